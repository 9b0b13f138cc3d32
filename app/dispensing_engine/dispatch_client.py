# app/dispensing_engine/dispatch_client.py
"""
Robot Dispatch Client
---------------------

Sends a dispense command to the robotic dispensing unit:

    POST {robot_url}
    Body: {"ward": "...", "bed": "...", "tag": "..."}

Best effort: one attempt per command, hard timeout, no retry. The outcome is
logged and counted, it never reaches the prescription request that produced
the command.
"""
import asyncio
import logging
from dataclasses import dataclass, asdict
from typing import Optional

import httpx

from app.dispensing_engine.errors import DispatchFailure
from config.dispensingconfig import DispensingSettings, dispensing_settings

logger = logging.getLogger(__name__)

# Used when the patient has no ward/bed or the medication has no tag on file
DEFAULT_WARD = "1"
DEFAULT_BED = "1"
DEFAULT_TAG = "rfid"


@dataclass(frozen=True)
class DispatchCommand:
    ward: str
    bed: str
    tag: str
    medication_id: int
    prescription_id: Optional[int] = None

    @classmethod
    def for_line(cls, ward, bed, tag, medication_id: int, prescription_id: int) -> "DispatchCommand":
        return cls(
            ward=str(ward if ward is not None else DEFAULT_WARD),
            bed=str(bed if bed is not None else DEFAULT_BED),
            tag=str(tag if tag is not None else DEFAULT_TAG),
            medication_id=medication_id,
            prescription_id=prescription_id,
        )

    def payload(self) -> dict:
        return {"ward": self.ward, "bed": self.bed, "tag": self.tag}


@dataclass
class DispatchResult:
    command: DispatchCommand
    success: bool
    status_code: Optional[int] = None
    error: Optional[str] = None


class RobotDispatchClient:
    """Async HTTP client for the dispensing robot."""

    def __init__(
        self,
        config: DispensingSettings = dispensing_settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        # Settings are read per call so in-memory config updates apply immediately
        self.config = config
        self._client = httpx.AsyncClient(transport=transport)

    def _headers(self) -> dict:
        headers = {"Content-Type": "application/json"}
        if self.config.ROBOT_API_KEY:
            headers["X-Robot-Api-Key"] = self.config.ROBOT_API_KEY
        return headers

    async def send(self, command: DispatchCommand) -> DispatchResult:
        """
        Post one command. Raises DispatchFailure on timeout, network error
        or a non-2xx answer.
        """
        url = self.config.robot_url
        timeout = self.config.ROBOT_TIMEOUT_SECONDS
        try:
            response = await asyncio.wait_for(
                self._client.post(url, json=command.payload(), headers=self._headers(), timeout=timeout),
                timeout=timeout,
            )
        except asyncio.TimeoutError as e:
            raise DispatchFailure(f"Robot did not answer within {timeout}s") from e
        except httpx.HTTPError as e:
            raise DispatchFailure(f"Robot unreachable at {url}: {e}") from e

        if not response.is_success:
            raise DispatchFailure(
                f"Robot returned status {response.status_code}: {response.text[:200]}"
            )
        return DispatchResult(command=command, success=True, status_code=response.status_code)

    async def dispatch(self, command: DispatchCommand) -> DispatchResult:
        """Fire-and-observe: never raises for robot problems."""
        logger.info(
            f"🤖 Dispatching medication {command.medication_id} "
            f"(prescription {command.prescription_id}) to ward {command.ward}, bed {command.bed}"
        )
        try:
            result = await self.send(command)
        except DispatchFailure as e:
            logger.error(
                f"❌ Dispatch failed for medication {command.medication_id} "
                f"(prescription {command.prescription_id}): {e.detail}"
            )
            return DispatchResult(command=command, success=False, error=e.detail)

        logger.info(
            f"✓ Robot accepted medication {command.medication_id} "
            f"(prescription {command.prescription_id}), status {result.status_code}"
        )
        return result

    async def aclose(self) -> None:
        await self._client.aclose()


@dataclass
class DispatchStats:
    queued: int = 0
    sent: int = 0
    failed: int = 0
    dropped: int = 0
    skipped: int = 0


class DispatchQueue:
    """
    Bounded in-process queue drained by one background worker.

    Request handlers call submit() and move on; the worker talks to the robot.
    A full queue drops the command and counts it as a failure.
    """

    def __init__(self, client: RobotDispatchClient, maxsize: int = 100, enabled: bool = True):
        self.client = client
        self.enabled = enabled
        self.stats = DispatchStats()
        self._queue: "asyncio.Queue[DispatchCommand]" = asyncio.Queue(maxsize=maxsize)
        self._worker: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    def start(self) -> None:
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="robot-dispatch-worker")
        logger.info("🤖 Robot dispatch worker started")

    def submit(self, command: DispatchCommand) -> bool:
        if not self.enabled:
            self.stats.skipped += 1
            logger.info(f"Dispatch disabled, skipping medication {command.medication_id}")
            return False
        try:
            self._queue.put_nowait(command)
        except asyncio.QueueFull:
            self.stats.dropped += 1
            logger.error(
                f"❌ Dispatch queue full, dropped command for medication {command.medication_id} "
                f"(prescription {command.prescription_id})"
            )
            return False
        self.stats.queued += 1
        return True

    async def _run(self) -> None:
        while True:
            command = await self._queue.get()
            try:
                result = await self.client.dispatch(command)
                if result.success:
                    self.stats.sent += 1
                else:
                    self.stats.failed += 1
            except Exception:
                # Keep the worker alive for the next command
                self.stats.failed += 1
                logger.exception(f"Unexpected error dispatching medication {command.medication_id}")
            finally:
                self._queue.task_done()

    async def join(self) -> None:
        """Wait until every queued command has been attempted."""
        await self._queue.join()

    def snapshot(self) -> dict:
        return {**asdict(self.stats), "pending": self._queue.qsize(), "running": self.running}

    async def stop(self) -> None:
        if self._worker is not None:
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
            self._worker = None
        await self.client.aclose()
        logger.info("👋 Robot dispatch worker stopped")
