# config/config_routes.py
import logging

from fastapi import APIRouter, Request

from config.config_schemas import DispensingConfigRequest, DispensingConfigResponse
from config.dispensingconfig import dispensing_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/config", tags=["Configuration"])


def _current_config() -> DispensingConfigResponse:
    return DispensingConfigResponse(
        robot_host=dispensing_settings.ROBOT_HOST,
        robot_port=dispensing_settings.ROBOT_PORT,
        robot_command_path=dispensing_settings.ROBOT_COMMAND_PATH,
        robot_url=dispensing_settings.robot_url,
        robot_timeout_seconds=dispensing_settings.ROBOT_TIMEOUT_SECONDS,
        dispatch_queue_size=dispensing_settings.DISPATCH_QUEUE_SIZE,
        dispatch_enabled=dispensing_settings.DISPATCH_ENABLED,
    )


def _sync_dispatcher(request: Request) -> None:
    dispatcher = getattr(request.app.state, "dispatch_queue", None)
    if dispatcher is not None:
        dispatcher.enabled = dispensing_settings.DISPATCH_ENABLED


@router.get("", response_model=DispensingConfigResponse)
async def get_config():
    return _current_config()


@router.post("", response_model=DispensingConfigResponse)
async def update_config(update: DispensingConfigRequest, request: Request):
    """
    Update robot dispatch settings in-memory.
    Only the provided fields change.
    """
    changes = update.model_dump(exclude_none=True)
    for field, value in changes.items():
        setattr(dispensing_settings, field.upper(), value)
    _sync_dispatcher(request)

    logger.info(f"⚙️  Dispensing config updated: {changes}")
    return _current_config()


@router.post("/reset", response_model=DispensingConfigResponse)
async def reset_config(request: Request):
    """
    Reset dispatch settings to file defaults.
    """
    # Reload settings from files
    dispensing_settings.__init__()
    _sync_dispatcher(request)

    logger.info("⚙️  Dispensing config reset to defaults")
    return _current_config()
