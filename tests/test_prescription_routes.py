"""
Tests for the HTTP surface of the dispensing backend.

Requests go through httpx.AsyncClient + ASGITransport so the app, the
database and the dispatch worker share the test's event loop.
"""

import httpx
import pytest

from app.database.connection import get_db
from app.dispensing_engine.dependencies import get_dispatcher
from app.dispensing_engine.dispatch_client import DispatchQueue, RobotDispatchClient
from app.main import app
from config.dispensingconfig import DispensingSettings


@pytest.fixture
def override_db(session_factory):
    async def _get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = _get_db
    yield
    app.dependency_overrides.clear()


@pytest.fixture
async def client(override_db, dispatcher):
    app.dependency_overrides[get_dispatcher] = lambda: dispatcher
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as c:
        yield c


def body(seeded, *lines, patient_id=None, prescriber_id=None):
    return {
        "patientId": patient_id if patient_id is not None else seeded.patient_id,
        "prescriberId": prescriber_id if prescriber_id is not None else seeded.prescriber_id,
        "medications": [{"medicationId": m, "dose": d, "frequency": f} for m, d, f in lines],
    }


class TestCreateEndpoint:
    @pytest.mark.asyncio
    async def test_created_returns_ids(self, client, seeded, stock_of, dispatcher):
        response = await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 1000, 30)))

        assert response.status_code == 201
        data = response.json()
        assert set(data) == {"prescriptionId", "transportId"}
        assert await stock_of(seeded.plenty_id) == 4
        assert len(dispatcher.commands) == 1

    @pytest.mark.asyncio
    async def test_out_of_bounds_dose_is_400(self, client, seeded, stock_of):
        response = await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 99, 5)))

        assert response.status_code == 400
        assert "dose" in response.json()["detail"]
        assert await stock_of(seeded.plenty_id) == 10

    @pytest.mark.asyncio
    async def test_insufficient_stock_is_400_with_amounts(self, client, seeded):
        response = await client.post("/api/prescriptions", json=body(seeded, (seeded.scarce_id, 1000, 30)))

        assert response.status_code == 400
        detail = response.json()["detail"]
        assert "Available: 1" in detail
        assert "required: 6" in detail

    @pytest.mark.asyncio
    async def test_unknown_patient_is_404(self, client, seeded):
        response = await client.post(
            "/api/prescriptions", json=body(seeded, (seeded.plenty_id, 100, 1), patient_id=9999)
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_unknown_medication_is_404(self, client, seeded):
        response = await client.post("/api/prescriptions", json=body(seeded, (9999, 100, 1)))

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_body_is_400(self, client, seeded):
        response = await client.post("/api/prescriptions", json={"patientId": seeded.patient_id})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_empty_medication_list_is_400(self, client, seeded):
        response = await client.post("/api/prescriptions", json=body(seeded))

        assert response.status_code == 400


class TestDispatchFailureIsInvisible:
    @pytest.fixture
    async def offline_queue(self):
        def handler(request):
            raise httpx.ConnectError("robot offline", request=request)

        queue = DispatchQueue(RobotDispatchClient(DispensingSettings(), transport=httpx.MockTransport(handler)))
        queue.start()
        yield queue
        await queue.stop()

    @pytest.mark.asyncio
    async def test_create_succeeds_while_robot_is_down(self, client, seeded, stock_of, offline_queue):
        app.dependency_overrides[get_dispatcher] = lambda: offline_queue

        response = await client.post(
            "/api/prescriptions",
            json=body(seeded, (seeded.plenty_id, 1000, 30), (seeded.untagged_id, 100, 1)),
        )
        await offline_queue.join()

        assert response.status_code == 201
        data = response.json()
        assert data == {"prescriptionId": data["prescriptionId"], "transportId": data["transportId"]}
        assert data["prescriptionId"] is not None
        assert offline_queue.stats.failed == 2
        assert await stock_of(seeded.plenty_id) == 4

        lines = await client.get(f"/api/prescriptions/{data['prescriptionId']}/medications")
        assert len(lines.json()) == 2


class TestReviseEndpoint:
    @pytest.mark.asyncio
    async def test_revise_reports_updated_and_ignored(self, client, seeded, stock_of):
        created = await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 500, 10)))
        prescription_id = created.json()["prescriptionId"]

        response = await client.put(
            f"/api/prescriptions/{prescription_id}",
            json={
                "medications": [
                    {"medicationId": seeded.plenty_id, "dose": 1000, "frequency": 30},
                    {"medicationId": seeded.untagged_id, "dose": 100, "frequency": 1},
                ]
            },
        )

        assert response.status_code == 200
        assert response.json() == {
            "success": True,
            "updatedMedicationIds": [seeded.plenty_id],
            "ignoredMedicationIds": [seeded.untagged_id],
        }
        assert await stock_of(seeded.plenty_id) == 4

    @pytest.mark.asyncio
    async def test_unknown_prescription_is_404(self, client, seeded):
        response = await client.put(
            "/api/prescriptions/9999",
            json={"medications": [{"medicationId": seeded.plenty_id, "dose": 100, "frequency": 1}]},
        )

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_invalid_frequency_is_400(self, client, seeded):
        response = await client.put(
            "/api/prescriptions/1",
            json={"medications": [{"medicationId": seeded.plenty_id, "dose": 100, "frequency": 31}]},
        )

        assert response.status_code == 400


class TestReadProjections:
    @pytest.mark.asyncio
    async def test_listings(self, client, seeded):
        created = await client.post(
            "/api/prescriptions", json=body(seeded, (seeded.plenty_id, 500, 10), (seeded.untagged_id, 200, 5))
        )
        prescription_id = created.json()["prescriptionId"]

        listing = (await client.get("/api/prescriptions")).json()
        assert listing[0]["prescriptionId"] == prescription_id
        assert listing[0]["patientName"] == "Elena Dumitru"
        assert listing[0]["doctorName"] == "Ana Ionescu"

        lines = (await client.get(f"/api/prescriptions/{prescription_id}/medications")).json()
        assert [(l["medicationId"], l["dose"], l["frequency"]) for l in lines] == [
            (seeded.plenty_id, 500, 10),
            (seeded.untagged_id, 200, 5),
        ]
        assert lines[0]["medicationName"] == "Paracetamol"
        assert lines[0]["currentStock"] == 9

        history = (await client.get(f"/api/patients/{seeded.patient_id}/prescriptions")).json()
        assert len(history) == 2
        assert history[0]["doctor"] == "Ana Ionescu"
        assert history[0]["medName"] == "Paracetamol"

    @pytest.mark.asyncio
    async def test_unknown_patient_has_no_prescriptions(self, client, seeded):
        response = await client.get("/api/patients/9999/prescriptions")

        assert response.status_code == 200
        assert response.json() == []


class TestTransportEndpoints:
    @pytest.mark.asyncio
    async def test_status_advance_by_id(self, client, seeded):
        created = await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 100, 1)))
        transport_id = created.json()["transportId"]

        response = await client.post("/api/transport-status", json={"transportId": transport_id, "status": "delivered"})

        assert response.status_code == 200
        assert response.json()["status"] == "delivered"
        record = (await client.get(f"/api/transport-records/{transport_id}")).json()
        assert record["status"] == "delivered"
        assert record["medicationId"] == seeded.plenty_id

    @pytest.mark.asyncio
    async def test_status_advance_requires_transport_id(self, client, seeded):
        response = await client.post("/api/transport-status", json={"status": "delivered"})

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_status_is_400(self, client, seeded):
        created = await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 100, 1)))

        response = await client.post(
            "/api/transport-status", json={"transportId": created.json()["transportId"], "status": "lost"}
        )

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_unknown_record_is_404(self, client, seeded):
        response = await client.post("/api/transport-status", json={"transportId": 9999, "status": "delivered"})
        assert response.status_code == 404

        response = await client.get("/api/transport-records/9999")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_history_lists_records(self, client, seeded):
        await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 100, 1)))
        await client.post("/api/prescriptions", json=body(seeded, (seeded.untagged_id, 100, 1)))

        records = (await client.get("/api/transport-records")).json()

        assert len(records) == 2
        assert {r["status"] for r in records} == {"in-progress"}


class TestRobotEndpoints:
    @pytest.mark.asyncio
    async def test_robot_error_creates_alarm(self, client, seeded):
        created = await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 100, 1)))
        transport_id = created.json()["transportId"]

        response = await client.post("/api/robot/error", json={"description": "Gripper jammed", "transportId": transport_id})

        assert response.status_code == 201
        alarm = response.json()
        assert alarm["alarmType"] == "ROBOT_ERROR"
        assert alarm["status"] == "new"
        assert alarm["transportId"] == transport_id

        alarms = (await client.get("/api/alarms")).json()
        assert [a["description"] for a in alarms] == ["Gripper jammed"]

    @pytest.mark.asyncio
    async def test_robot_error_without_description_uses_default(self, client, seeded):
        response = await client.post("/api/robot/error", json={})

        assert response.status_code == 201
        assert response.json()["description"] == "Standard robot error"
        assert response.json()["transportId"] is None

    @pytest.mark.asyncio
    async def test_robot_error_for_unknown_transport_is_404(self, client, seeded):
        response = await client.post("/api/robot/error", json={"transportId": 9999})

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_dispatch_stats(self, client, seeded):
        await client.post("/api/prescriptions", json=body(seeded, (seeded.plenty_id, 100, 1)))

        response = await client.get("/api/robot/dispatch-stats")

        assert response.status_code == 200
        assert response.json() == {"queued": 1}
