"""
API tests for the HTTP routers.

Stores are the in-memory fixtures from conftest; authentication is replaced
through dependency overrides.
"""

import base64
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from exceptions import (
    AlreadyExistsError,
    DocumentVerificationError,
    NotFoundError,
    PermissionDeniedError,
)
from models.documents import VerifyDocumentOutput

PHOTO = "data:image/jpeg;base64," + base64.b64encode(b"\xff\xd8\xffjpeg-bytes").decode()

ENROLLMENT = {
    "client_name": "TCS",
    "first_name": "Asha",
    "last_name": "Nair",
    "phone_number": "98765 43210",
    "joining_date": "2024-06-01T09:30:00Z",
    "profile_picture_url": "https://files.test/profile.jpg",
}


class TestRoot:
    @pytest.mark.asyncio
    async def test_root(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200
        assert response.json()["service"] == "CISS Workforce"

    @pytest.mark.asyncio
    async def test_health_reports_database(self, async_client):
        with patch("main.db.health_check", AsyncMock(return_value=True)):
            response = await async_client.get("/health")
        assert response.status_code == 200
        assert response.json()["database"] == "connected"

    @pytest.mark.asyncio
    async def test_health_without_database(self, async_client):
        with patch("main.db.health_check", AsyncMock(return_value=False)):
            response = await async_client.get("/health")
        assert response.status_code == 503


class TestAuthApi:
    @pytest.fixture
    def supabase(self, app):
        from auth.supabase_client import get_supabase

        client = MagicMock()
        app.dependency_overrides[get_supabase] = lambda: client
        return client

    @pytest.mark.asyncio
    async def test_send_otp_normalizes_number(self, async_client, supabase):
        response = await async_client.post("/api/auth/otp/send", json={"phone_number": "98765 43210"})

        assert response.status_code == 200
        assert response.json()["phone"] == "+919876543210"
        supabase.auth.sign_in_with_otp.assert_called_once_with({"phone": "+919876543210"})

    @pytest.mark.asyncio
    async def test_verify_otp_without_session(self, async_client, supabase):
        supabase.auth.verify_otp.return_value = MagicMock(session=None, user=None)

        response = await async_client.post(
            "/api/auth/otp/verify", json={"phone_number": "9876543210", "token": "123456"}
        )

        assert response.status_code == 401
        assert supabase.auth.verify_otp.call_args.args[0]["type"] == "sms"

    @pytest.mark.asyncio
    async def test_unconfigured_auth(self, async_client, app):
        from auth.supabase_client import get_supabase

        app.dependency_overrides[get_supabase] = lambda: None

        response = await async_client.post("/api/auth/otp/send", json={"phone_number": "9876543210"})

        assert response.status_code == 503

    @pytest.mark.asyncio
    async def test_me_returns_claims(self, admin_client):
        response = await admin_client.get("/api/auth/me")

        assert response.status_code == 200
        assert response.json()["claims"] == {"role": "stateAdmin", "state": "Kerala"}


class TestEmployeesApi:
    @pytest.mark.asyncio
    async def test_anonymous_enrollment(self, async_client, override_services):
        response = await async_client.post("/api/employees", json=ENROLLMENT)

        assert response.status_code == 201
        body = response.json()
        assert body["full_name"] == "ASHA NAIR"
        assert body["phone_number"] == "9876543210"
        assert body["employee_id"].startswith("TCS/")
        assert await override_services.employees.count() == 1

    @pytest.mark.asyncio
    async def test_enrollment_validation(self, async_client):
        response = await async_client.post("/api/employees", json={**ENROLLMENT, "phone_number": "123"})
        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_listing_requires_admin(self, async_client_with_auth):
        response = await async_client_with_auth.get("/api/employees")
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_listing_requires_sign_in(self, async_client):
        response = await async_client.get("/api/employees")
        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_admin_lists_and_filters(self, admin_client, override_services, employee_factory):
        await override_services.employees.create(employee_factory())
        await override_services.employees.create(employee_factory(client_name="Wipro", phone_number="9000000001"))

        response = await admin_client.get("/api/employees", params={"client_name": "Wipro"})

        assert response.status_code == 200
        assert [e["client_name"] for e in response.json()] == ["Wipro"]

    @pytest.mark.asyncio
    async def test_stats(self, admin_client, override_services, employee_factory):
        await override_services.employees.create(employee_factory())

        response = await admin_client.get("/api/employees/stats")

        assert response.status_code == 200
        assert response.json()["active"] == 1
        assert len(response.json()["recent"]) == 1

    @pytest.mark.asyncio
    async def test_my_record_by_phone(self, async_client_with_auth, override_services, employee_factory):
        record = await override_services.employees.create(employee_factory())

        response = await async_client_with_auth.get("/api/employees/me")

        assert response.status_code == 200
        assert response.json()["id"] == record["id"]

    @pytest.mark.asyncio
    async def test_missing_employee_is_404(self, admin_client):
        response = await admin_client.get("/api/employees/nope")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not-found"

    @pytest.mark.asyncio
    async def test_malformed_employee_id_in_database_mode(self, app, admin_client, mock_db):
        import dependencies
        from records.employee_store import EmployeeStore

        app.dependency_overrides[dependencies.get_employee_store] = lambda: EmployeeStore(db_connection=mock_db)

        for response in (
            await admin_client.get("/api/employees/nope"),
            await admin_client.patch("/api/employees/nope", json={"district": "Kochi"}),
            await admin_client.post("/api/employees/nope/regenerate-id"),
        ):
            assert response.status_code == 404
            assert response.json()["error"]["details"]["resource"] == "employee"
        mock_db.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_id_lookup_is_case_insensitive(self, admin_client, override_services, employee_factory):
        record = await override_services.employees.create(employee_factory())

        response = await admin_client.get(f"/api/employees/{record['id'].upper()}")

        assert response.status_code == 200
        assert response.json()["id"] == record["id"]

    @pytest.mark.asyncio
    async def test_null_status_rejected(self, admin_client, override_services, employee_factory):
        record = await override_services.employees.create(employee_factory())

        response = await admin_client.patch(
            f"/api/employees/{record['id']}",
            json={"status": None, "first_name": None, "client_name": None},
        )

        assert response.status_code == 422
        stored = await override_services.employees.get(record["id"])
        assert stored["status"] == "Active"
        assert stored["full_name"] == "ASHA NAIR"
        assert stored["client_name"] == "TCS"

        follow_up = await admin_client.get(f"/api/employees/{record['id']}")
        assert follow_up.status_code == 200

    @pytest.mark.asyncio
    async def test_csv_import(self, admin_client, override_services):
        content = (
            "FirstName,LastName,PhoneNumber,ClientName,JoiningDate\n"
            "Asha,Nair,9876543210,TCS,2024-06-01\n"
            "Ravi,Kumar,123,TCS,2024-06-01\n"
        ).encode()

        response = await admin_client.post(
            "/api/employees/import", files={"file": ("staff.csv", content, "text/csv")}
        )

        assert response.status_code == 200
        body = response.json()
        assert body["records_processed"] == 1
        assert body["skipped"][0]["line"] == 3
        assert await override_services.employees.count() == 1

    @pytest.mark.asyncio
    async def test_csv_import_rejects_other_files(self, admin_client, override_services):
        response = await admin_client.post(
            "/api/employees/import", files={"file": ("staff.xlsx", b"PK", "application/octet-stream")}
        )
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_csv_import_without_valid_rows(self, admin_client, override_services):
        response = await admin_client.post(
            "/api/employees/import",
            files={"file": ("staff.csv", b"FirstName,LastName,PhoneNumber\n", "text/csv")},
        )
        assert response.status_code == 400
        assert response.json()["error"]["code"] == "invalid-argument"

    @pytest.mark.asyncio
    async def test_csv_import_requires_admin(self, async_client_with_auth, override_services):
        response = await async_client_with_auth.post(
            "/api/employees/import", files={"file": ("staff.csv", b"FirstName\n", "text/csv")}
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_qr_png(self, admin_client, override_services, employee_factory):
        record = await override_services.employees.create(employee_factory())

        response = await admin_client.get(f"/api/employees/{record['id']}/qr")

        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        assert response.content.startswith(b"\x89PNG")

    @pytest.mark.asyncio
    async def test_patch_status(self, admin_client, override_services, employee_factory):
        record = await override_services.employees.create(employee_factory())

        response = await admin_client.patch(
            f"/api/employees/{record['id']}",
            json={"status": "Exited", "exit_date": "2024-09-30T00:00:00Z"},
        )

        assert response.status_code == 200
        assert response.json()["status"] == "Exited"

    @pytest.mark.asyncio
    async def test_regenerate_id(self, admin_client, override_services, employee_factory):
        record = await override_services.employees.create(employee_factory())

        with patch("records.employee_store.random.randint", return_value=1000):
            response = await admin_client.post(f"/api/employees/{record['id']}/regenerate-id")

        assert response.status_code == 200
        assert response.json()["employee_id"].endswith("/1000")


class TestExportsApi:
    @pytest.mark.asyncio
    async def test_create_runs_pipeline(self, admin_client, override_services, employee_factory):
        """The job is returned pending and the background run completes it."""
        await override_services.employees.create(employee_factory())
        await override_services.employees.create(employee_factory(phone_number="9000000001"))

        response = await admin_client.post("/api/exports", json={"filters": {"client_name": "TCS"}})

        assert response.status_code == 202
        created = response.json()
        assert created["status"] == "pending"
        assert created["filters"] == {"client_name": "TCS"}

        polled = await admin_client.get(f"/api/exports/{created['id']}")
        assert polled.status_code == 200
        job = polled.json()
        assert job["status"] == "complete"
        assert job["employee_count"] == 2
        assert job["download_url"].startswith("https://storage.test/exports/")

    @pytest.mark.asyncio
    async def test_no_matches_ends_in_error(self, admin_client, override_services):
        response = await admin_client.post("/api/exports", json={"filters": {"client_name": "Nobody"}})

        job = (await admin_client.get(f"/api/exports/{response.json()['id']}")).json()
        assert job["status"] == "error"
        assert job["error"] == "No employees found matching the selected filters."
        assert override_services.blobs.uploads == {}

    @pytest.mark.asyncio
    async def test_invalid_range_rejected_up_front(self, admin_client, override_services):
        response = await admin_client.post(
            "/api/exports",
            json={"filters": {"start_date": "2024-07-01", "end_date": "2024-06-01"}},
        )

        assert response.status_code == 422
        assert await override_services.jobs.list_jobs() == []

    @pytest.mark.asyncio
    async def test_employee_cannot_export(self, async_client_with_auth):
        response = await async_client_with_auth.post("/api/exports", json={})
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_other_admins_job_is_hidden(self, admin_client, override_services):
        job = await override_services.jobs.create_job("another-admin", {})

        response = await admin_client.get(f"/api/exports/{job.id}")

        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_malformed_job_id_is_not_found(self, app, admin_client, mock_db):
        """Ids that are not UUIDs never reach the uuid column."""
        import dependencies
        from jobs.job_store import ExportJobStore

        app.dependency_overrides[dependencies.get_job_store] = lambda: ExportJobStore(db_connection=mock_db)

        response = await admin_client.get("/api/exports/not-a-uuid")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not-found"
        mock_db.fetchrow.assert_not_called()

    @pytest.mark.asyncio
    async def test_super_admin_sees_all_jobs(self, super_admin_client, override_services):
        await override_services.jobs.create_job("admin-a", {})
        await override_services.jobs.create_job("admin-b", {})

        response = await super_admin_client.get("/api/exports")

        assert response.status_code == 200
        assert len(response.json()) == 2


class TestAdminApi:
    @pytest.fixture
    def claims_service(self, app):
        import dependencies

        service = MagicMock()
        service.create_state_admin = AsyncMock()
        service.set_super_admin = AsyncMock()
        app.dependency_overrides[dependencies.get_claims_service] = lambda: service
        return service

    @pytest.mark.asyncio
    async def test_bootstrap_super_admin_anonymously(self, async_client, claims_service):
        claims_service.set_super_admin.return_value = {
            "message": "Successfully made owner@example.com a super admin.",
            "user_id": "u1",
            "claims": {"superAdmin": True, "role": "superAdmin"},
        }

        response = await async_client.post("/api/admin/super-admins", json={"email": "owner@example.com"})

        assert response.status_code == 200
        assert response.json()["claims"]["superAdmin"] is True
        caller, email = claims_service.set_super_admin.call_args.args
        assert caller is None
        assert email == "owner@example.com"

    @pytest.mark.asyncio
    async def test_second_super_admin_conflict(self, admin_client, claims_service):
        claims_service.set_super_admin.side_effect = AlreadyExistsError("A super admin already exists.")

        response = await admin_client.post("/api/admin/super-admins", json={"email": "x@example.com"})

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "already-exists"

    @pytest.mark.asyncio
    async def test_state_admin_permission_denied(self, admin_client, claims_service):
        claims_service.create_state_admin.side_effect = PermissionDeniedError(
            "Only super admins can create state admins.", required_claim="superAdmin"
        )

        response = await admin_client.post(
            "/api/admin/state-admins", json={"email": "x@example.com", "state": "Goa"}
        )

        assert response.status_code == 403
        error = response.json()["error"]
        assert error["code"] == "permission-denied"
        assert error["details"]["required_claim"] == "superAdmin"

    @pytest.mark.asyncio
    async def test_state_admin_requires_sign_in(self, async_client, claims_service):
        response = await async_client.post("/api/admin/state-admins", json={"email": "x@example.com"})

        assert response.status_code == 401
        claims_service.create_state_admin.assert_not_called()

    @pytest.mark.asyncio
    async def test_state_admin_not_found(self, super_admin_client, claims_service):
        claims_service.create_state_admin.side_effect = NotFoundError("No user found.", resource="user")

        response = await super_admin_client.post(
            "/api/admin/state-admins", json={"email": "x@example.com", "state": "Goa"}
        )

        assert response.status_code == 404


class TestDocumentsApi:
    @pytest.fixture
    def verifier(self, app):
        import dependencies

        verifier = MagicMock()
        verifier.verify = AsyncMock()
        app.dependency_overrides[dependencies.get_document_verifier] = lambda: verifier
        return verifier

    @pytest.mark.asyncio
    async def test_verify(self, async_client, verifier):
        verifier.verify.return_value = VerifyDocumentOutput(is_match=True, reason="Looks like a PAN card.")

        response = await async_client.post(
            "/api/documents/verify", json={"photo_data_uri": PHOTO, "expected_type": "PAN Card"}
        )

        assert response.status_code == 200
        assert response.json() == {"is_match": True, "reason": "Looks like a PAN card."}

    @pytest.mark.asyncio
    async def test_classifier_failure(self, async_client, verifier):
        verifier.verify.side_effect = DocumentVerificationError(raw_response="???")

        response = await async_client.post(
            "/api/documents/verify", json={"photo_data_uri": PHOTO, "expected_type": "PAN Card"}
        )

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "classifier-failure"


class TestAttendanceApi:
    @pytest.mark.asyncio
    async def test_mark_with_photo(self, async_client_with_auth, override_services, employee_factory):
        employee = await override_services.employees.create(employee_factory())

        response = await async_client_with_auth.post("/api/attendance", json={
            "employee_id": employee["employee_id"],
            "status": "In",
            "latitude": 9.97,
            "longitude": 76.28,
            "photo_data_uri": PHOTO,
        })

        assert response.status_code == 201
        body = response.json()
        assert body["employee_name"] == "ASHA NAIR"
        assert body["photo_path"] in override_services.blobs.uploads
        upload = override_services.blobs.uploads[body["photo_path"]]
        assert upload["content_type"] == "image/jpeg"
        assert upload["data"] == b"\xff\xd8\xffjpeg-bytes"

    @pytest.mark.asyncio
    async def test_inactive_employee_rejected(self, async_client_with_auth, override_services, employee_factory):
        from models.employee import EmployeeStatus, EmployeeUpdate

        employee = await override_services.employees.create(employee_factory())
        await override_services.employees.update(employee["id"], EmployeeUpdate(status=EmployeeStatus.ON_LEAVE))

        response = await async_client_with_auth.post(
            "/api/attendance", json={"employee_id": employee["employee_id"], "status": "In"}
        )

        assert response.status_code == 400
        assert response.json()["error"]["details"]["field"] == "employee_id"

    @pytest.mark.asyncio
    async def test_unknown_employee(self, async_client_with_auth):
        response = await async_client_with_auth.post(
            "/api/attendance", json={"employee_id": "TCS/2024-25/001", "status": "Out"}
        )
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_admin_lists_logs(self, admin_client, override_services, employee_factory):
        employee = await override_services.employees.create(employee_factory())
        await override_services.attendance.record(
            employee_id=employee["employee_id"],
            employee_name=employee["full_name"],
            status="In",
        )

        response = await admin_client.get(
            "/api/attendance", params={"employee_id": employee["employee_id"]}
        )

        assert response.status_code == 200
        assert len(response.json()) == 1


class TestClientsApi:
    @pytest.mark.asyncio
    async def test_crud(self, admin_client):
        created = await admin_client.post("/api/clients", json={"name": "TCS"})
        assert created.status_code == 201

        listed = await admin_client.get("/api/clients")
        assert [c["name"] for c in listed.json()] == ["TCS"]

        deleted = await admin_client.delete(f"/api/clients/{created.json()['id']}")
        assert deleted.status_code == 204
        assert (await admin_client.get("/api/clients")).json() == []

    @pytest.mark.asyncio
    async def test_duplicate_name(self, admin_client):
        await admin_client.post("/api/clients", json={"name": "TCS"})

        response = await admin_client.post("/api/clients", json={"name": "tcs"})

        assert response.status_code == 409

    @pytest.mark.asyncio
    async def test_delete_missing(self, admin_client):
        response = await admin_client.delete("/api/clients/nope")
        assert response.status_code == 404

    @pytest.mark.asyncio
    async def test_anonymous_cannot_add(self, async_client):
        response = await async_client.post("/api/clients", json={"name": "TCS"})
        assert response.status_code == 401
