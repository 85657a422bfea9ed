"""
Тесты загрузки и валидации BOM.
"""
import os
from uuid import uuid4

import pytest
from httpx import AsyncClient
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import NotFoundError, ValidationPipelineError
from app.models.bom_check import BomCheckStatus
from app.models.bom_item import BomItem
from app.services.bom_check import BomCheckService
from app.services.bom_validation import BomValidationService
from app.tasks import validation_tasks
from app.utils.file import CORRECTED_FILES_BUCKET, get_bucket_path, get_file_path


@pytest.mark.asyncio
async def test_upload_bom_runs_validation(upload_bom, user_id):
    """Загрузка BOM сразу запускает валидацию."""
    response = await upload_bom()

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "completed"
    assert data["user_id"] == str(user_id)
    assert data["original_filename"] == "bom.csv"
    assert data["total_entries"] == 4
    assert data["issues_found"] == 4
    assert data["issues_corrected"] == 3
    assert data["quality_score"] == pytest.approx(90.0)
    assert data["corrected_file_path"].startswith(f"{user_id}/")
    assert data["corrected_file_path"].endswith("_corrected.csv")
    assert data["completed_at"] is not None


@pytest.mark.asyncio
async def test_upload_bom_unauthorized(client: AsyncClient):
    files = {"file": ("bom.csv", b"partNumber\nPN-1", "text/csv")}
    response = await client.post("/api/v1/bom-checks/upload", files=files)

    assert response.status_code in (401, 403)


@pytest.mark.asyncio
async def test_upload_bom_invalid_token(client: AsyncClient):
    files = {"file": ("bom.csv", b"partNumber\nPN-1", "text/csv")}
    response = await client.post(
        "/api/v1/bom-checks/upload",
        headers={"Authorization": "Bearer not-a-token"},
        files=files,
    )

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_upload_bom_invalid_type(upload_bom):
    response = await upload_bom(filename="bom.xlsx")

    assert response.status_code == 400
    assert "Тип файла не разрешен" in response.json()["detail"]


@pytest.mark.asyncio
async def test_upload_bom_empty_file(upload_bom):
    response = await upload_bom(content="")

    assert response.status_code == 400
    assert response.json()["detail"] == "Файл пуст"


@pytest.mark.asyncio
async def test_upload_bom_duplicate(upload_bom, other_auth_headers):
    """Повторная загрузка того же файла тем же пользователем отклоняется."""
    first = await upload_bom()
    assert first.status_code == 201

    duplicate = await upload_bom()
    assert duplicate.status_code == 409

    # Другой пользователь может загрузить такой же файл
    other = await upload_bom(headers=other_auth_headers)
    assert other.status_code == 201


@pytest.mark.asyncio
async def test_upload_header_only_bom(upload_bom):
    """BOM без строк получает оценку 100."""
    response = await upload_bom(content="partNumber,partName,description,quantity\n")

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "completed"
    assert data["total_entries"] == 0
    assert data["issues_found"] == 0
    assert data["quality_score"] == 100.0


@pytest.mark.asyncio
async def test_upload_bom_async_mode(upload_bom, monkeypatch):
    """В асинхронном режиме валидация ставится в очередь Celery."""
    queued = []

    class FakeTask:
        @staticmethod
        def delay(check_id):
            queued.append(check_id)

    monkeypatch.setattr(settings, "VALIDATION_ASYNC", True)
    monkeypatch.setattr(validation_tasks, "validate_bom_check", FakeTask)

    response = await upload_bom()

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "pending"
    assert queued == [data["id"]]


@pytest.mark.asyncio
async def test_get_bom_items(client: AsyncClient, upload_bom, auth_headers):
    check_id = (await upload_bom()).json()["id"]

    response = await client.get(f"/api/v1/bom-checks/{check_id}/items", headers=auth_headers)

    assert response.status_code == 200
    items = response.json()
    assert [item["row_index"] for item in items] == [0, 1, 2, 3]
    assert [item["status"] for item in items] == ["warning", "valid", "error", "valid"]
    assert items[0]["part_number"] == "PN-001"
    assert items[0]["quantity"] == 3
    assert items[0]["suggested_corrections"] == {
        "partName": "Blade",
        "description": "rotor",
    }
    assert items[2]["part_number"] == "Unknown"
    assert items[2]["description"] == "teh section"
    assert items[2]["rule_violations"][0]["rule_id"] == "102"

    errors = await client.get(
        f"/api/v1/bom-checks/{check_id}/items",
        headers=auth_headers,
        params={"status": "error"},
    )
    assert [item["row_index"] for item in errors.json()] == [2]


@pytest.mark.asyncio
async def test_get_bom_issues(client: AsyncClient, upload_bom, auth_headers):
    check_id = (await upload_bom()).json()["id"]

    response = await client.get(f"/api/v1/bom-checks/{check_id}/issues", headers=auth_headers)

    assert response.status_code == 200
    issues = response.json()
    assert [(i["row_index"], i["issue_type"], i["field_name"]) for i in issues] == [
        (0, "terminology", "partName"),
        (0, "terminology", "description"),
        (2, "missing_field", "partNumber"),
        (2, "spelling", "description"),
    ]
    assert issues[2]["severity"] == "critical"
    assert issues[2]["suggested_value"] == "[Required]"
    assert issues[2]["auto_corrected"] is False

    critical = await client.get(
        f"/api/v1/bom-checks/{check_id}/issues",
        headers=auth_headers,
        params={"severity": "critical"},
    )
    assert len(critical.json()) == 1

    spelling = await client.get(
        f"/api/v1/bom-checks/{check_id}/issues",
        headers=auth_headers,
        params={"issue_type": "spelling"},
    )
    assert [i["original_value"] for i in spelling.json()] == ["teh"]


@pytest.mark.asyncio
async def test_download_corrected_bom(client: AsyncClient, upload_bom, auth_headers):
    check_id = (await upload_bom()).json()["id"]

    response = await client.get(f"/api/v1/bom-checks/{check_id}/corrected", headers=auth_headers)

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/csv")
    assert response.text == (
        "partNumber,partName,description,quantity\n"
        "PN-001,Blade,Main rotor assembly,3\n"
        "PN-002,Hub,Cast iron hub,1\n"
        ",Tower,the section,2\n"
        "PN-004,Bolt,Steel bolt M12,24"
    )


@pytest.mark.asyncio
async def test_get_bom_check_access(client: AsyncClient, upload_bom, auth_headers, other_auth_headers):
    """Проверка доступна только владельцу."""
    check_id = (await upload_bom()).json()["id"]

    own = await client.get(f"/api/v1/bom-checks/{check_id}", headers=auth_headers)
    assert own.status_code == 200
    assert own.json()["id"] == check_id

    foreign = await client.get(f"/api/v1/bom-checks/{check_id}", headers=other_auth_headers)
    assert foreign.status_code == 404


@pytest.mark.asyncio
async def test_list_bom_checks(client: AsyncClient, upload_bom, auth_headers):
    await upload_bom()
    await upload_bom(content="partNumber,partName,description,quantity\nPN-9,Hub,Hub casting,1\n", filename="clean.csv")

    response = await client.get("/api/v1/bom-checks/", headers=auth_headers)
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 2
    assert data["pages"] == 1

    by_score = await client.get(
        "/api/v1/bom-checks/",
        headers=auth_headers,
        params={"min_score": 95, "order_by": "quality_score"},
    )
    items = by_score.json()["items"]
    assert [item["original_filename"] for item in items] == ["clean.csv"]

    paged = await client.get("/api/v1/bom-checks/", headers=auth_headers, params={"page_size": 1, "page": 2})
    assert len(paged.json()["items"]) == 1
    assert paged.json()["pages"] == 2


@pytest.mark.asyncio
async def test_list_bom_checks_invalid_params(client: AsyncClient, auth_headers):
    response = await client.get("/api/v1/bom-checks/", headers=auth_headers, params={"page_size": 500})

    assert response.status_code == 422
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_revalidate_replaces_results(client: AsyncClient, upload_bom, auth_headers, db_session: AsyncSession):
    check_id = (await upload_bom()).json()["id"]

    response = await client.post(f"/api/v1/bom-checks/{check_id}/validate", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["success"] is True
    assert data["total_entries"] == 4
    assert data["total_issues"] == 4
    assert data["corrected_issues"] == 3

    items = (await db_session.execute(select(BomItem))).scalars().all()
    assert len(items) == 4


@pytest.mark.asyncio
async def test_delete_bom_check(client: AsyncClient, upload_bom, auth_headers, other_auth_headers):
    check = (await upload_bom()).json()
    corrected_path = get_file_path(CORRECTED_FILES_BUCKET, check["corrected_file_path"])

    foreign = await client.delete(f"/api/v1/bom-checks/{check['id']}", headers=other_auth_headers)
    assert foreign.status_code == 404

    response = await client.delete(f"/api/v1/bom-checks/{check['id']}", headers=auth_headers)
    assert response.status_code == 204

    missing = await client.get(f"/api/v1/bom-checks/{check['id']}", headers=auth_headers)
    assert missing.status_code == 404

    assert not os.path.exists(corrected_path)


@pytest.mark.asyncio
async def test_run_validation_unknown_check(db_session: AsyncSession):
    with pytest.raises(NotFoundError):
        await BomValidationService.run_validation(db_session, uuid4())


@pytest.mark.asyncio
async def test_run_validation_marks_check_failed(db_session: AsyncSession, user_id):
    """Если файл BOM недоступен, проверка помечается как failed."""
    check = await BomCheckService.create_check(
        db=db_session,
        user_id=user_id,
        original_filename="lost.csv",
        stored_filename=f"{user_id}/lost.csv",
        file_size=10,
        file_hash="0" * 64,
    )

    with pytest.raises(ValidationPipelineError) as exc_info:
        await BomValidationService.run_validation(db_session, check.id)

    assert exc_info.value.status_code == 500
    assert exc_info.value.error_code == "BOM_VALIDATION_FAILED"

    failed = await BomCheckService.get_check_by_id(db_session, check.id)
    assert failed.status == BomCheckStatus.FAILED
    assert "lost.csv" in failed.error_message
    assert failed.quality_score is None


@pytest.mark.asyncio
async def test_validate_endpoint_reports_pipeline_error(client: AsyncClient, auth_headers, db_session, user_id):
    check = await BomCheckService.create_check(
        db=db_session,
        user_id=user_id,
        original_filename="lost.csv",
        stored_filename=f"{user_id}/lost.csv",
        file_size=10,
        file_hash="1" * 64,
    )

    response = await client.post(f"/api/v1/bom-checks/{check.id}/validate", headers=auth_headers)

    assert response.status_code == 500
    assert response.json()["error"]["code"] == "BOM_VALIDATION_FAILED"

    status_response = await client.get(f"/api/v1/bom-checks/{check.id}", headers=auth_headers)
    assert status_response.json()["status"] == "failed"


@pytest.mark.asyncio
async def test_failed_validation_leaves_no_corrected_file(
    client: AsyncClient, upload_bom, auth_headers, monkeypatch
):
    """Сбой после записи исправленного CSV не оставляет файл на диске."""
    check_id = (await upload_bom()).json()["id"]

    def broken_correction(check_id, results):
        raise RuntimeError("correction storage unavailable")

    monkeypatch.setattr(BomValidationService, "build_correction", staticmethod(broken_correction))

    response = await client.post(f"/api/v1/bom-checks/{check_id}/validate", headers=auth_headers)
    assert response.status_code == 500

    corrected_root = get_bucket_path(CORRECTED_FILES_BUCKET)
    assert [path for path in corrected_root.rglob("*") if path.is_file()] == []

    check = (await client.get(f"/api/v1/bom-checks/{check_id}", headers=auth_headers)).json()
    assert check["status"] == "failed"
    assert check["corrected_file_path"] is None

    items = await client.get(f"/api/v1/bom-checks/{check_id}/items", headers=auth_headers)
    assert items.json() == []
