"""
Тесты проверки технических документов.
"""
import io
from pathlib import Path

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from app.models.doc_check import DocCheckStatus
from app.services import doc_check as doc_check_module
from app.services.doc_check import DocCheckService
from app.utils.file import CORRECTED_FILES_BUCKET, get_file_path

DOCUMENT = "The grbx is mounted in teh nacell.\n\nCheck brng wear, then continue.\n"


async def _upload_document(client: AsyncClient, headers: dict, content: bytes, filename: str = "manual.txt"):
    return await client.post(
        "/api/v1/doc-checks/upload",
        headers=headers,
        files={"file": (filename, io.BytesIO(content), "text/plain")},
    )


@pytest.mark.asyncio
async def test_upload_document(client: AsyncClient, auth_headers, user_id):
    response = await _upload_document(client, auth_headers, DOCUMENT.encode("utf-8"))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "completed"
    assert data["user_id"] == str(user_id)
    assert data["lines_checked"] == 2
    assert data["quality_score"] == pytest.approx(80.0)
    assert [issue["original"] for issue in data["issues_found"]] == ["grbx", "teh", "nacell", "brng"]
    assert data["issues_found"][1]["type"] == "spelling"
    assert data["issues_found"][1]["severity"] == "low"
    assert data["issues_found"][3]["location"] == "Line 3"
    assert len(data["corrections_made"]) == 4

    corrected = Path(get_file_path(CORRECTED_FILES_BUCKET, data["corrected_file_path"])).read_text("utf-8")
    assert corrected == "The gearbox is mounted in the nacelle.\n\nCheck bearing wear, then continue."


@pytest.mark.asyncio
async def test_upload_document_invalid_type(client: AsyncClient, auth_headers):
    response = await _upload_document(client, auth_headers, b"%PDF", filename="manual.pdf")

    assert response.status_code == 400


@pytest.mark.asyncio
async def test_upload_document_not_utf8(client: AsyncClient, auth_headers):
    """Ошибка обработки сохраняется в проверке со статусом failed."""
    response = await _upload_document(client, auth_headers, "Лопасть".encode("cp1251"))

    assert response.status_code == 201
    data = response.json()
    assert data["status"] == "failed"
    assert data["error_message"]
    assert data["issues_found"] == []


@pytest.mark.asyncio
async def test_list_and_get_doc_checks(client: AsyncClient, auth_headers, other_auth_headers):
    first = (await _upload_document(client, auth_headers, b"rotr hub")).json()
    await _upload_document(client, auth_headers, b"blade root", filename="notes.md")

    listing = await client.get("/api/v1/doc-checks/", headers=auth_headers)
    assert listing.status_code == 200
    assert listing.json()["total"] == 2

    single = await client.get(f"/api/v1/doc-checks/{first['id']}", headers=auth_headers)
    assert single.status_code == 200
    assert single.json()["issues_found"][0]["suggestion"] == "rotor"

    foreign = await client.get(f"/api/v1/doc-checks/{first['id']}", headers=other_auth_headers)
    assert foreign.status_code == 404

    other_listing = await client.get("/api/v1/doc-checks/", headers=other_auth_headers)
    assert other_listing.json()["total"] == 0


@pytest.mark.asyncio
async def test_document_check_failure_is_recorded(db_session: AsyncSession, user_id, monkeypatch):
    def broken_check(text, terminology):
        raise RuntimeError("tokenizer crashed")

    monkeypatch.setattr(doc_check_module, "check_document_text", broken_check)

    doc_check = await DocCheckService.run_document_check(db_session, user_id, "manual.txt", b"rotr")

    assert doc_check.status == DocCheckStatus.FAILED
    assert doc_check.error_message == "tokenizer crashed"
    assert doc_check.completed_at is None
