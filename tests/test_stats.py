"""
Тесты сводки соответствия.
"""
import io

import pytest
from uuid import UUID, uuid4
from httpx import AsyncClient

from app.core.config import settings
from app.models.bom_check import BomCheck, BomCheckStatus
from app.models.doc_check import DocCheck, DocCheckStatus
from app.services.bom_validation import BomValidationService
from app.services.stats import summarize
from app.tasks import validation_tasks


def _bom(status, score=None, found=0, corrected=0):
    return BomCheck(
        user_id=uuid4(),
        original_filename="bom.csv",
        stored_filename="bom.csv",
        file_size=1,
        file_hash="x",
        status=status,
        quality_score=score,
        issues_found=found,
        issues_corrected=corrected,
    )


def _doc(status, score=None, issues=None, corrections=None):
    return DocCheck(
        user_id=uuid4(),
        original_filename="doc.txt",
        stored_filename="doc.txt",
        file_size=1,
        status=status,
        quality_score=score,
        issues_found=issues or [],
        corrections_made=corrections or [],
    )


def test_summarize_empty():
    summary = summarize([], [])

    assert summary.total_bom_checks == 0
    assert summary.correction_confidence == 0.0
    assert summary.avg_quality_score == 0.0
    assert summary.avg_doc_quality_score == 0.0


def test_summarize():
    spelling = {"type": "spelling"}
    terminology = {"type": "terminology"}
    summary = summarize(
        [
            _bom(BomCheckStatus.COMPLETED, 95.0, found=1, corrected=1),
            _bom(BomCheckStatus.COMPLETED, 80.0, found=3, corrected=1),
            _bom(BomCheckStatus.COMPLETED, 100.0),
            _bom(BomCheckStatus.FAILED),
            _bom(BomCheckStatus.PENDING),
        ],
        [
            _doc(DocCheckStatus.COMPLETED, 90.0, [spelling, terminology], [spelling, terminology]),
            _doc(DocCheckStatus.COMPLETED, 70.0, [spelling, spelling, terminology], [spelling]),
            _doc(DocCheckStatus.FAILED),
        ],
    )

    assert summary.total_bom_checks == 5
    assert summary.completed_bom_checks == 3
    assert summary.compliant_boms == 2
    assert summary.boms_requiring_review == 1
    assert summary.correction_confidence == 50.0
    assert summary.avg_quality_score == pytest.approx(91.7)
    assert summary.total_docs_uploaded == 3
    assert summary.total_docs_checked == 2
    assert summary.docs_fully_corrected == 1
    assert summary.spelling_issues_found == 3
    assert summary.spelling_issues_corrected == 2
    assert summary.terminology_violations == 2
    assert summary.avg_doc_quality_score == 80.0


@pytest.mark.asyncio
async def test_summary_endpoint(client: AsyncClient, upload_bom, auth_headers, other_auth_headers):
    await upload_bom()
    await client.post(
        "/api/v1/doc-checks/upload",
        headers=auth_headers,
        files={"file": ("manual.txt", io.BytesIO(b"teh rotr"), "text/plain")},
    )

    response = await client.get("/api/v1/bom-checks/summary", headers=auth_headers)

    assert response.status_code == 200
    data = response.json()
    assert data["total_bom_checks"] == 1
    assert data["completed_bom_checks"] == 1
    assert data["compliant_boms"] == 1
    assert data["correction_confidence"] == 75.0
    assert data["avg_quality_score"] == 90.0
    assert data["total_docs_checked"] == 1
    assert data["spelling_issues_found"] == 1
    assert data["terminology_violations"] == 1

    other = await client.get("/api/v1/bom-checks/summary", headers=other_auth_headers)
    assert other.json()["total_bom_checks"] == 0


@pytest.mark.asyncio
async def test_summary_refreshes_after_upload(client: AsyncClient, upload_bom, auth_headers):
    """Кеш сводки сбрасывается при новой загрузке."""
    empty = await client.get("/api/v1/bom-checks/summary", headers=auth_headers)
    assert empty.json()["total_bom_checks"] == 0

    await upload_bom()

    refreshed = await client.get("/api/v1/bom-checks/summary", headers=auth_headers)
    assert refreshed.json()["total_bom_checks"] == 1


@pytest.mark.asyncio
async def test_summary_refreshes_after_background_validation(
    client: AsyncClient, upload_bom, auth_headers, db_session, monkeypatch
):
    """Сводка обновляется, когда фоновая валидация завершает проверку."""
    queued = []

    class FakeTask:
        @staticmethod
        def delay(check_id):
            queued.append(check_id)

    monkeypatch.setattr(settings, "VALIDATION_ASYNC", True)
    monkeypatch.setattr(validation_tasks, "validate_bom_check", FakeTask)

    await upload_bom()
    pending = await client.get("/api/v1/bom-checks/summary", headers=auth_headers)
    assert pending.json()["total_bom_checks"] == 1
    assert pending.json()["completed_bom_checks"] == 0

    await BomValidationService.run_validation(db_session, UUID(queued[0]))

    completed = await client.get("/api/v1/bom-checks/summary", headers=auth_headers)
    assert completed.json()["completed_bom_checks"] == 1
    assert completed.json()["avg_quality_score"] == 90.0
