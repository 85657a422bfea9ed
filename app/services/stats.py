"""
Сводные показатели соответствия для пользователя.
"""
from typing import Any, Dict, Iterable, List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.models.bom_check import BomCheck, BomCheckStatus
from app.models.doc_check import DocCheck, DocCheckStatus
from app.models.validation_issue import IssueType
from app.schemas.bom import ComplianceSummaryResponse
from app.services.cache import CacheService


def _round1(value: float) -> float:
    return round(value * 10) / 10


def _count_issues(records: Iterable[List[Dict[str, Any]]], types: Iterable[str]) -> int:
    wanted = set(types)
    return sum(
        1
        for issues in records
        for issue in (issues or [])
        if issue.get("type") in wanted
    )


def summarize(bom_checks: List[BomCheck], doc_checks: List[DocCheck]) -> ComplianceSummaryResponse:
    """
    Расчет сводки по проверкам BOM и документов.

    Args:
        bom_checks: Проверки BOM пользователя
        doc_checks: Проверки документов пользователя

    Returns:
        Сводка соответствия
    """
    threshold = settings.COMPLIANCE_THRESHOLD

    completed = [c for c in bom_checks if c.status == BomCheckStatus.COMPLETED]
    compliant = sum(1 for c in completed if (c.quality_score or 0) >= threshold)
    requiring_review = sum(
        1 for c in completed
        if (c.quality_score or 0) < threshold and (c.issues_found or 0) > 0
    )

    issues_found = sum(c.issues_found or 0 for c in bom_checks)
    issues_corrected = sum(c.issues_corrected or 0 for c in bom_checks)
    confidence = issues_corrected / issues_found * 100 if issues_found else 0.0
    avg_score = (
        sum(c.quality_score or 0 for c in completed) / len(completed) if completed else 0.0
    )

    docs_completed = [d for d in doc_checks if d.status == DocCheckStatus.COMPLETED]
    avg_doc_score = (
        sum(d.quality_score or 0 for d in docs_completed) / len(docs_completed)
        if docs_completed else 0.0
    )

    return ComplianceSummaryResponse(
        total_bom_checks=len(bom_checks),
        completed_bom_checks=len(completed),
        compliant_boms=compliant,
        boms_requiring_review=requiring_review,
        correction_confidence=_round1(confidence),
        avg_quality_score=_round1(avg_score),
        total_docs_uploaded=len(doc_checks),
        total_docs_checked=len(docs_completed),
        docs_fully_corrected=sum(1 for d in docs_completed if (d.quality_score or 0) >= threshold),
        spelling_issues_found=_count_issues((d.issues_found for d in doc_checks), [IssueType.SPELLING.value]),
        spelling_issues_corrected=_count_issues((d.corrections_made for d in doc_checks), [IssueType.SPELLING.value]),
        terminology_violations=_count_issues((d.issues_found for d in doc_checks), [IssueType.TERMINOLOGY.value]),
        avg_doc_quality_score=_round1(avg_doc_score),
    )


class StatsService:
    """Сервис сводных показателей."""

    @staticmethod
    def _cache_key(user_id: UUID) -> str:
        return f"summary:user:{user_id}"

    @staticmethod
    async def get_compliance_summary(db: AsyncSession, user_id: UUID) -> ComplianceSummaryResponse:
        """Сводка соответствия пользователя (кешируется на SUMMARY_CACHE_TTL)."""
        cache_key = StatsService._cache_key(user_id)
        cached = await CacheService.get(cache_key)
        if cached:
            return ComplianceSummaryResponse(**cached)

        bom_result = await db.execute(select(BomCheck).where(BomCheck.user_id == user_id))
        doc_result = await db.execute(select(DocCheck).where(DocCheck.user_id == user_id))
        summary = summarize(list(bom_result.scalars().all()), list(doc_result.scalars().all()))

        await CacheService.set(cache_key, summary.model_dump(), ttl=settings.SUMMARY_CACHE_TTL)
        return summary

    @staticmethod
    async def invalidate(user_id: UUID) -> None:
        await CacheService.delete(StatsService._cache_key(user_id))
