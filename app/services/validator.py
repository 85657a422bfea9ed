"""
Проверка строк BOM и текстов документов по словарю терминов.
"""
import re
from typing import Dict, Iterable, List, Mapping, Optional

from app.models.bom_item import BomItemStatus
from app.models.validation_issue import IssueType, Severity
from app.schemas.validation import (
    DocIssueItem,
    DocumentCheckResult,
    EntryValidationResult,
    IssueItem,
)

REQUIRED_FIELDS = ("partNumber", "partName", "description", "quantity")

MISSING_FIELD_SUGGESTION = "[Required]"

SPELLING_RULES: Dict[str, str] = {
    "teh": "the",
    "adn": "and",
    "wieght": "weight",
    "lenght": "length",
    "widht": "width",
    "hieght": "height",
    "diamter": "diameter",
    "materail": "material",
    "aluminium": "aluminum",
}

# Коды правил стандарта, к которым относятся замечания
RULE_CATALOG: Dict[IssueType, Dict[str, str]] = {
    IssueType.MISSING_FIELD: {"rule_id": "102", "rule_name": "Required Field Presence"},
    IssueType.TERMINOLOGY: {"rule_id": "101", "rule_name": "Terminology Standard"},
    IssueType.SPELLING: {"rule_id": "101", "rule_name": "Terminology Standard"},
}
DEFAULT_RULE = {"rule_id": "101", "rule_name": "Terminology Standard"}

_TOKEN_PARTS = re.compile(r"^(\W*)(.*?)(\W*)$", re.UNICODE)


def check_spelling(word: str) -> Optional[str]:
    """Исправление по статической таблице опечаток или None."""
    return SPELLING_RULES.get(word.lower())


def _check_token(
    word: str,
    terminology: Mapping[str, str],
) -> Optional[IssueItem]:
    """
    Проверка одного слова: сначала словарь терминов, затем таблица опечаток.

    Возвращает замечание без поля field; None если слово корректно.
    """
    correction = terminology.get(word.lower())
    if correction is not None:
        if word == correction:
            return None
        return IssueItem(
            type=IssueType.TERMINOLOGY,
            severity=Severity.MEDIUM,
            field="",
            original=word,
            suggestion=correction,
            description=f"Incorrect terminology: '{word}' should be '{correction}'",
            auto_corrected=True,
        )

    suggestion = check_spelling(word)
    if suggestion is not None:
        return IssueItem(
            type=IssueType.SPELLING,
            severity=Severity.LOW,
            field="",
            original=word,
            suggestion=suggestion,
            description=f"Possible spelling error: '{word}'",
            auto_corrected=True,
        )
    return None


def validate_bom_entry(
    entry: Mapping[str, str],
    terminology: Mapping[str, str],
) -> EntryValidationResult:
    """
    Валидация строки BOM.

    Args:
        entry: Строка BOM (заголовок -> значение)
        terminology: Словарь терминов (ключи в нижнем регистре)

    Returns:
        Исходная строка, замечания и исправленная строка
    """
    issues: List[IssueItem] = []
    corrected: Dict[str, str] = dict(entry)

    for field in REQUIRED_FIELDS:
        if not entry.get(field):
            issues.append(IssueItem(
                type=IssueType.MISSING_FIELD,
                severity=Severity.CRITICAL,
                field=field,
                original="",
                suggestion=MISSING_FIELD_SUGGESTION,
                description=f"Missing required field: {field}",
                auto_corrected=False,
            ))

    for field, value in entry.items():
        if not isinstance(value, str) or not value:
            continue

        corrected_words: List[str] = []
        field_corrected = False

        for word in value.split():
            issue = _check_token(word, terminology)
            if issue is None:
                corrected_words.append(word)
                continue

            issue.field = field
            issues.append(issue)
            corrected_words.append(issue.suggestion)
            field_corrected = True

        if field_corrected:
            corrected[field] = " ".join(corrected_words)

    return EntryValidationResult(entry=dict(entry), issues=issues, corrected=corrected)


def calculate_quality_score(total_issues: int, total_entries: int) -> float:
    """
    Оценка качества: 100 минус штраф 10 баллов за замечание на строку,
    штраф не больше 50.
    """
    if total_entries == 0:
        return 100.0

    issues_per_entry = total_issues / total_entries
    penalty = min(issues_per_entry * 10, 50)
    return max(100.0 - penalty, 0.0)


def determine_item_status(issues: Iterable[IssueItem]) -> BomItemStatus:
    """Статус строки по самому серьезному замечанию."""
    severities = {issue.severity for issue in issues}
    if Severity.CRITICAL in severities:
        return BomItemStatus.ERROR
    if Severity.HIGH in severities or Severity.MEDIUM in severities:
        return BomItemStatus.WARNING
    return BomItemStatus.VALID


def build_rule_violations(issues: Iterable[IssueItem]) -> List[Dict[str, str]]:
    """Нарушения правил стандарта для строки BOM."""
    violations = []
    for issue in issues:
        rule = RULE_CATALOG.get(issue.type, DEFAULT_RULE)
        violations.append({
            "rule_id": rule["rule_id"],
            "rule_name": rule["rule_name"],
            "severity": issue.severity.value,
            "description": issue.description,
            "field": issue.field,
            "current_value": issue.original,
        })
    return violations


def build_suggested_corrections(result: EntryValidationResult) -> Dict[str, str]:
    """
    Предлагаемые замены по полям: исправленное слово, для поля с
    несколькими исправлениями остается последнее.

    Полное исправленное значение поля хранится в result.corrected.
    """
    return {
        issue.field: issue.suggestion
        for issue in result.issues
        if issue.auto_corrected and issue.suggestion
    }


def check_document_text(text: str, terminology: Mapping[str, str]) -> DocumentCheckResult:
    """
    Проверка текста технического документа.

    Каждая непустая строка разбивается на слова по пробелам; знаки
    препинания по краям слова отделяются перед поиском и сохраняются
    при исправлении.

    Args:
        text: Текст документа
        terminology: Словарь терминов

    Returns:
        Замечания, исправленный текст и оценка качества
    """
    issues: List[DocIssueItem] = []
    corrected_lines: List[str] = []
    lines_checked = 0

    for line_number, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            corrected_lines.append(line)
            continue

        lines_checked += 1
        parts = re.split(r"(\s+)", line)
        for index, token in enumerate(parts):
            if not token or token.isspace():
                continue

            prefix, core, suffix = _TOKEN_PARTS.match(token).groups()
            if not core:
                continue

            issue = _check_token(core, terminology)
            if issue is None:
                continue

            issues.append(DocIssueItem(
                type=issue.type,
                severity=issue.severity,
                location=f"Line {line_number}",
                original=core,
                suggestion=issue.suggestion,
                description=issue.description,
                auto_corrected=issue.auto_corrected,
            ))
            parts[index] = f"{prefix}{issue.suggestion}{suffix}"

        corrected_lines.append("".join(parts))

    return DocumentCheckResult(
        issues=issues,
        corrected_text="\n".join(corrected_lines),
        lines_checked=lines_checked,
        quality_score=calculate_quality_score(len(issues), lines_checked),
    )
