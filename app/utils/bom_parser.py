"""
Разбор и формирование CSV-файлов BOM.
"""
import csv
import io
import re
from typing import Dict, List, Sequence

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_bom_file(content: str) -> List[Dict[str, str]]:
    """
    Разбор содержимого CSV-файла BOM.

    Первая непустая запись задает заголовки, каждая следующая непустая
    запись превращается в словарь заголовок -> значение. Недостающие
    значения заполняются пустой строкой, лишние отбрасываются.

    Args:
        content: Текст файла

    Returns:
        Список строк BOM
    """
    # Значения в кавычках могут содержать переводы строк
    reader = csv.reader(io.StringIO(content, newline=""), skipinitialspace=True)
    rows = [row for row in reader if any(value.strip() for value in row)]
    if not rows:
        return []

    headers = [header.strip() for header in rows[0]]

    entries: List[Dict[str, str]] = []
    for values in rows[1:]:
        entry: Dict[str, str] = {}
        for index, header in enumerate(headers):
            entry[header] = values[index].strip() if index < len(values) else ""
        entries.append(entry)

    return entries


def generate_csv(entries: Sequence[Dict[str, str]]) -> str:
    """
    Формирование CSV из строк BOM.

    Заголовки берутся из ключей первой строки.

    Args:
        entries: Строки BOM

    Returns:
        Текст CSV (пустая строка, если строк нет)
    """
    if not entries:
        return ""

    headers = list(entries[0].keys())
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(headers)
    for entry in entries:
        writer.writerow([entry.get(header) or "" for header in headers])

    return buffer.getvalue().rstrip("\n")


def parse_quantity(value: object) -> int:
    """Целая часть в начале значения количества, иначе 0."""
    if value is None:
        return 0
    match = _LEADING_INT.match(str(value))
    return int(match.group(1)) if match else 0
