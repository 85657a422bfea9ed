"""
Санитизация имен файлов, ключей хранилища и пользовательских строк.
"""
import re
from pathlib import Path, PurePosixPath
from typing import Optional

_UNSAFE_FILENAME_CHARS = re.compile(r'[\x00-\x1f<>:"|?*]')
_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f-\x9f]")
_WHITESPACE = re.compile(r"\s+")

MAX_FILENAME_LENGTH = 255


def sanitize_filename(filename: str) -> str:
    """
    Имя загруженного файла без каталогов и небезопасных символов.

    Имена из Windows-клиентов приходят с обратными слэшами, поэтому
    каталог отбрасывается для обоих разделителей. Расширение сохраняется
    при обрезке длинных имен.

    Args:
        filename: Имя файла из запроса

    Returns:
        Очищенное имя файла или "unnamed"
    """
    name = PurePosixPath((filename or "").replace("\\", "/")).name
    name = _UNSAFE_FILENAME_CHARS.sub("_", name).replace("..", "_").strip(" .")

    if len(name) > MAX_FILENAME_LENGTH:
        suffix = Path(name).suffix[:16]
        name = Path(name).stem[:MAX_FILENAME_LENGTH - len(suffix)] + suffix

    return name or "unnamed"


def validate_file_path(file_path: str, base_path: str) -> bool:
    """
    Ключ файла не выходит за пределы каталога бакета.

    Args:
        file_path: Ключ внутри бакета, например "<user_id>/<uuid>.csv"
        base_path: Каталог бакета

    Returns:
        True если итоговый путь лежит внутри бакета
    """
    if not file_path or PurePosixPath(file_path).is_absolute():
        return False
    try:
        root = Path(base_path).resolve()
        return root in (root / file_path).resolve().parents
    except (OSError, ValueError):
        return False


def sanitize_string(value: Optional[str], max_length: Optional[int] = None) -> str:
    """Строка без управляющих символов, с одиночными пробелами и обрезкой длины."""
    if not value:
        return ""

    value = _WHITESPACE.sub(" ", _CONTROL_CHARS.sub(" ", value)).strip()
    if max_length:
        value = value[:max_length].rstrip()
    return value
