"""
Преобразование сырых байтов колонок в значения для отчёта.

Все функции чистые. Ошибки формата сообщаются через ValueError:
классификатор пропускает такое поле и продолжает строку.
"""

import re
from datetime import datetime, timedelta, timezone

# FILETIME: 100-наносекундные интервалы от 1601-01-01 UTC
FILETIME_EPOCH = datetime(1601, 1, 1, tzinfo=timezone.utc)

# Конец GUID в составном URI (ContentUri: '...?VolumeId={...}&ObjectId={...}&...')
_GUID_END = re.compile(r"[;&]")


def column_string_part(name: str) -> str:
    """'4450-System_ItemType' -> 'System_ItemType'. Имена без префикса не меняются."""
    prefix, sep, rest = name.partition("-")
    if sep and prefix.isdigit():
        return rest
    return name


def from_utf16(raw: bytes) -> str:
    """UTF-16LE -> str. Завершающие NUL отбрасываются, битые пары заменяются."""
    return raw.decode("utf-16-le", errors="replace").rstrip("\x00")


def u64_from_bytes(raw: bytes) -> int:
    """Беззнаковое little-endian целое (до 8 байт)."""
    return int.from_bytes(raw[:8], "little", signed=False)


def filetime_to_datetime(filetime: int) -> datetime:
    try:
        return FILETIME_EPOCH + timedelta(microseconds=filetime // 10)
    except OverflowError as exc:
        raise ValueError(f"FILETIME out of range: {filetime}") from exc


def format_date_time(value: datetime) -> str:
    """ISO-8601 в UTC с микросекундами и суффиксом Z."""
    return value.astimezone(timezone.utc).isoformat(timespec="microseconds").replace("+00:00", "Z")


def filetime_to_iso(raw: bytes) -> str:
    return format_date_time(filetime_to_datetime(u64_from_bytes(raw)))


def find_guid(text: str, marker: str) -> str:
    """Текст после marker до ';', '&' или конца строки. Нет маркера -> ''."""
    start = text.find(marker)
    if start < 0:
        return ""
    start += len(marker)
    end = _GUID_END.search(text, start)
    return text[start:end.start() if end else len(text)]
