from __future__ import annotations
from typing import List, Optional
from .errors import EmptyInputError, InvalidExtensionError

RawTable = List[List[str]]

TAB = "\t"
COMMA = ","
# =========================

# Upload: bytes -> текст
# =========================
def check_extension(name: str) -> None:
    # Проверка до любого разбора: принимаем только *.csv
    if not str(name or "").lower().endswith(".csv"):
        raise InvalidExtensionError()


def decode_bytes(data: bytes) -> str:
    # выгрузки из Excel/SIS бывают с BOM или в cp1251
    for enc in ("utf-8-sig", "utf-8", "cp1251"):
        try:
            return data.decode(enc)
        except UnicodeDecodeError:
            continue
    return data.decode("utf-8", errors="replace")


def read_upload(name: str, data: bytes) -> str:
    check_extension(name)
    if isinstance(data, str):
        return data
    return decode_bytes(data)
# =========================

# Текст -> строки/ячейки
# =========================
def split_lines(text: str) -> List[str]:
    """
    Делит текст на физические строки.
    Хвостовые пустые строки убираются за счёт trim всего текста.
    Пустой текст -> EmptyInputError.
    """
    t = (text or "").strip()
    if not t:
        raise EmptyInputError()
    return [ln.rstrip("\r") for ln in t.split("\n")]


def detect_delimiter(line: str) -> str:
    return TAB if TAB in (line or "") else COMMA


def clean_cell(v: str) -> str:
    # пробелы и внешние кавычки
    s = (v or "").strip()
    s = s.strip('"')
    return s.strip()


def split_cells(line: str, delimiter: str = COMMA) -> List[str]:
    # Разделитель внутри кавычек не экранируется (наивный split)
    return [clean_cell(c) for c in (line or "").split(delimiter)]


def tokenize(text: str, delimiter: Optional[str] = None) -> RawTable:
    lines = split_lines(text)
    delim = delimiter or detect_delimiter(lines[0])
    return [split_cells(ln, delim) for ln in lines]
