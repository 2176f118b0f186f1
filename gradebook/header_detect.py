from __future__ import annotations
import re
from dataclasses import dataclass, replace
from typing import List, Tuple
from .errors import MalformedLayoutError
from .ingest import COMMA, TAB, RawTable, detect_delimiter, split_cells

GENERAL = "general"
EXAM = "exam"

_LONE_INT_RE = re.compile(r"^\d+$")


@dataclass(frozen=True)
class HeaderLayout:
    header_row_index: int
    data_start_index: int
    delimiter: str = COMMA
    min_rows: int = 1

    def __post_init__(self):
        if not (self.data_start_index > self.header_row_index >= 0):
            raise ValueError(f"bad layout: header={self.header_row_index} data={self.data_start_index}")


# Обычный CSV: заголовок в 1-й строке
SIMPLE_LAYOUT = HeaderLayout(header_row_index=0, data_start_index=1, min_rows=1)
# Выгрузка результатов экзамена: метаданные, строка итогов, заголовок, данные
OFFSET_LAYOUT = HeaderLayout(header_row_index=2, data_start_index=3, min_rows=4)

TOTALS_ROW_INDEX = 1

_LAYOUTS = {GENERAL: SIMPLE_LAYOUT, EXAM: OFFSET_LAYOUT}


def resolve_layout(lines: List[str], mode: str = GENERAL) -> HeaderLayout:
    """
    Выбирает раскладку по контексту загрузки (general / exam),
    проверяет минимальное число строк и определяет разделитель по строке заголовка.
    """
    try:
        base = _LAYOUTS[mode]
    except KeyError:
        raise ValueError(f"unknown upload mode: {mode}") from None

    if len(lines) < base.min_rows:
        raise MalformedLayoutError(base.min_rows, len(lines))

    delim = detect_delimiter(lines[base.header_row_index])
    return replace(base, delimiter=delim)


def split_table(lines: List[str], layout: HeaderLayout) -> Tuple[List[str], RawTable]:
    # (заголовки, строки данных); пустые строки в блоке данных пропускаются
    headers = split_cells(lines[layout.header_row_index], layout.delimiter)
    rows: RawTable = []
    for ln in lines[layout.data_start_index:]:
        if not ln.strip():
            continue
        rows.append(split_cells(ln, layout.delimiter))
    return headers, rows


def scan_total_questions(line: str, default: int = 0) -> int:
    """
    Ищет во 2-й строке выгрузки число вопросов теста (целое 1..100).
    Сначала табы; если полей меньше 4 - запятые. Первое подходящее слева направо.
    Не нашли - возвращаем default (это не ошибка).
    """
    if not line:
        return default
    cells = split_cells(line, TAB)
    if len(cells) < 4:
        cells = split_cells(line, COMMA)
    for c in cells:
        if not _LONE_INT_RE.match(c):
            continue
        n = int(c)
        if 1 <= n <= 100:
            return n
    return default


def scan_total_questions_in(lines: List[str], default: int = 0) -> int:
    if len(lines) <= TOTALS_ROW_INDEX:
        return default
    return scan_total_questions(lines[TOTALS_ROW_INDEX], default)
