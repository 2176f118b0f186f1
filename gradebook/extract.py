from __future__ import annotations
import hashlib
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from .infer import FieldMap, general_identity_columns
from .utils import parse_int

UNKNOWN_NAME = "Unknown"
SYNTH_ID_LEN = 9
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


@dataclass(frozen=True)
class StudentRecord:
    """
    Каноническая запись студента.
    fields - общий режим: все колонки строки как есть;
             режим экзамена: score / total_questions / percentage / subject.
    extra  - исходные колонки строки (только режим экзамена), порядок как в файле.
    """
    id: str
    name: str
    fields: Dict[str, Any] = field(default_factory=dict)
    extra: Dict[str, str] = field(default_factory=dict)
    subject: Optional[str] = None

    def as_row(self) -> Dict[str, Any]:
        # плоская строка для таблиц/аналитики; канонические поля важнее исходных
        if self.subject is None:
            return dict(self.fields)
        row: Dict[str, Any] = dict(self.extra)
        row["id"] = self.id
        row["name"] = self.name
        row.update(self.fields)
        return row


def row_to_mapping(headers: Sequence[str], row: Sequence[str]) -> Dict[str, str]:
    # недостающие ячейки -> "", лишние отбрасываются
    out: Dict[str, str] = {}
    for i, h in enumerate(headers):
        out[h] = row[i] if i < len(row) else ""
    return out
# =========================

# Общий режим
# =========================
def records_from_general(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> List[StudentRecord]:
    id_col, name_col = general_identity_columns(headers)
    out: List[StudentRecord] = []
    for r in rows:
        m = row_to_mapping(headers, r)
        out.append(StudentRecord(
            id=m.get(id_col, "") if id_col else "",
            name=m.get(name_col, "") if name_col else "",
            fields=m,
        ))
    return out
# =========================

# Режим экзамена
# =========================
def _value(m: Dict[str, str], col: Optional[str]) -> str:
    if not col:
        return ""
    return str(m.get(col, "") or "").strip()


def compose_name(m: Dict[str, str], fm: FieldMap) -> str:
    parts = [_value(m, c) for c in (fm.first_name, fm.middle_name, fm.last_name)]
    name = " ".join(p for p in parts if p).strip()
    if name:
        return name
    # колонка вида "Student Name" без разбивки на части в имя не идёт
    return _value(m, fm.username) or UNKNOWN_NAME


def _to_base36(n: int, width: int) -> str:
    digits = []
    while n:
        n, r = divmod(n, 36)
        digits.append(_BASE36[r])
    s = "".join(reversed(digits)) or "0"
    return s[-width:].rjust(width, "0")


def synthesize_id(subject: str, name: str, position: int) -> str:
    # Детерминированный id: повторная загрузка того же файла даёт те же id
    digest = hashlib.md5(f"{subject}|{name}|{position}".encode("utf-8")).hexdigest()
    return f"{subject}_{_to_base36(int(digest, 16), SYNTH_ID_LEN)}"


def compose_id(m: Dict[str, str], fm: FieldMap, subject: str, name: str, position: int) -> str:
    for col in (fm.sis_id, fm.student_number, fm.username):
        v = _value(m, col)
        if v:
            return v
    return synthesize_id(subject, name, position)


def percentage(raw_score: int, total_questions: int) -> float:
    if not total_questions or total_questions <= 0:
        return 0.0
    return round(raw_score / total_questions * 100, 2)


def normalize_exam_row(
    row: Sequence[str],
    headers: Sequence[str],
    fm: FieldMap,
    subject: str,
    total_questions: int,
    position: int = 0,
) -> StudentRecord:
    m = row_to_mapping(headers, row)
    name = compose_name(m, fm)
    sid = compose_id(m, fm, subject, name, position)
    raw = parse_int(_value(m, fm.score))
    raw = raw if raw is not None else 0
    return StudentRecord(
        id=sid,
        name=name,
        fields={
            "score": raw,
            "total_questions": int(total_questions or 0),
            "percentage": percentage(raw, total_questions),
            "subject": subject,
        },
        extra=m,
        subject=subject,
    )


def records_from_exam(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    fm: FieldMap,
    subject: str,
    total_questions: int,
) -> List[StudentRecord]:
    return [normalize_exam_row(r, headers, fm, subject, total_questions, position=i) for i, r in enumerate(rows)]
