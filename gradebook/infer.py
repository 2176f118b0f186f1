from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple
from .utils import norm_text

# Варианты написания заголовков для каждого поля
SYN = {
    "first_name": ["first name", "firstname"],
    "middle_name": ["middle name", "middlename"],
    "last_name": ["last name", "lastname", "surname"],
    "username": ["username"],
    "sis_id": ["sis id"],
    "student_number": ["student number"],
}

STUDENT_NAME_FALLBACK = "name"
# колонка "student_id" для экзамена не ищется: только SIS ID, Student Number, Username
STUDENT_ID_ORDER = ["sis_id", "student_number", "username"]

SCORE_KW = "score"
SCORE_AVOID = "%"

# в общем режиме эти колонки не считаются предметами
RESERVED_COLUMNS = {"name", "student_id", "id", "student_name"}
GENERAL_ID_KEYS = ["student_id", "id"]
GENERAL_NAME_KEYS = ["name", "student_name"]
# валидация общего режима: хватает одной из подстрок
GENERAL_REQUIRED_KWS = ["name", "student_id"]


@dataclass(frozen=True)
class FieldMap:
    student_name: Optional[str] = None
    first_name: Optional[str] = None
    middle_name: Optional[str] = None
    last_name: Optional[str] = None
    username: Optional[str] = None
    sis_id: Optional[str] = None
    student_number: Optional[str] = None
    student_id: Optional[str] = None
    score: Optional[str] = None


def find_header(headers: Sequence[str], tokens: Sequence[str]) -> Optional[str]:
    # Первая (слева) колонка, содержащая любой из токенов
    for h in headers:
        n = norm_text(h)
        if any(t in n for t in tokens):
            return h
    return None


def find_score_header(headers: Sequence[str]) -> Optional[str]:
    for h in headers:
        n = norm_text(h)
        if SCORE_KW in n and SCORE_AVOID not in n:
            return h
    return None


def subject_columns(headers: Sequence[str]) -> List[str]:
    return [h for h in headers if norm_text(h) not in RESERVED_COLUMNS]


def map_fields(headers: Sequence[str]) -> FieldMap:
    found = {k: find_header(headers, v) for k, v in SYN.items()}

    student_name = found["first_name"] or find_header(headers, [STUDENT_NAME_FALLBACK])
    student_id = None
    for k in STUDENT_ID_ORDER:
        if found[k]:
            student_id = found[k]
            break

    return FieldMap(
        student_name=student_name,
        first_name=found["first_name"],
        middle_name=found["middle_name"],
        last_name=found["last_name"],
        username=found["username"],
        sis_id=found["sis_id"],
        student_number=found["student_number"],
        student_id=student_id,
        score=find_score_header(headers),
    )


def general_identity_columns(headers: Sequence[str]) -> Tuple[Optional[str], Optional[str]]:
    # (id, name) по точному имени колонки без учёта регистра
    low = {}
    for h in headers:
        low.setdefault(norm_text(h), h)
    id_col = next((low[k] for k in GENERAL_ID_KEYS if k in low), None)
    name_col = next((low[k] for k in GENERAL_NAME_KEYS if k in low), None)
    return id_col, name_col
