from __future__ import annotations
import logging
import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple
from dateutil import parser as dtparser
from .entity import add_student as _add_student
from .errors import MissingExamDetailsError, UnknownExamSetError, UnknownSubjectError
from .extract import StudentRecord
from .utils import RULES

logger = logging.getLogger(__name__)

SUBJECTS: Tuple[str, ...] = ("verbal", "numerical", "maths", "reading")
RECENT_EXAMS = 3


def subject_label(subject: str) -> str:
    return RULES["subjects"].get(subject, subject.title())


def parse_exam_date(value: Any) -> Optional[date]:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    txt = str(value).strip()
    if not txt:
        return None
    try:
        return dtparser.parse(txt).date()
    except (ValueError, OverflowError):
        return None


@dataclass(frozen=True)
class ExamSet:
    id: str
    name: str
    date: date
    description: str = ""
    uploads_by_subject: Dict[str, Tuple[StudentRecord, ...]] = field(default_factory=dict)
    student_count: int = 0

    @property
    def uploaded_subjects(self) -> List[str]:
        return [s for s in SUBJECTS if self.uploads_by_subject.get(s)]

    @property
    def uploaded_count(self) -> int:
        return len(self.uploaded_subjects)

    @property
    def is_complete(self) -> bool:
        return self.uploaded_count == len(SUBJECTS)

    def records(self, subject: str) -> Tuple[StudentRecord, ...]:
        return self.uploads_by_subject.get(subject, ())


def count_students(uploads_by_subject: Dict[str, Sequence[StudentRecord]]) -> int:
    # объединение id по всем предметам, пересчёт целиком
    ids = set()
    for recs in uploads_by_subject.values():
        for r in recs or ():
            ids.add(r.id)
    return len(ids)


def with_subject_upload(exam_set: ExamSet, subject: str, records: Sequence[StudentRecord]) -> ExamSet:
    if subject not in SUBJECTS:
        raise UnknownSubjectError(subject)
    uploads = dict(exam_set.uploads_by_subject)
    uploads[subject] = tuple(records)
    return replace(exam_set, uploads_by_subject=uploads, student_count=count_students(uploads))


def combine_subjects(exam_set: ExamSet) -> List[Dict[str, Any]]:
    """
    Плоская таблица для дашборда: строки всех предметов подряд,
    каждая помечена ключом предмета и названием набора экзаменов.
    """
    rows: List[Dict[str, Any]] = []
    for subject in SUBJECTS:
        for r in exam_set.records(subject):
            row = r.as_row()
            row["subject"] = subject
            row["exam_set"] = exam_set.name
            rows.append(row)
    return rows


def overview(exam_sets: Sequence[ExamSet]) -> Dict[str, Any]:
    recent = sorted(exam_sets, key=lambda e: e.date, reverse=True)[:RECENT_EXAMS]
    return {
        "total_exam_sets": len(exam_sets),
        "total_students": sum(e.student_count for e in exam_sets),
        "total_uploads": sum(e.uploaded_count for e in exam_sets),
        "active_exam_sets": sum(1 for e in exam_sets if e.uploaded_count > 0),
        "recent": recent,
    }
# =========================

# Состояние сессии
# =========================
class Gradebook:
    """
    Владелец состояния сессии: наборы экзаменов, выбранный набор,
    число вопросов по предметам и текущая таблица общего режима.
    Меняется только через методы ниже; значения заменяются целиком.
    """

    def __init__(self, rules: Optional[Dict[str, Any]] = None):
        rules = rules or RULES
        self._exam_sets: Tuple[ExamSet, ...] = ()
        self._selected_id: Optional[str] = None
        default_total = int(rules.get("default_total_questions", 0) or 0)
        self._total_questions: Dict[str, int] = {s: default_total for s in SUBJECTS}
        self._dataset: Tuple[StudentRecord, ...] = ()

    # --- наборы экзаменов
    @property
    def exam_sets(self) -> List[ExamSet]:
        return list(self._exam_sets)

    @property
    def selected(self) -> Optional[ExamSet]:
        if self._selected_id is None:
            return None
        return self.get_exam_set(self._selected_id)

    def get_exam_set(self, exam_id: str) -> ExamSet:
        for e in self._exam_sets:
            if e.id == exam_id:
                return e
        raise UnknownExamSetError(exam_id)

    def create_exam_set(self, name: str, date: Any, description: str = "") -> ExamSet:
        name = (name or "").strip()
        if not name or date is None or not str(date).strip():
            raise MissingExamDetailsError()
        d = parse_exam_date(date)
        if d is None:
            raise MissingExamDetailsError(f"Invalid exam date: {date}")

        exam = ExamSet(id=uuid.uuid4().hex, name=name, date=d, description=(description or "").strip())
        self._exam_sets = self._exam_sets + (exam,)
        logger.info("Exam set created: %s (%s)", exam.name, exam.id)
        return exam

    def record_subject_upload(self, exam_id: str, subject: str, records: Sequence[StudentRecord]) -> ExamSet:
        current = self.get_exam_set(exam_id)
        updated = with_subject_upload(current, subject, records)
        self._exam_sets = tuple(updated if e.id == exam_id else e for e in self._exam_sets)
        logger.info(
            "Subject %s uploaded to %s: %d records, %d students in set",
            subject, exam_id, len(records), updated.student_count,
        )
        return updated

    def select_exam_set(self, exam_id: str) -> ExamSet:
        exam = self.get_exam_set(exam_id)
        self._selected_id = exam.id
        return exam

    def clear_selection(self) -> None:
        self._selected_id = None

    # --- число вопросов
    def total_questions(self, subject: str) -> int:
        if subject not in SUBJECTS:
            raise UnknownSubjectError(subject)
        return self._total_questions[subject]

    def set_total_questions(self, subject: str, value: int) -> None:
        if subject not in SUBJECTS:
            raise UnknownSubjectError(subject)
        self._total_questions = {**self._total_questions, subject: max(0, int(value or 0))}

    # --- общий режим
    @property
    def dataset(self) -> List[StudentRecord]:
        return list(self._dataset)

    def set_dataset(self, records: Sequence[StudentRecord]) -> None:
        self._dataset = tuple(records)
        logger.info("Dataset replaced: %d records", len(self._dataset))

    def add_student(self, name: str, student_id: str, grades: Optional[Dict[str, Any]] = None) -> StudentRecord:
        updated = _add_student(self._dataset, name, student_id, grades)
        self._dataset = tuple(updated)
        return updated[-1]

    def reset_dataset(self) -> None:
        self._dataset = ()
