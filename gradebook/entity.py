from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from .errors import MissingStudentDetailsError
from .extract import StudentRecord
from .infer import general_identity_columns, subject_columns
from .scoring import grade_letter
from .utils import parse_float

logger = logging.getLogger(__name__)

# порог "положительной динамики" в карточке студента
ON_TRACK_AVERAGE = 75


@dataclass
class Student:
    id: str
    name: str
    grades: List[StudentRecord] = field(default_factory=list)


def unique_students(records: Sequence[StudentRecord]) -> List[Student]:
    """
    Уникальные студенты в порядке первого появления.
    grades - все записи с этим id (включая первую) в исходном порядке.
    Записи без id или без имени пропускаются.
    """
    by_id: Dict[str, Student] = {}
    for r in records:
        sid = str(r.id or "").strip()
        if not sid or not str(r.name or "").strip():
            continue
        st = by_id.get(sid)
        if st is None:
            st = Student(id=sid, name=r.name)
            by_id[sid] = st
        st.grades.append(r)
    return list(by_id.values())


def search_students(students: Sequence[Student], term: str) -> List[Student]:
    # по подстроке имени (без регистра) или id
    t = (term or "").strip()
    if not t:
        return list(students)
    low = t.lower()
    return [s for s in students if low in s.name.lower() or t in str(s.id)]


def grade_fields(record: Optional[StudentRecord]) -> List[str]:
    if record is None:
        return []
    return subject_columns(list(record.as_row().keys()))


def _numeric_values(records: Sequence[StudentRecord], fields: Sequence[str]) -> List[float]:
    out = []
    for r in records:
        row = r.as_row()
        for f in fields:
            v = parse_float(row.get(f))
            if v is not None:
                out.append(v)
    return out


def student_average(student: Student) -> Optional[float]:
    # среднее по всем числовым значениям всех записей студента; нет чисел -> None
    fields = grade_fields(student.grades[0] if student.grades else None)
    vals = _numeric_values(student.grades, fields)
    if not vals:
        return None
    return round(sum(vals) / len(vals), 1)


def student_detail(student: Student) -> Dict[str, Any]:
    """
    Карточка студента:
      subjects - средний по каждой колонке (1 знак), полоса оценки
      overall  - среднее средних по предметам
      trend    - значения по каждой записи ("Exam 1", "Exam 2", ...)
    """
    fields = grade_fields(student.grades[0] if student.grades else None)

    subjects = []
    for f in fields:
        vals = _numeric_values(student.grades, [f])
        avg = round(sum(vals) / len(vals), 1) if vals else 0.0
        subjects.append({
            "subject": f.replace("_", " ").upper(),
            "column": f,
            "average": avg,
            "count": len(vals),
            "grade": grade_letter(avg),
            "on_track": avg >= ON_TRACK_AVERAGE,
        })

    overall = sum(s["average"] for s in subjects) / len(subjects) if subjects else 0.0

    trend = []
    for i, r in enumerate(student.grades):
        row = r.as_row()
        point: Dict[str, Any] = {"exam": f"Exam {i + 1}"}
        for f in fields:
            point[f] = parse_float(row.get(f)) or 0.0
        trend.append(point)

    return {
        "id": student.id,
        "name": student.name,
        "subjects": subjects,
        "overall": round(overall, 1),
        "records": len(student.grades),
        "trend": trend,
    }


def add_student(
    records: Sequence[StudentRecord],
    name: str,
    student_id: str,
    grades: Optional[Dict[str, Any]] = None,
) -> List[StudentRecord]:
    """
    Ручное добавление студента в текущий набор (общий режим).
    Колонки берутся из уже загруженных данных; возвращается новый список.
    """
    name = (name or "").strip()
    student_id = (student_id or "").strip()
    if not name or not student_id:
        raise MissingStudentDetailsError()
    grades = {k: ("" if v is None else str(v)) for k, v in (grades or {}).items()}

    if records:
        headers = list(records[0].fields.keys())
        id_col, name_col = general_identity_columns(headers)
        fields: Dict[str, Any] = {}
        for h in headers:
            fields[h] = grades.get(h, "")
        fields[name_col or "name"] = name
        fields[id_col or "student_id"] = student_id
    else:
        fields = {"name": name, "student_id": student_id}
        fields.update(grades)

    rec = StudentRecord(id=student_id, name=name, fields=fields)
    logger.info("Student added manually: %s", student_id)
    return list(records) + [rec]
