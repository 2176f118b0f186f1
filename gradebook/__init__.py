"""
Этот пакет содержит:
- чтение CSV-выгрузок (разделители, строки заголовка, смещённые данные)
- распознавание колонок (имя, id, балл, предметы) и валидацию
- нормализацию строк в записи студентов (процент, синтетический id)
- объединение по студентам и наборам экзаменов
- аналитику для дашборда
- экспорт отчёта
"""
from .errors import DashboardError
from .ingest import read_upload, tokenize
from .header_detect import HeaderLayout, resolve_layout, scan_total_questions
from .infer import FieldMap, map_fields
from .validate import validate_exam, validate_general
from .extract import StudentRecord, records_from_exam, records_from_general
from .entity import Student, unique_students, student_detail
from .exams import ExamSet, Gradebook, combine_subjects, overview
from .scoring import Analytics, compute_analytics
from .upload import parse_exam, parse_general, handle_exam_upload, handle_general_upload
from .export import export_analytics_to_excel_bytes

__all__ = [
    "DashboardError",
    "read_upload",
    "tokenize",
    "HeaderLayout",
    "resolve_layout",
    "scan_total_questions",
    "FieldMap",
    "map_fields",
    "validate_exam",
    "validate_general",
    "StudentRecord",
    "records_from_exam",
    "records_from_general",
    "Student",
    "unique_students",
    "student_detail",
    "ExamSet",
    "Gradebook",
    "combine_subjects",
    "overview",
    "Analytics",
    "compute_analytics",
    "parse_exam",
    "parse_general",
    "handle_exam_upload",
    "handle_general_upload",
    "export_analytics_to_excel_bytes",
]
