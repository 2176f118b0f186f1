from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import List, Optional
from .errors import DashboardError
from .exams import Gradebook
from .extract import StudentRecord, records_from_exam, records_from_general
from .header_detect import EXAM, GENERAL, resolve_layout, scan_total_questions_in, split_table
from .ingest import read_upload, split_lines
from .validate import validate_exam, validate_general

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Failed to process file"


@dataclass(frozen=True)
class ExamUpload:
    records: List[StudentRecord]
    total_questions: int
# =========================

# Разбор (исключения наружу)
# =========================
def parse_general(text: str) -> List[StudentRecord]:
    lines = split_lines(text)
    layout = resolve_layout(lines, GENERAL)
    headers, rows = split_table(lines, layout)
    validate_general(headers, rows)
    return records_from_general(headers, rows)


def parse_exam(text: str, subject: str, total_questions: int = 0) -> ExamUpload:
    """
    Выгрузка результатов по одному предмету:
      строка 1 - метаданные, строка 2 - итоги (ищем число вопросов),
      строка 3 - заголовки, дальше данные.
    Если число вопросов в файле не найдено, остаётся переданное значение.
    """
    lines = split_lines(text)
    layout = resolve_layout(lines, EXAM)
    total = scan_total_questions_in(lines, total_questions)
    headers, rows = split_table(lines, layout)
    fm = validate_exam(headers, rows)
    records = records_from_exam(headers, rows, fm, subject, total)
    return ExamUpload(records=records, total_questions=total)


def load_general_csv(name: str, data: bytes) -> List[StudentRecord]:
    return parse_general(read_upload(name, data))


def load_exam_csv(name: str, data: bytes, subject: str, total_questions: int = 0) -> ExamUpload:
    return parse_exam(read_upload(name, data), subject, total_questions)
# =========================

# Граница обработчика загрузки: ошибка -> одна строка для UI
# =========================
def handle_general_upload(book: Gradebook, name: str, data: bytes) -> Optional[str]:
    try:
        records = load_general_csv(name, data)
    except DashboardError as e:
        logger.warning("Upload rejected (%s): %s", name, e.message)
        return e.message
    except Exception:
        logger.exception("Upload failed: %s", name)
        return FALLBACK_MESSAGE

    book.set_dataset(records)
    logger.info("Upload accepted (%s): %d records", name, len(records))
    return None


def handle_exam_upload(book: Gradebook, exam_id: str, subject: str, name: str, data: bytes) -> Optional[str]:
    # состояние меняется только после успешного разбора всего файла
    try:
        book.get_exam_set(exam_id)
        upload = load_exam_csv(name, data, subject, book.total_questions(subject))
        book.set_total_questions(subject, upload.total_questions)
        book.record_subject_upload(exam_id, subject, upload.records)
    except DashboardError as e:
        logger.warning("Exam upload rejected (%s, %s): %s", subject, name, e.message)
        return e.message
    except Exception:
        logger.exception("Exam upload failed: %s, %s", subject, name)
        return FALLBACK_MESSAGE

    logger.info("Exam upload accepted (%s, %s): total questions %d", subject, name, upload.total_questions)
    return None
