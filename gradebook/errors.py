from __future__ import annotations


class DashboardError(Exception):
    """
    Базовая ошибка загрузки/обработки.
    Текст сообщения показывается пользователю как есть (одной строкой под формой загрузки).
    """
    default_message = "Failed to process file"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)

# =========================

# Файл
# =========================
class InvalidExtensionError(DashboardError):
    default_message = "Please upload a CSV file"


class EmptyInputError(DashboardError):
    default_message = "CSV file is empty"


class EmptyDataError(DashboardError):
    default_message = "CSV file is empty"


class MalformedLayoutError(DashboardError):
    def __init__(self, min_rows: int, found_rows: int):
        self.min_rows = min_rows
        self.found_rows = found_rows
        super().__init__(
            f"CSV must have at least {min_rows} rows "
            f"(metadata, totals, headers, data); found {found_rows}"
        )

# =========================

# Колонки
# =========================
class MissingRequiredColumnsError(DashboardError):
    default_message = "CSV must contain student name and ID columns"


class MissingNameColumnError(DashboardError):
    default_message = "CSV must contain a student name column (e.g. First Name, Last Name)"


class MissingScoreColumnError(DashboardError):
    default_message = "CSV must contain a Score column"

# =========================

# Состояние (экзамены / ручной ввод)
# =========================
class MissingExamDetailsError(DashboardError):
    default_message = "Please fill in exam name and date"


class MissingStudentDetailsError(DashboardError):
    default_message = "Please fill in student name and ID"


class UnknownExamSetError(DashboardError):
    def __init__(self, exam_id: str):
        self.exam_id = exam_id
        super().__init__(f"Exam set not found: {exam_id}")


class UnknownSubjectError(DashboardError):
    def __init__(self, subject: str):
        self.subject = subject
        super().__init__(f"Unknown subject: {subject}")
