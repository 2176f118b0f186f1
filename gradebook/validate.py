from __future__ import annotations
from typing import Optional, Sequence
from .errors import (EmptyDataError, MissingNameColumnError, MissingRequiredColumnsError, MissingScoreColumnError)
from .infer import GENERAL_REQUIRED_KWS, FieldMap, map_fields
from .utils import norm_text


def validate_general(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> None:
    # порядок проверок: сначала пустота, потом колонки
    if len(rows) == 0:
        raise EmptyDataError()
    low = [norm_text(h) for h in headers]
    if not any(kw in h for kw in GENERAL_REQUIRED_KWS for h in low):
        raise MissingRequiredColumnsError()


def validate_exam(
    headers: Sequence[str],
    rows: Sequence[Sequence[str]],
    field_map: Optional[FieldMap] = None,
) -> FieldMap:
    """
    Профиль загрузки результатов экзамена.
    Возвращает FieldMap (строится заново, если не передан), чтобы не маппить дважды.
    """
    if len(rows) == 0:
        raise EmptyDataError()
    fm = field_map or map_fields(headers)
    if not fm.student_name:
        raise MissingNameColumnError()
    if not fm.score:
        raise MissingScoreColumnError()
    return fm
