from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
import numpy as np
import pandas as pd
from .utils import RULES, is_numeric, norm_text, parse_float

MIN_GRADE = 0.0
MAX_GRADE = 100.0


@dataclass
class Analytics:
    total_students: int = 0
    grade_columns: List[str] = field(default_factory=list)
    average_grade: float = 0.0
    # только непустые полосы, в порядке A..F
    grade_distribution: List[Dict[str, Any]] = field(default_factory=list)
    subject_performance: List[Dict[str, Any]] = field(default_factory=list)
    top_students: List[Dict[str, Any]] = field(default_factory=list)
    struggling_students: List[Dict[str, Any]] = field(default_factory=list)
    pass_rate: int = 0


def _bands(rules: Dict[str, Any]) -> List[Dict[str, Any]]:
    # от большего порога к меньшему; нижняя полоса ловит всё остальное из 0..100
    return sorted(rules["grade_bands"], key=lambda b: float(b["min"]), reverse=True)


def grade_band(value: float, rules: Optional[Dict[str, Any]] = None) -> Optional[str]:
    """
    Полоса оценки для значения из [0, 100]. Полосы не пересекаются:
    A >= 90, B >= 80, C >= 70, D >= 60, F - остальное.
    Вне диапазона -> None.
    """
    if value is None or not (MIN_GRADE <= value <= MAX_GRADE):
        return None
    for b in _bands(rules or RULES):
        if value >= float(b["min"]):
            return b["label"]
    return None


def grade_letter(value: float, rules: Optional[Dict[str, Any]] = None) -> Optional[str]:
    label = grade_band(value, rules)
    return label[0] if label else None


def _looks_numeric(v: Any) -> bool:
    # пустая ячейка считается числом (0), отсутствующее значение - нет
    if isinstance(v, str) and not v.strip():
        return True
    return is_numeric(v)


def detect_grade_columns(columns: Sequence[str], first_row: Dict[str, Any], keywords: Sequence[str]) -> List[str]:
    # ключевое слово в названии ИЛИ число в первой строке
    out = []
    for c in columns:
        low = norm_text(c)
        if any(k in low for k in keywords) or _looks_numeric(first_row.get(c)):
            out.append(c)
    return out


def _name_column(columns: Sequence[str]) -> Optional[str]:
    for c in columns:
        if "name" in norm_text(c):
            return c
    return columns[0] if columns else None


def _round2(x: float) -> float:
    return float(round(float(x), 2))


def compute_analytics(rows: Sequence[Dict[str, Any]], rules: Optional[Dict[str, Any]] = None) -> Optional[Analytics]:
    """
    Сводная аналитика по плоской таблице (список словарей).
    Чистая функция: пересчитывается на каждый вызов, ничего не кэширует.
    Пустая таблица -> None.
    """
    if not rows:
        return None
    rules = rules or RULES

    df = pd.DataFrame(list(rows))
    columns = [str(c) for c in df.columns]
    df.columns = columns
    grade_cols = detect_grade_columns(columns, dict(rows[0]), rules["grade_keywords"])

    if grade_cols:
        vals = df[grade_cols].apply(lambda col: col.map(parse_float)).astype(float)
    else:
        vals = pd.DataFrame(index=df.index, dtype=float)
    in_range = vals.where((vals >= MIN_GRADE) & (vals <= MAX_GRADE))

    # общий средний: все значения 0..100 по всем колонкам оценок
    flat = in_range.to_numpy().ravel()
    flat = flat[~np.isnan(flat)]
    average = _round2(flat.mean()) if flat.size else 0.0

    counts: Dict[str, int] = {b["label"]: 0 for b in _bands(rules)}
    for v in flat:
        label = grade_band(float(v), rules)
        if label:
            counts[label] += 1
    distribution = [{"range": k, "count": n} for k, n in counts.items() if n > 0]

    subjects = []
    for c in grade_cols:
        s = in_range[c].dropna()
        if s.empty:
            continue
        subjects.append({
            "subject": c.replace("_", " ").upper(),
            "column": c,
            "average": _round2(s.mean()),
            "students": int(s.size),
        })

    # средний по строке: все числовые значения колонок оценок (без фильтра диапазона)
    name_col = _name_column(columns)
    row_count = vals.count(axis=1) if grade_cols else pd.Series(0, index=df.index)
    row_mean = vals.mean(axis=1) if grade_cols else pd.Series(np.nan, index=df.index)

    students = []
    for i in df.index:
        n = int(row_count.loc[i])
        if n == 0:
            continue
        name = df.at[i, name_col] if name_col else None
        if name is None or (isinstance(name, float) and np.isnan(name)) or str(name).strip() == "":
            name = "Unknown"
        students.append({"name": str(name), "average": _round2(row_mean.loc[i]), "grades_count": n})

    top_n = int(rules["top_n"])
    top = sorted(students, key=lambda s: s["average"], reverse=True)[:top_n]
    struggling = sorted(
        [s for s in students if s["average"] < float(rules["struggling_below"])],
        key=lambda s: s["average"],
    )[:top_n]

    passed = sum(1 for s in students if s["average"] >= float(rules["pass_mark"]))
    # округление до ближайшего целого, .5 вверх
    pass_rate = int(np.floor(passed / len(students) * 100 + 0.5)) if students else 0

    return Analytics(
        total_students=len(rows),
        grade_columns=grade_cols,
        average_grade=average,
        grade_distribution=distribution,
        subject_performance=subjects,
        top_students=top,
        struggling_students=struggling,
        pass_rate=pass_rate,
    )
