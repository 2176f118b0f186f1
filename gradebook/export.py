from __future__ import annotations
import pandas as pd
from io import BytesIO
from typing import Any, Dict, Optional, Sequence
from .scoring import Analytics

SHEET_SUMMARY = "Summary"
SHEET_DISTRIBUTION = "Grade distribution"
SHEET_SUBJECTS = "Subjects"
SHEET_TOP = "Top students"
SHEET_STRUGGLING = "Struggling students"
SHEET_DATA = "Data"


def _summary_df(analytics: Analytics, title: str) -> pd.DataFrame:
    return pd.DataFrame([
        {"Metric": "Dataset", "Value": title},
        {"Metric": "Total students", "Value": analytics.total_students},
        {"Metric": "Class average (%)", "Value": analytics.average_grade},
        {"Metric": "Pass rate (%)", "Value": analytics.pass_rate},
        {"Metric": "Struggling students", "Value": len(analytics.struggling_students)},
        {"Metric": "Grade columns", "Value": ", ".join(analytics.grade_columns)},
    ])


def _students_df(items: Sequence[Dict[str, Any]]) -> pd.DataFrame:
    if not items:
        return pd.DataFrame(columns=["Rank", "Name", "Average", "Grades"])
    df = pd.DataFrame([{"Name": s["name"], "Average": s["average"], "Grades": s["grades_count"]} for s in items])
    df.insert(0, "Rank", range(1, len(df) + 1))
    return df


def export_analytics_to_excel_bytes(
    analytics: Analytics,
    rows: Optional[Sequence[Dict[str, Any]]] = None,
    *,
    title: str = "Student data",
) -> bytes:
    bio = BytesIO()

    summary_df = _summary_df(analytics, title)
    dist_df = pd.DataFrame(analytics.grade_distribution, columns=["range", "count"]).rename(
        columns={"range": "Range", "count": "Count"}
    )
    subj_df = pd.DataFrame(analytics.subject_performance, columns=["subject", "average", "students"]).rename(
        columns={"subject": "Subject", "average": "Average", "students": "Students"}
    )
    top_df = _students_df(analytics.top_students)
    struggling_df = _students_df(analytics.struggling_students)
    data_df = pd.DataFrame(list(rows)) if rows else pd.DataFrame()

    sheets = [
        (SHEET_SUMMARY, summary_df),
        (SHEET_DISTRIBUTION, dist_df),
        (SHEET_SUBJECTS, subj_df),
        (SHEET_TOP, top_df),
        (SHEET_STRUGGLING, struggling_df),
    ]
    if not data_df.empty:
        sheets.append((SHEET_DATA, data_df))

    with pd.ExcelWriter(bio, engine="xlsxwriter") as writer:
        for name, df in sheets:
            df.to_excel(writer, index=False, sheet_name=name)

        wb = writer.book
        fmt_header = wb.add_format({"bold": True, "bg_color": "#F2F2F2", "border": 1, "valign": "vcenter"})
        fmt_low = wb.add_format({"bg_color": "#FCE8E6"})
        fmt_high = wb.add_format({"bg_color": "#E6F4EA"})

        def format_df_sheet(sheet_name: str, df: pd.DataFrame, default_width: int = 16, max_width: int = 48):
            ws = writer.sheets.get(sheet_name)
            if ws is None:
                return
            ws.freeze_panes(1, 0)
            ws.autofilter(0, 0, max(1, len(df)), max(0, len(df.columns) - 1))
            for col, name in enumerate(df.columns):
                ws.write(0, col, name, fmt_header)
                w = max(10, min(max_width, int(len(str(name)) * 1.2) + 6))
                ws.set_column(col, col, max(default_width, w))

        for name, df in sheets:
            format_df_sheet(name, df, default_width=28 if name == SHEET_SUMMARY else 16)

        # подсветка средних: < 60 красным, >= 90 зелёным
        ws = writer.sheets.get(SHEET_SUBJECTS)
        if ws is not None and not subj_df.empty:
            last = len(subj_df)
            ws.conditional_format(1, 1, last, 1, {"type": "cell", "criteria": "<", "value": 60, "format": fmt_low})
            ws.conditional_format(1, 1, last, 1, {"type": "cell", "criteria": ">=", "value": 90, "format": fmt_high})

    return bio.getvalue()
