from __future__ import annotations
import logging
import streamlit as st
import pandas as pd
from gradebook.exams import Gradebook, SUBJECTS, combine_subjects, overview, subject_label
from gradebook.entity import search_students, student_average, student_detail, unique_students
from gradebook.errors import DashboardError
from gradebook.infer import subject_columns
from gradebook.scoring import compute_analytics
from gradebook.upload import handle_exam_upload, handle_general_upload
from gradebook.export import export_analytics_to_excel_bytes
from gradebook.utils import RULES

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

MAX_MB = int(RULES.get("max_upload_mb", 10))
PREVIEW_COLS = 8
st.set_page_config(page_title="Teacher Dashboard", layout="wide")
st.title("Teacher Dashboard")
st.caption("Student Academic Analytics")

if "book" not in st.session_state:
    st.session_state["book"] = Gradebook()
book: Gradebook = st.session_state["book"]
st.session_state.setdefault("exam_upload_error", None)
st.session_state.setdefault("general_upload_error", None)
# =========================

# Helpers
# =========================
def _render_analytics(rows: list[dict], title: str) -> None:
    analytics = compute_analytics(rows)
    if analytics is None:
        st.info("No data yet.")
        return

    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("Total Students", analytics.total_students)
    with c2:
        st.metric("Class Average", f"{analytics.average_grade}%")
    with c3:
        st.metric("Pass Rate", f"{analytics.pass_rate}%")
    with c4:
        st.metric("Struggling Students", len(analytics.struggling_students))

    g1, g2 = st.columns(2)
    with g1:
        st.subheader("Grade Distribution")
        if analytics.grade_distribution:
            st.bar_chart(pd.DataFrame(analytics.grade_distribution).set_index("range"))
        else:
            st.caption("No grades in the 0-100 range.")
    with g2:
        st.subheader("Subject Performance")
        if analytics.subject_performance:
            st.bar_chart(pd.DataFrame(analytics.subject_performance).set_index("subject")["average"])

    t1, t2 = st.columns(2)
    with t1:
        st.subheader("Top Performers")
        st.dataframe(pd.DataFrame(analytics.top_students), width="stretch", hide_index=True)
    with t2:
        st.subheader("Students Needing Support")
        if analytics.struggling_students:
            st.dataframe(pd.DataFrame(analytics.struggling_students), width="stretch", hide_index=True)
        else:
            st.success("No struggling students.")

    st.download_button(
        "Download Excel report",
        data=export_analytics_to_excel_bytes(analytics, rows, title=title),
        file_name="student_analytics.xlsx",
        mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )


def _avg_text(student) -> str:
    avg = student_average(student)
    return "N/A" if avg is None else f"{avg:.1f}"


def _render_preview(rows: list[dict]) -> None:
    if not rows:
        return
    df = pd.DataFrame(rows)
    cols = list(df.columns)
    note = f" (displaying first {PREVIEW_COLS} columns)" if len(cols) > PREVIEW_COLS else ""
    st.caption(f"Showing {len(df)} students • {len(cols)} columns{note}")
    st.dataframe(df[cols[:PREVIEW_COLS]], width="stretch", hide_index=True)
# =========================

# Pages
# =========================
page = st.sidebar.radio("Navigation", ["Overview", "Exam sets", "Student data"])

if page == "Overview":
    ov = overview(book.exam_sets)
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        st.metric("Total Exam Sets", ov["total_exam_sets"])
    with c2:
        st.metric("Total Students", ov["total_students"])
    with c3:
        st.metric("CSV Uploads", ov["total_uploads"])
    with c4:
        st.metric("Active exam sets", ov["active_exam_sets"])

    st.subheader("Recent Exam Sets")
    if not ov["recent"]:
        st.info("Create your first exam set to start tracking student performance across multiple subjects.")
    for exam in ov["recent"]:
        st.write(f"**{exam.name}** | {exam.date:%Y-%m-%d} • {exam.uploaded_count}/{len(SUBJECTS)} subjects uploaded"
                 + (" • complete" if exam.is_complete else ""))

elif page == "Exam sets":
    with st.expander("Create New Exam Set", expanded=not book.exam_sets):
        with st.form("create_exam_form", clear_on_submit=True):
            exam_name = st.text_input("Exam Name", placeholder="e.g., Mid-term Exams October 2024")
            exam_date = st.date_input("Exam Date", value=None)
            exam_desc = st.text_input("Description (Optional)")
            if st.form_submit_button("Create Exam Set"):
                try:
                    created = book.create_exam_set(exam_name, exam_date, exam_desc)
                    book.select_exam_set(created.id)
                    st.success("Exam set created.")
                except DashboardError as e:
                    st.error(e.message)

    if not book.exam_sets:
        st.warning("No exam sets yet.")
        st.stop()

    options = {e.id: f"{e.name} ({e.date:%Y-%m-%d})" for e in book.exam_sets}
    current = book.selected.id if book.selected else next(iter(options))
    chosen = st.selectbox("Exam set", list(options.keys()), index=list(options.keys()).index(current),
                          format_func=lambda k: options[k])
    exam = book.select_exam_set(chosen)

    st.write(f"Upload CSV files for all {len(SUBJECTS)} subjects • {exam.uploaded_count}/{len(SUBJECTS)} completed")
    if st.session_state["exam_upload_error"]:
        st.error(st.session_state["exam_upload_error"])

    cols = st.columns(2)
    for i, subject in enumerate(SUBJECTS):
        with cols[i % 2]:
            recs = exam.records(subject)
            st.markdown(f"**{subject_label(subject)}**" + (f" ✓ ({len(recs)} students)" if recs else ""))
            tq = st.number_input(
                "Total questions", min_value=0, max_value=100,
                value=book.total_questions(subject), key=f"{exam.id}__{subject}__tq",
            )
            book.set_total_questions(subject, int(tq))
            up = st.file_uploader(
                "Replace File" if recs else f"Upload {subject_label(subject)} CSV",
                type=["csv"], key=f"{exam.id}__{subject}__file",
                help=f"Supports CSV files up to {MAX_MB}MB",
            )
            if up is not None and st.button("Process", key=f"{exam.id}__{subject}__go"):
                st.session_state["exam_upload_error"] = handle_exam_upload(book, exam.id, subject, up.name, up.getvalue())
                # число вопросов могло определиться из файла
                st.session_state.pop(f"{exam.id}__{subject}__tq", None)
                st.rerun()

    exam = book.selected
    if exam is not None and exam.uploaded_count:
        st.divider()
        st.subheader(f"Dashboard: {exam.name}")
        _render_analytics(combine_subjects(exam), exam.name)

else:
    if st.session_state["general_upload_error"]:
        st.error(st.session_state["general_upload_error"])

    up = st.file_uploader(
        "Upload Student Data", type=["csv"],
        help=f"Include headers in the first row. Required: Student Name, Student ID columns. Up to {MAX_MB}MB.",
    )
    if up is not None and st.button("Process file", type="primary"):
        st.session_state["general_upload_error"] = handle_general_upload(book, up.name, up.getvalue())
        st.rerun()

    if not book.dataset:
        st.stop()

    if st.button("Upload New Data"):
        book.reset_dataset()
        st.rerun()

    rows = [r.as_row() for r in book.dataset]
    tab_dash, tab_students, tab_preview = st.tabs(["Analytics Dashboard", "Students", "Data Preview"])

    with tab_dash:
        _render_analytics(rows, "Student data")

    with tab_students:
        students = unique_students(book.dataset)
        q = st.text_input("Search students", value="")
        found = search_students(students, q)
        st.dataframe(
            pd.DataFrame([{"ID": s.id, "Name": s.name, "Records": len(s.grades), "Average": _avg_text(s)} for s in found]),
            width="stretch", hide_index=True,
        )

        ids = [s.id for s in found]
        if ids:
            sel = st.selectbox("Student detail", ids, format_func=lambda k: next(s.name for s in found if s.id == k))
            detail = student_detail(next(s for s in found if s.id == sel))
            st.markdown(f"### {detail['name']}  \nStudent ID: {detail['id']}")
            st.metric("Overall Average", f"{detail['overall']}%")
            st.dataframe(pd.DataFrame(detail["subjects"]), width="stretch", hide_index=True)
            if len(detail["trend"]) > 1:
                st.line_chart(pd.DataFrame(detail["trend"]).set_index("exam"))

        with st.expander("Add Student", expanded=False):
            subject_cols = subject_columns(list(book.dataset[0].fields.keys()))
            with st.form("add_student_form", clear_on_submit=True):
                name = st.text_input("Student Name")
                sid = st.text_input("Student ID")
                grades = {c: st.text_input(c, value="") for c in subject_cols}
                if st.form_submit_button("Add Student"):
                    try:
                        book.add_student(name, sid, grades)
                        st.success("Added.")
                        st.rerun()
                    except DashboardError as e:
                        st.error(e.message)

    with tab_preview:
        _render_preview(rows)
