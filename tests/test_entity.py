import unittest

from gradebook.entity import add_student, grade_fields, search_students, student_average, student_detail, unique_students
from gradebook.errors import MissingStudentDetailsError
from gradebook.extract import records_from_general

HEADERS = ["name", "student_id", "math", "science"]


def _records(rows):
    return records_from_general(HEADERS, rows)


class UniqueStudentsTests(unittest.TestCase):
    def test_first_seen_order_and_grades(self):
        recs = _records([
            ["Ann", "A", "90", "80"],
            ["Bob", "B", "70", "60"],
            ["Ann", "A", "100", "x"],
            ["Cid", "C", "50", "40"],
        ])
        students = unique_students(recs)
        self.assertEqual([s.id for s in students], ["A", "B", "C"])
        self.assertEqual([g.fields["math"] for g in students[0].grades], ["90", "100"])
        self.assertIs(students[0].grades[0], recs[0])

    def test_rows_without_id_or_name_skipped(self):
        students = unique_students(_records([["", "A", "1", "2"], ["Bob", "", "1", "2"], ["Cid", "C", "1", "2"]]))
        self.assertEqual([s.id for s in students], ["C"])

    def test_search(self):
        students = unique_students(_records([["Ann Lee", "101", "1", "1"], ["Bob", "202", "1", "1"]]))
        self.assertEqual([s.id for s in search_students(students, "lee")], ["101"])
        self.assertEqual([s.id for s in search_students(students, "20")], ["202"])
        self.assertEqual(len(search_students(students, "  ")), 2)


class StudentDetailTests(unittest.TestCase):
    def setUp(self):
        self.student = unique_students(_records([
            ["Ann", "A", "90", "80"],
            ["Ann", "A", "70", "n/a"],
        ]))[0]

    def test_grade_fields_skip_identity_columns(self):
        rec = records_from_general(["Name", "Student_ID", "math", "science"], [["Ann", "A", "90", "80"]])[0]
        self.assertEqual(grade_fields(rec), ["math", "science"])
        self.assertEqual(grade_fields(None), [])

    def test_average(self):
        self.assertEqual(student_average(self.student), 80.0)

    def test_average_none_without_numbers(self):
        st = unique_students(_records([["Ann", "A", "-", ""]]))[0]
        self.assertIsNone(student_average(st))

    def test_detail(self):
        d = student_detail(self.student)
        subj = {s["column"]: s for s in d["subjects"]}
        self.assertEqual(subj["math"]["average"], 80.0)
        self.assertEqual(subj["math"]["count"], 2)
        self.assertEqual(subj["math"]["grade"], "B")
        self.assertTrue(subj["math"]["on_track"])
        self.assertEqual(subj["science"]["average"], 80.0)
        self.assertEqual(subj["science"]["count"], 1)
        self.assertEqual(d["overall"], 80.0)
        self.assertEqual([p["exam"] for p in d["trend"]], ["Exam 1", "Exam 2"])
        self.assertEqual(d["trend"][1]["science"], 0.0)


class AddStudentTests(unittest.TestCase):
    def test_requires_name_and_id(self):
        with self.assertRaises(MissingStudentDetailsError):
            add_student([], " ", "1")
        with self.assertRaises(MissingStudentDetailsError):
            add_student([], "Ann", "")

    def test_follows_existing_columns(self):
        recs = _records([["Ann", "A", "90", "80"]])
        out = add_student(recs, "Bob", "B", {"math": 75, "art": "x"})
        self.assertEqual(len(recs), 1)
        self.assertEqual(out[-1].fields, {"name": "Bob", "student_id": "B", "math": "75", "science": ""})
        self.assertEqual((out[-1].id, out[-1].name), ("B", "Bob"))

    def test_without_existing_data(self):
        out = add_student([], "Bob", "B", {"math": "75"})
        self.assertEqual(out[0].fields, {"name": "Bob", "student_id": "B", "math": "75"})


if __name__ == "__main__":
    unittest.main()
