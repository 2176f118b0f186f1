import unittest

from gradebook.errors import EmptyInputError, MalformedLayoutError, MissingRequiredColumnsError, MissingScoreColumnError
from gradebook.exams import Gradebook
from gradebook.upload import FALLBACK_MESSAGE, handle_exam_upload, handle_general_upload, parse_exam, parse_general

EXAM_CSV = "meta\n,,,,50\nFirst Name,Last Name,Score\nJane,Doe,45\n"


class ParseTests(unittest.TestCase):
    def test_exam_offset_file(self):
        up = parse_exam(EXAM_CSV, "maths")
        self.assertEqual(up.total_questions, 50)
        self.assertEqual(len(up.records), 1)
        rec = up.records[0]
        self.assertEqual(rec.name, "Jane Doe")
        self.assertEqual(rec.fields["score"], 45)
        self.assertEqual(rec.fields["total_questions"], 50)
        self.assertEqual(rec.fields["percentage"], 90.0)
        self.assertTrue(rec.id.startswith("maths_"))

    def test_exam_keeps_given_total_when_totals_row_has_none(self):
        up = parse_exam("meta\nTotals,n/a\nFirst Name,Score\nJane,5\n", "verbal", total_questions=10)
        self.assertEqual(up.total_questions, 10)
        self.assertEqual(up.records[0].fields["percentage"], 50.0)

    def test_exam_header_only_has_no_rows(self):
        with self.assertRaises(MalformedLayoutError):
            parse_exam("meta\n,,50\nFirst Name,Score\n", "verbal")

    def test_exam_missing_score(self):
        with self.assertRaises(MissingScoreColumnError):
            parse_exam("meta\n,,50\nFirst Name,Score %\nJane,90%\n", "verbal")

    def test_general(self):
        recs = parse_general("name,student_id,math\nAnn,A1,90\n\nBob,B2,70\n")
        self.assertEqual([(r.id, r.name) for r in recs], [("A1", "Ann"), ("B2", "Bob")])

    def test_general_missing_columns(self):
        with self.assertRaises(MissingRequiredColumnsError):
            parse_general("foo,bar\n1,2")

    def test_empty_input_both_modes(self):
        with self.assertRaises(EmptyInputError):
            parse_general("")
        with self.assertRaises(EmptyInputError):
            parse_exam("  \n", "reading")


class HandlerTests(unittest.TestCase):
    def setUp(self):
        self.book = Gradebook()
        self.exam = self.book.create_exam_set("Mocks", "2024-06-01")

    def test_general_messages(self):
        self.assertEqual(handle_general_upload(self.book, "grades.txt", b"name\nA"), "Please upload a CSV file")
        self.assertEqual(handle_general_upload(self.book, "grades.csv", b""), "CSV file is empty")
        self.assertEqual(
            handle_general_upload(self.book, "grades.csv", b"foo,bar\n1,2"),
            "CSV must contain student name and ID columns",
        )
        self.assertEqual(self.book.dataset, [])

    def test_general_success_replaces_dataset(self):
        self.assertIsNone(handle_general_upload(self.book, "GRADES.CSV", b"\xef\xbb\xbfname,student_id\nAnn,A1\n"))
        self.assertEqual([r.id for r in self.book.dataset], ["A1"])
        self.assertIsNone(handle_general_upload(self.book, "g.csv", b"name,student_id\nBob,B2\n"))
        self.assertEqual([r.id for r in self.book.dataset], ["B2"])

    def test_exam_success_updates_set_and_total(self):
        msg = handle_exam_upload(self.book, self.exam.id, "maths", "maths.csv", EXAM_CSV.encode("utf-8"))
        self.assertIsNone(msg)
        exam = self.book.get_exam_set(self.exam.id)
        self.assertEqual(exam.uploaded_subjects, ["maths"])
        self.assertEqual(exam.student_count, 1)
        self.assertEqual(self.book.total_questions("maths"), 50)

    def test_exam_failure_leaves_state(self):
        msg = handle_exam_upload(self.book, self.exam.id, "maths", "maths.csv", b"meta\n,,50\nFirst Name,Score\n")
        self.assertIn("at least 4 rows", msg)
        self.assertEqual(self.book.get_exam_set(self.exam.id), self.exam)
        self.assertEqual(self.book.total_questions("maths"), 0)

    def test_exam_unknown_targets(self):
        msg = handle_exam_upload(self.book, "missing", "maths", "maths.csv", EXAM_CSV.encode("utf-8"))
        self.assertEqual(msg, "Exam set not found: missing")
        msg = handle_exam_upload(self.book, self.exam.id, "art", "art.csv", EXAM_CSV.encode("utf-8"))
        self.assertEqual(msg, "Unknown subject: art")

    def test_unexpected_error_gets_fallback_message(self):
        with self.assertLogs("gradebook.upload", level="ERROR"):
            msg = handle_general_upload(self.book, "g.csv", object())
        self.assertEqual(msg, FALLBACK_MESSAGE)


if __name__ == "__main__":
    unittest.main()
