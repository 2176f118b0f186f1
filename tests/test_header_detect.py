import unittest

from gradebook import header_detect as hd
from gradebook.errors import MalformedLayoutError


class LayoutTests(unittest.TestCase):
    def test_simple_layout_header_only_is_valid(self):
        layout = hd.resolve_layout(["name,student_id"], hd.GENERAL)
        self.assertEqual((layout.header_row_index, layout.data_start_index), (0, 1))
        headers, rows = hd.split_table(["name,student_id"], layout)
        self.assertEqual(headers, ["name", "student_id"])
        self.assertEqual(rows, [])

    def test_offset_layout_requires_four_rows(self):
        with self.assertRaises(MalformedLayoutError) as ctx:
            hd.resolve_layout(["meta", ",,50", "First Name,Score"], hd.EXAM)
        self.assertEqual(ctx.exception.min_rows, 4)
        self.assertIn("at least 4 rows", ctx.exception.message)

    def test_offset_layout_detects_tab_from_header_row(self):
        lines = ["meta,with,commas", "x,y", "First Name\tScore", "Jane\t45"]
        layout = hd.resolve_layout(lines, hd.EXAM)
        self.assertEqual(layout.delimiter, "\t")
        headers, rows = hd.split_table(lines, layout)
        self.assertEqual(headers, ["First Name", "Score"])
        self.assertEqual(rows, [["Jane", "45"]])

    def test_blank_data_lines_skipped(self):
        lines = ["name,math", "A,1", "", "  ", "B,2"]
        headers, rows = hd.split_table(lines, hd.resolve_layout(lines, hd.GENERAL))
        self.assertEqual(rows, [["A", "1"], ["B", "2"]])

    def test_unknown_mode(self):
        with self.assertRaises(ValueError):
            hd.resolve_layout(["a"], "other")

    def test_layout_invariant(self):
        with self.assertRaises(ValueError):
            hd.HeaderLayout(header_row_index=2, data_start_index=2)


class TotalQuestionsScanTests(unittest.TestCase):
    def test_comma_fallback(self):
        self.assertEqual(hd.scan_total_questions(",,,,50", default=7), 50)

    def test_tab_row_with_enough_fields(self):
        self.assertEqual(hd.scan_total_questions("Total\t\t\t40\t30"), 40)

    def test_first_in_range_integer_wins(self):
        self.assertEqual(hd.scan_total_questions("0,150,abc,12.5,25,30"), 25)

    def test_default_kept_when_nothing_found(self):
        self.assertEqual(hd.scan_total_questions("Totals,,n/a,101", default=20), 20)
        self.assertEqual(hd.scan_total_questions("", default=20), 20)

    def test_scan_in_lines(self):
        self.assertEqual(hd.scan_total_questions_in(["meta"], default=3), 3)
        self.assertEqual(hd.scan_total_questions_in(["meta", "x,x,x,60"], default=3), 60)


if __name__ == "__main__":
    unittest.main()
