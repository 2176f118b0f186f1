import unittest
from io import BytesIO

import pandas as pd

from gradebook.export import export_analytics_to_excel_bytes
from gradebook.scoring import compute_analytics

ROWS = [
    {"name": "Ann", "student_id": "S1", "math": "95", "science": "85"},
    {"name": "Bob", "student_id": "S2", "math": "50", "science": "60"},
]


class ExportTests(unittest.TestCase):
    def test_sheets(self):
        data = export_analytics_to_excel_bytes(compute_analytics(ROWS), ROWS, title="Term 1")
        sheets = pd.read_excel(BytesIO(data), sheet_name=None, engine="openpyxl")
        self.assertEqual(
            list(sheets),
            ["Summary", "Grade distribution", "Subjects", "Top students", "Struggling students", "Data"],
        )
        self.assertEqual(list(sheets["Subjects"]["Subject"]), ["MATH", "SCIENCE"])
        self.assertEqual(list(sheets["Top students"]["Name"]), ["Ann", "Bob"])
        self.assertEqual(len(sheets["Data"]), 2)
        summary = dict(zip(sheets["Summary"]["Metric"], sheets["Summary"]["Value"]))
        self.assertEqual(summary["Dataset"], "Term 1")

    def test_without_rows_no_data_sheet(self):
        data = export_analytics_to_excel_bytes(compute_analytics(ROWS))
        sheets = pd.read_excel(BytesIO(data), sheet_name=None, engine="openpyxl")
        self.assertNotIn("Data", sheets)
        self.assertEqual(len(sheets["Struggling students"]), 1)


if __name__ == "__main__":
    unittest.main()
