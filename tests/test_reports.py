import unittest
from datetime import date, datetime, timezone

from app.features.reports.service import assemble_report, generate_health_report, report_filename
from app.services.generative import REPORT_CONFIG
from app.shared.constants import MEDICAL_DISCLAIMER
from app.shared.errors import InsufficientDataError, UpstreamServiceError

from fakes import FakeGenerativeClient, make_db, seed_entries

NOW = datetime(2024, 3, 31, 9, 15, tzinfo=timezone.utc)
REPORT_BODY = "## Executive Summary\nMood was stable.\n\n## Recommendations for Healthcare Provider\nNone."


class AssembleReportTests(unittest.TestCase):
    def test_frame_around_model_text(self):
        text = assemble_report("  body text \n", "Dana", NOW)

        self.assertTrue(text.startswith("# Health Report for Dana\n\nbody text\n\n---"))
        self.assertIn("**MEDICAL DISCLAIMER:**\n" + MEDICAL_DISCLAIMER, text)
        self.assertTrue(
            text.endswith("*Report generated by Plusnote AI Health Journal on 2024-03-31 09:15 UTC*")
        )

    def test_filename(self):
        self.assertEqual(report_filename(date(2024, 3, 31)), "health-report-2024-03-31.pdf")


class GenerateHealthReportTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db, self.supabase = make_db()

    async def test_no_entries_in_window(self):
        seed_entries(self.supabase, "user-1", date(2024, 1, 1), [5, 6])
        llm = FakeGenerativeClient([REPORT_BODY])

        with self.assertRaises(InsufficientDataError) as ctx:
            await generate_health_report("user-1", self.db, llm, now=NOW)

        self.assertEqual(ctx.exception.title, "No health logs found for the last 30 days")
        self.assertEqual(llm.calls, [])

    async def test_only_the_last_thirty_days_are_reported(self):
        # 2024-02-25 .. 2024-03-05; the window starts at 2024-03-01
        seed_entries(self.supabase, "user-1", date(2024, 2, 25), [5, 6, 7, 4, 5, 6, 7, 8, 6, 5])
        llm = FakeGenerativeClient([REPORT_BODY])

        report = await generate_health_report("user-1", self.db, llm, patient_name="Dana", now=NOW)

        self.assertEqual(report.data_points, 5)
        self.assertEqual(report.date_range.start, date(2024, 3, 1))
        self.assertEqual(report.date_range.end, date(2024, 3, 5))

        prompt = llm.calls[0]["parts"][0]
        self.assertEqual(llm.calls[0]["config"], REPORT_CONFIG)
        self.assertIn('"2024-03-01"', prompt)
        self.assertNotIn('"2024-02-29"', prompt)

    async def test_report_is_framed_and_serialized_with_camel_case(self):
        seed_entries(self.supabase, "user-1", date(2024, 3, 20), [5, 6, 7])
        llm = FakeGenerativeClient([REPORT_BODY])

        report = await generate_health_report("user-1", self.db, llm, patient_name=" Dana ", now=NOW)

        self.assertTrue(report.report.startswith("# Health Report for Dana\n"))
        self.assertIn("## Executive Summary", report.report)
        self.assertIn("MEDICAL DISCLAIMER", report.report)
        payload = report.model_dump(mode="json", by_alias=True)
        self.assertEqual(payload["dataPoints"], 3)
        self.assertEqual(payload["dateRange"], {"start": "2024-03-20", "end": "2024-03-22"})

    async def test_name_falls_back_to_profile(self):
        seed_entries(self.supabase, "user-1", date(2024, 3, 20), [5])
        self.supabase.tables["profiles"] = [
            {"id": "p-1", "user_id": "user-1", "display_name": None, "email": "sam.lee@example.com"}
        ]
        llm = FakeGenerativeClient([REPORT_BODY])

        report = await generate_health_report("user-1", self.db, llm, now=NOW)

        self.assertTrue(report.report.startswith("# Health Report for sam.lee\n"))
        self.assertIn('"sam.lee"', llm.calls[0]["parts"][0])

    async def test_name_defaults_to_patient_without_profile(self):
        seed_entries(self.supabase, "user-1", date(2024, 3, 20), [5])
        llm = FakeGenerativeClient([REPORT_BODY])

        report = await generate_health_report("user-1", self.db, llm, patient_name="  ", now=NOW)

        self.assertTrue(report.report.startswith("# Health Report for Patient\n"))

    async def test_upstream_failure_yields_no_partial_report(self):
        seed_entries(self.supabase, "user-1", date(2024, 3, 20), [5])
        llm = FakeGenerativeClient([UpstreamServiceError("down", service="fake", upstream_status=503)])

        with self.assertRaises(UpstreamServiceError):
            await generate_health_report("user-1", self.db, llm, now=NOW)


if __name__ == "__main__":
    unittest.main()
