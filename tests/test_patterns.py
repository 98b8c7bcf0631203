import unittest
from datetime import date, timedelta

from app.features.analysis.models import MoodLabel
from app.features.analysis.patterns import (
    analysis_status,
    analyze_health_patterns,
    entries_needed,
    health_score_label,
)
from app.services.generative import ANALYSIS_CONFIG
from app.shared.errors import (
    AnalysisParseError,
    ConfigurationError,
    InsufficientDataError,
    UpstreamServiceError,
)

from fakes import FakeGenerativeClient, analysis_json, make_db, seed_entries

START = date(2024, 1, 1)
WEEK = [START + timedelta(days=i) for i in range(7)]
MOODS = [3, 8, 5, 6, 7, 4, 9]


class AnalyzeHealthPatternsTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.db, self.supabase = make_db()

    async def test_weekly_analysis_end_to_end(self):
        seed_entries(self.supabase, "user-1", START, MOODS)
        llm = FakeGenerativeClient([f"```json\n{analysis_json(WEEK, score=72)}\n```"])

        analysis = await analyze_health_patterns("user-1", self.db, llm)

        self.assertEqual(analysis.health_score, 72)
        self.assertEqual([p.date for p in analysis.mood_timeline], WEEK)
        self.assertEqual(analysis.mood_timeline[0].mood, MoodLabel.LOW)
        self.assertTrue(analysis.summary)

        self.assertEqual(len(llm.calls), 1)
        self.assertEqual(llm.calls[0]["config"], ANALYSIS_CONFIG)
        prompt = llm.calls[0]["parts"][0]
        self.assertIn('Day 1 (2024-01-01): "Entry for 2024-01-01" (Mood: 3/10', prompt)
        self.assertIn('Day 7 (2024-01-07): "Entry for 2024-01-07" (Mood: 9/10', prompt)

    async def test_only_the_newest_seven_entries_are_used(self):
        seed_entries(self.supabase, "user-1", START - timedelta(days=3), [5, 5, 5] + MOODS)
        llm = FakeGenerativeClient([analysis_json(WEEK)])

        await analyze_health_patterns("user-1", self.db, llm)

        prompt = llm.calls[0]["parts"][0]
        self.assertIn("Day 1 (2024-01-01)", prompt)
        self.assertNotIn("2023-12-31", prompt)

    async def test_other_users_entries_do_not_count(self):
        seed_entries(self.supabase, "user-1", START, MOODS[:4])
        seed_entries(self.supabase, "user-2", START, MOODS)
        llm = FakeGenerativeClient([analysis_json(WEEK)])

        with self.assertRaises(InsufficientDataError):
            await analyze_health_patterns("user-1", self.db, llm)

    async def test_fewer_than_seven_entries_never_reach_the_model(self):
        seed_entries(self.supabase, "user-1", START, MOODS[:6])
        llm = FakeGenerativeClient([analysis_json(WEEK)])

        with self.assertRaises(InsufficientDataError) as ctx:
            await analyze_health_patterns("user-1", self.db, llm)

        self.assertEqual(ctx.exception.title, "Not enough entries for analysis")
        self.assertEqual(ctx.exception.details["entries_needed"], 1)
        self.assertEqual(llm.calls, [])

    async def test_missing_credentials_are_reported_after_the_data_check(self):
        seed_entries(self.supabase, "user-1", START, MOODS)
        llm = FakeGenerativeClient(configured=False)

        with self.assertRaises(ConfigurationError):
            await analyze_health_patterns("user-1", self.db, llm)
        self.assertEqual(llm.calls, [])

    async def test_unparseable_reply_is_a_distinct_error(self):
        seed_entries(self.supabase, "user-1", START, MOODS)
        llm = FakeGenerativeClient(["I'm sorry, I can't help with that."])

        with self.assertRaises(AnalysisParseError):
            await analyze_health_patterns("user-1", self.db, llm)

    async def test_timeline_dates_must_match_the_entries(self):
        seed_entries(self.supabase, "user-1", START, MOODS)
        shifted = [d + timedelta(days=1) for d in WEEK]
        llm = FakeGenerativeClient([analysis_json(shifted)])

        with self.assertRaises(AnalysisParseError):
            await analyze_health_patterns("user-1", self.db, llm)

    async def test_upstream_failure_propagates(self):
        seed_entries(self.supabase, "user-1", START, MOODS)
        llm = FakeGenerativeClient([UpstreamServiceError("boom", service="fake", upstream_status=500)])

        with self.assertRaises(UpstreamServiceError):
            await analyze_health_patterns("user-1", self.db, llm)


class AnalysisStatusTests(unittest.TestCase):
    def test_entries_needed(self):
        self.assertEqual(entries_needed(0), 7)
        self.assertEqual(entries_needed(4), 3)
        self.assertEqual(entries_needed(7), 0)
        self.assertEqual(entries_needed(30), 0)

    def test_status_counts_the_users_entries(self):
        db, supabase = make_db()
        seed_entries(supabase, "user-1", START, MOODS[:5])

        status = analysis_status(db, "user-1")

        self.assertEqual(status.entry_count, 5)
        self.assertEqual(status.entries_needed, 2)
        self.assertFalse(status.unlocked)

        seed_entries(supabase, "user-1", START + timedelta(days=5), [6, 6])
        self.assertTrue(analysis_status(db, "user-1").unlocked)

    def test_score_labels(self):
        self.assertEqual(health_score_label(0), "Poor")
        self.assertEqual(health_score_label(30), "Poor")
        self.assertEqual(health_score_label(31), "Fair")
        self.assertEqual(health_score_label(61), "Good")
        self.assertEqual(health_score_label(80), "Good")
        self.assertEqual(health_score_label(81), "Excellent")
        self.assertEqual(health_score_label(100), "Excellent")


if __name__ == "__main__":
    unittest.main()
