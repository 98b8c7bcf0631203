import unittest
from datetime import date, datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.api.dependencies import get_database, get_generative_client, get_pdf_renderer
from app.features.reports.renderer import PdfRenderer
from app.shared.errors import UpstreamServiceError
from main import app

from fakes import FakeGenerativeClient, analysis_json, make_db, seed_entries

START = date(2024, 1, 1)
WEEK = [START + timedelta(days=i) for i in range(7)]


class ApiTestCase(unittest.TestCase):
    def setUp(self):
        self.db, self.supabase = make_db()
        self.llm = FakeGenerativeClient()
        app.dependency_overrides[get_database] = lambda: self.db
        app.dependency_overrides[get_generative_client] = lambda: self.llm
        app.dependency_overrides[get_pdf_renderer] = lambda: PdfRenderer(service_url="")
        self.client = TestClient(app)

    def tearDown(self):
        app.dependency_overrides.clear()

    def assertErrorBody(self, response, status_code, code):
        self.assertEqual(response.status_code, status_code, response.text)
        body = response.json()
        self.assertEqual(body["code"], code)
        self.assertIn("error", body)
        self.assertIn("message", body)
        return body


class HealthEndpointTests(ApiTestCase):
    def test_health(self):
        response = self.client.get("/api/v1/health")
        self.assertEqual(response.json(), {"status": "healthy"})

    def test_correlation_id_is_echoed(self):
        response = self.client.get("/api/v1/health", headers={"X-Correlation-ID": "abc12345"})
        self.assertEqual(response.headers["X-Correlation-ID"], "abc12345")

    def test_malformed_correlation_id_is_replaced(self):
        response = self.client.get("/api/v1/health", headers={"X-Correlation-ID": "has spaces in it"})
        self.assertNotEqual(response.headers["X-Correlation-ID"], "has spaces in it")
        self.assertEqual(len(response.headers["X-Correlation-ID"]), 8)

    def test_correlation_id_is_generated(self):
        response = self.client.get("/api/v1/health")
        self.assertEqual(len(response.headers["X-Correlation-ID"]), 8)


class JournalEndpointTests(ApiTestCase):
    def test_create_and_list(self):
        response = self.client.post(
            "/api/v1/journal/user-1/entries",
            json={"entry_text": "Slept well", "mood_rating": 8, "tags": ["rested"], "log_date": "2024-04-02"},
        )
        self.assertEqual(response.status_code, 201, response.text)
        created = response.json()
        self.assertEqual(created["log_date"], "2024-04-02")
        self.assertEqual(created["tags"], ["rested"])

        listed = self.client.get("/api/v1/journal/user-1/entries").json()
        self.assertEqual([e["id"] for e in listed], [created["id"]])

    def test_blank_entry_is_rejected(self):
        response = self.client.post("/api/v1/journal/user-1/entries", json={"entry_text": "   "})
        body = self.assertErrorBody(response, 400, "VALIDATION_ERROR")
        self.assertTrue(body["details"]["problems"])

    def test_rating_out_of_range_is_rejected(self):
        row = seed_entries(self.supabase, "user-1", START, [5])[0]
        response = self.client.patch(f"/api/v1/journal/entries/{row['id']}", json={"mood_rating": 11})
        self.assertErrorBody(response, 400, "VALIDATION_ERROR")

    def test_update_and_delete(self):
        row = seed_entries(self.supabase, "user-1", START, [5])[0]

        updated = self.client.patch(f"/api/v1/journal/entries/{row['id']}", json={"sleep_rating": 9})
        self.assertEqual(updated.json()["sleep_rating"], 9)

        deleted = self.client.delete(f"/api/v1/journal/entries/{row['id']}")
        self.assertEqual(deleted.json()["id"], row["id"])

        missing = self.client.delete(f"/api/v1/journal/entries/{row['id']}")
        self.assertErrorBody(missing, 404, "NOT_FOUND")

    def test_database_failure(self):
        self.supabase.fail_with = RuntimeError("connection reset")
        response = self.client.get("/api/v1/journal/user-1/entries")
        body = self.assertErrorBody(response, 500, "DATABASE_ERROR")
        self.assertNotIn("connection reset", body["message"])


class ProfileEndpointTests(ApiTestCase):
    def test_get_and_update(self):
        self.db.profiles.create("user-1", email="jo.kim@example.com")

        profile = self.client.get("/api/v1/profile/user-1").json()
        self.assertEqual(profile["display_name"], "jo.kim")

        updated = self.client.patch("/api/v1/profile/user-1", json={"display_name": " Jo "}).json()
        self.assertEqual(updated["display_name"], "Jo")

    def test_first_fetch_creates_profile_from_email(self):
        response = self.client.get("/api/v1/profile/user-2", params={"email": "sam.lee@example.com"})

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.json()["display_name"], "sam.lee")
        self.assertEqual(len(self.supabase.tables["profiles"]), 1)

        again = self.client.get("/api/v1/profile/user-2", params={"email": "other@example.com"}).json()
        self.assertEqual(again["display_name"], "sam.lee")
        self.assertEqual(len(self.supabase.tables["profiles"]), 1)

    def test_first_fetch_without_email_uses_default_name(self):
        body = self.client.get("/api/v1/profile/nobody").json()

        self.assertEqual(body["display_name"], "Patient")
        self.assertEqual(body["profile"]["user_id"], "nobody")

    def test_update_of_missing_profile(self):
        response = self.client.patch("/api/v1/profile/nobody", json={"display_name": "Jo"})
        self.assertErrorBody(response, 404, "NOT_FOUND")


class AnalysisEndpointTests(ApiTestCase):
    def test_weekly_analysis(self):
        seed_entries(self.supabase, "user-1", START, [3, 8, 5, 6, 7, 4, 9])
        self.llm.replies = [analysis_json(WEEK, score=72)]

        response = self.client.post("/api/v1/analysis/patterns", json={"userId": "user-1"})

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["health_score"], 72)
        self.assertEqual(len(body["mood_timeline"]), 7)
        self.assertEqual(body["mood_timeline"][0], {"date": "2024-01-01", "mood": "Low", "mood_emoji": "😔"})

    def test_not_enough_entries(self):
        seed_entries(self.supabase, "user-1", START, [3, 8, 5])

        response = self.client.post("/api/v1/analysis/patterns", json={"userId": "user-1"})

        body = self.assertErrorBody(response, 400, "INSUFFICIENT_DATA")
        self.assertEqual(body["error"], "Not enough entries for analysis")
        self.assertIn("correlation_id", body)
        self.assertEqual(self.llm.calls, [])

    def test_missing_user_id(self):
        response = self.client.post("/api/v1/analysis/patterns", json={})
        self.assertErrorBody(response, 400, "VALIDATION_ERROR")

    def test_unparseable_model_output(self):
        seed_entries(self.supabase, "user-1", START, [3, 8, 5, 6, 7, 4, 9])
        self.llm.replies = ["not json at all"]

        response = self.client.post("/api/v1/analysis/patterns", json={"userId": "user-1"})

        body = self.assertErrorBody(response, 500, "UNPARSEABLE_RESPONSE")
        self.assertEqual(body["error"], "Failed to parse AI analysis")

    def test_upstream_failure(self):
        seed_entries(self.supabase, "user-1", START, [3, 8, 5, 6, 7, 4, 9])
        self.llm.replies = [UpstreamServiceError("Gemini API error: overloaded", service="gemini", upstream_status=503)]

        response = self.client.post("/api/v1/analysis/patterns", json={"userId": "user-1"})

        body = self.assertErrorBody(response, 500, "EXTERNAL_SERVICE_ERROR")
        self.assertEqual(body["details"]["upstream_status"], 503)

    def test_missing_credentials(self):
        seed_entries(self.supabase, "user-1", START, [3, 8, 5, 6, 7, 4, 9])
        self.llm.configured = False

        response = self.client.post("/api/v1/analysis/patterns", json={"userId": "user-1"})

        self.assertErrorBody(response, 500, "CONFIGURATION_ERROR")

    def test_status(self):
        seed_entries(self.supabase, "user-1", START, [3, 8, 5])
        response = self.client.get("/api/v1/analysis/status/user-1")
        self.assertEqual(response.json(), {"entry_count": 3, "entries_needed": 4, "unlocked": False})


class ReportEndpointTests(ApiTestCase):
    def setUp(self):
        super().setUp()
        self.today = datetime.now(timezone.utc).date()

    def test_text_report(self):
        seed_entries(self.supabase, "user-1", self.today - timedelta(days=2), [5, 6])
        self.llm.replies = ["## Executive Summary\nAll good."]

        response = self.client.post("/api/v1/reports/health", json={"userId": "user-1", "patientName": "Dana"})

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertTrue(body["report"].startswith("# Health Report for Dana"))
        self.assertIn("MEDICAL DISCLAIMER", body["report"])
        self.assertEqual(body["dataPoints"], 2)
        self.assertEqual(
            body["dateRange"],
            {"start": (self.today - timedelta(days=2)).isoformat(), "end": (self.today - timedelta(days=1)).isoformat()},
        )

    def test_pdf_report(self):
        seed_entries(self.supabase, "user-1", self.today - timedelta(days=1), [5])
        self.llm.replies = ["## Executive Summary\nAll good."]

        response = self.client.post("/api/v1/reports/health", json={"userId": "user-1", "format": "pdf"})

        self.assertEqual(response.status_code, 200, response.text)
        self.assertEqual(response.headers["content-type"], "application/pdf")
        self.assertEqual(
            response.headers["content-disposition"],
            f'attachment; filename="health-report-{self.today.isoformat()}.pdf"',
        )
        self.assertTrue(response.content.startswith(b"%PDF"))

    def test_no_recent_entries(self):
        seed_entries(self.supabase, "user-1", self.today - timedelta(days=60), [5])

        for fmt in ("text", "pdf"):
            with self.subTest(format=fmt):
                response = self.client.post("/api/v1/reports/health", json={"userId": "user-1", "format": fmt})
                body = self.assertErrorBody(response, 400, "INSUFFICIENT_DATA")
                self.assertEqual(body["error"], "No health logs found for the last 30 days")

    def test_unknown_format(self):
        response = self.client.post("/api/v1/reports/health", json={"userId": "user-1", "format": "docx"})
        self.assertErrorBody(response, 400, "VALIDATION_ERROR")


class ChatEndpointTests(ApiTestCase):
    def test_chat_extends_the_callers_history(self):
        seed_entries(self.supabase, "user-1", START, [6])
        self.llm.replies = ["That sounds restful."]

        response = self.client.post(
            "/api/v1/chat",
            json={
                "userId": "user-1",
                "message": "I napped today",
                "conversationHistory": [
                    {"role": "user", "content": "Hi"},
                    {"role": "assistant", "content": "Hello! How are you?"},
                ],
            },
        )

        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["response"], "That sounds restful.")
        self.assertEqual(
            body["conversationHistory"][-2:],
            [
                {"role": "user", "content": "I napped today"},
                {"role": "assistant", "content": "That sounds restful."},
            ],
        )
        self.assertEqual(len(body["conversationHistory"]), 4)

        system_prompt, user_turn = self.llm.calls[0]["parts"]
        self.assertIn("Entry for 2024-01-01", system_prompt)
        self.assertIn("assistant: Hello! How are you?", system_prompt)
        self.assertEqual(user_turn, "User message: I napped today")

    def test_blank_reply_gets_fallback(self):
        self.llm.replies = ["   "]

        body = self.client.post("/api/v1/chat", json={"userId": "user-1", "message": "hey"}).json()

        self.assertTrue(body["response"].startswith("I'm here to listen"))

    def test_chat_survives_database_failure(self):
        self.supabase.fail_with = RuntimeError("down")
        self.llm.replies = ["Still here."]

        response = self.client.post("/api/v1/chat", json={"userId": "user-1", "message": "hey"})

        self.assertEqual(response.json()["response"], "Still here.")
        self.assertIn("No health logs available yet.", self.llm.calls[0]["parts"][0])


if __name__ == "__main__":
    unittest.main()
