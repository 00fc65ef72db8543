import sys
import unittest
from pathlib import Path
from unittest.mock import patch

from fastapi.testclient import TestClient

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from smarthr.ai.invoker import GenerationInvoker  # noqa: E402
from smarthr.core.lifespan import Services  # noqa: E402
from smarthr.main import create_app  # noqa: E402
from smarthr.services.candidate_review import CandidateReviewService  # noqa: E402
from smarthr.services.jd_processor import JobDescriptionProcessor  # noqa: E402
from smarthr.services.pipeline import IntakePipeline  # noqa: E402
from smarthr.services.text_normalizer import TextNormalizer  # noqa: E402
from tests.fakes import (  # noqa: E402
    FIXED_NOW,
    JD_TEXT,
    RESUME_TEXT,
    FakeBlobStore,
    InMemoryCandidateStore,
    make_settings,
)

EMAIL = "priya.sharma@example.org"


class CandidateApiTests(unittest.TestCase):
    def _client(self, **setting_overrides) -> TestClient:
        settings = make_settings(**setting_overrides)
        blob_store = FakeBlobStore()
        normalizer = TextNormalizer(None)
        self.store = InMemoryCandidateStore()
        self.pipeline = pipeline = IntakePipeline(
            settings=settings,
            blob_store=blob_store,
            normalizer=normalizer,
            jd_processor=JobDescriptionProcessor(blob_store, normalizer, now=lambda: FIXED_NOW),
            invoker=GenerationInvoker(None, model_id=""),
            store=self.store,
            now=lambda: FIXED_NOW,
        )
        services = Services(
            pipeline=pipeline,
            review=CandidateReviewService(self.store, now=lambda: FIXED_NOW),
            store=self.store,
        )
        return TestClient(create_app(settings, services=services))

    def _upload(self, client: TestClient, **extra_files):
        files = {"resume": ("priya.txt", RESUME_TEXT.encode("utf-8"), "text/plain"), **extra_files}
        return client.post("/v1/upload", files=files)

    def test_health(self):
        response = self._client().get("/v1/health")
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["status"], "healthy")
        self.assertEqual(body["datastoreBackend"], "sqlite")

    def test_upload_returns_camel_case_record(self):
        client = self._client()
        response = self._upload(client)
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["email"], EMAIL)
        self.assertEqual(body["name"], "Priya Sharma")
        self.assertEqual(body["status"], "Pending")
        self.assertFalse(body["aiUsed"])
        self.assertFalse(body["enhancedMatching"])
        self.assertTrue(body["resumeUrl"].startswith("https://blobs.test/resumes/"))
        self.assertIn("Technical Questions", body["questions"])
        self.assertEqual(body["message"], "Resume uploaded and processed successfully")
        self.assertIn(EMAIL, self.store.items)

    def test_upload_with_job_description(self):
        client = self._client()
        response = self._upload(
            client, jobDescription=("jd.txt", JD_TEXT.encode("utf-8"), "text/plain")
        )
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["enhancedMatching"])
        self.assertEqual(body["jobTitle"], "Platform Engineer")

    def test_upload_without_resume(self):
        response = self._client().post("/v1/upload", data={"note": "nothing"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["error"], "No file uploaded")

    def test_upload_too_large(self):
        response = self._upload(self._client(max_upload_bytes=64))
        self.assertEqual(response.status_code, 413)
        self.assertIn("File too large", response.json()["error"])
        self.assertEqual(self.store.items, {})

    def test_empty_resume_is_rejected(self):
        client = self._client()
        response = client.post("/v1/upload", files={"resume": ("empty.txt", b"", "text/plain")})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"], "Resume upload and processing failed")

    def test_list_and_get_candidates(self):
        client = self._client()
        self._upload(client)

        listed = client.get("/v1/candidates")
        self.assertEqual(listed.status_code, 200)
        self.assertEqual([item["email"] for item in listed.json()], [EMAIL])

        fetched = client.get(f"/v1/candidates/{EMAIL}")
        self.assertEqual(fetched.status_code, 200)
        self.assertEqual(fetched.json()["phone"], self.store.items[EMAIL]["phone"])

        self.assertEqual(client.get("/v1/candidates/nobody@example.com").status_code, 404)

    def test_update_candidate_and_stale_version(self):
        client = self._client()
        self._upload(client)

        updated = client.put(
            f"/v1/candidates/{EMAIL}",
            json={"status": "Shortlisted", "notes": "Strong systems background", "version": 1},
        )
        self.assertEqual(updated.status_code, 200)
        body = updated.json()
        self.assertEqual(body["status"], "Shortlisted")
        self.assertEqual(body["notes"], "Strong systems background")
        self.assertEqual(body["version"], 2)

        stale = client.put(f"/v1/candidates/{EMAIL}", json={"status": "Rejected", "version": 1})
        self.assertEqual(stale.status_code, 409)
        self.assertEqual(self.store.items[EMAIL]["status"], "Shortlisted")

    def test_update_unknown_candidate(self):
        response = self._client().put("/v1/candidates/nobody@example.com", json={"status": "Hired"})
        self.assertEqual(response.status_code, 404)

    def test_generate_tasks_requires_shortlist(self):
        client = self._client()
        self._upload(client)

        response = client.post(f"/v1/generate-tasks/{EMAIL}")
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "not shortlisted", "currentStatus": "Pending"})

    def test_generate_tasks_for_shortlisted_candidate(self):
        client = self._client()
        self._upload(client)
        client.put(f"/v1/candidates/{EMAIL}", json={"status": "Shortlisted"})

        first = client.post(f"/v1/generate-tasks/{EMAIL}")
        self.assertEqual(first.status_code, 200)
        self.assertTrue(first.json()["generated"])
        self.assertFalse(first.json()["alreadyGenerated"])
        self.assertEqual(first.json()["taskQuestions"].count('class="task-card"'), 2)

        second = client.post(f"/v1/generate-tasks/{EMAIL}")
        self.assertTrue(second.json()["alreadyGenerated"])
        self.assertEqual(second.json()["taskQuestions"], first.json()["taskQuestions"])

    def test_unexpected_task_failure_returns_error_body(self):
        client = self._client()
        with patch.object(self.pipeline, "generate_task_questions", side_effect=RuntimeError("store offline")):
            response = client.post(f"/v1/generate-tasks/{EMAIL}")
        self.assertEqual(response.status_code, 500)
        self.assertEqual(
            response.json(), {"error": "store offline", "details": "Task question generation failed"}
        )

    def test_generate_tasks_unknown_candidate(self):
        response = self._client().post("/v1/generate-tasks/nobody@example.com")
        self.assertEqual(response.status_code, 404)

    def test_api_key_is_enforced(self):
        client = self._client(api_key="secret-key")
        self.assertEqual(client.get("/v1/candidates").status_code, 401)
        self.assertEqual(client.get("/v1/candidates", headers={"X-API-Key": "wrong"}).status_code, 401)
        self.assertEqual(client.get("/v1/candidates", headers={"X-API-Key": "secret-key"}).status_code, 200)
        self.assertEqual(client.get("/v1/health").status_code, 200)


if __name__ == "__main__":
    unittest.main()
