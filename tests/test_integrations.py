import asyncio
import sys
import tempfile
import unittest
from datetime import datetime, timezone
from decimal import Decimal
from io import BytesIO
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from botocore.exceptions import ClientError  # noqa: E402

from smarthr.integrations.blob_store import LocalBlobStore, S3BlobStore, build_blob_key  # noqa: E402
from smarthr.integrations.candidate_store import (  # noqa: E402
    CandidateNotFoundError,
    DynamoCandidateStore,
    SqliteCandidateStore,
    StaleCandidateError,
)
from smarthr.integrations.errors import UpstreamServiceError  # noqa: E402
from smarthr.integrations.textract_ocr import TextractOcr  # noqa: E402
from smarthr.schemas.documents import BlobLocation  # noqa: E402


class BlobKeyTests(unittest.TestCase):
    def test_key_layout(self):
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)
        self.assertEqual(build_blob_key("resumes", "My CV (final).pdf", now), "resumes/1714521600000_My_CV_final_.pdf")

    def test_path_components_are_dropped(self):
        now = datetime(2024, 5, 1, tzinfo=timezone.utc)
        self.assertEqual(build_blob_key("resumes", "../../etc/passwd", now), "resumes/1714521600000_passwd")


class SqliteCandidateStoreTests(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.store = SqliteCandidateStore(str(Path(self._tmp.name) / "candidates.db"))

    def tearDown(self):
        self.store.close()
        self._tmp.cleanup()

    def test_put_get_and_version_bump(self):
        first = asyncio.run(self.store.put("a@example.com", {"name": "A", "status": "Pending"}))
        self.assertEqual(first["version"], 1)
        second = asyncio.run(self.store.put("a@example.com", {"name": "A2", "status": "Pending"}))
        self.assertEqual(second["version"], 2)
        stored = asyncio.run(self.store.get("a@example.com"))
        self.assertEqual(stored["name"], "A2")
        self.assertEqual(stored["email"], "a@example.com")
        self.assertIsNone(asyncio.run(self.store.get("missing@example.com")))

    def test_update_checks_version(self):
        asyncio.run(self.store.put("a@example.com", {"name": "A", "status": "Pending"}))

        updated = asyncio.run(self.store.update("a@example.com", {"status": "Shortlisted"}, expected_version=1))
        self.assertEqual(updated["status"], "Shortlisted")
        self.assertEqual(updated["name"], "A")
        self.assertEqual(updated["version"], 2)

        with self.assertRaises(StaleCandidateError):
            asyncio.run(self.store.update("a@example.com", {"status": "Hired"}, expected_version=1))

        last_writer = asyncio.run(self.store.update("a@example.com", {"status": "Hired"}))
        self.assertEqual(last_writer["version"], 3)

    def test_update_missing_candidate(self):
        with self.assertRaises(CandidateNotFoundError):
            asyncio.run(self.store.update("missing@example.com", {"status": "Hired"}))

    def test_scan_all(self):
        asyncio.run(self.store.put("a@example.com", {"name": "A"}))
        asyncio.run(self.store.put("b@example.com", {"name": "B"}))
        emails = {item["email"] for item in asyncio.run(self.store.scan_all())}
        self.assertEqual(emails, {"a@example.com", "b@example.com"})


class FakeTable:
    def __init__(self):
        self.items = {}
        self.update_kwargs = None
        self.fail_condition = False

    def get_item(self, Key):
        item = self.items.get(Key["email"])
        return {"Item": dict(item)} if item else {}

    def put_item(self, Item):
        self.items[Item["email"]] = dict(Item)

    def update_item(self, **kwargs):
        self.update_kwargs = kwargs
        if self.fail_condition:
            raise ClientError(
                {"Error": {"Code": "ConditionalCheckFailedException", "Message": "stale"}}, "UpdateItem"
            )
        item = self.items[kwargs["Key"]["email"]]
        names = kwargs["ExpressionAttributeNames"]
        values = kwargs["ExpressionAttributeValues"]
        for assignment in kwargs["UpdateExpression"][len("SET "):].split(", "):
            name, value = assignment.split(" = ")
            item[names[name]] = values[value]
        return {"Attributes": dict(item)}

    def scan(self, **kwargs):
        if "ExclusiveStartKey" not in kwargs:
            return {"Items": [self.items["a@example.com"]], "LastEvaluatedKey": {"email": "a@example.com"}}
        return {"Items": [self.items["b@example.com"]]}


class DynamoCandidateStoreTests(unittest.TestCase):
    def setUp(self):
        self.table = FakeTable()
        self.store = DynamoCandidateStore("candidates", "us-east-1", table=self.table)

    def test_numbers_come_back_as_ints(self):
        self.table.items["a@example.com"] = {"email": "a@example.com", "version": Decimal("3")}
        self.assertEqual(asyncio.run(self.store.get("a@example.com"))["version"], 3)

    def test_update_is_conditional_on_version(self):
        asyncio.run(self.store.put("a@example.com", {"name": "A", "status": "Pending"}))
        updated = asyncio.run(self.store.update("a@example.com", {"status": "Shortlisted"}, expected_version=1))
        self.assertEqual(updated["status"], "Shortlisted")
        self.assertEqual(updated["version"], 2)
        self.assertEqual(self.table.update_kwargs["ConditionExpression"], "#version = :current")
        self.assertEqual(self.table.update_kwargs["ExpressionAttributeValues"][":current"], 1)

    def test_conditional_failure_is_stale(self):
        asyncio.run(self.store.put("a@example.com", {"name": "A"}))
        self.table.fail_condition = True
        with self.assertRaises(StaleCandidateError):
            asyncio.run(self.store.update("a@example.com", {"status": "Hired"}))

    def test_scan_follows_pagination(self):
        asyncio.run(self.store.put("a@example.com", {"name": "A", "updated_at": "2024-01-01"}))
        asyncio.run(self.store.put("b@example.com", {"name": "B", "updated_at": "2024-02-01"}))
        items = asyncio.run(self.store.scan_all())
        self.assertEqual([item["email"] for item in items], ["b@example.com", "a@example.com"])


class FakeS3:
    def __init__(self, fail=False):
        self.objects = {}
        self.fail = fail

    def put_object(self, Bucket, Key, Body, ContentType):
        if self.fail:
            raise ClientError({"Error": {"Code": "AccessDenied", "Message": "denied"}}, "PutObject")
        self.objects[(Bucket, Key)] = Body

    def get_object(self, Bucket, Key):
        return {"Body": BytesIO(self.objects[(Bucket, Key)])}


class BlobStoreTests(unittest.TestCase):
    def test_s3_round_trip_and_url(self):
        store = S3BlobStore("hr-bucket", "ap-south-1", client=FakeS3())
        location = asyncio.run(store.put("resumes/1_cv.pdf", b"data", "application/pdf"))
        self.assertEqual(location.url, "https://hr-bucket.s3.ap-south-1.amazonaws.com/resumes/1_cv.pdf")
        self.assertTrue(location.supports_async_ocr)
        self.assertEqual(asyncio.run(store.get(location)), b"data")

    def test_s3_errors_are_upstream_errors(self):
        store = S3BlobStore("hr-bucket", "ap-south-1", client=FakeS3(fail=True))
        with self.assertRaises(UpstreamServiceError):
            asyncio.run(store.put("resumes/1_cv.pdf", b"data", "application/pdf"))

    def test_local_store(self):
        with tempfile.TemporaryDirectory() as root:
            store = LocalBlobStore(root)
            location = asyncio.run(store.put("resumes/1_cv.txt", b"hello", "text/plain"))
            self.assertFalse(location.supports_async_ocr)
            self.assertEqual(asyncio.run(store.get(location)), b"hello")
            with self.assertRaises(UpstreamServiceError):
                asyncio.run(store.put("../outside.txt", b"x", "text/plain"))


class FakeTextract:
    def __init__(self, pages):
        self.pages = pages

    def detect_document_text(self, Document):
        return {"Blocks": [{"BlockType": "PAGE"}, {"BlockType": "LINE", "Text": "Jane Roe"}, {"BlockType": "WORD", "Text": "Jane"}]}

    def start_document_text_detection(self, DocumentLocation):
        return {"JobId": "job-42"}

    def get_document_text_detection(self, JobId, NextToken=None):
        return self.pages[NextToken]


class TextractOcrTests(unittest.TestCase):
    def test_detect_keeps_line_blocks(self):
        ocr = TextractOcr("us-east-1", client=FakeTextract({}))
        self.assertEqual(asyncio.run(ocr.detect_text(b"img")), ["Jane Roe"])

    def test_poll_collects_all_pages(self):
        pages = {
            None: {"JobStatus": "SUCCEEDED", "Blocks": [{"BlockType": "LINE", "Text": "one"}], "NextToken": "t2"},
            "t2": {"JobStatus": "SUCCEEDED", "Blocks": [{"BlockType": "LINE", "Text": "two"}]},
        }
        ocr = TextractOcr("us-east-1", client=FakeTextract(pages))
        state = asyncio.run(ocr.poll_job("job-42"))
        self.assertEqual(state.status, "SUCCEEDED")
        self.assertEqual(state.lines, ["one", "two"])

    def test_poll_statuses(self):
        for raw, expected in (("IN_PROGRESS", "IN_PROGRESS"), ("FAILED", "FAILED"), ("PARTIAL_SUCCESS", "SUCCEEDED")):
            with self.subTest(raw=raw):
                ocr = TextractOcr("us-east-1", client=FakeTextract({None: {"JobStatus": raw, "Blocks": []}}))
                self.assertEqual(asyncio.run(ocr.poll_job("job-42")).status, expected)

    def test_async_job_needs_bucket(self):
        ocr = TextractOcr("us-east-1", client=FakeTextract({}))
        with self.assertRaises(UpstreamServiceError):
            asyncio.run(ocr.start_job(BlobLocation(key="k", url="file:///k")))
        location = BlobLocation(key="k", url="https://b/k", bucket="b")
        self.assertEqual(asyncio.run(ocr.start_job(location)), "job-42")


if __name__ == "__main__":
    unittest.main()
