import os
import sys
import unittest
import requests
from fastapi.testclient import TestClient

sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from log_schema import LogStore, SetEntry
from rest_api import SyncAPI
from sync_client import SyncClient


class FakeResponse:
    def __init__(self, status_code: int, payload=None, raises: bool = False) -> None:
        self.status_code = status_code
        self._payload = payload
        self._raises = raises

    def json(self):
        if self._raises:
            raise ValueError("Expecting value")
        return self._payload


class FakeSession:
    def __init__(self, response=None, error=None) -> None:
        self.response = response
        self.error = error
        self.calls: list[tuple] = []

    def get(self, url, **kwargs):
        self.calls.append(("GET", url, kwargs))
        if self.error:
            raise self.error
        return self.response

    def post(self, url, **kwargs):
        self.calls.append(("POST", url, kwargs))
        if self.error:
            raise self.error
        return self.response


async def broken_get_text(key, default=None):
    raise RuntimeError("database is locked")


def sample_store() -> LogStore:
    return LogStore(
        units="lb",
        sets=[
            SetEntry(
                id="a",
                date="2024-01-01",
                exercise="Press",
                category="push",
                weight=95.0,
                reps=5,
            )
        ],
    )


class SyncClientEndpointTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db_path = "test_sync_client.db"
        if os.path.exists(self.db_path):
            os.remove(self.db_path)
        self.api = SyncAPI(db_path=self.db_path, yaml_path="missing_settings.yaml")
        self.client = SyncClient("http://testserver/", session=TestClient(self.api.app))

    def tearDown(self) -> None:
        if os.path.exists(self.db_path):
            os.remove(self.db_path)

    def test_fetch_empty_remote_is_default_snapshot(self) -> None:
        fetched = self.client.fetch_remote()
        self.assertFalse(fetched.failed)
        self.assertEqual(fetched.snapshot.sets, [])
        self.assertEqual(fetched.snapshot.units, "lb")

    def test_push_then_fetch(self) -> None:
        self.assertTrue(self.client.push_remote(sample_store()))
        self.assertEqual(self.client.fetch_remote().snapshot, sample_store())

    def test_endpoint_error_is_failure(self) -> None:
        self.api.storage.get_text = broken_get_text
        fetched = self.client.fetch_remote()
        self.assertTrue(fetched.failed)
        self.assertFalse(fetched.absent)
        self.assertEqual(fetched.error, "HTTP 500")
        self.assertIsNone(fetched.snapshot)


class SyncClientFailureTestCase(unittest.TestCase):
    def test_base_url_trailing_slash(self) -> None:
        session = FakeSession(FakeResponse(200, {"units": "lb", "sets": []}))
        SyncClient("http://example.test/", session=session).fetch_remote()
        self.assertEqual(session.calls[0][1], "http://example.test/sync")
        self.assertEqual(session.calls[0][2], {})

    def test_timeout_forwarded(self) -> None:
        session = FakeSession(FakeResponse(200, {"ok": True}))
        SyncClient("http://x", session=session, timeout=3).push_remote(sample_store())
        method, url, kwargs = session.calls[0]
        self.assertEqual(method, "POST")
        self.assertEqual(kwargs["timeout"], 3)
        self.assertEqual(kwargs["json"], sample_store().to_dict())

    def test_transport_error_is_failure(self) -> None:
        session = FakeSession(error=requests.ConnectionError("unreachable"))
        client = SyncClient("http://x", session=session)
        fetched = client.fetch_remote()
        self.assertTrue(fetched.failed)
        self.assertEqual(fetched.error, "unreachable")
        self.assertFalse(client.push_remote(sample_store()))

    def test_server_error_is_failure_not_absent(self) -> None:
        client = SyncClient("http://x", session=FakeSession(FakeResponse(500, {"error": "boom"})))
        fetched = client.fetch_remote()
        self.assertTrue(fetched.failed)
        self.assertFalse(fetched.absent)
        self.assertFalse(client.push_remote(sample_store()))
        client = SyncClient("http://x", session=FakeSession(FakeResponse(503)))
        self.assertEqual(client.fetch_remote().error, "HTTP 503")

    def test_not_found_is_absent(self) -> None:
        client = SyncClient("http://x", session=FakeSession(FakeResponse(404)))
        fetched = client.fetch_remote()
        self.assertTrue(fetched.absent)
        self.assertFalse(fetched.failed)

    def test_malformed_body_is_absent(self) -> None:
        client = SyncClient("http://x", session=FakeSession(FakeResponse(200, raises=True)))
        self.assertTrue(client.fetch_remote().absent)
        client = SyncClient("http://x", session=FakeSession(FakeResponse(200, {"units": "lb"})))
        self.assertTrue(client.fetch_remote().absent)
        client = SyncClient("http://x", session=FakeSession(FakeResponse(200, None)))
        self.assertTrue(client.fetch_remote().absent)


if __name__ == "__main__":
    unittest.main()
