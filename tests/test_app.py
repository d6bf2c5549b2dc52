"""Tests for app wiring: health, root, request-id logging middleware and the 500 handler."""

import unittest

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

from nhatroso.core.database import engine_options
from nhatroso.core.middleware import setup_middleware
from tests._helpers import ApiTestCase


class TestHealthAndRoot(ApiTestCase):
    def test_health_reports_database(self) -> None:
        resp = self.client.get(f"{self.prefix}/health/")
        self.assertEqual(resp.status_code, 200)
        data = resp.json()
        self.assertEqual(data["status"], "ok")
        self.assertEqual(data["environment"], "dev")
        self.assertEqual(data["database"], "connected")
        self.assertTrue(data["version"])

    def test_root(self) -> None:
        resp = self.client.get("/")
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.json()["message"], "Nhatroso API")

    def test_request_id_headers(self) -> None:
        resp = self.client.get("/", headers={"X-Request-Id": "abc123"})
        self.assertEqual(resp.headers["X-Request-Id"], "abc123")
        self.assertIn("X-Response-Time-Ms", resp.headers)
        generated = self.client.get("/")
        self.assertTrue(generated.headers["X-Request-Id"])


class TestMiddleware(unittest.TestCase):
    """setup_middleware on a bare app: failures become a generic 500 and are logged."""

    def setUp(self) -> None:
        app = FastAPI()
        setup_middleware(app)

        @app.get("/boom")
        def boom() -> dict[str, str]:
            raise RuntimeError("database password is hunter2")

        @app.get("/ok")
        def ok() -> dict[str, str]:
            return {"ok": "yes"}

        self.client = TestClient(app, raise_server_exceptions=False)

    def tearDown(self) -> None:
        self.client.close()

    def test_unhandled_error_is_generic_500(self) -> None:
        with self.assertLogs("nhatroso.core.middleware", level="ERROR") as logs:
            resp = self.client.get("/boom")
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.json(), {"detail": "Internal server error"})
        self.assertNotIn("hunter2", resp.text)
        self.assertTrue(any("Unhandled error on GET /boom" in line for line in logs.output))

    def test_crash_keeps_request_id_and_access_log(self) -> None:
        with self.assertLogs("nhatroso.core.middleware", level="ERROR") as logs:
            resp = self.client.get("/boom", headers={"X-Request-Id": "abc"})
        self.assertEqual(resp.status_code, 500)
        self.assertEqual(resp.headers["X-Request-Id"], "abc")
        self.assertIn("X-Response-Time-Ms", resp.headers)
        self.assertTrue(
            any(
                line.startswith("ERROR:") and "GET /boom 500" in line and "request_id=abc" in line
                for line in logs.output
            )
        )

    def test_success_logged_at_info(self) -> None:
        with self.assertLogs("nhatroso.core.middleware", level="INFO") as logs:
            resp = self.client.get("/ok")
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(any("GET /ok 200" in line for line in logs.output))


class TestEngineOptions(unittest.TestCase):
    def test_postgres_uses_pre_ping(self) -> None:
        self.assertEqual(engine_options("postgresql+psycopg2://u:p@h/db"), {"pool_pre_ping": True})

    def test_in_memory_sqlite_shares_one_connection(self) -> None:
        options = engine_options("sqlite://")
        self.assertIs(options["poolclass"], StaticPool)
        self.assertEqual(options["connect_args"], {"check_same_thread": False})

    def test_file_sqlite_keeps_default_pool(self) -> None:
        self.assertNotIn("poolclass", engine_options("sqlite:///./dev.db"))


if __name__ == "__main__":
    unittest.main()
