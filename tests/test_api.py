"""End-to-end tests of the HTTP surface through the real application lifespan."""

import csv
import io
import shutil
import tempfile
import unittest
from datetime import date, timedelta
from pathlib import Path

from fastapi.testclient import TestClient

from src.registry.core.errors import StoreError
from src.registry.core.security import CredentialService
from src.registry.main import create_app
from src.registry.services.registry import age_on, utc_today
from tests.fakes import InMemoryStore
from tests.helpers import make_settings, supporter_payload


class RegistryAPITestCase(unittest.TestCase):
    """Exercise the public and admin routes against a temporary SQLite file."""

    def setUp(self):
        self._tmpdir = tempfile.mkdtemp(prefix="registry_api_")
        self.settings = make_settings(Path(self._tmpdir) / "registry.db")
        self.app = create_app(self.settings)
        self.client = TestClient(self.app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)
        shutil.rmtree(self._tmpdir, ignore_errors=True)

    # Helper utilities -------------------------------------------------
    def login(self, password="provision-pass"):
        response = self.client.post("/api/admin/login", json={"username": "admin", "password": password})
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["token"]

    def rotated_token(self):
        token = self.login()
        response = self.client.post(
            "/api/admin/password",
            json={"currentPassword": "provision-pass", "newPassword": "rotated-password"},
            headers={"Authorization": f"Bearer {token}"},
        )
        self.assertEqual(response.status_code, 200, response.text)
        return response.json()["token"]

    def auth(self, token):
        return {"Authorization": f"Bearer {token}"}

    # Public routes ----------------------------------------------------
    def test_health(self):
        response = self.client.get("/health")
        self.assertEqual(response.json(), {"status": "ok"})

    def test_submit_and_list(self):
        response = self.client.post("/api/supporters", json=supporter_payload(email="amara@mail.org"))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"message": "Saved", "id": 1})

        response = self.client.get("/api/supporters")
        self.assertEqual(response.status_code, 200)
        rows = response.json()
        self.assertEqual(len(rows), 1)
        row = rows[0]
        self.assertEqual(row["name"], "Amara Okoye")
        self.assertEqual(row["email"], "amara@mail.org")
        self.assertEqual(row["currentAge"], age_on(date(1990, 5, 15), utc_today()))
        self.assertEqual(row["age2029"], 39)
        self.assertEqual(
            set(row),
            {"id", "name", "dob", "sex", "location", "community", "clan",
             "district", "contact", "email", "currentAge", "age2029"},
        )

    def test_duplicate_submission(self):
        self.assertEqual(self.client.post("/api/supporters", json=supporter_payload()).status_code, 200)
        response = self.client.post("/api/supporters", json=supporter_payload(location="Changed"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json(), {"error": "Duplicate entry", "code": "duplicate_entry"})
        self.assertEqual(len(self.client.get("/api/supporters").json()), 1)

    def test_invalid_submission(self):
        response = self.client.post("/api/supporters", json=supporter_payload(sex="Unknown", district=""))
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["code"], "validation_error")
        self.assertIn("sex", body["fields"])
        self.assertIn("district", body["fields"])

    def test_non_object_body_is_rejected(self):
        response = self.client.post("/api/supporters", json=["not", "an", "object"])
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["code"], "validation_error")

    def test_list_filters(self):
        self.client.post("/api/supporters", json=supporter_payload(name="Amara", district="D1", contact="1"))
        self.client.post("/api/supporters", json=supporter_payload(name="Subira", district="D2", sex="Male", contact="2"))
        self.client.post("/api/supporters", json=supporter_payload(name="Grace", district="D2", contact="3"))

        def names(**params):
            response = self.client.get("/api/supporters", params=params)
            self.assertEqual(response.status_code, 200)
            return [row["name"] for row in response.json()]

        self.assertEqual(names(district="D2"), ["Subira", "Grace"])
        self.assertEqual(names(sex="Male"), ["Subira"])
        self.assertEqual(names(q="SUB"), ["Subira"])
        self.assertEqual(names(district="D2", sex="Female"), ["Grace"])
        self.assertEqual(names(district=""), ["Amara", "Subira", "Grace"])
        self.assertEqual(names(district="D9"), [])
        self.assertEqual(names(limit=1, offset=2), ["Grace"])

    def test_invalid_pagination(self):
        response = self.client.get("/api/supporters", params={"limit": 0})
        self.assertEqual(response.status_code, 400)
        self.assertIn("limit", response.json()["fields"])

    # Login ------------------------------------------------------------
    def test_login_failures_are_uniform(self):
        unknown = self.client.post("/api/admin/login", json={"username": "ghost", "password": "provision-pass"})
        wrong = self.client.post("/api/admin/login", json={"username": "admin", "password": "nope"})
        self.assertEqual(unknown.status_code, 401)
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(unknown.json(), wrong.json())
        self.assertEqual(wrong.json()["error"], "Invalid credentials")

    def test_login_returns_token(self):
        token = self.login()
        claims = self.app.state.credentials.verify_token(token)
        self.assertEqual(claims.username, "admin")
        self.assertTrue(claims.password_change_required)

    # Admin routes -----------------------------------------------------
    def test_admin_routes_require_token(self):
        for path in ("/api/stats", "/api/export/csv"):
            with self.subTest(path=path):
                response = self.client.get(path)
                self.assertEqual(response.status_code, 401)
                self.assertEqual(response.headers.get("www-authenticate"), "Bearer")
                self.assertEqual(response.json()["code"], "invalid_or_expired_token")

    def test_admin_routes_reject_bad_tokens(self):
        expired = self.app.state.credentials.issue_token(1, "admin", expires_delta=timedelta(seconds=-30))
        foreign = CredentialService("some-other-signing-secret-000000", bcrypt_rounds=4).issue_token(1, "admin")
        headers = [
            self.auth("garbage"),
            self.auth(expired),
            self.auth(foreign),
            {"Authorization": "Basic YWRtaW46cGFzcw=="},
        ]
        for header in headers:
            with self.subTest(header=header):
                self.assertEqual(self.client.get("/api/stats", headers=header).status_code, 401)

    def test_provisioning_password_must_be_rotated(self):
        token = self.login()
        response = self.client.get("/api/stats", headers=self.auth(token))
        self.assertEqual(response.status_code, 403)
        self.assertEqual(response.json()["code"], "password_change_required")

        rotated = self.rotated_token()
        self.assertEqual(self.client.get("/api/stats", headers=self.auth(rotated)).status_code, 200)
        self.assertEqual(
            self.client.post("/api/admin/login", json={"username": "admin", "password": "provision-pass"}).status_code,
            401,
        )
        self.login("rotated-password")

    def test_password_change_requires_token(self):
        response = self.client.post(
            "/api/admin/password",
            json={"currentPassword": "provision-pass", "newPassword": "rotated-password"},
        )
        self.assertEqual(response.status_code, 401)

    def test_stats(self):
        self.client.post("/api/supporters", json=supporter_payload(name="A", district="D1", contact="1"))
        self.client.post("/api/supporters", json=supporter_payload(name="B", district="D2", sex="Male", contact="2"))
        self.client.post("/api/supporters", json=supporter_payload(name="C", district="D2", contact="3"))
        self.client.post("/api/supporters", json=supporter_payload(name="C", district="D2", contact="3"))

        response = self.client.get("/api/stats", headers=self.auth(self.rotated_token()))
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {
            "totalSupporters": 3,
            "genderBreakdown": [{"sex": "Female", "count": 2}, {"sex": "Male", "count": 1}],
            "districtBreakdown": [{"district": "D1", "count": 1}, {"district": "D2", "count": 2}],
        })

    def test_export_csv(self):
        token = self.rotated_token()
        empty = self.client.get("/api/export/csv", headers=self.auth(token))
        self.assertEqual(empty.status_code, 200)
        self.assertTrue(empty.headers["content-type"].startswith("text/csv"))
        self.assertEqual(empty.headers["content-disposition"], "attachment; filename=supporters.csv")
        self.assertEqual(len(list(csv.reader(io.StringIO(empty.text, newline="")))), 1)

        self.client.post("/api/supporters", json=supporter_payload(name='Okoye, "Amara"', location="a,b"))
        response = self.client.get("/api/export/csv", headers=self.auth(token))
        records = list(csv.DictReader(io.StringIO(response.text, newline="")))
        self.assertEqual(len(records), 1)
        self.assertEqual(records[0]["name"], 'Okoye, "Amara"')
        self.assertEqual(records[0]["location"], "a,b")
        self.assertEqual(records[0]["age2029"], "39")


class StoreErrorAPITestCase(unittest.TestCase):
    """Store failures turn into opaque 500 responses."""

    def setUp(self):
        self.store = InMemoryStore()
        self.app = create_app(make_settings(), store=self.store)
        self.client = TestClient(self.app)
        self.client.__enter__()

    def tearDown(self):
        self.client.__exit__(None, None, None)

    def test_store_failure_is_opaque(self):
        self.store.fail_with = StoreError()
        response = self.client.post("/api/supporters", json=supporter_payload())
        self.assertEqual(response.status_code, 500)
        self.assertEqual(response.json(), {"error": "Database error", "code": "store_error"})
        self.assertEqual(self.client.get("/api/supporters").status_code, 500)


if __name__ == "__main__":
    unittest.main()
