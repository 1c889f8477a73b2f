"""HTTP-level tests: route guard, error mapping and the JSON wire format."""

import unittest

import httpx
from fastapi.testclient import TestClient

from factories import DEFAULT_PASSWORD, add_user, make_db

from guardroster.api.v1.uploads import get_object_storage
from guardroster.core.database import get_db
from guardroster.core.roles import Role
from guardroster.main import app
from guardroster.models import User
from guardroster.services.storage import ObjectStorage

API = "/api/v1"


class ApiTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_db()
        self.admin = add_user(self.db, user_id="a1", name="Admin", email="admin@x.de", role=Role.ADMIN)
        self.staff = add_user(self.db, user_id="u1", name="Anna", email="anna@x.de")
        self.other = add_user(self.db, user_id="u2", name="Ben", email="ben@x.de")
        self.blob_puts: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.blob_puts.append(request)
            return httpx.Response(200)

        storage = ObjectStorage("https://files.example.test", transport=httpx.MockTransport(handler))

        def override_get_db():
            yield self.db

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_object_storage] = lambda: storage
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        self.db.close()

    def login(self, email: str) -> dict[str, str]:
        response = self.client.post(f"{API}/auth", json={"email": email, "password": DEFAULT_PASSWORD})
        self.assertEqual(response.status_code, 200, response.text)
        return {"Authorization": f"Bearer {response.json()['accessToken']}"}


class TestAuthEndpoints(ApiTestCase):
    def test_login_returns_token_and_role(self) -> None:
        response = self.client.post(f"{API}/auth", json={"email": "anna@x.de", "password": DEFAULT_PASSWORD})
        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["userId"], "u1")
        self.assertEqual(body["role"], "USER")
        self.assertEqual(body["tokenType"], "bearer")
        self.assertIn("expiresAt", body)

    def test_bad_credentials_are_indistinguishable(self) -> None:
        wrong = self.client.post(f"{API}/auth", json={"email": "anna@x.de", "password": "nope-nope"})
        unknown = self.client.post(f"{API}/auth", json={"email": "who@x.de", "password": "nope-nope"})
        self.assertEqual(wrong.status_code, 401)
        self.assertEqual(wrong.json(), unknown.json())
        self.assertEqual(wrong.json()["error"], "unauthenticated")

    def test_me_and_logout(self) -> None:
        headers = self.login("anna@x.de")
        me = self.client.get(f"{API}/auth/me", headers=headers)
        self.assertEqual(me.status_code, 200)
        self.assertEqual(me.json()["userId"], "u1")

        self.assertEqual(self.client.post(f"{API}/auth/logout", headers=headers).status_code, 200)
        after = self.client.get(f"{API}/auth/me", headers=headers)
        self.assertEqual(after.status_code, 401)
        self.assertEqual(after.json()["detail"], "Session revoked")
        self.assertEqual(self.client.post(f"{API}/auth/logout", headers=headers).status_code, 200)


class TestUserEndpoints(ApiTestCase):
    def test_admin_creates_max_then_duplicate_conflicts(self) -> None:
        headers = self.login("admin@x.de")
        payload = {"name": "Max", "email": "max@x.de", "password": "pw123456", "role": "USER"}
        created = self.client.post(f"{API}/users", json=payload, headers=headers)
        self.assertEqual(created.status_code, 200, created.text)
        body = created.json()
        self.assertEqual(set(body), {"id", "name", "email", "role"})
        self.assertEqual((body["name"], body["email"], body["role"]), ("Max", "max@x.de", "USER"))

        again = self.client.post(f"{API}/users", json=payload, headers=headers)
        self.assertEqual(again.status_code, 409)
        self.assertEqual(again.json()["error"], "conflict")

    def test_route_guard_blocks_missing_token_and_staff(self) -> None:
        anonymous = self.client.get(f"{API}/users")
        self.assertEqual(anonymous.status_code, 401)
        self.assertEqual(anonymous.headers["WWW-Authenticate"], "Bearer")
        staff = self.client.delete(f"{API}/users/u2", headers=self.login("anna@x.de"))
        self.assertEqual(staff.status_code, 403)
        self.assertIsNotNone(self.db.get(User, "u2"))

    def test_missing_fields_are_named(self) -> None:
        response = self.client.post(f"{API}/users", json={"name": "Max"}, headers=self.login("admin@x.de"))
        self.assertEqual(response.status_code, 400)
        body = response.json()
        self.assertEqual(body["error"], "invalid_input")
        self.assertEqual(set(body["fields"]), {"email", "password", "role"})

    def test_delete_unknown_user_is_not_found(self) -> None:
        response = self.client.delete(f"{API}/users/nobody", headers=self.login("admin@x.de"))
        self.assertEqual(response.status_code, 404)


class TestShiftEndpoints(ApiTestCase):
    def _create(self, headers: dict[str, str], user_id: str, start: str, end: str):
        return self.client.post(
            f"{API}/shifts",
            json={"userId": user_id, "startTime": start, "endTime": end, "location": "Tor 3"},
            headers=headers,
        )

    def test_admin_creates_and_staff_reads_own(self) -> None:
        admin = self.login("admin@x.de")
        created = self._create(admin, "u1", "2026-11-02T06:00:00Z", "2026-11-02T14:00:00Z")
        self.assertEqual(created.status_code, 200, created.text)
        self.assertEqual(created.json()["userName"], "Anna")
        self._create(admin, "u2", "2026-11-02T06:00:00Z", "2026-11-02T14:00:00Z")

        staff = self.login("anna@x.de")
        own = self.client.get(f"{API}/shifts", headers=staff)
        self.assertEqual([s["userId"] for s in own.json()], ["u1"])
        other = self.client.get(f"{API}/shifts", params={"userId": "u2"}, headers=staff)
        self.assertEqual(other.status_code, 403)

    def test_reversed_range_is_invalid(self) -> None:
        response = self._create(self.login("admin@x.de"), "u1", "2026-11-02T14:00:00Z", "2026-11-02T06:00:00Z")
        self.assertEqual(response.status_code, 400)
        self.assertIn("startTime", response.json()["fields"])


class TestMessageAndUploadEndpoints(ApiTestCase):
    def test_staff_message_lands_in_admin_inbox(self) -> None:
        sent = self.client.post(f"{API}/messages", json={"content": "Schlüssel fehlt"}, headers=self.login("anna@x.de"))
        self.assertEqual(sent.status_code, 200, sent.text)
        inbox = self.client.get(f"{API}/messages", headers=self.login("admin@x.de"))
        self.assertEqual([m["content"] for m in inbox.json()], ["Schlüssel fehlt"])

    def test_multipart_upload_then_admin_listing(self) -> None:
        staff = self.login("anna@x.de")
        response = self.client.post(
            f"{API}/uploads",
            files={"file": ("bericht.txt", b"alles ruhig", "text/plain")},
            headers=staff,
        )
        self.assertEqual(response.status_code, 200, response.text)
        body = response.json()
        self.assertEqual(body["filename"], "bericht.txt")
        self.assertEqual(body["sizeBytes"], 11)
        self.assertTrue(body["url"].startswith("https://files.example.test/"))
        self.assertEqual(len(self.blob_puts), 1)

        self.assertEqual(self.client.get(f"{API}/uploads", headers=staff).status_code, 403)
        listing = self.client.get(f"{API}/uploads", headers=self.login("admin@x.de"))
        self.assertEqual([u["userName"] for u in listing.json()], ["Anna"])

    def test_upload_without_file_is_invalid(self) -> None:
        response = self.client.post(f"{API}/uploads", json={"x": 1}, headers=self.login("anna@x.de"))
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["fields"], ["file"])


if __name__ == "__main__":
    unittest.main()
