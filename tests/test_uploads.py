"""Tests for guardroster.services.uploads and the object storage client."""

import asyncio
import unittest
from datetime import UTC, datetime, timedelta
from unittest.mock import patch

import httpx
from sqlalchemy.exc import OperationalError

from factories import add_user, make_db, session_for

from guardroster.core.errors import DependencyFailure, Forbidden, InvalidInput
from guardroster.core.roles import Role
from guardroster.models import Upload
from guardroster.models.upload import UPLOAD_STATUS_PENDING, UPLOAD_STATUS_STORED
from guardroster.services.storage import (
    ObjectStorage,
    StorageError,
    StorageNotConfiguredError,
    build_storage_key,
)
from guardroster.services.uploads import UploadManager, reconcile_pending_uploads

STORE = "https://files.example.test/bucket"


def _storage(status_code: int = 200, calls: list | None = None) -> ObjectStorage:
    """ObjectStorage whose HTTP calls hit an in-process handler."""

    def handler(request: httpx.Request) -> httpx.Response:
        if calls is not None:
            calls.append(request)
        return httpx.Response(status_code)

    return ObjectStorage(STORE, access_token="tok", transport=httpx.MockTransport(handler))


class TestBuildStorageKey(unittest.TestCase):
    def test_keeps_safe_name_with_unique_prefix(self) -> None:
        key = build_storage_key("Dienstplan März.pdf")
        self.assertTrue(key.endswith("-Dienstplan_M_rz.pdf"))
        self.assertNotEqual(key, build_storage_key("Dienstplan März.pdf"))

    def test_strips_path_components(self) -> None:
        key = build_storage_key("../../etc/passwd")
        self.assertNotIn("/", key)
        self.assertTrue(key.endswith("-passwd"))
        self.assertTrue(build_storage_key("C:\\Users\\x\\foto.jpg").endswith("-foto.jpg"))


class TestObjectStorage(unittest.TestCase):
    def test_put_sends_bytes_with_auth_and_returns_public_url(self) -> None:
        calls: list[httpx.Request] = []
        url = asyncio.run(_storage(calls=calls).put("k-1.txt", b"hello", "text/plain"))
        self.assertEqual(url, f"{STORE}/k-1.txt")
        self.assertEqual(calls[0].method, "PUT")
        self.assertEqual(calls[0].headers["Authorization"], "Bearer tok")
        self.assertEqual(calls[0].headers["Content-Type"], "text/plain")
        self.assertEqual(calls[0].content, b"hello")

    def test_public_url_override(self) -> None:
        storage = ObjectStorage(STORE, public_url="https://cdn.example.test/")
        self.assertEqual(storage.url_for("a.txt"), "https://cdn.example.test/a.txt")

    def test_error_status_raises(self) -> None:
        with self.assertRaises(StorageError) as ctx:
            asyncio.run(_storage(status_code=503).put("k", b"x"))
        self.assertEqual(ctx.exception.status_code, 503)

    def test_delete_treats_missing_blob_as_deleted(self) -> None:
        asyncio.run(_storage(status_code=404).delete("gone"))
        with self.assertRaises(StorageError):
            asyncio.run(_storage(status_code=500).delete("k"))

    def test_not_configured(self) -> None:
        storage = ObjectStorage(None)
        self.assertFalse(storage.is_configured)
        with self.assertRaises(StorageNotConfiguredError):
            storage.url_for("k")


class UploadManagerTestCase(unittest.TestCase):
    def setUp(self) -> None:
        self.db = make_db()
        self.admin = add_user(self.db, name="Admin", role=Role.ADMIN)
        self.u1 = add_user(self.db, user_id="u1", name="Anna")
        self.u2 = add_user(self.db, user_id="u2", name="Ben")
        self.admin_session = session_for(self.admin)
        self.u1_session = session_for(self.u1)
        self.calls: list[httpx.Request] = []

    def tearDown(self) -> None:
        self.db.close()

    def manager(self, status_code: int = 200, max_bytes: int = 1024) -> UploadManager:
        return UploadManager(self.db, _storage(status_code, self.calls), max_bytes)


class TestCreateUpload(UploadManagerTestCase):
    def test_staff_upload_is_stored(self) -> None:
        upload = asyncio.run(
            self.manager().create(
                self.u1_session, filename="ausweis.png", data=b"\x89PNG", content_type="image/png"
            )
        )
        self.assertEqual(upload.user_id, "u1")
        self.assertEqual(upload.status, UPLOAD_STATUS_STORED)
        self.assertEqual(upload.filename, "ausweis.png")
        self.assertEqual(upload.size_bytes, 4)
        self.assertTrue(upload.storage_url.startswith(STORE + "/"))
        self.assertEqual(len(self.calls), 1)

    def test_admin_uploads_on_behalf_of_user(self) -> None:
        upload = asyncio.run(
            self.manager().create(self.admin_session, filename="a.txt", data=b"x", user_id="u2")
        )
        self.assertEqual(upload.user_id, "u2")

    def test_staff_cannot_upload_for_someone_else(self) -> None:
        with self.assertRaises(Forbidden):
            asyncio.run(self.manager().create(self.u1_session, filename="a.txt", data=b"x", user_id="u2"))
        self.assertEqual(self.calls, [])

    def test_missing_filename_or_oversized_file_is_invalid(self) -> None:
        with self.assertRaises(InvalidInput):
            asyncio.run(self.manager().create(self.u1_session, filename="  ", data=b"x"))
        with self.assertRaises(InvalidInput) as ctx:
            asyncio.run(self.manager(max_bytes=3).create(self.u1_session, filename="a.bin", data=b"1234"))
        self.assertEqual(ctx.exception.fields, ["file"])
        self.assertEqual(self.db.query(Upload).count(), 0)

    def test_unknown_owner_is_invalid(self) -> None:
        with self.assertRaises(InvalidInput):
            asyncio.run(self.manager().create(self.admin_session, filename="a", data=b"x", user_id="ghost"))

    def test_failed_blob_write_leaves_no_row(self) -> None:
        with self.assertRaises(DependencyFailure):
            asyncio.run(self.manager(status_code=500).create(self.u1_session, filename="a.txt", data=b"x"))
        self.assertEqual(self.db.query(Upload).count(), 0)

    def test_unconfigured_storage_is_dependency_failure(self) -> None:
        manager = UploadManager(self.db, ObjectStorage(None), 1024)
        with self.assertRaises(DependencyFailure):
            asyncio.run(manager.create(self.u1_session, filename="a.txt", data=b"x"))
        self.assertEqual(self.db.query(Upload).count(), 0)


class TestListUploads(UploadManagerTestCase):
    def test_admin_sees_stored_uploads_only(self) -> None:
        asyncio.run(self.manager().create(self.u1_session, filename="a.txt", data=b"x"))
        self.db.add(
            Upload(
                user_id="u2",
                filename="half.txt",
                storage_key="pending-key",
                storage_url=f"{STORE}/pending-key",
                status=UPLOAD_STATUS_PENDING,
            )
        )
        self.db.commit()
        rows = self.manager().list(self.admin_session)
        self.assertEqual([r.filename for r in rows], ["a.txt"])
        self.assertEqual(rows[0].user.name, "Anna")

    def test_staff_forbidden(self) -> None:
        with self.assertRaises(Forbidden):
            self.manager().list(self.u1_session)


class TestReconcilePendingUploads(UploadManagerTestCase):
    def _pending(self, key: str, age: timedelta) -> None:
        self.db.add(
            Upload(
                user_id="u1",
                filename=key,
                storage_key=key,
                storage_url=f"{STORE}/{key}",
                status=UPLOAD_STATUS_PENDING,
                created_at=datetime.now(UTC) - age,
            )
        )
        self.db.commit()

    def test_stale_pending_rows_and_blobs_removed(self) -> None:
        self._pending("old", timedelta(hours=3))
        self._pending("fresh", timedelta(minutes=1))
        cutoff = datetime.now(UTC) - timedelta(hours=1)
        removed = asyncio.run(reconcile_pending_uploads(self.db, _storage(404, self.calls), cutoff))
        self.assertEqual(removed, 1)
        self.assertEqual([c.method for c in self.calls], ["DELETE"])
        self.assertEqual([u.storage_key for u in self.db.query(Upload).all()], ["fresh"])

    def test_blob_stored_but_finalize_failed_is_swept_later(self) -> None:
        real_commit = self.db.commit
        commits: list[int] = []

        def commit_then_fail() -> None:
            commits.append(1)
            if len(commits) == 2:
                raise OperationalError("COMMIT", {}, Exception("connection lost"))
            real_commit()

        with patch.object(self.db, "commit", side_effect=commit_then_fail):
            with self.assertRaises(DependencyFailure):
                asyncio.run(self.manager().create(self.u1_session, filename="a.txt", data=b"x"))

        orphan = self.db.query(Upload).one()
        self.assertEqual(orphan.status, UPLOAD_STATUS_PENDING)
        self.assertEqual(self.manager().list(self.admin_session), [])

        later = datetime.now(UTC) + timedelta(minutes=1)
        removed = asyncio.run(reconcile_pending_uploads(self.db, _storage(204, self.calls), later))
        self.assertEqual(removed, 1)
        self.assertEqual([c.method for c in self.calls], ["PUT", "DELETE"])
        self.assertTrue(self.calls[1].url.path.endswith(orphan.storage_key))
        self.assertEqual(self.db.query(Upload).count(), 0)

    def test_rows_kept_when_blob_delete_fails(self) -> None:
        self._pending("old", timedelta(hours=3))
        cutoff = datetime.now(UTC) - timedelta(hours=1)
        removed = asyncio.run(reconcile_pending_uploads(self.db, _storage(500), cutoff))
        self.assertEqual(removed, 0)
        self.assertEqual(self.db.query(Upload).count(), 1)


if __name__ == "__main__":
    unittest.main()
