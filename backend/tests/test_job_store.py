import sqlite3

import pytest
from sqlalchemy.exc import OperationalError

from jobtracker.database import init_db
from jobtracker.dependencies import open_store
from jobtracker.models.user import User
from jobtracker.schemas.job import JobCreate, JobUpdate, merge_milestones
from jobtracker.services.job_store import (
    DuplicateJobError,
    DurableJobStore,
    GuestStorage,
    JobNotFoundError,
    StorageError,
    VolatileJobStore,
)
from jobtracker.services.session_service import OwnerContext


@pytest.fixture
def db(test_db):
    session = test_db()
    session.add(User(id="u1", email="u1@example.com", password_hash="x", created_at="2024-01-01T00:00:00Z"))
    session.commit()
    yield session
    session.close()


class TestMergeMilestones:
    @pytest.mark.parametrize("status,expected", [
        ("Wishlist", (False, False)),
        ("Applied", (False, False)),
        ("Interview", (True, False)),
        ("Offer", (True, True)),
        ("Rejected", (True, False)),
    ])
    def test_derived_from_status(self, status, expected):
        assert merge_milestones(status) == expected

    def test_flags_never_unset(self):
        assert merge_milestones("Wishlist", True, True) == (True, True)


class TestDurableJobStore:
    def test_create_and_list(self, db):
        store = DurableJobStore(db, "u1")
        job = store.create(JobCreate(title="Engineer", company="Acme", status="Interview"))
        assert job.had_interview is True
        assert [j.id for j in store.list()] == [job.id]

    def test_duplicate_is_distinct_error(self, db):
        store = DurableJobStore(db, "u1")
        store.create(JobCreate(title="Engineer", company="Acme"))
        with pytest.raises(DuplicateJobError):
            store.create(JobCreate(title="Engineer", company="Acme"))

    def test_update_keeps_history(self, db):
        store = DurableJobStore(db, "u1")
        job = store.create(JobCreate(title="Engineer", company="Acme", status="Offer"))
        updated = store.update(job.id, JobUpdate(status="Applied"))
        assert updated.status == "Applied"
        assert updated.had_interview is True
        assert updated.had_offer is True

    def test_missing_job(self, db):
        store = DurableJobStore(db, "u1")
        with pytest.raises(JobNotFoundError):
            store.get("missing")
        with pytest.raises(JobNotFoundError):
            store.delete("missing")

    def test_commit_failure_is_storage_error(self, db, monkeypatch):
        store = DurableJobStore(db, "u1")

        def fail():
            raise OperationalError("INSERT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db, "commit", fail)
        with pytest.raises(StorageError):
            store.create(JobCreate(title="Engineer", company="Acme"))

    def test_scoped_to_user(self, db):
        db.add(User(id="u2", email="u2@example.com", password_hash="x", created_at="2024-01-01T00:00:00Z"))
        db.commit()
        job = DurableJobStore(db, "u1").create(JobCreate(title="Engineer", company="Acme"))
        other = DurableJobStore(db, "u2")
        assert other.list() == []
        with pytest.raises(JobNotFoundError):
            other.update(job.id, JobUpdate(title="Stolen"))


    def test_same_second_inserts_list_newest_first(self, db, monkeypatch):
        monkeypatch.setattr("jobtracker.services.job_store._utcnow", lambda: "2024-01-01T00:00:00Z")
        store = DurableJobStore(db, "u1")
        ids = [store.create(JobCreate(title=t, company="Acme")).id for t in ("A", "B", "C")]
        assert [j.id for j in store.list()] == ids[::-1]

class TestVolatileJobStore:
    def test_crud(self):
        store = VolatileJobStore("guest-1", GuestStorage())
        first = store.create(JobCreate(title="A", company="X"))
        second = store.create(JobCreate(title="B", company="X"))
        assert [j.id for j in store.list()] == [second.id, first.id]

        updated = store.update(first.id, JobUpdate(status="Interview", notes="Call on Monday"))
        assert updated.had_interview is True
        assert store.get(first.id).notes == "Call on Monday"

        store.delete(second.id)
        assert [j.id for j in store.list()] == [first.id]

    def test_no_duplicate_check(self):
        store = VolatileJobStore("guest-1", GuestStorage())
        store.create(JobCreate(title="A", company="X"))
        store.create(JobCreate(title="A", company="X"))
        assert len(store.list()) == 2

    def test_list_is_a_copy(self):
        store = VolatileJobStore("guest-1", GuestStorage())
        store.create(JobCreate(title="A", company="X"))
        store.list().clear()
        assert len(store.list()) == 1

    def test_discard_drops_jobs(self):
        storage = GuestStorage()
        store = VolatileJobStore("guest-1", storage)
        store.create(JobCreate(title="A", company="X"))
        storage.discard("guest-1")
        assert store.list() == []

    def test_missing_job(self):
        store = VolatileJobStore("guest-1", GuestStorage())
        with pytest.raises(JobNotFoundError):
            store.update("missing", JobUpdate(title="X"))


class TestOpenStore:
    def test_guest_gets_volatile_store(self, db):
        owner = OwnerContext(email="guest@example.com", guest_id="guest-1")
        assert isinstance(open_store(owner, db), VolatileJobStore)

    def test_user_gets_durable_store(self, db):
        owner = OwnerContext(email="u1@example.com", user_id="u1")
        assert isinstance(open_store(owner, db), DurableJobStore)


class TestInitDb:
    def test_fresh_database_has_all_indexes(self, tmp_path):
        path = tmp_path / "data" / "jobs.sqlite"
        init_db(path)
        init_db(path)

        conn = sqlite3.connect(str(path))
        names = {row[0] for row in conn.execute("SELECT name FROM sqlite_master WHERE type = 'index'")}
        conn.close()
        assert {"idx_jobs_user", "idx_jobs_created", "idx_jobs_status", "idx_jobs_user_title_company"} <= names
