"""Unit tests for jobs/store.py -- document storage and ownership checks.

Covers:
- create_job() stores the body verbatim and drops server-owned keys
- list_jobs() returns every job
- update_owned() writes only allow-listed fields, keeps authorEmail, bumps updatedAt
- update_owned() / delete_owned() return the same "no match" for absent and foreign jobs
"""

from datetime import datetime

import pytest

from jobs.models import UPDATABLE_FIELDS, Job
from jobs.store import JobStore

OWNER = "owner@x.com"
OTHER = "other@x.com"


def _body(**overrides) -> dict:
    body = {
        "title": "Backend Engineer",
        "price": 1200,
        "pricingType": "fixed",
        "description": "Build APIs",
        "location": "Remote",
        "experienceLevel": "mid",
        "vacancy": 2,
        "skills": ["python", "sql"],
        "company": "Acme",
    }
    body.update(overrides)
    return body


@pytest.fixture
def job_id(job_store: JobStore) -> str:
    return job_store.create_job(Job(author_email=OWNER, fields=_body()))


class TestCreateAndRead:
    def test_body_stored_verbatim(self, job_store: JobStore, job_id: str) -> None:
        job = job_store.get_job(job_id)
        assert job.fields == _body()
        assert job.author_email == OWNER
        assert job.created_at == job.updated_at

    def test_reserved_keys_dropped(self, job_store: JobStore) -> None:
        new_id = job_store.create_job(
            Job(author_email=OWNER, fields=_body(authorEmail="spoof@x.com", _id="x", updatedAt="never"))
        )
        doc = job_store.get_job(new_id).to_document()
        assert doc["authorEmail"] == OWNER
        assert doc["_id"] == new_id
        assert doc["updatedAt"] != "never"

    def test_list_jobs(self, job_store: JobStore, job_id: str) -> None:
        second = job_store.create_job(Job(author_email=OTHER, fields={"title": "Other"}))
        ids = [j.id for j in job_store.list_jobs()]
        assert ids == [job_id, second]

    def test_get_job_malformed_or_absent(self, job_store: JobStore) -> None:
        assert job_store.get_job("not-an-id") is None
        assert job_store.get_job("f" * 32) is None


class TestUpdateOwned:
    def test_owner_update_changes_only_allow_listed_fields(self, job_store: JobStore, job_id: str) -> None:
        before = job_store.get_job(job_id)
        changes = {
            "title": "T2",
            "vacancy": 5,
            "company": "Evil Corp",
            "authorEmail": OTHER,
        }
        updated = job_store.update_owned(job_id, OWNER, changes)

        assert updated is not None
        assert updated.fields["title"] == "T2"
        assert updated.fields["vacancy"] == 5
        assert updated.fields["company"] == "Acme", "non-allow-listed fields must not change"
        assert updated.author_email == OWNER
        for name in UPDATABLE_FIELDS:
            if name not in changes:
                assert updated.fields[name] == before.fields[name]
        assert datetime.fromisoformat(updated.updated_at) > datetime.fromisoformat(before.updated_at)

    def test_non_owner_gets_no_match(self, job_store: JobStore, job_id: str) -> None:
        assert job_store.update_owned(job_id, OTHER, {"title": "hijack"}) is None
        assert job_store.get_job(job_id).fields["title"] == "Backend Engineer"

    def test_absent_and_malformed_ids_get_no_match(self, job_store: JobStore) -> None:
        assert job_store.update_owned("a" * 32, OWNER, {"title": "x"}) is None
        assert job_store.update_owned("bad", OWNER, {"title": "x"}) is None


class TestDeleteOwned:
    def test_non_owner_cannot_delete(self, job_store: JobStore, job_id: str) -> None:
        assert job_store.delete_owned(job_id, OTHER) is False
        assert job_store.get_job(job_id) is not None

    def test_owner_deletes(self, job_store: JobStore, job_id: str) -> None:
        assert job_store.delete_owned(job_id, OWNER) is True
        assert job_store.get_job(job_id) is None
        assert job_store.delete_owned(job_id, OWNER) is False
