"""Tests for SQLite database operations."""

import pytest

from talentmatch.db.candidates import (
    clear_candidate_embedding,
    count_candidates,
    find_candidates,
    get_candidate,
    insert_candidates,
    iter_candidates,
    set_candidate_embedding,
)
from talentmatch.db.jobs import get_all_jobs, get_job, insert_jobs
from talentmatch.errors import NotFoundError
from talentmatch.schemas.candidate import CandidateFilters, Experience
from tests.test_utils import make_test_candidate, make_test_job


class TestInitDatabase:
    def test_creates_database(self, temp_db):
        assert temp_db.exists()


class TestInsertJobs:
    def test_insert_single_job(self, temp_db):
        inserted = insert_jobs([make_test_job("job-1")])
        assert inserted == 1

    def test_idempotent_insert(self, temp_db):
        job = make_test_job("job-1")
        insert_jobs([job])
        inserted = insert_jobs([job])  # Insert again
        assert inserted == 0

    def test_round_trips_list_fields(self, temp_db):
        insert_jobs([
            make_test_job(
                "job-1",
                requirements=["SQL"],
                skill_names=["Python", "Django"],
                company_name="Acme",
            )
        ])

        job = get_job("job-1")
        assert job.requirements == ["SQL"]
        assert job.skill_names == ["Python", "Django"]
        assert job.company_name == "Acme"


class TestGetJobs:
    def test_get_all_jobs(self, temp_db):
        insert_jobs([make_test_job("j1"), make_test_job("j2")])

        result = get_all_jobs()
        assert {job.uid for job in result} == {"j1", "j2"}

    def test_get_missing_job_raises(self, temp_db):
        with pytest.raises(NotFoundError, match="missing"):
            get_job("missing")

    def test_empty_database(self, temp_db):
        assert get_all_jobs() == []


class TestInsertCandidates:
    def test_insert_and_get(self, temp_db):
        candidate = make_test_candidate(
            "u1",
            name="Ann",
            location="Berlin",
            skill_ids=["python"],
            experiences=[Experience(title="Engineer", company="Globex")],
            embedding=[0.1, 0.2],
        )

        assert insert_candidates([candidate]) == 1

        stored = get_candidate("u1")
        assert stored.name == "Ann"
        assert stored.skill_ids == ["python"]
        assert stored.experiences[0].company == "Globex"
        assert stored.embedding == [0.1, 0.2]

    def test_idempotent_insert(self, temp_db):
        insert_candidates([make_test_candidate("u1")])
        assert insert_candidates([make_test_candidate("u1")]) == 0

    def test_missing_candidate_raises(self, temp_db):
        with pytest.raises(NotFoundError):
            get_candidate("nobody")


class TestCandidateEmbedding:
    def test_set_embedding(self, temp_db):
        insert_candidates([make_test_candidate("u1")])

        set_candidate_embedding("u1", [0.5, 0.5])

        assert get_candidate("u1").embedding == [0.5, 0.5]
        assert count_candidates(with_embedding=True) == 1

    def test_set_embedding_replaces_previous(self, temp_db):
        insert_candidates([make_test_candidate("u1", embedding=[1.0, 0.0])])

        set_candidate_embedding("u1", [0.0, 1.0])

        assert get_candidate("u1").embedding == [0.0, 1.0]

    def test_set_embedding_for_missing_candidate_raises(self, temp_db):
        with pytest.raises(NotFoundError):
            set_candidate_embedding("nobody", [1.0])

    def test_clear_embedding(self, temp_db):
        insert_candidates([make_test_candidate("u1", embedding=[1.0, 0.0])])

        clear_candidate_embedding("u1")

        assert get_candidate("u1").embedding is None
        assert count_candidates(with_embedding=True) == 0


class TestFindCandidates:
    @pytest.fixture
    def candidates(self, temp_db):
        insert_candidates([
            make_test_candidate("u1", name="Ann Lee", location="Berlin", embedding=[1.0, 0.0]),
            make_test_candidate("u2", name="Bob", bio="Python developer", location="Paris"),
            make_test_candidate("u3", name="Cara", location="Berlin", embedding=[0.0, 1.0]),
        ])

    def test_storage_order(self, candidates):
        assert [c.uid for c in find_candidates()] == ["u1", "u2", "u3"]

    def test_with_embedding_only(self, candidates):
        assert [c.uid for c in find_candidates(with_embedding=True)] == ["u1", "u3"]

    def test_filters_applied(self, candidates):
        result = find_candidates(filters=CandidateFilters(location="berlin"))
        assert [c.uid for c in result] == ["u1", "u3"]

    def test_query_matches_name_or_bio(self, candidates):
        assert [c.uid for c in find_candidates(query="lee")] == ["u1"]
        assert [c.uid for c in find_candidates(query="PYTHON")] == ["u2"]

    def test_query_without_match(self, candidates):
        assert find_candidates(query="rust") == []

    def test_limit(self, candidates):
        assert [c.uid for c in find_candidates(limit=2)] == ["u1", "u2"]

    def test_iter_is_lazy(self, candidates):
        iterator = iter_candidates()
        assert next(iterator).uid == "u1"
        iterator.close()

    def test_counts(self, candidates):
        assert count_candidates() == 3
        assert count_candidates(with_embedding=True) == 2
