"""Tests for the request-level matching operations."""

from unittest.mock import patch

from talentmatch.analysis.pipeline import ResumeAnalysisPipeline
from talentmatch.db.candidates import insert_candidates
from talentmatch.db.jobs import insert_jobs
from talentmatch.matching.ranker import CandidateRanker
from talentmatch.services import match_service
from talentmatch.services.match_service import (
    get_default_ranker,
    invalidate_job_ranking,
    optimize_resume,
    rank_candidates,
    search_candidates,
)
from tests.test_utils import (
    FakeDocumentClient,
    FakeEmbeddingClient,
    create_pdf,
    make_test_candidate,
    make_test_job,
    vector_with_similarity,
)


def _seed():
    insert_jobs([make_test_job("job-1")])
    insert_candidates([
        make_test_candidate("u0", embedding=vector_with_similarity(0.9)),
        make_test_candidate("u1", embedding=vector_with_similarity(0.4)),
    ])


class TestRankCandidates:
    def test_rank_then_cached(self, temp_db):
        _seed()
        ranker = CandidateRanker(FakeEmbeddingClient())

        first = rank_candidates("job-1", ranker=ranker)
        second = rank_candidates("job-1", ranker=ranker)

        assert [c.user_id for c in first.items] == ["u0", "u1"]
        assert first.cached is False
        assert second.cached is True

    def test_invalidate(self, temp_db):
        _seed()
        ranker = CandidateRanker(FakeEmbeddingClient())
        rank_candidates("job-1", ranker=ranker)

        assert invalidate_job_ranking("job-1", ranker=ranker) is True
        assert rank_candidates("job-1", ranker=ranker).cached is False


class TestSearchCandidates:
    def test_search(self, temp_db):
        _seed()

        result = search_candidates("backend", ranker=CandidateRanker(FakeEmbeddingClient()))

        assert [c.user_id for c in result.items] == ["u0", "u1"]
        assert result.pagination.total_items == 2


class TestOptimizeResume:
    def test_uses_given_pipeline(self, temp_db, assets_dir):
        _seed()
        create_pdf(assets_dir / "cv.pdf", "Jane Doe")
        pipeline = ResumeAnalysisPipeline(
            FakeDocumentClient(response='{"strengths": ["a"], "weakness": [], "suggests": []}'),
            assets_dir=assets_dir,
        )

        result = optimize_resume("u0", "cv.pdf", "job-1", pipeline=pipeline)

        assert result.analysis.strengths == ["a"]
        assert result.fallback is False


class TestDefaults:
    def test_default_ranker_is_shared(self):
        with (
            patch.object(match_service, "_default_ranker", None),
            patch("talentmatch.services.match_service.FastEmbedClient") as mock_client_class,
        ):
            first = get_default_ranker()
            second = get_default_ranker()

        assert first is second
        mock_client_class.assert_called_once()
