"""Tests for keeping candidate embeddings in sync with résumés."""

import pytest

from talentmatch.db.candidates import get_candidate, insert_candidates
from talentmatch.errors import NotFoundError, ProviderError
from talentmatch.services.profile_service import update_candidate_embedding
from tests.test_utils import FakeEmbeddingClient, create_pdf, make_test_candidate


@pytest.fixture
def candidate(temp_db):
    insert_candidates([make_test_candidate("u1", embedding=[0.0, 1.0])])


class TestUpdateCandidateEmbedding:
    def test_embeds_resume_text(self, candidate, assets_dir):
        create_pdf(assets_dir / "users" / "u1" / "cv.pdf", "Jane Doe\nRust engineer")
        client = FakeEmbeddingClient(vector=[0.6, 0.8])

        updated = update_candidate_embedding("u1", "/users/u1/cv.pdf", client, assets_dir=assets_dir)

        assert updated is True
        assert get_candidate("u1").embedding == [0.6, 0.8]
        assert "Rust engineer" in client.calls[0]

    def test_missing_candidate_raises(self, temp_db, assets_dir):
        create_pdf(assets_dir / "cv.pdf", "Jane Doe")

        with pytest.raises(NotFoundError):
            update_candidate_embedding("nobody", "cv.pdf", FakeEmbeddingClient(), assets_dir=assets_dir)

    def test_missing_resume_keeps_old_embedding(self, candidate, assets_dir):
        updated = update_candidate_embedding("u1", "missing.pdf", FakeEmbeddingClient(), assets_dir=assets_dir)

        assert updated is False
        assert get_candidate("u1").embedding == [0.0, 1.0]

    def test_unreadable_pdf_keeps_old_embedding(self, candidate, assets_dir):
        (assets_dir / "broken.pdf").write_bytes(b"garbage")

        updated = update_candidate_embedding("u1", "broken.pdf", FakeEmbeddingClient(), assets_dir=assets_dir)

        assert updated is False
        assert get_candidate("u1").embedding == [0.0, 1.0]

    def test_provider_failure_keeps_old_embedding(self, candidate, assets_dir):
        create_pdf(assets_dir / "cv.pdf", "Jane Doe")
        client = FakeEmbeddingClient(error=ProviderError("model unavailable"))

        updated = update_candidate_embedding("u1", "cv.pdf", client, assets_dir=assets_dir)

        assert updated is False
        assert get_candidate("u1").embedding == [0.0, 1.0]
