"""Keeps candidate embeddings in sync with uploaded résumés."""

import logging
from pathlib import Path

from talentmatch.cv.extractor import extract_text_from_pdf, resolve_resume_path
from talentmatch.db.candidates import get_candidate, set_candidate_embedding
from talentmatch.embeddings.fastembed_client import EmbeddingProvider
from talentmatch.errors import NotFoundError, ProviderError

logger = logging.getLogger(__name__)


def update_candidate_embedding(
    user_id: str,
    resume_ref: str,
    embedding_client: EmbeddingProvider,
    assets_dir: Path | None = None,
) -> bool:
    """Embed a candidate's résumé and replace their stored embedding.

    Called after a résumé upload. Extraction and embedding failures are
    logged and reported as False so the upload itself still succeeds.

    Args:
        user_id: Candidate whose embedding is replaced.
        resume_ref: Stored résumé path, relative to the assets directory.
        embedding_client: Provider used to embed the résumé text.
        assets_dir: Override for the assets directory.

    Returns:
        True if the embedding was updated.

    Raises:
        NotFoundError: If the candidate does not exist.
    """
    get_candidate(user_id)

    try:
        resume_path = resolve_resume_path(resume_ref, assets_dir)
        resume_text = extract_text_from_pdf(resume_path)
        embedding = embedding_client.embed_text(resume_text)
    except (NotFoundError, ValueError, ProviderError) as e:
        logger.warning(f"Failed to update embedding for user {user_id}: {e}")
        return False

    set_candidate_embedding(user_id, embedding)
    logger.info(f"Updated embedding for user {user_id} ({len(embedding)} dims)")
    return True
