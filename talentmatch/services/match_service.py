"""Request-level matching operations.

The web layer calls these functions. Each accepts an explicit ranker or
pipeline; without one, a process-wide default backed by fastembed and
Groq is created on first use so per-job locks are shared across requests.
"""

import logging

from talentmatch.analysis.pipeline import ResumeAnalysisPipeline
from talentmatch.config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from talentmatch.embeddings import FastEmbedClient, GroqDocumentClient
from talentmatch.matching.ranker import CandidateRanker
from talentmatch.schemas.analysis import OptimizeCVResult
from talentmatch.schemas.candidate import CandidateFilters
from talentmatch.schemas.match import CandidatePage, JobRanking

logger = logging.getLogger(__name__)

_default_ranker: CandidateRanker | None = None
_default_pipeline: ResumeAnalysisPipeline | None = None


def get_default_ranker() -> CandidateRanker:
    """Get the shared ranker backed by the fastembed client."""
    global _default_ranker
    if _default_ranker is None:
        _default_ranker = CandidateRanker(embedding_client=FastEmbedClient())
    return _default_ranker


def get_default_pipeline() -> ResumeAnalysisPipeline:
    """Get the shared résumé analysis pipeline backed by Groq."""
    global _default_pipeline
    if _default_pipeline is None:
        _default_pipeline = ResumeAnalysisPipeline(document_client=GroqDocumentClient())
    return _default_pipeline


def rank_candidates(
    job_id: str,
    filters: CandidateFilters | None = None,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
    force_recompute: bool = False,
    ranker: CandidateRanker | None = None,
) -> JobRanking:
    """Rank candidates for a job (cached per job).

    Raises:
        NotFoundError: If the job does not exist.
        ValueError: If page or page_size is less than 1.
    """
    ranker = ranker or get_default_ranker()
    result = ranker.rank(
        job_id,
        filters=filters,
        page=page,
        page_size=page_size,
        force_recompute=force_recompute,
    )
    logger.info(
        f"Ranked job {job_id}: {result.pagination.total_items} candidates "
        f"(cached={result.cached}, fallback={result.fallback})"
    )
    return result


def search_candidates(
    query: str | None = None,
    filters: CandidateFilters | None = None,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
    ranker: CandidateRanker | None = None,
) -> CandidatePage:
    """Search candidates by a free-text query and structural filters."""
    ranker = ranker or get_default_ranker()
    return ranker.search(query, filters=filters, page=page, page_size=page_size)


def invalidate_job_ranking(job_id: str, ranker: CandidateRanker | None = None) -> bool:
    """Drop a job's cached ranking. Returns True if one existed."""
    ranker = ranker or get_default_ranker()
    return ranker.invalidate(job_id)


def optimize_resume(
    user_id: str,
    resume_ref: str,
    job_id: str,
    pipeline: ResumeAnalysisPipeline | None = None,
) -> OptimizeCVResult:
    """Analyse a user's résumé against a job and store the analysis.

    Raises:
        NotFoundError: If the résumé file or the job does not exist.
    """
    pipeline = pipeline or get_default_pipeline()
    return pipeline.analyze(user_id, resume_ref, job_id)
