"""Semantic ranking of candidates against a job or a free-text query.

The candidate pool is capped, split into fixed-size batches and scored on a
bounded thread pool, one task per batch, so a large pool never occupies
more than `max_workers` threads of the process.
"""

import logging
import threading
from collections.abc import Iterator
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime

import numpy as np

from talentmatch.config import (
    DEFAULT_PAGE,
    DEFAULT_PAGE_SIZE,
    MAX_CANDIDATE_POOL,
    MIN_SIMILARITY_SCORE,
    RANKING_BATCH_SIZE,
    RANKING_MAX_WORKERS,
    TOP_K_CANDIDATES,
)
from talentmatch.db.candidates import find_candidates
from talentmatch.db.jobs import get_job
from talentmatch.db.match_cache import (
    delete_match_result,
    get_match_result,
    upsert_match_result,
)
from talentmatch.embeddings.fastembed_client import EmbeddingProvider
from talentmatch.errors import ProviderError
from talentmatch.matching.fallback import keyword_search, list_candidates
from talentmatch.matching.pagination import paginate
from talentmatch.matching.similarity import compute_similarities_batch
from talentmatch.schemas.candidate import CandidateFilters, CandidateProfile
from talentmatch.schemas.job import Job
from talentmatch.schemas.match import CandidatePage, JobRanking, MatchResult, RankedCandidate

logger = logging.getLogger(__name__)


@dataclass
class _JobLock:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


@dataclass
class ScoredPool:
    """Outcome of scoring a candidate pool against one query vector."""

    candidates: list[RankedCandidate] = field(default_factory=list)
    pool_size: int = 0
    truncated: bool = False


class CandidateRanker:
    """Ranks candidates by cosine similarity of their résumé embeddings.

    Args:
        embedding_client: Provider used to embed job and query texts.
        max_pool: Maximum number of candidates scored per request.
        batch_size: Candidates scored per worker task.
        min_score: Scores at or below this value are dropped.
        top_k: Length of the ranking cached per job.
        max_workers: Upper bound on batches scored concurrently.
    """

    def __init__(
        self,
        embedding_client: EmbeddingProvider,
        max_pool: int = MAX_CANDIDATE_POOL,
        batch_size: int = RANKING_BATCH_SIZE,
        min_score: float = MIN_SIMILARITY_SCORE,
        top_k: int = TOP_K_CANDIDATES,
        max_workers: int = RANKING_MAX_WORKERS,
    ):
        if batch_size < 1 or max_workers < 1:
            raise ValueError("batch_size and max_workers must be >= 1")

        self.embedding_client = embedding_client
        self.max_pool = max_pool
        self.batch_size = batch_size
        self.min_score = min_score
        self.top_k = top_k
        self.max_workers = max_workers

        self._job_locks: dict[str, _JobLock] = {}
        self._locks_guard = threading.Lock()

    def rank(
        self,
        job_id: str,
        filters: CandidateFilters | None = None,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
        force_recompute: bool = False,
    ) -> JobRanking:
        """Rank candidates for a job, serving the cached ranking when present.

        A cached ranking is returned as is, whatever `filters` are passed.
        On a miss the top `top_k` candidates are computed and cached. If the
        job cannot be embedded or the pool cannot be scored, keyword search
        on the job title replaces the ranking and nothing is cached.

        Args:
            job_id: Job to rank candidates for.
            filters: Structural filters applied to the pool on a cache miss.
            page: 1-based page over the ranked list.
            page_size: Items per page.
            force_recompute: Ignore and overwrite any cached ranking.

        Returns:
            JobRanking with the page of candidates and cached/fallback flags.

        Raises:
            NotFoundError: If the job does not exist.
            ValueError: If page or page_size is less than 1.
        """
        _check_page(page, page_size)

        # Concurrent misses for the same job wait here and then hit the cache
        with self._job_lock(job_id):
            if not force_recompute:
                cached = get_match_result(job_id)
                if cached is not None:
                    logger.info(f"Serving cached ranking for job {job_id}")
                    # Display details come from the live job; the stored snapshot is a record only
                    job_details = get_job(job_id).snapshot()
                    items, pagination = paginate(cached.ranked_candidates, page, page_size)
                    return JobRanking(job=job_details, items=items, pagination=pagination, cached=True)

            logger.info(f"Computing ranking for job {job_id}")
            job = get_job(job_id)
            return self._compute_ranking(job, filters, page, page_size)

    def _compute_ranking(
        self,
        job: Job,
        filters: CandidateFilters | None,
        page: int,
        page_size: int,
    ) -> JobRanking:
        query_text = job.build_query_text()

        try:
            job_embedding = self.embedding_client.embed_text(query_text)
        except ProviderError as e:
            logger.warning(f"Embedding failed for job {job.uid}, falling back to keyword search: {e}")
            result = keyword_search(filters=filters, query=job.title, page=page, page_size=page_size)
            return JobRanking(job=job.snapshot(), **result.model_dump())

        try:
            scored = self.score_candidates(job_embedding, filters)
        except ValueError as e:
            logger.warning(f"Scoring failed for job {job.uid}, falling back to keyword search: {e}")
            result = keyword_search(filters=filters, query=job.title, page=page, page_size=page_size)
            return JobRanking(job=job.snapshot(), **result.model_dump())

        if scored.pool_size == 0:
            logger.info(f"No candidates with embeddings for job {job.uid}; nothing cached")
            items, pagination = paginate([], page, page_size)
            return JobRanking(job=job.snapshot(), items=items, pagination=pagination)

        top_candidates = scored.candidates[:self.top_k]
        upsert_match_result(
            MatchResult(
                job_uid=job.uid,
                query_text=query_text,
                job_embedding=job_embedding,
                ranked_candidates=top_candidates,
                analyzed_at=datetime.now(UTC),
                job_snapshot=job.snapshot(),
            )
        )
        logger.info(f"Cached {len(top_candidates)} ranked candidates for job {job.uid}")

        items, pagination = paginate(top_candidates, page, page_size)
        return JobRanking(
            job=job.snapshot(),
            items=items,
            pagination=pagination,
            cached=False,
            pool_truncated=scored.truncated,
        )

    def search(
        self,
        query: str | None,
        filters: CandidateFilters | None = None,
        page: int = DEFAULT_PAGE,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> CandidatePage:
        """Search candidates by semantic similarity to a free-text query.

        Every candidate above the threshold is paginated (no top-k cut) and
        nothing is cached. A blank query lists the filtered candidates in
        storage order. An embedding or scoring failure falls back to keyword
        search.

        Raises:
            ValueError: If page or page_size is less than 1.
        """
        _check_page(page, page_size)

        if not query or not query.strip():
            return list_candidates(filters=filters, page=page, page_size=page_size)

        try:
            query_embedding = self.embedding_client.embed_text(query)
        except ProviderError as e:
            logger.warning(f"Vector search failed, falling back to text search: {e}")
            return keyword_search(filters=filters, query=query, page=page, page_size=page_size)

        try:
            scored = self.score_candidates(query_embedding, filters)
        except ValueError as e:
            logger.warning(f"Vector scoring failed, falling back to text search: {e}")
            return keyword_search(filters=filters, query=query, page=page, page_size=page_size)

        items, pagination = paginate(scored.candidates, page, page_size)
        return CandidatePage(items=items, pagination=pagination, pool_truncated=scored.truncated)

    def invalidate(self, job_id: str) -> bool:
        """Drop the cached ranking for a job so the next rank recomputes it."""
        with self._job_lock(job_id):
            removed = delete_match_result(job_id)
        if removed:
            logger.info(f"Invalidated cached ranking for job {job_id}")
        return removed

    def score_candidates(
        self,
        query_embedding: list[float],
        filters: CandidateFilters | None = None,
    ) -> ScoredPool:
        """Score the filtered, capped candidate pool against a query vector.

        Candidates whose embedding length differs from the query, or whose
        embedding holds NaN or inf values, are skipped.

        Returns:
            ScoredPool with candidates above `min_score`, sorted by score
            descending (ties keep storage order).
        """
        pool = find_candidates(filters=filters, with_embedding=True, limit=self.max_pool + 1)
        truncated = len(pool) > self.max_pool
        if truncated:
            logger.warning(
                f"Candidate pool exceeds {self.max_pool}; "
                f"candidates past the cap are not scored"
            )
            pool = pool[:self.max_pool]

        if not pool:
            return ScoredPool()

        query_vector = np.asarray(query_embedding, dtype=float)
        batches = [pool[i:i + self.batch_size] for i in range(0, len(pool), self.batch_size)]

        scored: list[RankedCandidate] = []
        with ThreadPoolExecutor(
            max_workers=min(self.max_workers, len(batches)),
            thread_name_prefix="ranker",
        ) as executor:
            futures = [executor.submit(self._score_batch, query_vector, batch) for batch in batches]
            # Collect in submission order; the sort below decides the final order
            for index, future in enumerate(futures):
                batch_results = future.result()
                logger.debug(f"Batch {index + 1}/{len(batches)}: {len(batch_results)} above threshold")
                scored.extend(batch_results)

        scored.sort(key=lambda c: c.score, reverse=True)
        logger.info(f"Scored {len(pool)} candidates, {len(scored)} above {self.min_score}")

        return ScoredPool(candidates=scored, pool_size=len(pool), truncated=truncated)

    def _score_batch(
        self,
        query_vector: np.ndarray,
        batch: list[CandidateProfile],
    ) -> list[RankedCandidate]:
        dimension = query_vector.shape[0]
        valid = []
        rows = []
        for candidate in batch:
            if candidate.embedding is None or len(candidate.embedding) != dimension:
                logger.debug(f"Skipping candidate {candidate.uid}: embedding length mismatch")
                continue
            row = np.asarray(candidate.embedding, dtype=float)
            if not np.isfinite(row).all():
                logger.warning(f"Skipping candidate {candidate.uid}: embedding has NaN or inf values")
                continue
            valid.append(candidate)
            rows.append(row)

        if not valid:
            return []

        matrix = np.vstack(rows)
        similarities = compute_similarities_batch(query_vector, matrix)

        return [
            RankedCandidate.from_profile(candidate, score=float(score))
            for candidate, score in zip(valid, similarities)
            if score > self.min_score
        ]

    @contextmanager
    def _job_lock(self, job_id: str) -> Iterator[None]:
        with self._locks_guard:
            entry = self._job_locks.get(job_id)
            if entry is None:
                entry = self._job_locks[job_id] = _JobLock()
            entry.users += 1

        try:
            with entry.lock:
                yield
        finally:
            # The entry is dropped once no caller holds or waits for it
            with self._locks_guard:
                entry.users -= 1
                if entry.users == 0:
                    del self._job_locks[job_id]


def _check_page(page: int, page_size: int) -> None:
    if page < 1:
        raise ValueError(f"page must be >= 1, got {page}")
    if page_size < 1:
        raise ValueError(f"page_size must be >= 1, got {page_size}")
