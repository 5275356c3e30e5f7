"""Keyword search over candidate name and bio.

Used when vector ranking is unavailable. Results carry no score and keep
storage order.
"""

import logging

from talentmatch.config import DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from talentmatch.db.candidates import find_candidates
from talentmatch.matching.pagination import paginate
from talentmatch.schemas.candidate import CandidateFilters
from talentmatch.schemas.match import CandidatePage, RankedCandidate

logger = logging.getLogger(__name__)


def keyword_search(
    filters: CandidateFilters | None = None,
    query: str | None = None,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> CandidatePage:
    """Find candidates whose name or bio contains `query`.

    The structural filters apply as well. No results is an empty page,
    never an error.

    Args:
        filters: Structural filters (location, skills, experience).
        query: Case-insensitive substring to look for in name or bio.
        page: 1-based page number.
        page_size: Items per page.

    Returns:
        CandidatePage with unscored items and fallback=True.
    """
    query = query.strip() if query else None
    candidates = find_candidates(filters=filters, query=query)
    logger.info(f"Keyword search for {query!r} matched {len(candidates)} candidates")

    return _to_page(candidates, page, page_size, fallback=True)


def list_candidates(
    filters: CandidateFilters | None = None,
    page: int = DEFAULT_PAGE,
    page_size: int = DEFAULT_PAGE_SIZE,
) -> CandidatePage:
    """List candidates matching the structural filters, in storage order."""
    candidates = find_candidates(filters=filters)
    return _to_page(candidates, page, page_size, fallback=False)


def _to_page(candidates, page: int, page_size: int, fallback: bool) -> CandidatePage:
    ranked = [RankedCandidate.from_profile(candidate) for candidate in candidates]
    items, pagination = paginate(ranked, page, page_size)
    return CandidatePage(items=items, pagination=pagination, cached=False, fallback=fallback)
