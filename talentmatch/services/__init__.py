"""Service layer for talentmatch request-level operations."""

from talentmatch.services.match_service import (
    invalidate_job_ranking,
    optimize_resume,
    rank_candidates,
    search_candidates,
)
from talentmatch.services.profile_service import update_candidate_embedding

__all__ = [
    "rank_candidates",
    "search_candidates",
    "invalidate_job_ranking",
    "optimize_resume",
    "update_candidate_embedding",
]
