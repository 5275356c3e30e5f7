"""Database access for jobs, candidates, cached rankings and analyses."""

from talentmatch.db.analyses import count_analyses, get_analysis, upsert_analysis
from talentmatch.db.candidates import (
    clear_candidate_embedding,
    count_candidates,
    find_candidates,
    get_candidate,
    insert_candidates,
    iter_candidates,
    set_candidate_embedding,
)
from talentmatch.db.connection import get_connection, init_tables
from talentmatch.db.jobs import get_all_jobs, get_job, insert_jobs
from talentmatch.db.match_cache import (
    delete_match_result,
    get_match_result,
    upsert_match_result,
)

__all__ = [
    "get_connection",
    "init_tables",
    "insert_jobs",
    "get_job",
    "get_all_jobs",
    "insert_candidates",
    "get_candidate",
    "set_candidate_embedding",
    "clear_candidate_embedding",
    "iter_candidates",
    "find_candidates",
    "count_candidates",
    "get_match_result",
    "upsert_match_result",
    "delete_match_result",
    "upsert_analysis",
    "get_analysis",
    "count_analyses",
]
