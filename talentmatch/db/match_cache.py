"""Match cache: the latest candidate ranking per job.

There is no expiry. An entry lives until it is overwritten by a recompute
or removed with delete_match_result.
"""

import json

from talentmatch.db.connection import get_connection, load_json
from talentmatch.schemas.match import MatchResult


def get_match_result(job_uid: str) -> MatchResult | None:
    """Retrieve the cached ranking for a job.

    Args:
        job_uid: Job the ranking was computed for.

    Returns:
        MatchResult if cached, None otherwise.
    """
    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        cursor.execute(
            f"SELECT * FROM match_results WHERE job_uid = {db.placeholder}",
            (job_uid,),
        )
        row = cursor.fetchone()

    if row is None:
        return None

    return MatchResult(
        job_uid=row["job_uid"],
        query_text=row["query_text"] or "",
        job_embedding=load_json(row["job_embedding"]),
        ranked_candidates=load_json(row["ranked_candidates"]),
        analyzed_at=row["analyzed_at"],
        job_snapshot=load_json(row["job_snapshot"]),
    )


def upsert_match_result(result: MatchResult) -> None:
    """Insert or wholesale replace the cached ranking for a job.

    Last write wins; nothing from a previous entry is merged.
    """
    snapshot_json = result.job_snapshot.model_dump_json() if result.job_snapshot else None
    ranked_json = json.dumps([c.model_dump(mode="json") for c in result.ranked_candidates])

    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder
        cursor.execute(
            f"""
            INSERT INTO match_results (
                job_uid, query_text, job_embedding, ranked_candidates, analyzed_at, job_snapshot
            ) VALUES ({ph}, {ph}, {ph}, {ph}, {ph}, {ph})
            ON CONFLICT (job_uid) DO UPDATE SET
                query_text = excluded.query_text,
                job_embedding = excluded.job_embedding,
                ranked_candidates = excluded.ranked_candidates,
                analyzed_at = excluded.analyzed_at,
                job_snapshot = excluded.job_snapshot
            """,
            (
                result.job_uid,
                result.query_text,
                json.dumps(result.job_embedding),
                ranked_json,
                result.analyzed_at.isoformat(),
                snapshot_json,
            ),
        )
        db.commit()


def delete_match_result(job_uid: str) -> bool:
    """Remove the cached ranking for a job.

    Returns:
        True if an entry was removed.
    """
    with get_connection() as db:
        cursor = db.cursor()
        cursor.execute(
            f"DELETE FROM match_results WHERE job_uid = {db.placeholder}",
            (job_uid,),
        )
        deleted = cursor.rowcount
        db.commit()

    return deleted > 0
