"""Candidate profile and embedding storage.

Candidates are returned in storage order (insertion order). Structural
filters are evaluated in Python with CandidateFilters.matches so SQLite and
PostgreSQL behave identically.
"""

import json
import logging
from collections.abc import Iterator
from datetime import UTC, datetime

from talentmatch.db.connection import get_connection, load_json
from talentmatch.errors import NotFoundError
from talentmatch.schemas.candidate import CandidateFilters, CandidateProfile

logger = logging.getLogger(__name__)

_FETCH_SIZE = 200


def insert_candidates(profiles: list[CandidateProfile]) -> int:
    """Insert candidate profiles into the database.

    Args:
        profiles: Candidate profiles to insert.

    Returns:
        Number of candidates inserted (excludes duplicates).
    """
    inserted = 0

    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder
        now = datetime.now(UTC).isoformat()

        for profile in profiles:
            embedding_json = json.dumps(profile.embedding) if profile.embedding else None
            cursor.execute(
                f"""
                INSERT INTO candidates (
                    uid, name, email, phone, location, bio, avatar_url, resume_url,
                    skill_ids, experiences, embedding, embedded_at
                ) VALUES ({", ".join([ph] * 12)})
                ON CONFLICT (uid) DO NOTHING
                """,
                (
                    profile.uid, profile.name, profile.email, profile.phone,
                    profile.location, profile.bio, profile.avatar_url, profile.resume_url,
                    json.dumps(profile.skill_ids),
                    json.dumps([exp.model_dump() for exp in profile.experiences]),
                    embedding_json,
                    now if embedding_json else None,
                ),
            )
            inserted += cursor.rowcount

        db.commit()

    return inserted


def get_candidate(uid: str) -> CandidateProfile:
    """Retrieve a candidate by user id.

    Raises:
        NotFoundError: If no candidate has this id.
    """
    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        cursor.execute(f"SELECT * FROM candidates WHERE uid = {db.placeholder}", (uid,))
        row = cursor.fetchone()

    if row is None:
        raise NotFoundError(f"Candidate not found: {uid}")

    return _row_to_candidate(row)


def set_candidate_embedding(uid: str, embedding: list[float]) -> None:
    """Replace a candidate's embedding.

    The whole vector is written in a single UPDATE; readers see either the
    previous or the new embedding.

    Raises:
        NotFoundError: If no candidate has this id.
    """
    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder
        cursor.execute(
            f"UPDATE candidates SET embedding = {ph}, embedded_at = {ph} WHERE uid = {ph}",
            (json.dumps(embedding), datetime.now(UTC).isoformat(), uid),
        )
        updated = cursor.rowcount
        db.commit()

    if updated == 0:
        raise NotFoundError(f"Candidate not found: {uid}")


def clear_candidate_embedding(uid: str) -> None:
    """Remove a candidate's embedding so they drop out of vector ranking."""
    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder
        cursor.execute(
            f"UPDATE candidates SET embedding = NULL, embedded_at = NULL WHERE uid = {ph}",
            (uid,),
        )
        db.commit()


def iter_candidates(
    filters: CandidateFilters | None = None,
    with_embedding: bool = False,
    query: str | None = None,
) -> Iterator[CandidateProfile]:
    """Yield candidates in storage order that satisfy the given criteria.

    Args:
        filters: Structural filters (location, skills, experience).
        with_embedding: Only yield candidates that have a non-empty embedding.
        query: If set, name or bio must contain it (case-insensitive).

    Yields:
        Matching CandidateProfile objects.
    """
    filters = filters or CandidateFilters()
    needle = query.strip().lower() if query else None

    sql = "SELECT * FROM candidates"
    if with_embedding:
        sql += " WHERE embedding IS NOT NULL"
    sql += " ORDER BY seq"

    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        cursor.execute(sql)

        while True:
            rows = cursor.fetchmany(_FETCH_SIZE)
            if not rows:
                break

            for row in rows:
                candidate = _row_to_candidate(row)
                if with_embedding and not candidate.embedding:
                    continue
                if needle and not _matches_query(candidate, needle):
                    continue
                if not filters.matches(candidate):
                    continue
                yield candidate


def find_candidates(
    filters: CandidateFilters | None = None,
    with_embedding: bool = False,
    query: str | None = None,
    limit: int | None = None,
) -> list[CandidateProfile]:
    """Collect matching candidates, stopping after `limit` of them.

    See iter_candidates for the matching rules.
    """
    results = []
    candidates = iter_candidates(filters=filters, with_embedding=with_embedding, query=query)
    try:
        for candidate in candidates:
            results.append(candidate)
            if limit is not None and len(results) >= limit:
                break
    finally:
        candidates.close()

    return results


def count_candidates(with_embedding: bool = False) -> int:
    """Count stored candidates, optionally only those with an embedding."""
    sql = "SELECT COUNT(*) FROM candidates"
    if with_embedding:
        sql += " WHERE embedding IS NOT NULL"

    with get_connection() as db:
        cursor = db.cursor()
        cursor.execute(sql)
        return cursor.fetchone()[0]


def _matches_query(candidate: CandidateProfile, needle: str) -> bool:
    return needle in candidate.name.lower() or needle in (candidate.bio or "").lower()


def _row_to_candidate(row) -> CandidateProfile:
    data = dict(row)
    for column in ("seq", "created_at", "embedded_at"):
        data.pop(column, None)

    data["skill_ids"] = load_json(data.get("skill_ids")) or []
    data["experiences"] = load_json(data.get("experiences")) or []
    data["embedding"] = load_json(data.get("embedding")) or None
    return CandidateProfile(**data)
