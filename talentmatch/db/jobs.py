"""Job post database operations."""

import json

from talentmatch.db.connection import get_connection, load_json
from talentmatch.errors import NotFoundError
from talentmatch.schemas.job import Job

_JSON_LIST_FIELDS = ("requirements", "benefits", "skill_names")


def insert_jobs(jobs: list[Job]) -> int:
    """Insert jobs into the database.

    Args:
        jobs: List of Job objects to insert.

    Returns:
        Number of jobs inserted (excludes duplicates).
    """
    inserted = 0

    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder

        for job in jobs:
            cursor.execute(
                f"""
                INSERT INTO jobs (
                    uid, title, description, requirements, benefits, skill_names,
                    company_name, category, experience_level, job_type, location
                ) VALUES ({", ".join([ph] * 11)})
                ON CONFLICT (uid) DO NOTHING
                """,
                (
                    job.uid, job.title, job.description,
                    json.dumps(job.requirements), json.dumps(job.benefits),
                    json.dumps(job.skill_names), job.company_name, job.category,
                    job.experience_level, job.job_type, job.location,
                ),
            )
            # Existing jobs are skipped, not updated
            inserted += cursor.rowcount

        db.commit()

    return inserted


def get_job(uid: str) -> Job:
    """Retrieve a job by UID.

    Raises:
        NotFoundError: If no job has this UID.
    """
    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        cursor.execute(f"SELECT * FROM jobs WHERE uid = {db.placeholder}", (uid,))
        row = cursor.fetchone()

    if row is None:
        raise NotFoundError(f"Job not found: {uid}")

    return _row_to_job(row)


def get_all_jobs() -> list[Job]:
    """Retrieve all jobs from the database."""
    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        cursor.execute("SELECT * FROM jobs ORDER BY created_at, uid")
        rows = cursor.fetchall()

    return [_row_to_job(row) for row in rows]


def _row_to_job(row) -> Job:
    data = dict(row)
    data.pop("created_at", None)
    for field in _JSON_LIST_FIELDS:
        data[field] = load_json(data.get(field)) or []
    data["description"] = data.get("description") or ""
    return Job(**data)
