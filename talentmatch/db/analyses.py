"""Résumé analysis storage, one row per (user, job) pair."""

import json

from talentmatch.db.connection import get_connection, load_json
from talentmatch.schemas.analysis import AnalysisResult, CVAnalysis


def upsert_analysis(result: AnalysisResult) -> None:
    """Insert or replace the analysis for a (user, job) pair."""
    snapshot_json = result.job_snapshot.model_dump_json() if result.job_snapshot else None

    with get_connection() as db:
        cursor = db.cursor()
        ph = db.placeholder
        cursor.execute(
            f"""
            INSERT INTO cv_analyses (
                user_id, job_uid, resume_url, strengths, weaknesses, suggestions,
                resume_text_preview, job_snapshot, fallback, analyzed_at
            ) VALUES ({", ".join([ph] * 10)})
            ON CONFLICT (user_id, job_uid) DO UPDATE SET
                resume_url = excluded.resume_url,
                strengths = excluded.strengths,
                weaknesses = excluded.weaknesses,
                suggestions = excluded.suggestions,
                resume_text_preview = excluded.resume_text_preview,
                job_snapshot = excluded.job_snapshot,
                fallback = excluded.fallback,
                analyzed_at = excluded.analyzed_at
            """,
            (
                result.user_id,
                result.job_uid,
                result.resume_url,
                json.dumps(result.analysis.strengths),
                json.dumps(result.analysis.weaknesses),
                json.dumps(result.analysis.suggestions),
                result.resume_text_preview,
                snapshot_json,
                result.fallback,
                result.analyzed_at.isoformat(),
            ),
        )
        db.commit()


def get_analysis(user_id: str, job_uid: str) -> AnalysisResult | None:
    """Retrieve the stored analysis for a (user, job) pair."""
    with get_connection() as db:
        cursor = db.cursor(dictionary=True)
        ph = db.placeholder
        cursor.execute(
            f"SELECT * FROM cv_analyses WHERE user_id = {ph} AND job_uid = {ph}",
            (user_id, job_uid),
        )
        row = cursor.fetchone()

    if row is None:
        return None

    return AnalysisResult(
        user_id=row["user_id"],
        job_uid=row["job_uid"],
        resume_url=row["resume_url"],
        analysis=CVAnalysis(
            strengths=load_json(row["strengths"]),
            weaknesses=load_json(row["weaknesses"]),
            suggestions=load_json(row["suggestions"]),
        ),
        resume_text_preview=row["resume_text_preview"] or "",
        job_snapshot=load_json(row["job_snapshot"]),
        fallback=bool(row["fallback"]),
        analyzed_at=row["analyzed_at"],
    )


def count_analyses() -> int:
    """Count stored résumé analyses."""
    with get_connection() as db:
        cursor = db.cursor()
        cursor.execute("SELECT COUNT(*) FROM cv_analyses")
        return cursor.fetchone()[0]
