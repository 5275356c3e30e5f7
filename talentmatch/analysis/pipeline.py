"""Résumé-vs-job gap analysis.

Provider and parsing failures never fail the request: they degrade to a
fixed-shape analysis and the result is flagged as a fallback.
"""

import logging
from datetime import UTC, datetime
from pathlib import Path

from talentmatch.analysis.parser import parse_analysis_response
from talentmatch.analysis.prompt import build_analysis_prompt
from talentmatch.config import RESUME_PREVIEW_CHARS
from talentmatch.cv.extractor import extract_text_from_pdf, resolve_resume_path
from talentmatch.db.analyses import upsert_analysis
from talentmatch.db.jobs import get_job
from talentmatch.embeddings.document_client import DocumentAnalyzer
from talentmatch.errors import ProviderError
from talentmatch.schemas.analysis import AnalysisResult, CVAnalysis, OptimizeCVResult

logger = logging.getLogger(__name__)

ANALYSIS_UNAVAILABLE_MESSAGE = (
    "AI analysis is currently unavailable. Please try again later."
)


class ResumeAnalysisPipeline:
    """Compares a stored résumé with a job through a chat provider."""

    def __init__(self, document_client: DocumentAnalyzer, assets_dir: Path | None = None):
        self.document_client = document_client
        self.assets_dir = assets_dir

    def analyze(self, user_id: str, resume_ref: str, job_id: str) -> OptimizeCVResult:
        """Analyse a résumé against a job and store the result.

        Args:
            user_id: Owner of the résumé.
            resume_ref: Stored résumé path, relative to the assets directory.
            job_id: Job to compare against.

        Returns:
            OptimizeCVResult with the analysis and a fallback flag.

        Raises:
            NotFoundError: If the résumé file or the job does not exist.
            ValueError: If the résumé is not a readable PDF.
        """
        resume_path = resolve_resume_path(resume_ref, self.assets_dir)
        job = get_job(job_id)

        resume_text = extract_text_from_pdf(resume_path)
        prompt = build_analysis_prompt(job)

        analysis, fallback = self._request_analysis(resume_text, prompt)

        preview = resume_text[:RESUME_PREVIEW_CHARS]
        snapshot = job.snapshot()
        upsert_analysis(
            AnalysisResult(
                user_id=user_id,
                job_uid=job.uid,
                resume_url=resume_ref,
                analysis=analysis,
                resume_text_preview=preview,
                job_snapshot=snapshot,
                fallback=fallback,
                analyzed_at=datetime.now(UTC),
            )
        )
        logger.info(f"Stored résumé analysis for user {user_id} and job {job.uid} (fallback={fallback})")

        return OptimizeCVResult(
            resume_text_preview=preview,
            job=snapshot,
            analysis=analysis,
            cached=False,
            fallback=fallback,
        )

    def _request_analysis(self, resume_text: str, prompt: str) -> tuple[CVAnalysis, bool]:
        try:
            session_id = self.document_client.open_session(resume_text)
        except ProviderError as e:
            logger.warning(f"Could not open analysis session: {e}")
            return _unavailable_analysis(), True

        try:
            raw_response = self.document_client.analyze(session_id, prompt)
        except ProviderError as e:
            logger.warning(f"Résumé analysis failed: {e}")
            return _unavailable_analysis(), True
        finally:
            self._close_session(session_id)

        return parse_analysis_response(raw_response)

    def _close_session(self, session_id: str) -> None:
        try:
            self.document_client.close_session(session_id)
        except ProviderError as e:
            logger.warning(f"Failed to close analysis session {session_id}: {e}")


def _unavailable_analysis() -> CVAnalysis:
    return CVAnalysis(strengths=[], weaknesses=[], suggestions=[ANALYSIS_UNAVAILABLE_MESSAGE])
