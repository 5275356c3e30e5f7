from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from talentmatch.schemas.job import JobSnapshot


class CVAnalysis(BaseModel):
    """Gap analysis of a résumé against a job."""

    strengths: list[str] = Field(default_factory=list, description="Where the résumé fits the job")
    weaknesses: list[str] = Field(default_factory=list, description="Gaps compared to the job")
    suggestions: list[str] = Field(default_factory=list, description="How to improve the résumé")


class LLMAnalysisOutput(BaseModel):
    """Schema the chat provider is asked to return.

    Field names follow the prompt's JSON keys (`weakness`, `suggests`).
    """

    model_config = ConfigDict(extra="ignore")

    strengths: list[str] = Field(default_factory=list)
    weakness: list[str] = Field(default_factory=list)
    suggests: list[str] = Field(default_factory=list)

    @field_validator("strengths", "weakness", "suggests", mode="before")
    @classmethod
    def _null_as_empty(cls, value):
        return [] if value is None else value

    def to_analysis(self) -> CVAnalysis:
        return CVAnalysis(
            strengths=self.strengths,
            weaknesses=self.weakness,
            suggestions=self.suggests,
        )


class AnalysisResult(BaseModel):
    """Persisted analysis, unique per (user, job) pair."""

    user_id: str
    job_uid: str
    resume_url: str
    analysis: CVAnalysis
    resume_text_preview: str = ""
    job_snapshot: JobSnapshot | None = None
    fallback: bool = False
    analyzed_at: datetime


class OptimizeCVResult(BaseModel):
    """Response of the optimize-résumé operation."""

    resume_text_preview: str
    job: JobSnapshot
    analysis: CVAnalysis
    cached: bool = False
    fallback: bool = Field(default=False, description="True when the analysis is degraded")
