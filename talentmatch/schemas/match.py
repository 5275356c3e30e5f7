from datetime import datetime

from pydantic import BaseModel, Field

from talentmatch.schemas.candidate import CandidateProfile
from talentmatch.schemas.job import JobSnapshot


class RankedCandidate(BaseModel):
    """A candidate with the display fields denormalized into a ranking."""

    user_id: str = Field(description="Candidate's user id")
    name: str
    email: str
    phone: str | None = None
    location: str | None = None
    bio: str | None = None
    avatar_url: str | None = None
    resume_url: str | None = None
    score: float | None = Field(
        default=None,
        description="Cosine similarity to the query; None for keyword-search results",
    )

    @classmethod
    def from_profile(cls, profile: CandidateProfile, score: float | None = None) -> "RankedCandidate":
        return cls(
            user_id=profile.uid,
            name=profile.name,
            email=profile.email,
            phone=profile.phone,
            location=profile.location,
            bio=profile.bio,
            avatar_url=profile.avatar_url,
            resume_url=profile.resume_url,
            score=score,
        )


class MatchResult(BaseModel):
    """Cached ranking of candidates for one job. At most one per job."""

    job_uid: str = Field(description="Job the ranking was computed for")
    query_text: str = Field(default="", description="Text that was embedded for the job")
    job_embedding: list[float] = Field(description="Embedding of the job's query text")
    ranked_candidates: list[RankedCandidate] = Field(
        description="Top candidates ordered by score descending"
    )
    analyzed_at: datetime = Field(description="When the ranking was computed")
    job_snapshot: JobSnapshot | None = Field(default=None, description="Job facts at analysis time")


class Pagination(BaseModel):
    """Page metadata returned with every list response."""

    current_page: int
    page_size: int
    total_pages: int
    total_items: int
    has_next_page: bool
    has_previous_page: bool


class CandidatePage(BaseModel):
    """A page of candidates from search or ranking."""

    items: list[RankedCandidate]
    pagination: Pagination
    cached: bool = False
    fallback: bool = Field(default=False, description="True when keyword search replaced vector ranking")
    pool_truncated: bool = Field(default=False, description="True when the pool hit the size cap")

    @property
    def total_items(self) -> int:
        return self.pagination.total_items


class JobRanking(CandidatePage):
    """Ranking response for a job, with the job's display details."""

    job: JobSnapshot
