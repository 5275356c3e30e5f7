from pydantic import BaseModel, Field


class Experience(BaseModel):
    """A single work-history entry on a candidate profile."""

    title: str = Field(description="Job title held")
    company: str | None = Field(default=None, description="Employer name")
    start_date: str | None = Field(default=None, description="Start date (free-form)")
    end_date: str | None = Field(default=None, description="End date, empty if current")
    description: str | None = Field(default=None, description="What the candidate did")


class CandidateProfile(BaseModel):
    """A candidate's user profile as stored for matching."""

    uid: str = Field(description="Unique identifier of the user account")
    name: str = Field(description="Full name")
    email: str = Field(description="Contact email")
    phone: str | None = Field(default=None, description="Contact phone")
    location: str | None = Field(default=None, description="City/country the candidate lives in")
    bio: str | None = Field(default=None, description="Free-text self description")
    avatar_url: str | None = Field(default=None, description="Path to the avatar image")
    resume_url: str | None = Field(default=None, description="Path to the uploaded résumé")
    skill_ids: list[str] = Field(default_factory=list, description="Ids of the candidate's skills")
    experiences: list[Experience] = Field(default_factory=list, description="Work history")
    embedding: list[float] | None = Field(
        default=None,
        description="Résumé embedding; absent until a résumé has been processed",
    )


class CandidateFilters(BaseModel):
    """Structural filters shared by vector ranking and keyword search.

    All fields are optional; an empty filter set matches every candidate.
    """

    location: str | None = Field(default=None, description="Case-insensitive location substring")
    skill_ids: list[str] = Field(default_factory=list, description="Match candidates with any of these skills")
    experience_title: str | None = Field(default=None, description="Experience title substring")
    experience_company: str | None = Field(default=None, description="Experience company substring")

    def matches(self, candidate: CandidateProfile) -> bool:
        """Check whether a candidate satisfies every filter that is set."""
        if self.location:
            if not _contains(candidate.location, self.location):
                return False

        if self.skill_ids:
            if not set(self.skill_ids) & set(candidate.skill_ids):
                return False

        # Title and company are alternatives, not both required
        if self.experience_title or self.experience_company:
            if not any(
                (self.experience_title and _contains(exp.title, self.experience_title))
                or (self.experience_company and _contains(exp.company, self.experience_company))
                for exp in candidate.experiences
            ):
                return False

        return True


def _contains(value: str | None, needle: str) -> bool:
    """Case-insensitive substring test that treats None as empty."""
    return needle.lower() in (value or "").lower()
