from pydantic import BaseModel, Field


class Job(BaseModel):
    """A job post that candidates are ranked against."""

    uid: str = Field(description="Unique identifier for the job")
    title: str = Field(description="Job title")
    description: str = Field(default="", description="Free-text job description")
    requirements: list[str] = Field(default_factory=list, description="Listed requirements")
    benefits: list[str] = Field(default_factory=list, description="Listed benefits")
    skill_names: list[str] = Field(default_factory=list, description="Names of required skills")
    company_name: str | None = Field(default=None, description="Hiring company")
    category: str | None = Field(default=None, description="Job category name")
    experience_level: str | None = Field(default=None, description="Required experience level")
    job_type: str | None = Field(default=None, description="Full-time, part-time, contract, ...")
    location: str | None = Field(default=None, description="Job location")

    def build_query_text(self) -> str:
        """Build the text whose embedding represents this job.

        Deterministic in the job's fields: title, experience level, job type,
        skill names, requirements and description, skipping empty parts.
        """
        parts = [
            self.title,
            self.experience_level or "",
            self.job_type or "",
            " ".join(self.skill_names),
            " ".join(self.requirements),
            self.description,
        ]
        return "\n".join(part.strip() for part in parts if part and part.strip())

    def snapshot(self) -> "JobSnapshot":
        """Denormalize the facts stored alongside cached results."""
        return JobSnapshot(
            title=self.title,
            company=self.company_name or "N/A",
            description=self.description,
            requirements=list(self.requirements),
            skills=list(self.skill_names),
        )


class JobSnapshot(BaseModel):
    """Job facts captured at analysis time. Informational only."""

    title: str
    company: str = "N/A"
    description: str = ""
    requirements: list[str] = Field(default_factory=list)
    skills: list[str] = Field(default_factory=list)
