from talentmatch.schemas.job import Job

CV_ANALYSIS_PROMPT = """\
Analyse the attached CV and compare it with the job description below. \
Return the result in EXACTLY this JSON format:

{{
  "strengths": ["strengths of the CV that fit the job description", "..."],
  "weakness": ["weaknesses or gaps of the CV compared to the job description", "..."],
  "suggests": ["suggestions to improve the CV", "..."]
}}

Job Description:
{job_info}

Return only the JSON, with no other text.\
"""

JOB_INFO_TEMPLATE = """\
Position: {title} at {company}
Level: {experience_level}
Type: {job_type}

Required skills:
{skills}

Requirements:
{requirements}

Description:
{description}\
"""


def _bullets(items: list[str]) -> str:
    return "\n".join(f"- {item}" for item in items) if items else "N/A"


def build_analysis_prompt(job: Job) -> str:
    """Build the prompt asking for a CV-vs-job gap analysis."""
    job_info = JOB_INFO_TEMPLATE.format(
        title=job.title,
        company=job.company_name or "N/A",
        experience_level=job.experience_level or "N/A",
        job_type=job.job_type or "N/A",
        skills=_bullets(job.skill_names),
        requirements=_bullets(job.requirements),
        description=job.description or "N/A",
    )
    return CV_ANALYSIS_PROMPT.format(job_info=job_info)
