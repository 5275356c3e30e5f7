"""talentmatch CLI - semantic candidate matching for job posts."""

import json
import logging
import sys
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from talentmatch.config import DATABASE_URL, DB_PATH, DEFAULT_PAGE, DEFAULT_PAGE_SIZE
from talentmatch.db.analyses import count_analyses
from talentmatch.db.candidates import count_candidates, insert_candidates
from talentmatch.db.connection import init_tables
from talentmatch.db.jobs import get_all_jobs, insert_jobs
from talentmatch.embeddings import FastEmbedClient
from talentmatch.errors import NotFoundError
from talentmatch.schemas.analysis import OptimizeCVResult
from talentmatch.schemas.candidate import CandidateFilters, CandidateProfile
from talentmatch.schemas.job import Job
from talentmatch.schemas.match import CandidatePage, JobRanking
from talentmatch.services.match_service import (
    invalidate_job_ranking,
    optimize_resume,
    rank_candidates,
    search_candidates,
)
from talentmatch.services.profile_service import update_candidate_embedding
from talentmatch.utils import LLMConfigurationError, check_llm_configured

app = typer.Typer(help="talentmatch - rank candidates for job posts by résumé similarity")
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logs"),
) -> None:
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


@app.command(name="init-db")
def init_db() -> None:
    """Create database tables if they don't exist."""
    try:
        init_tables()
        console.print("[bold green]Database initialized.[/bold green]")
    except Exception as e:
        console.print(f"[red]Error initializing database: {escape(str(e))}[/red]")
        raise typer.Exit(1)


@app.command(name="import-jobs")
def import_jobs(
    jobs_file: Path = typer.Option(..., "--file", "-f", help="Path to jobs JSON file"),
) -> None:
    """Import job posts from a JSON array of job objects."""
    records = _load_json_array(jobs_file)

    try:
        jobs = [Job(**record) for record in records]
        init_tables()
        count = insert_jobs(jobs)
    except ValidationError as e:
        console.print(f"[red]Invalid job record: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error importing jobs: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(f"[bold green]Imported {count} of {len(jobs)} jobs from {jobs_file}[/bold green]")


@app.command(name="import-candidates")
def import_candidates(
    candidates_file: Path = typer.Option(
        ..., "--file", "-f", help="Path to candidates JSON file"
    ),
) -> None:
    """Import candidate profiles from a JSON array of profile objects."""
    records = _load_json_array(candidates_file)

    try:
        profiles = [CandidateProfile(**record) for record in records]
        init_tables()
        count = insert_candidates(profiles)
    except ValidationError as e:
        console.print(f"[red]Invalid candidate record: {escape(str(e))}[/red]")
        raise typer.Exit(1)
    except Exception as e:
        console.print(f"[red]Error importing candidates: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    console.print(
        f"[bold green]Imported {count} of {len(profiles)} candidates "
        f"from {candidates_file}[/bold green]"
    )


@app.command(name="upload-resume")
def upload_resume(
    user_id: str = typer.Option(..., "--user-id", "-u", help="Candidate user id"),
    resume: str = typer.Option(
        ..., "--resume", "-r", help="Résumé path relative to the assets directory"
    ),
) -> None:
    """Embed a candidate's résumé so they can be ranked."""
    try:
        updated = update_candidate_embedding(
            user_id, resume, embedding_client=FastEmbedClient()
        )
    except NotFoundError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if updated:
        console.print(f"[bold green]Embedding updated for {user_id}[/bold green]")
    else:
        console.print(
            f"[yellow]Résumé stored but embedding could not be generated for {user_id}. "
            f"Run with --verbose for details.[/yellow]"
        )


@app.command()
def rank(
    job_id: str = typer.Option(..., "--job-id", "-j", help="Job to rank candidates for"),
    location: str | None = typer.Option(None, "--location", "-l", help="Location substring"),
    skills: list[str] = typer.Option([], "--skill", "-s", help="Skill id (repeatable)"),
    title: str | None = typer.Option(None, "--title", help="Experience title substring"),
    company: str | None = typer.Option(None, "--company", help="Experience company substring"),
    page: int = typer.Option(DEFAULT_PAGE, "--page", "-p", help="Page number"),
    page_size: int = typer.Option(DEFAULT_PAGE_SIZE, "--page-size", help="Items per page"),
    force: bool = typer.Option(False, "--force", help="Recompute even if a ranking is cached"),
    output_json: bool = typer.Option(False, "--json", help="Output results as JSON"),
) -> None:
    """Rank candidates for a job by résumé similarity."""
    filters = CandidateFilters(
        location=location,
        skill_ids=skills,
        experience_title=title,
        experience_company=company,
    )

    try:
        result = rank_candidates(
            job_id, filters=filters, page=page, page_size=page_size, force_recompute=force
        )
    except (NotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if output_json:
        _output_json(result)
    else:
        _output_ranking(result)


@app.command()
def invalidate(
    job_id: str = typer.Option(..., "--job-id", "-j", help="Job whose cached ranking is dropped"),
) -> None:
    """Drop a job's cached ranking so the next rank recomputes it."""
    if invalidate_job_ranking(job_id):
        console.print(f"[bold green]Cached ranking for {job_id} removed.[/bold green]")
    else:
        console.print(f"[yellow]No cached ranking for {job_id}.[/yellow]")


@app.command()
def search(
    query: str | None = typer.Option(None, "--query", "-q", help="Free-text search query"),
    location: str | None = typer.Option(None, "--location", "-l", help="Location substring"),
    skills: list[str] = typer.Option([], "--skill", "-s", help="Skill id (repeatable)"),
    title: str | None = typer.Option(None, "--title", help="Experience title substring"),
    company: str | None = typer.Option(None, "--company", help="Experience company substring"),
    page: int = typer.Option(DEFAULT_PAGE, "--page", "-p", help="Page number"),
    page_size: int = typer.Option(DEFAULT_PAGE_SIZE, "--page-size", help="Items per page"),
    output_json: bool = typer.Option(False, "--json", help="Output results as JSON"),
) -> None:
    """Search candidates by query and filters."""
    filters = CandidateFilters(
        location=location,
        skill_ids=skills,
        experience_title=title,
        experience_company=company,
    )

    try:
        result = search_candidates(query, filters=filters, page=page, page_size=page_size)
    except ValueError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if output_json:
        _output_json(result)
    else:
        _output_candidates(result, title="Search Results")


@app.command(name="optimize-cv")
def optimize_cv(
    user_id: str = typer.Option(..., "--user-id", "-u", help="Owner of the résumé"),
    resume: str = typer.Option(
        ..., "--resume", "-r", help="Résumé path relative to the assets directory"
    ),
    job_id: str = typer.Option(..., "--job-id", "-j", help="Job to compare against"),
    output_json: bool = typer.Option(False, "--json", help="Output results as JSON"),
) -> None:
    """Compare a résumé with a job and suggest improvements."""
    try:
        check_llm_configured()
    except LLMConfigurationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    try:
        result = optimize_resume(user_id, resume, job_id)
    except (NotFoundError, ValueError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if output_json:
        _output_json(result)
    else:
        _output_analysis(result)


@app.command()
def info() -> None:
    """Display database statistics."""
    console.print("[bold cyan]talentmatch System Information[/bold cyan]\n")

    is_cloud = DATABASE_URL is not None
    if not is_cloud and not DB_PATH.exists():
        console.print("[yellow]Database not found. Run 'talentmatch init-db' first.[/yellow]")
        raise typer.Exit(0)

    try:
        job_count = len(get_all_jobs())
        candidate_count = count_candidates()
        embedded_count = count_candidates(with_embedding=True)
        analysis_count = count_analyses()
    except Exception as e:
        console.print(f"[red]Error reading database: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    table = Table(title="Database Statistics")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("Database", "PostgreSQL (cloud)" if is_cloud else str(DB_PATH))
    table.add_row("Jobs", str(job_count))
    table.add_row("Candidates", str(candidate_count))
    table.add_row("Candidates with embeddings", str(embedded_count))
    table.add_row("Résumé analyses", str(analysis_count))

    console.print(table)


def _load_json_array(path: Path) -> list[dict]:
    if not path.exists():
        console.print(f"[red]Error: File not found: {path}[/red]")
        raise typer.Exit(1)

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        console.print(f"[red]Error: {path} is not valid JSON: {escape(str(e))}[/red]")
        raise typer.Exit(1)

    if not isinstance(data, list):
        console.print(f"[red]Error: {path} must contain a JSON array[/red]")
        raise typer.Exit(1)

    return data


def _output_json(result: JobRanking | CandidatePage | OptimizeCVResult) -> None:
    """Output a result model as JSON to stdout."""
    json.dump(obj=result.model_dump(mode="json"), fp=sys.stdout, indent=2)
    sys.stdout.write("\n")


def _output_ranking(result: JobRanking) -> None:
    header = f"[bold]{escape(result.job.title)}[/bold] at {escape(result.job.company)}"
    flags = []
    if result.cached:
        flags.append("cached")
    if result.fallback:
        flags.append("keyword fallback")
    if result.pool_truncated:
        flags.append("pool truncated")
    if flags:
        header += f" [dim]({', '.join(flags)})[/dim]"

    console.print(header)
    _output_candidates(result, title="Ranked Candidates")


def _output_candidates(result: CandidatePage, title: str) -> None:
    if not result.items:
        console.print("[yellow]No candidates found.[/yellow]")
        return

    table = Table(title=title)
    table.add_column("#", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Location")
    table.add_column("Email")
    table.add_column("Score", style="green")

    offset = (result.pagination.current_page - 1) * result.pagination.page_size
    for i, candidate in enumerate(result.items, start=offset + 1):
        score = f"{candidate.score:.1%}" if candidate.score is not None else "-"
        table.add_row(
            str(i),
            escape(candidate.name),
            escape(candidate.location or ""),
            escape(candidate.email),
            score,
        )

    console.print(table)
    pagination = result.pagination
    console.print(
        f"Page {pagination.current_page} of {pagination.total_pages} "
        f"({pagination.total_items} candidates)"
    )


def _output_analysis(result: OptimizeCVResult) -> None:
    content = []

    sections = [
        ("Strengths", "green", result.analysis.strengths),
        ("Weaknesses", "red", result.analysis.weaknesses),
        ("Suggestions", "yellow", result.analysis.suggestions),
    ]
    for name, style, points in sections:
        content.append(f"[{style}]{name}:[/{style}]")
        content.extend(f"  • {escape(point)}" for point in points)
        if not points:
            content.append("  (none)")
        content.append("")

    title = f"[bold]{escape(result.job.title)}[/bold] at {escape(result.job.company)}"
    if result.fallback:
        title += " [dim](degraded)[/dim]"

    console.print(Panel(renderable="\n".join(content).rstrip(), title=title, border_style="blue"))


if __name__ == "__main__":
    app()
