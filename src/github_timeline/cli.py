"""CLI interface for GitHub Timeline."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import httpx
import typer
from rich.console import Console
from rich.logging import RichHandler

from github_timeline import __version__
from github_timeline.config import Config, get_config
from github_timeline.exceptions import GitHubTimelineError
from github_timeline.models.activity import ActivityModel, QueryProfile, SubjectKind
from github_timeline.output.console import Console as OutputConsole
from github_timeline.output.json_writer import build_report, write_json_report

app = typer.Typer(
    name="github-timeline",
    help="Fetch and normalize GitHub issue and pull request timelines",
    add_completion=False,
)

console = Console()


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        console.print(f"github-timeline version {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def parse_repository(value: str) -> tuple[str, str]:
    """Split an ``owner/repo`` argument."""
    owner, sep, repo = value.partition("/")
    if not sep or not owner or not repo or "/" in repo:
        raise typer.BadParameter(f"Expected OWNER/REPO, got {value!r}")
    return owner, repo


@app.callback()
def main(
    version: bool = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit",
    ),
):
    """GitHub Timeline - Normalize issue and pull request timelines."""
    pass


def _render(
    model: ActivityModel,
    title: str,
    output: Optional[Path],
    summary_only: bool,
    limit: Optional[int],
    verbose: bool,
    quiet: bool,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
    name: Optional[str] = None,
) -> None:
    output_console = OutputConsole(verbose=verbose, quiet=quiet)
    output_console.print_header(title, model.subject)
    output_console.print_events(model, limit=limit)
    output_console.print_summary(model)

    if not summary_only:
        report = build_report(model, owner=owner, repo=repo)
        output_file = write_json_report(report, output, name=name)
        output_console.print_output_path(str(output_file))


async def _fetch(
    config: Config,
    owner: str,
    repo: str,
    number: int,
    subject_kind: SubjectKind,
    profile: QueryProfile,
    output_console: OutputConsole,
) -> ActivityModel:
    from github_timeline.sdk import GitHubTimeline

    async with GitHubTimeline(config=config) as client:
        with output_console.create_progress() as progress:
            progress.add_task(f"Fetching {owner}/{repo}#{number}...", total=None)
            if subject_kind is SubjectKind.PULL_REQUEST:
                return await client.get_pull_request_timeline(owner, repo, number)
            return await client.get_issue_timeline(owner, repo, number, profile)


def _run_fetch(
    repository: str,
    number: int,
    subject_kind: SubjectKind,
    profile: QueryProfile,
    output: Optional[Path],
    summary_only: bool,
    limit: Optional[int],
    verbose: bool,
    quiet: bool,
) -> None:
    _configure_logging(verbose)
    owner, repo = parse_repository(repository)
    config = get_config()
    output_console = OutputConsole(verbose=verbose, quiet=quiet)

    if not config.is_authenticated:
        output_console.print_error(
            "No GitHub token found. The GraphQL API requires one.\n"
            "Set GITHUB_TIMELINE_TOKEN or GITHUB_TOKEN."
        )
        raise typer.Exit(1)

    try:
        model = asyncio.run(
            _fetch(config, owner, repo, number, subject_kind, profile, output_console)
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Cancelled[/yellow]")
        raise typer.Exit(1)
    except (GitHubTimelineError, httpx.HTTPError) as e:
        output_console.print_error(str(e))
        raise typer.Exit(1)

    label = "Pull Request" if subject_kind is SubjectKind.PULL_REQUEST else "Issue"
    _render(
        model,
        f"{label} {owner}/{repo}#{number}",
        output,
        summary_only,
        limit,
        verbose,
        quiet,
        owner=owner,
        repo=repo,
        name=f"{owner}_{repo}_{number}",
    )


OutputOption = typer.Option(None, "--output", "-o", help="Output JSON file path")
SummaryOnlyOption = typer.Option(False, "--summary-only", help="Print summary only, don't save JSON")
LimitOption = typer.Option(None, "--limit", "-n", help="Show at most N events in the table")
VerboseOption = typer.Option(False, "--verbose", "-v", help="Verbose output")
QuietOption = typer.Option(False, "--quiet", "-q", help="Minimal output")


@app.command()
def issue(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO"),
    number: int = typer.Argument(..., help="Issue number"),
    linkage: bool = typer.Option(
        False,
        "--linkage",
        help="Minimal query: closure and cross-links only, no timestamps",
    ),
    output: Optional[Path] = OutputOption,
    summary_only: bool = SummaryOnlyOption,
    limit: Optional[int] = LimitOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
):
    """Show an issue's normalized timeline.

    Examples:
        github-timeline issue octo/repo 12
        github-timeline issue octo/repo 12 --linkage --summary-only
    """
    profile = QueryProfile.LINKAGE if linkage else QueryProfile.FULL
    _run_fetch(
        repository, number, SubjectKind.ISSUE, profile, output, summary_only, limit, verbose, quiet
    )


@app.command()
def pr(
    repository: str = typer.Argument(..., help="Repository as OWNER/REPO"),
    number: int = typer.Argument(..., help="Pull request number"),
    output: Optional[Path] = OutputOption,
    summary_only: bool = SummaryOnlyOption,
    limit: Optional[int] = LimitOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
):
    """Show a pull request's normalized timeline."""
    _run_fetch(
        repository,
        number,
        SubjectKind.PULL_REQUEST,
        QueryProfile.FULL,
        output,
        summary_only,
        limit,
        verbose,
        quiet,
    )


@app.command()
def decode(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Saved GraphQL response"),
    kind: Optional[SubjectKind] = typer.Option(
        None, "--kind", help="Subject kind, when the file holds a bare subject object"
    ),
    linkage: bool = typer.Option(False, "--linkage", help="Response came from the linkage query"),
    output: Optional[Path] = OutputOption,
    summary_only: bool = SummaryOnlyOption,
    limit: Optional[int] = LimitOption,
    verbose: bool = VerboseOption,
    quiet: bool = QuietOption,
):
    """Normalize a saved timeline response without touching the network."""
    from github_timeline.services.timeline_fetcher import decode_response

    _configure_logging(verbose)
    output_console = OutputConsole(verbose=verbose, quiet=quiet)

    try:
        raw = json.loads(file.read_text(encoding="utf-8"))
        profile = QueryProfile.LINKAGE if linkage else QueryProfile.FULL
        model = decode_response(raw, subject_kind=kind, profile=profile, config=get_config())
    except json.JSONDecodeError as e:
        output_console.print_error(f"Invalid JSON in {file}: {e}")
        raise typer.Exit(1)
    except (GitHubTimelineError, httpx.HTTPError) as e:
        output_console.print_error(str(e))
        raise typer.Exit(1)

    _render(model, f"Decoded {file.name}", output, summary_only, limit, verbose, quiet, name=file.stem)


async def _check_rate_limit(config: Config) -> dict:
    from github_timeline.queries import RATE_LIMIT_QUERY
    from github_timeline.services.graphql_client import GitHubGraphQLClient
    from github_timeline.utils.time import parse_datetime

    async with GitHubGraphQLClient(config=config) as client:
        data = await client.execute(RATE_LIMIT_QUERY)

    rate = data.get("rateLimit") or {}
    reset_at = parse_datetime(rate.get("resetAt"))
    return {
        "limit": rate.get("limit", 0),
        "remaining": rate.get("remaining", 0),
        "reset": reset_at.timestamp() if reset_at else 0.0,
    }


@app.command()
def check_token():
    """Check GitHub token configuration and GraphQL rate limits."""
    from github_timeline.utils.rate_limiter import check_and_report_rate_limit

    config = get_config()

    if not config.is_authenticated:
        console.print("[yellow]No GitHub token configured[/yellow]")
        console.print("GraphQL API: Not available (timelines require a token)")
        console.print()
        console.print("To configure a token:")
        console.print("  export GITHUB_TIMELINE_TOKEN=your_token_here")
        console.print()
        console.print("Create a token at: https://github.com/settings/tokens")
        console.print("No special scopes needed for public repositories.")
        raise typer.Exit(1)

    console.print("[green]GitHub token is configured[/green]")
    try:
        rate_info = asyncio.run(_check_rate_limit(config))
    except (GitHubTimelineError, httpx.HTTPError) as e:
        console.print(f"[red]Token check failed: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"GraphQL points: {rate_info['remaining']}/{rate_info['limit']}")
    if not check_and_report_rate_limit(rate_info):
        raise typer.Exit(1)


if __name__ == "__main__":
    app()
