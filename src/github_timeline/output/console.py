"""Rich console output for timelines."""

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from github_timeline.models.activity import ActivityModel, SubjectSummary
from github_timeline.models.events import (
    AssignedPayload,
    ClosedPayload,
    CommentedPayload,
    CommitPayload,
    ConnectedPayload,
    ConvertedToDiscussionPayload,
    CrossReferencedPayload,
    DemilestonedPayload,
    ForcePushedPayload,
    HeadDeletedPayload,
    LabeledPayload,
    LockedPayload,
    MarkedDuplicatePayload,
    MergedPayload,
    MilestonedPayload,
    ReferencedPayload,
    RenamedTitlePayload,
    ReviewPayload,
    ReviewRequestedPayload,
    ReviewRequestRemovedPayload,
    ReviewThreadPayload,
    TimelineEvent,
    UnassignedPayload,
    UnknownPayload,
    UnlabeledPayload,
    UnmarkedDuplicatePayload,
)


def _first_line(text: str | None, width: int = 60) -> str:
    line = (text or "").strip().splitlines()[0] if (text or "").strip() else ""
    return line[:width] + "..." if len(line) > width else line


def describe_event(event: TimelineEvent) -> str:
    """One-line human description of an event's payload."""
    p = event.payload

    if isinstance(p, (AssignedPayload, UnassignedPayload)):
        return str(p.assignee) if p.assignee else ""
    if isinstance(p, (LabeledPayload, UnlabeledPayload)):
        return p.label.name
    if isinstance(p, ClosedPayload):
        return f"by {p.closer}" if p.closer else "no closer"
    if isinstance(p, (ConnectedPayload, CrossReferencedPayload)):
        return f"from {p.source}" if p.source else ""
    if isinstance(p, ReferencedPayload):
        commit = p.commit.abbreviated_oid if p.commit else "?"
        where = f" in {p.commit_repository}" if p.is_cross_repository and p.commit_repository else ""
        return f"{commit}{where}"
    if isinstance(p, CommentedPayload):
        return _first_line(p.body)
    if isinstance(p, ReviewPayload):
        more = "+" if p.comments_truncated else ""
        return f"{p.state.value} ({len(p.comments)}{more} comments)"
    if isinstance(p, ReviewThreadPayload):
        more = "+" if p.comments_truncated else ""
        return f"{p.path or ''} ({len(p.comments)}{more} comments)"
    if isinstance(p, CommitPayload):
        return f"{p.commit.abbreviated_oid} {_first_line(p.commit.message_headline)}"
    if isinstance(p, MergedPayload):
        return f"into {p.merge_ref_name}" if p.merge_ref_name else ""
    if isinstance(p, LockedPayload):
        return p.raw_lock_reason or ""
    if isinstance(p, (MilestonedPayload, DemilestonedPayload)):
        return p.milestone_title or ""
    if isinstance(p, (MarkedDuplicatePayload, UnmarkedDuplicatePayload)):
        return f"of {p.canonical}" if p.canonical else ""
    if isinstance(p, RenamedTitlePayload):
        return f"{p.previous_title!r} -> {p.current_title!r}"
    if isinstance(p, ConvertedToDiscussionPayload):
        return str(p.discussion) if p.discussion else ""
    if isinstance(p, ForcePushedPayload):
        before = p.before_commit.abbreviated_oid if p.before_commit else "?"
        after = p.after_commit.abbreviated_oid if p.after_commit else "?"
        return f"{before} -> {after}"
    if isinstance(p, HeadDeletedPayload):
        return p.head_ref_name or ""
    if isinstance(p, (ReviewRequestedPayload, ReviewRequestRemovedPayload)):
        return str(p.requested_reviewer) if p.requested_reviewer else ""
    if isinstance(p, UnknownPayload):
        return f"{p.raw_type or 'untyped'}: {p.error}" if p.error else p.raw_type or ""
    return ""


class Console:
    """Wrapper for rich console output."""

    def __init__(self, verbose: bool = False, quiet: bool = False):
        self.console = RichConsole()
        self.verbose = verbose
        self.quiet = quiet

    def print(self, *args, **kwargs):
        """Print to console (respects quiet mode)."""
        if not self.quiet:
            self.console.print(*args, **kwargs)

    def print_verbose(self, *args, **kwargs):
        """Print only in verbose mode."""
        if self.verbose and not self.quiet:
            self.console.print(*args, **kwargs)

    def print_error(self, message: str):
        """Print error message."""
        self.console.print(f"[red]Error:[/red] {message}")

    def print_warning(self, message: str):
        """Print warning message."""
        self.console.print(f"[yellow]Warning:[/yellow] {message}")

    def print_success(self, message: str):
        """Print success message."""
        if not self.quiet:
            self.console.print(f"[green]{message}[/green]")

    def create_progress(self) -> Progress:
        """Create a spinner progress context."""
        return Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=self.console,
            disable=self.quiet,
            transient=True,
        )

    def print_header(self, title: str, subject: SubjectSummary | None = None):
        """Print timeline header."""
        if self.quiet:
            return

        lines = [f"[bold blue]{title}[/bold blue]"]
        if subject is not None:
            if subject.title:
                lines.append(subject.title)
            state = subject.state or ("CLOSED" if subject.is_closed else "OPEN")
            reason = subject.closed_reason
            lines.append(f"[dim]State: {state}{f' ({reason.value})' if reason else ''}[/dim]")

        self.console.print()
        self.console.print(Panel("\n".join(lines), expand=False))
        self.console.print()

    def print_events(self, model: ActivityModel, limit: int | None = None):
        """Print the timeline as a table."""
        if self.quiet:
            return

        table = Table(title=f"Timeline ({len(model.events)} events)", expand=False)
        table.add_column("When", style="dim", no_wrap=True)
        table.add_column("Kind", style="cyan")
        table.add_column("Actor", style="green")
        table.add_column("Details")

        events = model.events if limit is None else model.events[:limit]
        for event in events:
            table.add_row(
                event.timestamp.strftime("%Y-%m-%d %H:%M") if event.timestamp else "-",
                event.kind.value,
                str(event.actor) if event.actor else "-",
                describe_event(event),
            )

        self.console.print(table)

    def print_summary(self, model: ActivityModel):
        """Print counts, participants and diagnostics."""
        if self.quiet:
            return

        table = Table(title="Summary", show_header=False, expand=False)
        table.add_column("Field", style="dim")
        table.add_column("Value")

        table.add_row("Profile", model.profile.value)
        table.add_row("Events", str(len(model.events)))
        for kind, count in sorted(model.count_by_kind().items(), key=lambda x: -x[1]):
            table.add_row(f"  {kind.value}", str(count))
        table.add_row("Participants", ", ".join(model.participants()) or "-")
        closing = model.closing_references()
        if closing:
            table.add_row("Closed by", ", ".join(str(ref) for ref in closing))

        self.console.print(table)

        if model.truncated:
            self.print_warning(
                "Timeline hit the 100 item cap; older or newer events may be missing."
            )
        if model.unknown_variant_count:
            self.print_warning(
                f"{model.unknown_variant_count} event(s) had an unrecognized or malformed shape."
            )
        for diagnostic in model.diagnostics:
            self.print_verbose(
                f"[dim]  edge {diagnostic.index} ({diagnostic.raw_type or 'untyped'}): "
                f"{diagnostic.message}[/dim]"
            )

    def print_output_path(self, path: str):
        """Print where the report was written."""
        if not self.quiet:
            self.console.print(f"\n[dim]Report saved to:[/dim] {path}")
