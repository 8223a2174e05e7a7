"""JSON output writer for timeline reports."""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

from github_timeline.models.activity import ActivityModel


def build_report(
    model: ActivityModel,
    owner: Optional[str] = None,
    repo: Optional[str] = None,
) -> dict[str, Any]:
    """Build a JSON-ready report for one activity model.

    Args:
        model: Assembled activity model
        owner: Repository owner, when known
        repo: Repository name, when known

    Returns:
        Dictionary ready for JSON serialization
    """
    subject = model.subject.model_dump(mode="json") if model.subject else None

    return {
        "repository": f"{owner}/{repo}" if owner and repo else None,
        "subject_kind": model.subject_kind.value,
        "subject": subject,
        "profile": model.profile.value,
        "generated_at": datetime.now().isoformat(),
        "truncated": model.truncated,
        "unknown_variant_count": model.unknown_variant_count,
        "decode_error_count": model.decode_error_count,
        "summary": {
            "events_count": len(model.events),
            "by_kind": {kind.value: count for kind, count in model.count_by_kind().items()},
            "participants": model.participants(),
            "closing_references": [str(ref) for ref in model.closing_references()],
        },
        "events": [event.model_dump(mode="json") for event in model.events],
        "diagnostics": [d.model_dump(mode="json") for d in model.diagnostics],
    }


def write_json_report(
    report: dict[str, Any],
    output_path: Optional[Path] = None,
    name: Optional[str] = None,
) -> Path:
    """Write a timeline report to a JSON file.

    Args:
        report: Report dictionary
        output_path: Output file path (optional)
        name: Base name for the default filename

    Returns:
        Path to written file
    """
    if output_path is None:
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        name = name or report.get("subject_kind", "timeline")
        output_dir = Path("output")
        output_dir.mkdir(exist_ok=True)
        output_path = output_dir / f"{name}_{timestamp}.json"

    # Ensure parent directory exists
    output_path.parent.mkdir(parents=True, exist_ok=True)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(report, f, indent=2, ensure_ascii=False, default=str)

    return output_path
