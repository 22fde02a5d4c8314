"""Approval filtering of pull-request review threads."""

from __future__ import annotations

import fnmatch
import json
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

from prthreads_core.errors import OutputWriteError
from prthreads_core.gh.review_threads import get_pull_request, get_review_threads, load_response
from prthreads_core.models import ApprovedThread, PullRequestInfo, ReviewThread

logger = logging.getLogger(__name__)

DEFAULT_REACTION = "THUMBS_UP"


@dataclass
class FilterSummary:
    """Result returned by run_filter, enough for the CLI to report and display."""

    input_path: str
    output_path: str
    reviewer: str
    reaction: str
    pull_request: PullRequestInfo
    total_threads: int = 0
    unresolved_threads: int = 0
    excluded_threads: int = 0
    approved: list[ApprovedThread] = field(default_factory=list)


def _is_excluded(path: str, patterns: list[str]) -> bool:
    """Return True if path matches any exclude pattern.

    Supports:
    - fnmatch globs on the full path: "src/generated/*.py"
    - fnmatch globs on the basename: "*.lock", "*.min.js"
    - Directory names/prefixes: "migrations/", "tests" (matches any file within that tree)
    """
    for pattern in patterns:
        if fnmatch.fnmatch(path, pattern):
            return True
        if fnmatch.fnmatch(path.rsplit("/", 1)[-1], pattern):
            return True
        prefix = pattern.rstrip("/") + "/"
        if path.startswith(prefix) or ("/" + prefix) in path:
            return True
    return False


def is_approved_by(thread: ReviewThread, reviewer: str, reaction: str = DEFAULT_REACTION) -> bool:
    """True if any comment in the thread carries `reaction` from `reviewer`."""
    return any(
        r.content == reaction and r.user_login == reviewer for comment in thread.comments for r in comment.reactions
    )


def filter_approved_threads(
    threads: Iterable[ReviewThread],
    reviewer: str,
    reaction: str = DEFAULT_REACTION,
    exclude: list[str] | None = None,
) -> list[ApprovedThread]:
    """Keep unresolved threads approved by `reviewer` and project them for output.

    Input order is preserved for threads and for the comments within each thread.
    Filtering is thread-level: every comment of an approved thread is kept.
    """
    patterns = exclude or []
    return [
        ApprovedThread.from_thread(t)
        for t in threads
        if not t.is_resolved and is_approved_by(t, reviewer, reaction) and not _is_excluded(t.path, patterns)
    ]


def serialize_approved_threads(approved: Iterable[ApprovedThread]) -> str:
    """Pretty-print approved threads as a JSON array with 2-space indentation."""
    return json.dumps([t.to_dict() for t in approved], indent=2, ensure_ascii=False)


def write_approved_threads(output_path: str | Path, approved: Iterable[ApprovedThread]) -> None:
    """Write the JSON array to output_path, creating parent directories and overwriting any file.

    The content goes to a temporary file next to the target which is then renamed
    over it, so a failed write never leaves a truncated output file behind.
    """
    content = serialize_approved_threads(approved)
    path = Path(output_path)
    tmp_name = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(content)
        os.replace(tmp_name, path)
    except OSError as e:
        if tmp_name is not None:
            Path(tmp_name).unlink(missing_ok=True)
        raise OutputWriteError(f"Error writing file: {output_path}: {e}") from e


def run_filter(
    json_path: str,
    reviewer: str,
    output_path: str,
    config: dict | None = None,
) -> FilterSummary:
    """Load a GraphQL review-thread response, filter it and write the approved threads.

    Nothing is written unless loading and filtering both succeed.
    Raises ThreadFilterError subclasses on read, parse or schema failures.
    """
    config = config or {}
    reaction = config.get("reaction") or DEFAULT_REACTION
    exclude = list(config.get("exclude") or [])

    response = load_response(json_path)
    pull_request = get_pull_request(response)
    threads = get_review_threads(response)

    unresolved = [t for t in threads if not t.is_resolved]
    approved_all = [t for t in unresolved if is_approved_by(t, reviewer, reaction)]
    approved = [ApprovedThread.from_thread(t) for t in approved_all if not _is_excluded(t.path, exclude)]
    excluded = len(approved_all) - len(approved)

    if pull_request.number is not None:
        logger.debug("PR #%s (%s)", pull_request.number, pull_request.head_ref_name or "unknown branch")
    logger.debug(
        "%d thread(s), %d unresolved, %d approved by %s with %s, %d excluded.",
        len(threads),
        len(unresolved),
        len(approved),
        reviewer,
        reaction,
        excluded,
    )

    write_approved_threads(output_path, approved)

    return FilterSummary(
        input_path=str(json_path),
        output_path=str(output_path),
        reviewer=reviewer,
        reaction=reaction,
        pull_request=pull_request,
        total_threads=len(threads),
        unresolved_threads=len(unresolved),
        excluded_threads=excluded,
        approved=approved,
    )
