"""Navigation of a `gh api graphql` response for pull-request review threads."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from prthreads_core.errors import InputParseError, InputReadError, SchemaError
from prthreads_core.models import PullRequestInfo, ReviewThread, connection_nodes, node_field

logger = logging.getLogger(__name__)

_PULL_REQUEST_PATH = ("data", "repository", "pullRequest")


def load_response(json_path: str | Path) -> dict:
    """Read and parse the raw GraphQL JSON written by `gh api graphql`."""
    try:
        raw = Path(json_path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise InputReadError(f"Error reading file: {json_path}: {e}") from e

    try:
        response = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputParseError(f"Error parsing JSON in {json_path}: {e}") from e

    if not isinstance(response, dict):
        raise SchemaError("<root>", "is not an object")
    return response


def _pull_request_node(response: dict) -> dict:
    node = response
    where = ""
    for key in _PULL_REQUEST_PATH:
        node = node_field(node, key, where, dict)
        where = f"{where}.{key}" if where else key
    return node


def get_pull_request(response: dict) -> PullRequestInfo:
    """Return the PR number and head branch when present; neither is required."""
    pr = _pull_request_node(response)
    number = pr.get("number")
    head_ref = pr.get("headRefName")
    return PullRequestInfo(
        number=number if isinstance(number, int) and not isinstance(number, bool) else None,
        head_ref_name=head_ref if isinstance(head_ref, str) else None,
    )


def get_review_threads(response: dict) -> list[ReviewThread]:
    """Return the review threads under data.repository.pullRequest.reviewThreads.nodes, in order."""
    pr = _pull_request_node(response)
    where = ".".join(_PULL_REQUEST_PATH)
    threads = [ReviewThread.from_node(node, path) for path, node in connection_nodes(pr, "reviewThreads", where)]
    logger.debug("Read %d review thread(s).", len(threads))
    return threads
