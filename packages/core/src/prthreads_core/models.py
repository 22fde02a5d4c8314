"""Review thread data models.

Input records mirror the `reviewThreads` section of a GitHub GraphQL
response; output records are the flattened projection written to disk.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from prthreads_core.errors import SchemaError

# GitHub returns a null author for deleted accounts and shows them as "ghost".
GHOST_LOGIN = "ghost"

_MISSING = object()


def node_field(node: Any, key: str, where: str, kind: type | tuple[type, ...] | None = None, nullable: bool = False):
    """Return node[key], raising SchemaError with the dotted path when absent or mistyped."""
    if not isinstance(node, dict):
        raise SchemaError(where, "is not an object")
    path = f"{where}.{key}" if where else key
    value = node.get(key, _MISSING)
    if value is _MISSING:
        raise SchemaError(path)
    if value is None:
        if nullable:
            return None
        raise SchemaError(path, "is null")
    # bool is an int subclass; a line number of `true` is still a schema error.
    if kind is not None and (not isinstance(value, kind) or (kind is int and isinstance(value, bool))):
        raise SchemaError(path, "has the wrong type")
    return value


def connection_nodes(node: Any, key: str, where: str) -> list[tuple[str, Any]]:
    """Return (path, item) pairs for a GraphQL connection's `nodes` list."""
    path = f"{where}.{key}" if where else key
    connection = node_field(node, key, where, dict)
    items = node_field(connection, "nodes", path, list)
    return [(f"{path}.nodes[{i}]", item) for i, item in enumerate(items)]


def _login(node: Any, key: str, where: str) -> str | None:
    actor = node_field(node, key, where, dict, nullable=True)
    if actor is None:
        return None
    return node_field(actor, "login", f"{where}.{key}", str)


@dataclass(frozen=True)
class Reaction:
    """One emoji reaction left on a comment."""

    content: str
    user_login: str | None

    @classmethod
    def from_node(cls, node: dict, where: str = "reaction") -> Reaction:
        return cls(
            content=node_field(node, "content", where, str),
            user_login=_login(node, "user", where),
        )


@dataclass(frozen=True)
class Comment:
    id: str
    body: str
    author_login: str
    created_at: str
    diff_hunk: str
    reactions: tuple[Reaction, ...] = ()

    @classmethod
    def from_node(cls, node: dict, where: str = "comment") -> Comment:
        return cls(
            id=node_field(node, "id", where, str),
            body=node_field(node, "body", where, str),
            author_login=_login(node, "author", where) or GHOST_LOGIN,
            created_at=node_field(node, "createdAt", where, str),
            diff_hunk=node_field(node, "diffHunk", where, str),
            reactions=tuple(Reaction.from_node(r, p) for p, r in connection_nodes(node, "reactions", where)),
        )


@dataclass(frozen=True)
class ReviewThread:
    """A comment conversation anchored to a file position in a PR diff."""

    id: str
    is_resolved: bool
    path: str
    line: int | None
    original_line: int | None
    diff_side: str
    comments: tuple[Comment, ...] = ()

    @classmethod
    def from_node(cls, node: dict, where: str = "thread") -> ReviewThread:
        return cls(
            id=node_field(node, "id", where, str),
            is_resolved=node_field(node, "isResolved", where, bool),
            path=node_field(node, "path", where, str),
            line=node_field(node, "line", where, int, nullable=True),
            original_line=node_field(node, "originalLine", where, int, nullable=True),
            diff_side=node_field(node, "diffSide", where, str),
            comments=tuple(Comment.from_node(c, p) for p, c in connection_nodes(node, "comments", where)),
        )


@dataclass(frozen=True)
class ApprovedComment:
    id: str
    body: str
    author: str
    created_at: str
    diff_hunk: str

    @classmethod
    def from_comment(cls, comment: Comment) -> ApprovedComment:
        return cls(
            id=comment.id,
            body=comment.body,
            author=comment.author_login,
            created_at=comment.created_at,
            diff_hunk=comment.diff_hunk,
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "body": self.body,
            "author": self.author,
            "createdAt": self.created_at,
            "diffHunk": self.diff_hunk,
        }


@dataclass(frozen=True)
class ApprovedThread:
    """Output projection of a ReviewThread. Reactions are only used for filtering and are dropped."""

    id: str
    path: str
    line: int | None
    original_line: int | None
    diff_side: str
    comments: tuple[ApprovedComment, ...] = ()

    @classmethod
    def from_thread(cls, thread: ReviewThread) -> ApprovedThread:
        return cls(
            id=thread.id,
            path=thread.path,
            line=thread.line,
            original_line=thread.original_line,
            diff_side=thread.diff_side,
            comments=tuple(ApprovedComment.from_comment(c) for c in thread.comments),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "path": self.path,
            "line": self.line,
            "originalLine": self.original_line,
            "diffSide": self.diff_side,
            "comments": [c.to_dict() for c in self.comments],
        }


@dataclass(frozen=True)
class PullRequestInfo:
    """The pull request the threads belong to. Only used for logging and display."""

    number: int | None = None
    head_ref_name: str | None = None
