"""Resolve a remote repository to a concrete, reproducible checkout point."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Literal, Optional, Union

from semver import Version

from .config import TRUNK_BRANCH
from .errors import GitQueryError
from .process import ProcessFailure, Runner, run_process

__all__ = [
    "BranchRef",
    "GitRef",
    "RemoteTagCandidate",
    "TagRef",
    "classify_tags",
    "latest_semver_tag",
    "list_remote_tags",
    "parse_ls_remote_tags",
    "parse_tag_version",
    "resolve_git_ref",
]

logger = logging.getLogger(__name__)

_TAG_PREFIX = "refs/tags/"
_PEELED_SUFFIX = "^{}"


@dataclass(frozen=True)
class TagRef:
    name: str
    kind: Literal["tag"] = "tag"

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class BranchRef:
    name: str
    kind: Literal["branch"] = "branch"

    def __str__(self) -> str:
        return self.name


GitRef = Union[TagRef, BranchRef]


@dataclass(frozen=True)
class RemoteTagCandidate:
    tag: str
    valid: bool
    version: Optional[Version] = None


def parse_ls_remote_tags(output: str) -> list[str]:
    """Extract tag names from ``git ls-remote --tags`` output, in listing order.

    Annotated tags appear twice (``v1`` and ``v1^{}``); both collapse to one name.
    """
    tags: list[str] = []
    seen: set[str] = set()
    for line in output.splitlines():
        parts = line.strip().split("\t", 1)
        if len(parts) != 2:
            continue
        ref = parts[1].strip()
        if not ref.startswith(_TAG_PREFIX):
            continue
        name = ref[len(_TAG_PREFIX):]
        if name.endswith(_PEELED_SUFFIX):
            name = name[: -len(_PEELED_SUFFIX)]
        if name and name not in seen:
            seen.add(name)
            tags.append(name)
    return tags


def parse_tag_version(tag: str) -> Version:
    """Parse a release tag as SemVer 2.0, allowing a leading ``v``.

    Raises:
        ValueError: *tag* is not a semantic version.
    """
    if tag[:1] in ("v", "V"):
        tag = tag[1:]
    return Version.parse(tag)


def classify_tags(tags: Iterable[str]) -> list[RemoteTagCandidate]:
    candidates = []
    for tag in tags:
        # Parsing is only a go/no-go check; the raw tag is what gets cloned.
        try:
            candidates.append(RemoteTagCandidate(tag=tag, valid=True, version=parse_tag_version(tag)))
        except ValueError:
            logger.debug("Discarding non-semver tag %r", tag)
            candidates.append(RemoteTagCandidate(tag=tag, valid=False))
    return candidates


def latest_semver_tag(tags: Iterable[str]) -> Optional[str]:
    """Return the highest-precedence valid version tag, or ``None``."""
    valid = [c for c in classify_tags(tags) if c.valid]
    if not valid:
        return None
    ranked = sorted(valid, key=lambda c: c.version)
    return ranked[-1].tag


def list_remote_tags(repo_url: str, *, runner: Runner = run_process) -> list[str]:
    command = ["git", "ls-remote", "--tags", repo_url]
    try:
        result = runner(command, merge_stderr=False)
    except ProcessFailure as failure:
        raise GitQueryError.from_failure(f"Could not list tags for {repo_url}", failure) from failure
    return parse_ls_remote_tags(result.output)


def resolve_git_ref(
    repo_url: str,
    *,
    use_trunk: bool = False,
    trunk: str = TRUNK_BRANCH,
    runner: Runner = run_process,
) -> GitRef:
    """Pick the newest release tag of *repo_url*, falling back to *trunk*.

    A repository without any valid version tag resolves to the trunk branch
    instead of failing; a failing tag query is still fatal.
    """
    if use_trunk:
        return BranchRef(trunk)

    latest = latest_semver_tag(list_remote_tags(repo_url, runner=runner))
    if latest is None:
        logger.info("No release tags found for %s, using %s", repo_url, trunk)
        return BranchRef(trunk)

    logger.debug("Resolved %s to tag %s", repo_url, latest)
    return TagRef(latest)
