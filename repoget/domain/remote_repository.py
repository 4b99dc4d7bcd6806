"""
Remote repository classification for repoget.

A canonical URL is wrapped in one of a closed set of host-specific
variants. Every variant knows whether the URL names a repository at all
(``is_valid``) and which VCS backend serves it (``resolve_backend``).
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Protocol, Tuple
from urllib.parse import SplitResult

import requests

from ..config import github_hosts, load_config, match_url_rule
from ..exit_codes import (
    BackendUndetectableError,
    InvalidRepositoryError,
    NoImportMetaFoundError,
    UnsupportedOperationError,
)
from ..infra.go_import import GoImportClient
from ..infra.vcs import (
    BAZAAR_BACKEND,
    DARCS_BACKEND,
    GIT_BACKEND,
    MERCURIAL_BACKEND,
    SUBVERSION_BACKEND,
    VCSBackend,
    get_backend,
)
from ..url import hostname, url_to_string
from ..utils import run_silently

logger = logging.getLogger(__name__)

GIST_HOST = "gist.github.com"
DARCSHUB_HOST = "hub.darcs.net"

VCS_SCHEME_PATTERN = re.compile(r"^(git|svn|bzr)(?:\+|$)")
SCHEME_BACKENDS = {
    "git": GIT_BACKEND,
    "svn": SUBVERSION_BACKEND,
    "bzr": BAZAAR_BACKEND,
}


class RemoteRepository(Protocol):
    """What every host-specific variant provides."""
    url: SplitResult

    def is_valid(self) -> bool:
        ...

    def resolve_backend(self) -> Tuple[VCSBackend, SplitResult]:
        ...


def _path_segments(path: str) -> List[str]:
    return [s for s in path.strip('/').split('/') if s]


@dataclass(frozen=True)
class GitHubRepository:
    """
    A repository on github.com or a GitHub Enterprise host.

    Only ``/owner/project`` identifies the repository, so deeper paths such
    as ``/owner/project/blob/main/README.md`` are cut at construction.
    """
    url: SplitResult

    @classmethod
    def from_url(cls, url: SplitResult) -> 'GitHubRepository':
        has_git_suffix = url.path.endswith(".git")
        path = url.path[:-len(".git")] if has_git_suffix else url.path
        new_path = "/" + "/".join(_path_segments(path)[:2])
        if has_git_suffix:
            new_path += ".git"
        return cls(url._replace(path=new_path, query="", fragment=""))

    def is_valid(self) -> bool:
        segments = _path_segments(self.url.path)
        if segments and segments[0] == "blog":
            logger.info('github: the user or organization named "blog" is invalid on github, '
                        '"https://github.com/blog" is redirected to "https://github.blog".')
            return False
        return len(segments) >= 2

    def resolve_backend(self) -> Tuple[VCSBackend, SplitResult]:
        return GIT_BACKEND, self.url


@dataclass(frozen=True)
class GitHubGistRepository:
    """A gist. Every gist is a plain git repository."""
    url: SplitResult

    def is_valid(self) -> bool:
        return True

    def resolve_backend(self) -> Tuple[VCSBackend, SplitResult]:
        return GIT_BACKEND, self.url


@dataclass(frozen=True)
class DarcsHubRepository:
    """A repository on hub.darcs.net, always ``/user/repo``."""
    url: SplitResult

    def is_valid(self) -> bool:
        return self.url.path.count("/") == 2

    def resolve_backend(self) -> Tuple[VCSBackend, SplitResult]:
        return DARCS_BACKEND, self.url


@dataclass(frozen=True)
class OtherRepository:
    """
    A repository on a host without special handling.

    The backend is detected by, in order: a ``url_rules`` vcs setting
    (longest prefix), a ``git+``/``svn+``/``bzr+`` scheme, ``git ls-remote``,
    go-import discovery, ``hg identify`` and ``svn info``. Hosts named
    ``svn.*`` try ``svn info`` first.
    """
    url: SplitResult
    config: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)
    go_import: Optional[GoImportClient] = field(default=None, compare=False, repr=False)

    def is_valid(self) -> bool:
        return True

    def resolve_backend(self) -> Tuple[VCSBackend, SplitResult]:
        url_str = url_to_string(self.url)

        vcs = match_url_rule(self.config, url_str, "vcs")
        if vcs:
            backend = get_backend(vcs)
            if backend is not None:
                return backend, self.url
            logger.warning(f"Unknown vcs {vcs!r} configured for {url_str}")

        matched = VCS_SCHEME_PATTERN.match(self.url.scheme)
        if matched:
            return SCHEME_BACKENDS[matched.group(1)], self.url

        may_be_svn = hostname(self.url).startswith("svn.")
        if may_be_svn and run_silently(["svn", "info", url_str]):
            return SUBVERSION_BACKEND, self.url

        if run_silently(["git", "ls-remote", url_str]):
            return GIT_BACKEND, self.url

        cause: Optional[Exception] = None
        try:
            vcs, repo_url = (self.go_import or GoImportClient()).detect(self.url)
        except (NoImportMetaFoundError, requests.RequestException) as e:
            logger.debug(f"go-import discovery failed for {url_str}: {e}")
            cause = e
        else:
            backend = get_backend(vcs)
            if backend is not None:
                return backend, repo_url
            cause = UnsupportedOperationError(f"go-import declares unsupported vcs {vcs!r}")

        if run_silently(["hg", "identify", url_str]):
            return MERCURIAL_BACKEND, self.url

        if not may_be_svn and run_silently(["svn", "info", url_str]):
            return SUBVERSION_BACKEND, self.url

        raise BackendUndetectableError(url_str, cause)


def classify(url: SplitResult, config: Optional[Dict[str, Any]] = None,
             go_import: Optional[GoImportClient] = None) -> RemoteRepository:
    """Pick the variant for ``url`` from its host alone."""
    if config is None:
        config = load_config()
    host = hostname(url).lower()

    if host in (h.lower() for h in github_hosts(config)):
        return GitHubRepository.from_url(url)
    if host == GIST_HOST:
        return GitHubGistRepository(url)
    if host == DARCSHUB_HOST:
        return DarcsHubRepository(url)
    return OtherRepository(url, config=config, go_import=go_import)


def new_remote_repository(url: SplitResult, config: Optional[Dict[str, Any]] = None,
                          go_import: Optional[GoImportClient] = None) -> RemoteRepository:
    """
    Classify ``url`` and check that it names a repository.

    Raises:
        InvalidRepositoryError: if the host-specific check fails
    """
    repo = classify(url, config=config, go_import=go_import)
    if not repo.is_valid():
        raise InvalidRepositoryError(url_to_string(url))
    return repo
