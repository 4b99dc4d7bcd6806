"""
Local repository index for repoget.

Knows the configured roots, walks them for checkouts laid out as
``<root>/<host>/<owner>/<project>``, answers list queries and maps remote
URLs onto local destinations.
"""

from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import SplitResult
import logging
import os
import threading

from ..config import load_config, local_repository_roots, match_url_rule, normalize_root
from ..domain.local_repository import REPOSITORY_DEPTH, LocalRepository
from ..exit_codes import CommandError, UsageError
from ..infra.vcs import find_vcs_backend
from ..url import has_scheme, hostname, is_scp_like, looks_like_authority, new_url, url_to_string

logger = logging.getLogger(__name__)


def url_path_parts(url: SplitResult) -> List[str]:
    """``https://github.com/motemen/ghq.git`` -> ``['github.com', 'motemen', 'ghq']``"""
    parts = [hostname(url)] + [s for s in url.path.split('/') if s]
    if len(parts) > 1 and parts[-1].endswith(".git"):
        parts[-1] = parts[-1][:-len(".git")]
    return parts


class LocalRepositoryIndex:
    """
    Service for discovering and locating local repositories.

    Example:
        index = LocalRepositoryIndex()
        for repo in index.repositories():
            print(repo.rel_path)
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize LocalRepositoryIndex.

        Args:
            config: Configuration dict (loads from file if None)
        """
        self.config = config if config is not None else load_config()

    def roots(self, all_roots: bool = True) -> List[str]:
        return local_repository_roots(self.config, all_roots=all_roots)

    def primary_root(self) -> str:
        return self.roots(all_roots=False)[0]

    def root_for_url(self, url: SplitResult) -> str:
        """Root declared by the best matching URL rule, else the primary root."""
        root = match_url_rule(self.config, url_to_string(url), "root")
        if root:
            return normalize_root(root)
        return self.primary_root()

    def walk(self, visit: Callable[[LocalRepository], None], vcs: Optional[str] = None) -> None:
        """
        Call ``visit`` for every checkout under every root.

        Each root is walked on its own thread. ``visit`` is always called
        while holding one shared lock, so it may mutate shared state.

        Args:
            visit: Callback receiving each LocalRepository
            vcs: Only report checkouts of this backend
        """
        roots = self.roots()
        if not roots:
            return
        lock = threading.Lock()

        def walk_root(root: str) -> None:
            if not os.path.isdir(root):
                logger.debug(f"Skipping missing root: {root}")
                return
            self._walk_dir(root, root, 0, vcs, visit, lock)

        with ThreadPoolExecutor(max_workers=len(roots)) as executor:
            futures = [executor.submit(walk_root, root) for root in roots]
            for future in futures:
                future.result()

    def _walk_dir(self, root: str, path: str, depth: int, vcs: Optional[str],
                  visit: Callable[[LocalRepository], None], lock: threading.Lock) -> None:
        if depth == REPOSITORY_DEPTH:
            if find_vcs_backend(path, vcs) is None:
                return
            repo = LocalRepository.from_full_path(root, path)
            if repo is not None:
                with lock:
                    visit(repo)
            return

        try:
            with os.scandir(path) as it:
                entries = sorted((e for e in it if e.is_dir()), key=lambda e: e.name)
        except OSError as e:
            logger.debug(f"{path}: {e.strerror or e}")
            return

        for entry in entries:
            self._walk_dir(root, entry.path, depth + 1, vcs, visit, lock)

    def repositories(self, vcs: Optional[str] = None) -> List[LocalRepository]:
        """All checkouts, the primary root's first, each root in walk order."""
        found: Dict[str, List[LocalRepository]] = {}
        self.walk(lambda repo: found.setdefault(repo.root_path, []).append(repo), vcs=vcs)
        return [repo for root in self.roots() for repo in found.get(root, [])]

    def from_url(self, url: SplitResult) -> LocalRepository:
        """
        Local destination for a remote URL.

        An existing checkout with the same relative path under any root
        wins. Otherwise the destination is under the URL rule root or the
        primary root.
        """
        parts = url_path_parts(url)
        for root in self.roots():
            existing = LocalRepository.from_path_parts(root, parts)
            if find_vcs_backend(existing.full_path) is not None:
                return existing
        return LocalRepository.from_path_parts(self.root_for_url(url), parts)

    def is_under_primary_root(self, repo: LocalRepository) -> bool:
        primary = self.primary_root()
        return repo.full_path == primary or repo.full_path.startswith(primary.rstrip(os.sep) + os.sep)

    def find(self, name: str) -> List[LocalRepository]:
        """
        Checkouts whose subpaths equal ``name``.

        When nothing matches, ``name`` is read as a reference and its
        destination is returned if that directory exists.
        """
        query = RepositoryQuery(name, exact=True, config=self.config)
        found = [repo for repo in self.repositories() if query.matches(repo)]
        if found:
            return found

        try:
            repo = self.from_url(new_url(name, config=self.config))
        except CommandError as e:
            logger.debug(f"{name!r} is not a reference either: {e}")
            return []
        return [repo] if os.path.isdir(repo.full_path) else []


class RepositoryQuery:
    """
    Filter for ``repoget list``.

    Exact queries must equal one of a repository's subpaths. Fuzzy queries
    are substrings of ``owner/project``, optionally pinned to a host by an
    authority-looking first segment (``github.com/motemen``).

    Case sensitivity defaults to smart case: an all-lowercase query
    ignores case. Exact queries are always case sensitive.
    """

    def __init__(self, query: str, exact: bool = False, ignore_case: Optional[bool] = None,
                 config: Optional[Dict[str, Any]] = None):
        if exact and ignore_case:
            raise UsageError("exact and ignore-case matching cannot be combined")

        query = query or ""
        if query and (has_scheme(query) or is_scp_like(query)):
            try:
                query = "/".join(url_path_parts(new_url(query, config=config)))
            except CommandError as e:
                logger.debug(f"Using {query!r} verbatim: {e}")

        self.exact = exact
        if exact:
            self.ignore_case = False
        elif ignore_case is None:
            self.ignore_case = query == query.lower()
        else:
            self.ignore_case = ignore_case

        self.query = query
        self.host: Optional[str] = None
        self.path_query = query
        if not exact:
            segments = query.split('/')
            if len(segments) > 1 and looks_like_authority(segments[0]):
                self.host = segments[0]
                self.path_query = "/".join(segments[1:])

    def _fold(self, value: str) -> str:
        return value.casefold() if self.ignore_case else value

    def matches(self, repo: LocalRepository) -> bool:
        if not self.query:
            return True
        if self.exact:
            return repo.matches(self.query)
        if self.host is not None and self._fold(repo.host) != self._fold(self.host):
            return False
        return self._fold(self.path_query) in self._fold(repo.non_host_path())


def unique_subpaths(repos: List[LocalRepository], index: LocalRepositoryIndex) -> List[str]:
    """
    Shortest subpath of each repository that no other repository shares.

    ``repos`` must be ordered primary root first. A checkout present under
    several roots is counted once and reported only from the primary root.
    """
    subpath_count: Counter = Counter()
    repo_count: Counter = Counter()

    for repo in repos:
        if repo_count[repo.rel_path] == 0:
            subpath_count.update(repo.subpaths())
        repo_count[repo.rel_path] += 1

    result = []
    for repo in repos:
        if repo_count[repo.rel_path] > 1 and not index.is_under_primary_root(repo):
            continue
        for subpath in repo.subpaths():
            if subpath_count[subpath] == 1:
                result.append(subpath)
                break
    return result
