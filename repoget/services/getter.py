"""
Get service for repoget.

Turns references into local checkouts: clones what is missing, updates
what exists when asked, and runs bulk imports sequentially or on a
bounded worker pool.
"""

import logging
import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
from typing import Any, Dict, Iterable, Optional, Set

from ..config import load_config
from ..domain.operation import GetResult, ImportSummary, OperationStatus
from ..domain.remote_repository import new_remote_repository
from ..exit_codes import (
    CommandError,
    DestinationConflictError,
    UnsupportedOperationError,
    UsageError,
)
from ..infra.go_import import GoImportClient
from ..infra.vcs import get_backend
from ..url import hostname, new_url, url_to_string
from .local_index import LocalRepositoryIndex

logger = logging.getLogger(__name__)

DEFAULT_PARALLEL_WIDTH = 6


@dataclass
class GetOptions:
    """Options for get and import."""
    update: bool = False
    shallow: bool = False
    silent: bool = False
    ssh: bool = False
    recursive: bool = True
    bare: bool = False
    vcs: Optional[str] = None
    branch: Optional[str] = None


def _trim_repo_path(path: str) -> str:
    path = path.rstrip('/')
    return path[:-len(".git")] if path.endswith(".git") else path


def detect_local_repo_root(remote_path: str, repo_path: str) -> str:
    """
    Part of ``remote_path`` that names the repository root.

    go-import may declare a repository root shallower than the requested
    path (``golang.org/x/net/http2`` lives in ``.../net``). The longest
    tail of ``repo_path`` found in ``remote_path`` marks where the
    checkout belongs. Returns "" when nothing lines up.
    """
    remote_path = _trim_repo_path(remote_path)
    parts = _trim_repo_path(repo_path).split('/')[1:]
    for i in range(len(parts)):
        tail = "/".join(p for p in parts[i:] if p)
        if not tail:
            continue
        sub_path = "/" + tail
        idx = remote_path.find(sub_path)
        if idx >= 0:
            return remote_path[:idx] + sub_path
    return ""


class Getter:
    """
    Clones or updates repositories named by references.

    A destination is cloned or updated at most once per Getter, even when
    several references resolve to it concurrently.

    Example:
        getter = Getter(GetOptions(update=True))
        result = getter.get("motemen/ghq")
        print(result.status.value, result.path)
    """

    def __init__(
        self,
        options: Optional[GetOptions] = None,
        config: Optional[Dict[str, Any]] = None,
        index: Optional[LocalRepositoryIndex] = None,
        go_import: Optional[GoImportClient] = None,
    ):
        """
        Initialize Getter.

        Args:
            options: Get options (defaults if None)
            config: Configuration dict (loads from file if None)
            index: Local repository index (creates one from config if None)
            go_import: go-import client used for backend detection
        """
        self.options = options or GetOptions()
        self.config = config if config is not None else load_config()
        self.index = index or LocalRepositoryIndex(self.config)
        self.go_import = go_import
        self._seen: Set[str] = set()
        self._seen_lock = threading.Lock()

    def _claim(self, path: str) -> bool:
        """True the first time ``path`` is claimed."""
        with self._seen_lock:
            if path in self._seen:
                return False
            self._seen.add(path)
            return True

    @property
    def parallel_width(self) -> int:
        width = self.config.get("general", {}).get("parallel_width") or DEFAULT_PARALLEL_WIDTH
        try:
            return max(1, int(width))
        except (TypeError, ValueError) as e:
            raise UsageError(
                f"general.parallel_width must be an integer, got {width!r}") from e

    def get(self, ref: str, branch: Optional[str] = None) -> GetResult:
        """
        Clone or update the repository named by ``ref``.

        Args:
            ref: Reference in any accepted form; a trailing ``@branch``
                selects a branch when none is given otherwise
            branch: Branch to clone

        Raises:
            CommandError: resolution, backend or subprocess failure
        """
        return self._get(ref, branch, self.options.silent)

    def _get(self, ref: str, branch: Optional[str], silent: bool) -> GetResult:
        options = self.options
        url = new_url(ref, ssh=options.ssh, config=self.config)

        ref_branch = None
        if '@' in url.path:
            path, ref_branch = url.path.rsplit('@', 1)
            url = url._replace(path=path)
        branch = branch or options.branch or ref_branch or None

        remote = new_remote_repository(url, config=self.config, go_import=self.go_import)
        remote_url = remote.url
        remote_url_str = url_to_string(remote_url)
        local = self.index.from_url(remote_url)

        if not os.path.exists(local.full_path):
            logger.info(f"clone {remote_url_str} -> {local.full_path}")

            repo_url = remote_url
            backend = None
            if options.vcs:
                backend = get_backend(options.vcs)
                if backend is None:
                    raise UnsupportedOperationError(f"unknown vcs: {options.vcs}")
            else:
                backend, repo_url = remote.resolve_backend()

            dest = local.full_path
            sub_path = detect_local_repo_root(remote_url.path, repo_url.path)
            if sub_path:
                dest = os.path.join(local.root_path, hostname(remote_url), *sub_path.strip('/').split('/'))
            if options.bare:
                dest += ".git"

            if not self._claim(dest):
                return GetResult(ref, OperationStatus.SKIPPED, path=dest,
                                 url=remote_url_str, vcs=backend.name)

            backend.clone(
                url_to_string(repo_url), dest,
                shallow=options.shallow,
                silent=silent,
                branch=branch,
                recursive=options.recursive,
                bare=options.bare,
            )
            return GetResult(ref, OperationStatus.CLONED, path=dest,
                             url=url_to_string(repo_url), vcs=backend.name)

        if options.update:
            logger.info(f"update {local.full_path}")
            backend = local.vcs()
            if backend is None:
                raise DestinationConflictError(local.full_path, "failed to detect VCS")

            if not self._claim(local.full_path):
                return GetResult(ref, OperationStatus.SKIPPED, path=local.full_path,
                                 url=remote_url_str, vcs=backend.name)

            backend.update(local.full_path, silent=silent, recursive=options.recursive)
            return GetResult(ref, OperationStatus.UPDATED, path=local.full_path,
                             url=remote_url_str, vcs=backend.name)

        logger.info(f"exists {local.full_path}")
        return GetResult(ref, OperationStatus.EXISTS, path=local.full_path, url=remote_url_str)

    def _get_one(self, ref: str, silent: bool) -> GetResult:
        """Like ``get`` but records failures instead of raising."""
        try:
            return self._get(ref, None, silent)
        except (CommandError, OSError) as e:
            logger.error(f"{ref}: {e}")
            return GetResult(ref, OperationStatus.FAILED, error=str(e))

    def get_all(self, refs: Iterable[str], parallel: bool = False,
                fail_fast: bool = True) -> ImportSummary:
        """
        Get many references.

        Sequential runs stop at the first failure when ``fail_fast`` is set.
        Parallel runs use ``general.parallel_width`` workers, force silent
        VCS commands and never stop early.

        Returns:
            ImportSummary with one result per reference
        """
        summary = ImportSummary()
        refs = list(refs)

        if not parallel:
            for ref in refs:
                if fail_fast:
                    result = self.get(ref)
                else:
                    result = self._get_one(ref, self.options.silent)
                summary.add_result(result)
            return summary

        with ThreadPoolExecutor(max_workers=self.parallel_width) as executor:
            futures = {executor.submit(self._get_one, ref, True): ref for ref in refs}

            for future in as_completed(futures):
                summary.add_result(future.result())

        return summary

    def import_references(self, lines: Iterable[str], parallel: bool = False) -> ImportSummary:
        """Get every non-blank line of ``lines``, logging failures per reference."""
        refs = [line.strip() for line in lines if line.strip()]
        return self.get_all(refs, parallel=parallel, fail_fast=False)
