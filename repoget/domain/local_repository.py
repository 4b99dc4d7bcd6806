"""
Local repository domain object for repoget.

A LocalRepository is a checkout at ``<root>/<host>/<owner>/<project>``.
It is immutable and serializable for JSONL output.
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..infra.vcs import VCSBackend, find_vcs_backend

# host, owner, project
REPOSITORY_DEPTH = 3


@dataclass(frozen=True)
class LocalRepository:
    """
    A repository checked out under one of the local roots.

    Attributes:
        full_path: Absolute path of the checkout
        rel_path: ``host/owner/project``, always with forward slashes
        root_path: The root directory the checkout lives under
        path_parts: ``rel_path`` split into its segments
    """
    full_path: str
    rel_path: str
    root_path: str
    path_parts: Tuple[str, ...]

    @classmethod
    def from_path_parts(cls, root: str, parts: Sequence[str]) -> 'LocalRepository':
        parts = tuple(parts)
        rel_path = "/".join(parts)
        return cls(
            full_path=os.path.join(root, *parts),
            rel_path=rel_path,
            root_path=root,
            path_parts=parts,
        )

    @classmethod
    def from_full_path(cls, root: str, path: str) -> Optional['LocalRepository']:
        """
        Build a LocalRepository from a directory found under ``root``.

        Returns None unless the path is exactly ``host/owner/project``
        below the root.
        """
        rel = os.path.relpath(path, root)
        if rel.startswith(os.pardir):
            return None
        parts = [p for p in rel.split(os.sep) if p and p != os.curdir]
        if len(parts) != REPOSITORY_DEPTH:
            return None
        return cls(
            full_path=path,
            rel_path="/".join(parts),
            root_path=root,
            path_parts=tuple(parts),
        )

    @property
    def host(self) -> str:
        return self.path_parts[0]

    @property
    def name(self) -> str:
        return self.path_parts[-1]

    def subpaths(self) -> List[str]:
        """Trailing path segments, shortest first: project, owner/project, host/owner/project."""
        n = len(self.path_parts)
        return ["/".join(self.path_parts[n - i:]) for i in range(1, n + 1)]

    def non_host_path(self) -> str:
        return "/".join(self.path_parts[1:])

    def matches(self, path_query: str) -> bool:
        """True if any subpath equals ``path_query`` exactly."""
        return path_query in self.subpaths()

    def vcs(self) -> Optional[VCSBackend]:
        return find_vcs_backend(self.full_path)

    def to_dict(self) -> Dict[str, Any]:
        backend = self.vcs()
        return {
            'path': self.full_path,
            'rel_path': self.rel_path,
            'root': self.root_path,
            'host': self.host,
            'name': self.name,
            'vcs': backend.name if backend else None,
        }
