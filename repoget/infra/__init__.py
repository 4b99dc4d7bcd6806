"""
Infrastructure layer for repoget.

Contains abstractions for external systems:
- VCSBackend / VCS_REGISTRY: VCS command-line tools (git, hg, svn, ...)
- GoImportClient: go-import HTTP discovery

These provide clean interfaces that can be mocked for testing.
"""

from .vcs import VCSBackend, VCS_REGISTRY, get_backend, find_vcs_backend
from .go_import import GoImportClient, MetaImport, detect_go_import, parse_go_import

__all__ = [
    'VCSBackend',
    'VCS_REGISTRY',
    'get_backend',
    'find_vcs_backend',
    'GoImportClient',
    'MetaImport',
    'detect_go_import',
    'parse_go_import',
]
