"""
Domain layer for repoget.

Contains the objects repoget reasons about:
- LocalRepository: a checkout under a local root
- RemoteRepository variants: host-specific remote identities
- GetResult / ImportSummary: outcomes of get and import

These objects are immutable where possible and provide
serialization methods for JSONL output.
"""

from .local_repository import LocalRepository
from .operation import GetResult, ImportSummary, OperationStatus
from .remote_repository import (
    RemoteRepository,
    GitHubRepository,
    GitHubGistRepository,
    DarcsHubRepository,
    OtherRepository,
    classify,
    new_remote_repository,
)

__all__ = [
    'LocalRepository',
    'GetResult',
    'ImportSummary',
    'OperationStatus',
    'RemoteRepository',
    'GitHubRepository',
    'GitHubGistRepository',
    'DarcsHubRepository',
    'OtherRepository',
    'classify',
    'new_remote_repository',
]
