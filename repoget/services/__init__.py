"""
Service layer for repoget.

Contains logic that orchestrates domain objects and infrastructure:
- LocalRepositoryIndex: roots, walking, lookups, destinations
- RepositoryQuery: list filtering
- Getter: clone, update and bulk import

Services are the primary API for commands to use.
"""

from .local_index import LocalRepositoryIndex, RepositoryQuery, unique_subpaths
from .getter import GetOptions, Getter

__all__ = [
    'LocalRepositoryIndex',
    'RepositoryQuery',
    'unique_subpaths',
    'GetOptions',
    'Getter',
]
