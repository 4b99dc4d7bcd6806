"""
repoget - Clone remote repositories into a predictable local layout.

Quick Start:
    from repoget import Getter, GetOptions, LocalRepositoryIndex

    # Clone (or update with update=True) into <root>/<host>/<owner>/<project>
    result = Getter(GetOptions()).get("motemen/ghq")
    print(result.status.value, result.path)

    # Walk the local roots
    for repo in LocalRepositoryIndex().repositories():
        print(repo.rel_path)

Domain Objects:
    LocalRepository - A checkout under a local root
    GitHubRepository, GitHubGistRepository, DarcsHubRepository,
    OtherRepository - Remote identities per host
    GetResult, ImportSummary - Outcomes of get and import

Services:
    LocalRepositoryIndex - Roots, walking, lookups, destinations
    RepositoryQuery - List filtering
    Getter - Clone, update and bulk import
"""

__version__ = "0.1.0"

# Domain objects
from .domain import (
    LocalRepository,
    GetResult,
    ImportSummary,
    OperationStatus,
    RemoteRepository,
    GitHubRepository,
    GitHubGistRepository,
    DarcsHubRepository,
    OtherRepository,
    new_remote_repository,
)

# Services
from .services import (
    LocalRepositoryIndex,
    RepositoryQuery,
    unique_subpaths,
    GetOptions,
    Getter,
)

# URLs and backends
from .url import new_url
from .infra import VCS_REGISTRY, get_backend

# Configuration
from .config import load_config

__all__ = [
    "__version__",
    "LocalRepository",
    "GetResult",
    "ImportSummary",
    "OperationStatus",
    "RemoteRepository",
    "GitHubRepository",
    "GitHubGistRepository",
    "DarcsHubRepository",
    "OtherRepository",
    "new_remote_repository",
    "LocalRepositoryIndex",
    "RepositoryQuery",
    "unique_subpaths",
    "GetOptions",
    "Getter",
    "new_url",
    "VCS_REGISTRY",
    "get_backend",
    "load_config",
]
