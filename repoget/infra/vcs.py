"""
VCS backends for repoget.

Each backend is an immutable bundle of plain functions that shell out to
the VCS command-line tool. ``VCS_REGISTRY`` maps every accepted name
(including aliases such as ``hg`` or ``svn``) to its backend.

All functions are synchronous and raise SubprocessFailureError when the
tool fails or is not installed. ``silent`` discards the tool's output but
never hides a failure.
"""

import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Callable, Mapping, Optional, Tuple
from urllib.parse import quote, urlsplit, urlunsplit

from ..exit_codes import UnsupportedOperationError
from ..utils import run_command, run_silently

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class VCSBackend:
    """
    A VCS tool bound to its clone/update/init verbs.

    Attributes:
        name: Canonical backend name
        clone: ``clone(url, dest, shallow, silent, branch, recursive, bare)``
        update: ``update(dest, silent, recursive)``
        contents: Marker paths whose presence identifies a checkout
        init: ``init(dest)`` or None when the tool cannot create repositories
        remote_url: ``remote_url(dest)`` returning the URL a checkout was
            cloned from, or None when the tool has no such notion
    """
    name: str
    clone: Callable[..., None]
    update: Callable[..., None]
    contents: Tuple[str, ...]
    init: Optional[Callable[[str], None]] = None
    remote_url: Optional[Callable[[str], str]] = None

    def __repr__(self) -> str:
        return f"VCSBackend({self.name!r})"


def _ensure_parent(dest: str) -> None:
    Path(dest).parent.mkdir(parents=True, exist_ok=True)


# ---------------------------------------------------------------------------
# git
# ---------------------------------------------------------------------------

def _git_clone(url: str, dest: str, shallow: bool = False, silent: bool = False,
               branch: Optional[str] = None, recursive: bool = False,
               bare: bool = False) -> None:
    _ensure_parent(dest)

    args = ["git", "clone"]
    if shallow:
        args += ["--depth", "1"]
    if branch:
        args += ["--branch", branch, "--single-branch"]
    if recursive:
        args.append("--recursive")
    if bare:
        args.append("--bare")
    args += [url, dest]

    run_command(args, silent=silent)


def _git_update(dest: str, silent: bool = False, recursive: bool = False) -> None:
    if os.path.exists(os.path.join(dest, ".git", "svn")):
        _gitsvn_update(dest, silent=silent)
        return

    if not run_silently(["git", "rev-parse", "@{upstream}"], cwd=dest):
        # Nothing to pull from; at least refresh the remote refs
        run_command(["git", "fetch"], cwd=dest, silent=silent)
        return

    run_command(["git", "pull", "--ff-only"], cwd=dest, silent=silent)
    if recursive:
        run_command(["git", "submodule", "update", "--init", "--recursive"],
                    cwd=dest, silent=silent)


def _git_init(dest: str) -> None:
    run_command(["git", "init"], cwd=dest)


def _git_remote_url(dest: str) -> str:
    output, _ = run_command(["git", "config", "--get", "remote.origin.url"], cwd=dest,
                            silent=True, capture_output=True)
    return (output or "").strip()


# ---------------------------------------------------------------------------
# subversion / git-svn
#
# Standard layouts are checked out into the project directory:
#   svn.example.com/proj/repo, .../repo/trunk, .../repo/branches/x and
#   .../repo/tags/v1 all land in $root/svn.example.com/proj/repo.
# ---------------------------------------------------------------------------

TRUNK = "/trunk"
SVN_BRANCH_PATTERN = re.compile(r"/(?:tags|branches)/[^/]+$")
SVN_LAST_REV_PATTERN = re.compile(r"^Last Changed Rev: (\d+)$", re.MULTILINE)


def svn_base(path: str) -> str:
    """Strip a trailing ``/trunk``, ``/branches/<x>`` or ``/tags/<x>``."""
    if path.endswith(TRUNK):
        return path[:-len(TRUNK)]
    return SVN_BRANCH_PATTERN.sub("", path, count=1)


def _svn_branch_url(url: str, branch: str) -> str:
    parsed = urlsplit(url)
    path = svn_base(parsed.path) + "/branches/" + quote(branch, safe="")
    return urlunsplit(parsed._replace(path=path))


def _svn_trunk_url(url: str) -> str:
    parsed = urlsplit(url)
    return urlunsplit(parsed._replace(path=parsed.path + TRUNK))


def _svn_clone(url: str, dest: str, shallow: bool = False, silent: bool = False,
               branch: Optional[str] = None, recursive: bool = False,
               bare: bool = False) -> None:
    dest = svn_base(dest)
    _ensure_parent(dest)

    args = ["svn", "checkout"]
    if shallow:
        args += ["--depth", "immediates"]

    remote = url
    if branch:
        remote = _svn_branch_url(url, branch)
    elif not urlsplit(url).path.endswith(TRUNK):
        candidate = _svn_trunk_url(url)
        if run_silently(["svn", "info", candidate]):
            remote = candidate
    args += [remote, dest]

    run_command(args, silent=silent)


def _svn_update(dest: str, silent: bool = False, recursive: bool = False) -> None:
    run_command(["svn", "update"], cwd=dest, silent=silent)


def _svn_info(url: str, check: bool) -> Tuple[str, int]:
    output, returncode = run_command(["svn", "info", url], silent=True,
                                     capture_output=True, check=check)
    return output or "", returncode


def _gitsvn_clone(url: str, dest: str, shallow: bool = False, silent: bool = False,
                  branch: Optional[str] = None, recursive: bool = False,
                  bare: bool = False) -> None:
    original_dest = dest
    dest = svn_base(dest)
    standard = original_dest == dest
    _ensure_parent(dest)

    args = ["git", "svn", "clone"]
    svn_info = ""
    remote = url
    if branch:
        remote = _svn_branch_url(url, branch)
    elif standard:
        info, returncode = _svn_info(_svn_trunk_url(url), check=False)
        if returncode == 0:
            args.append("-s")
            svn_info = info

    if shallow:
        if not svn_info:
            svn_info, _ = _svn_info(remote, check=True)
        matched = SVN_LAST_REV_PATTERN.search(svn_info)
        if not matched:
            raise UnsupportedOperationError(
                f"no revisions are taken from svn info output: {svn_info}")
        args.append(f"-r{matched.group(1)}:HEAD")

    args += [remote, dest]
    run_command(args, silent=silent)


def _gitsvn_update(dest: str, silent: bool = False, recursive: bool = False) -> None:
    run_command(["git", "svn", "rebase"], cwd=dest, silent=silent)


# ---------------------------------------------------------------------------
# mercurial, darcs, bazaar, fossil
# ---------------------------------------------------------------------------

def _hg_clone(url: str, dest: str, shallow: bool = False, silent: bool = False,
              branch: Optional[str] = None, recursive: bool = False,
              bare: bool = False) -> None:
    # Mercurial has no shallow clone
    _ensure_parent(dest)
    args = ["hg", "clone"]
    if branch:
        args += ["--branch", branch]
    args += [url, dest]
    run_command(args, silent=silent)


def _hg_update(dest: str, silent: bool = False, recursive: bool = False) -> None:
    run_command(["hg", "pull", "--update"], cwd=dest, silent=silent)


def _hg_init(dest: str) -> None:
    run_command(["hg", "init"], cwd=dest)


def _hg_remote_url(dest: str) -> str:
    output, _ = run_command(["hg", "paths", "default"], cwd=dest,
                            silent=True, capture_output=True)
    return (output or "").strip()


def _darcs_clone(url: str, dest: str, shallow: bool = False, silent: bool = False,
                 branch: Optional[str] = None, recursive: bool = False,
                 bare: bool = False) -> None:
    if branch:
        raise UnsupportedOperationError("darcs does not support branch")
    _ensure_parent(dest)
    args = ["darcs", "get"]
    if shallow:
        args.append("--lazy")
    args += [url, dest]
    run_command(args, silent=silent)


def _darcs_update(dest: str, silent: bool = False, recursive: bool = False) -> None:
    run_command(["darcs", "pull"], cwd=dest, silent=silent)


def _darcs_init(dest: str) -> None:
    run_command(["darcs", "init"], cwd=dest)


def _bzr_clone(url: str, dest: str, shallow: bool = False, silent: bool = False,
               branch: Optional[str] = None, recursive: bool = False,
               bare: bool = False) -> None:
    if branch:
        raise UnsupportedOperationError(
            "--branch option is unavailable for Bazaar since branch is included in remote URL")
    _ensure_parent(dest)
    run_command(["bzr", "branch", url, dest], silent=silent)


def _bzr_update(dest: str, silent: bool = False, recursive: bool = False) -> None:
    # Without --overwrite bzr does not pull tags that changed
    run_command(["bzr", "pull", "--overwrite"], cwd=dest, silent=silent)


def _bzr_init(dest: str) -> None:
    run_command(["bzr", "init"], cwd=dest)


FOSSIL_REPO_NAME = ".fossil"


def _fossil_clone(url: str, dest: str, shallow: bool = False, silent: bool = False,
                  branch: Optional[str] = None, recursive: bool = False,
                  bare: bool = False) -> None:
    if branch:
        raise UnsupportedOperationError("fossil does not support cloning specific branch")
    Path(dest).mkdir(parents=True, exist_ok=True)
    run_command(["fossil", "clone", url, os.path.join(dest, FOSSIL_REPO_NAME)], silent=silent)
    run_command(["fossil", "open", FOSSIL_REPO_NAME], cwd=dest, silent=silent)


def _fossil_update(dest: str, silent: bool = False, recursive: bool = False) -> None:
    run_command(["fossil", "update"], cwd=dest, silent=silent)


def _fossil_init(dest: str) -> None:
    run_command(["fossil", "init", FOSSIL_REPO_NAME], cwd=dest)
    run_command(["fossil", "open", FOSSIL_REPO_NAME], cwd=dest)


def _cvs_clone(url: str, dest: str, **kwargs) -> None:
    raise UnsupportedOperationError("CVS clone is not supported")


def _cvs_update(dest: str, **kwargs) -> None:
    raise UnsupportedOperationError("CVS update is not supported")


# ---------------------------------------------------------------------------
# Registry
# ---------------------------------------------------------------------------

GIT_BACKEND = VCSBackend("git", _git_clone, _git_update, (".git",), _git_init,
                         remote_url=_git_remote_url)
SUBVERSION_BACKEND = VCSBackend("subversion", _svn_clone, _svn_update, (".svn",))
GITSVN_BACKEND = VCSBackend("git-svn", _gitsvn_clone, _gitsvn_update, (".git/svn",))
MERCURIAL_BACKEND = VCSBackend("mercurial", _hg_clone, _hg_update, (".hg",), _hg_init,
                               remote_url=_hg_remote_url)
DARCS_BACKEND = VCSBackend("darcs", _darcs_clone, _darcs_update, ("_darcs",), _darcs_init)
BAZAAR_BACKEND = VCSBackend("bazaar", _bzr_clone, _bzr_update, (".bzr",), _bzr_init)
FOSSIL_BACKEND = VCSBackend("fossil", _fossil_clone, _fossil_update,
                            (".fslckout", "_FOSSIL_"), _fossil_init)
CVS_BACKEND = VCSBackend("cvs", _cvs_clone, _cvs_update, ("CVS/Repository",))

VCS_REGISTRY: Mapping[str, VCSBackend] = MappingProxyType({
    "git": GIT_BACKEND,
    "github": GIT_BACKEND,
    "svn": SUBVERSION_BACKEND,
    "subversion": SUBVERSION_BACKEND,
    "git-svn": GITSVN_BACKEND,
    "hg": MERCURIAL_BACKEND,
    "mercurial": MERCURIAL_BACKEND,
    "darcs": DARCS_BACKEND,
    "bzr": BAZAAR_BACKEND,
    "bazaar": BAZAAR_BACKEND,
    "fossil": FOSSIL_BACKEND,
    "cvs": CVS_BACKEND,
})

# Detection order used when the backend of a checkout is unknown
VCS_CONTENTS: Tuple[Tuple[str, VCSBackend], ...] = (
    (".git", GIT_BACKEND),
    (".hg", MERCURIAL_BACKEND),
    (".svn", SUBVERSION_BACKEND),
    ("_darcs", DARCS_BACKEND),
    (".bzr", BAZAAR_BACKEND),
    (".fslckout", FOSSIL_BACKEND),
    ("_FOSSIL_", FOSSIL_BACKEND),
    ("CVS/Repository", CVS_BACKEND),
)


def get_backend(name: Optional[str]) -> Optional[VCSBackend]:
    """Look up a backend by name or alias."""
    if not name:
        return None
    return VCS_REGISTRY.get(name.lower())


def find_vcs_backend(path: str, vcs: Optional[str] = None) -> Optional[VCSBackend]:
    """
    Detect the backend of a checkout from its marker files.

    When ``vcs`` is given, only that backend's markers are checked.
    """
    if vcs:
        backend = get_backend(vcs)
        if backend is None:
            return None
        for marker in backend.contents:
            if os.path.exists(os.path.join(path, marker)):
                return backend
        return None

    for marker, backend in VCS_CONTENTS:
        if os.path.exists(os.path.join(path, marker)):
            return backend
    return None
