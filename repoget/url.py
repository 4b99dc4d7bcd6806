"""
Reference normalization for repoget.

Turns anything a user may type (``project``, ``owner/project``,
``github.com/owner/project``, ``git@host:owner/project.git``, full URLs and
``../sibling`` paths inside a root) into an absolute URL.
"""

import logging
import os
import re
from typing import Any, Dict, List, Optional
from urllib.parse import SplitResult, urlsplit, urlunsplit

from .config import load_config, local_repository_roots
from .exit_codes import InvalidReferenceError
from .utils import run_command

logger = logging.getLogger(__name__)

HAS_SCHEME_PATTERN = re.compile(r"^[^:]+://")
# [user@]host.xz:path/to/repo.git/  (ref. git-fetch "GIT URLS")
SCP_LIKE_URL_PATTERN = re.compile(r"^([^@/]+@)?([^:/]+):(/?.+)$")
LOOKS_LIKE_AUTHORITY_PATTERN = re.compile(r"[A-Za-z0-9]\.[A-Za-z]+(?::\d{1,5})?$")


def has_scheme(ref: str) -> bool:
    return bool(HAS_SCHEME_PATTERN.match(ref))


def is_scp_like(ref: str) -> bool:
    return not has_scheme(ref) and bool(SCP_LIKE_URL_PATTERN.match(ref))


def looks_like_authority(segment: str) -> bool:
    """True for things like ``github.com`` or ``git.example.org:8080``."""
    return bool(LOOKS_LIKE_AUTHORITY_PATTERN.search(segment))


def host_with_port(url: SplitResult) -> str:
    """Netloc without userinfo."""
    return url.netloc.rpartition('@')[2]


def hostname(url: SplitResult) -> str:
    """Host part of the URL, case preserved, without userinfo or port."""
    host = host_with_port(url)
    if host.startswith('['):
        return host[:host.find(']') + 1]
    return host.split(':', 1)[0]


def url_to_string(url: SplitResult) -> str:
    return urlunsplit(url)


def new_url(ref: str, ssh: bool = False, force_me: bool = False,
            config: Optional[Dict[str, Any]] = None,
            roots: Optional[List[str]] = None) -> SplitResult:
    """
    Normalize a repository reference into an absolute URL.

    Args:
        ref: Reference as typed by the user
        ssh: Rewrite the result to an ``ssh://`` URL
        force_me: Always complete a bare project name with the current user
        config: Configuration dict (loads from file if None)
        roots: Local roots used to resolve ``./`` and ``../`` references

    Raises:
        InvalidReferenceError: if the reference cannot be parsed
    """
    if config is None:
        config = load_config()
    original = ref
    if not ref:
        raise InvalidReferenceError(original, "empty reference")

    ref = ref.replace(os.sep, '/')
    first = ref.split('/', 1)[0]
    if first in ('.', '..'):
        if roots is None:
            roots = local_repository_roots(config)
        resolved = _resolve_relative(ref, roots)
        if resolved:
            logger.info(f"resolved relative {ref!r} to {resolved!r}")
            ref = resolved

    if not has_scheme(ref):
        matched = SCP_LIKE_URL_PATTERN.match(ref)
        if matched:
            user, host, path = matched.groups()
            # Relative and absolute SCP paths are treated the same way
            ref = f"ssh://{user or ''}{host}/{path.lstrip('/')}"
        else:
            segments = ref.split('/')
            if len(segments) > 1 and looks_like_authority(segments[0]):
                ref = "https://" + ref

    try:
        url = urlsplit(ref)
        url.port  # raises ValueError on a malformed port
    except ValueError as e:
        raise InvalidReferenceError(original, str(e)) from e

    if url.scheme and not url.netloc:
        raise InvalidReferenceError(original, "missing host")

    if not url.scheme:
        path = url.path
        if not path.strip('/'):
            raise InvalidReferenceError(original, "empty repository path")
        if '/' not in path:
            path = _fill_username(original, path, config, force_me)
        if not path.startswith('/'):
            path = '/' + path
        default_host = config.get("general", {}).get("default_host") or "github.com"
        url = url._replace(scheme="https", netloc=default_host, path=path)

    if ssh:
        url = convert_git_url_http_to_ssh(url)

    return url


def convert_git_url_http_to_ssh(url: SplitResult) -> SplitResult:
    """``https://github.com/a/b`` -> ``ssh://git@github.com/a/b``"""
    user = url.username or "git"
    return urlsplit(f"ssh://{user}@{host_with_port(url)}{url.path}")


def detect_user_name(config: Dict[str, Any]) -> Optional[str]:
    """Owner used to complete bare project names."""
    user = config.get("general", {}).get("user")
    if user:
        return user

    output, returncode = run_command(
        ["git", "config", "--get", "github.user"],
        silent=True, capture_output=True, check=False,
    )
    if returncode == 0 and output and output.strip():
        return output.strip()

    return os.environ.get("USER") or os.environ.get("USERNAME") or None


def _fill_username(ref: str, path: str, config: Dict[str, Any], force_me: bool) -> str:
    if not force_me and not config.get("general", {}).get("complete_user", True):
        return f"{path}/{path}"
    user = detect_user_name(config)
    if not user:
        raise InvalidReferenceError(
            ref, "failed to detect username; set general.user in the config")
    return f"{user}/{path}"


def _resolve_relative(ref: str, roots: List[str]) -> Optional[str]:
    """Map ``../other`` inside a root onto ``https://host/owner/other``."""
    cwd = os.path.realpath(os.getcwd())
    path = os.path.normpath(os.path.join(cwd, *ref.split('/')))

    best = ""
    for root in roots:
        prefix = root.rstrip(os.sep) + os.sep
        if path.startswith(prefix):
            rel = path[len(prefix):]
            if not best or len(rel) < len(best):
                best = rel

    if not best:
        return None
    return "https://" + best.replace(os.sep, '/')
