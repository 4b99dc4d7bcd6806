"""
go-import discovery for repoget.

Hosts that serve Go packages announce the VCS and repository root of a
path through an HTML meta tag:

    <meta name="go-import" content="example.org/pkg git https://example.org/pkg.git">

Fetching ``<url>?go-get=1`` and reading that tag tells us how to clone
hosts we know nothing else about (ref. https://go.dev/ref/mod#vcs-find).
"""

import logging
from dataclasses import dataclass
from html.parser import HTMLParser
from typing import List, Optional, Tuple
from urllib.parse import SplitResult, parse_qsl, urlencode, urlsplit

import requests

from .. import __version__
from ..exit_codes import NoImportMetaFoundError

logger = logging.getLogger(__name__)

USER_AGENT = f"repoget/{__version__}"


@dataclass(frozen=True)
class MetaImport:
    """A parsed ``<meta name="go-import" content="prefix vcs reporoot">`` tag."""
    prefix: str
    vcs: str
    repo_root: str


class _GoImportParser(HTMLParser):
    """Collects go-import meta tags in document order."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.imports: List[MetaImport] = []

    def handle_starttag(self, tag, attrs):
        if tag != "meta":
            return
        attributes = dict(attrs)
        if attributes.get("name") != "go-import":
            return
        fields = (attributes.get("content") or "").split()
        # "mod" points at a module proxy, which is not a VCS
        if len(fields) >= 3 and fields[1] != "mod":
            self.imports.append(MetaImport(fields[0], fields[1], fields[2]))

    handle_startendtag = handle_starttag


def parse_go_import(document: str) -> MetaImport:
    """
    Find the first usable go-import meta tag in an HTML document.

    Raises:
        NoImportMetaFoundError: if the document has none
    """
    parser = _GoImportParser()
    parser.feed(document)
    parser.close()
    if not parser.imports:
        raise NoImportMetaFoundError()
    return parser.imports[0]


def go_get_url(url: SplitResult) -> str:
    """Append ``go-get=1`` to the query of ``url``."""
    query = parse_qsl(url.query, keep_blank_values=True)
    query.append(("go-get", "1"))
    return url._replace(query=urlencode(query), fragment="").geturl()


class GoImportClient:
    """
    Resolves a URL to ``(vcs, repository URL)`` via go-import discovery.

    Example:
        client = GoImportClient()
        vcs, repo_url = client.detect(urlsplit("https://golang.org/x/net"))
    """

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: Optional[float] = None):
        """
        Initialize GoImportClient.

        Args:
            session: requests session to use (creates one if None)
            timeout: HTTP timeout in seconds; None waits indefinitely
        """
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': USER_AGENT,
        })

    def detect(self, url: SplitResult) -> Tuple[str, SplitResult]:
        """
        Query ``url`` for its go-import meta tag.

        Redirects are not followed, so the answer belongs to the exact host
        that was asked.

        Raises:
            NoImportMetaFoundError: no usable meta tag in the response, or
                its repository URL does not parse
            requests.RequestException: the request itself failed
        """
        target = go_get_url(url)
        logger.debug(f"go-import lookup: {target}")
        response = self.session.get(target, allow_redirects=False, timeout=self.timeout)

        try:
            meta = parse_go_import(response.text)
        except NoImportMetaFoundError:
            raise NoImportMetaFoundError(target) from None

        try:
            repo_url = urlsplit(meta.repo_root)
            repo_url.port  # raises ValueError on a malformed port
        except ValueError as e:
            raise NoImportMetaFoundError(target) from e
        if not repo_url.scheme or not repo_url.netloc:
            raise NoImportMetaFoundError(target)

        return meta.vcs, repo_url


def detect_go_import(url: SplitResult,
                     session: Optional[requests.Session] = None) -> Tuple[str, SplitResult]:
    """Convenience wrapper around GoImportClient.detect()."""
    return GoImportClient(session=session).detect(url)
