"""Tests for remote repository classification and backend detection."""

from unittest.mock import MagicMock, patch
from urllib.parse import urlsplit

import pytest
import requests

from repoget.domain.remote_repository import (
    DarcsHubRepository,
    GitHubGistRepository,
    GitHubRepository,
    OtherRepository,
    classify,
    new_remote_repository,
)
from repoget.exit_codes import (
    BackendUndetectableError,
    InvalidRepositoryError,
    NoImportMetaFoundError,
)
from repoget.infra.vcs import (
    BAZAAR_BACKEND,
    DARCS_BACKEND,
    GIT_BACKEND,
    MERCURIAL_BACKEND,
    SUBVERSION_BACKEND,
)


def succeeding_commands(*succeeding):
    """run_silently replacement that succeeds for the given tool names."""
    def run_silently(argv, cwd=None):
        return argv[0] in succeeding
    return run_silently


def go_import_client(result=None, error=None):
    client = MagicMock()
    if error is not None:
        client.detect.side_effect = error
    else:
        client.detect.return_value = result
    return client


class TestClassify:
    """Tests for picking the variant by host."""

    def test_github(self, make_config):
        repo = classify(urlsplit("https://github.com/motemen/ghq"), make_config())
        assert isinstance(repo, GitHubRepository)

    def test_github_enterprise_host(self, make_config):
        config = make_config(hosts={"github": ["ghe.example.com"]})
        repo = classify(urlsplit("https://GHE.example.com/team/tool"), config)
        assert isinstance(repo, GitHubRepository)

    def test_gist(self, make_config):
        repo = classify(urlsplit("https://gist.github.com/1234567"), make_config())
        assert isinstance(repo, GitHubGistRepository)

    def test_darcshub(self, make_config):
        repo = classify(urlsplit("https://hub.darcs.net/user/repo"), make_config())
        assert isinstance(repo, DarcsHubRepository)

    def test_other(self, make_config):
        repo = classify(urlsplit("https://git.example.org/a/b"), make_config())
        assert isinstance(repo, OtherRepository)


class TestGitHubRepository:
    """Tests for the github.com variant."""

    def test_valid(self, make_config):
        repo = new_remote_repository(urlsplit("https://github.com/motemen/ghq"), make_config())
        backend, url = repo.resolve_backend()
        assert backend is GIT_BACKEND
        assert url.geturl() == "https://github.com/motemen/ghq"

    def test_blob_url_is_truncated(self, make_config):
        url = urlsplit("https://github.com/motemen/ghq/blob/main/README.md")
        repo = new_remote_repository(url, make_config())
        assert repo.url.path == "/motemen/ghq"

    def test_git_suffix_kept(self):
        repo = GitHubRepository.from_url(urlsplit("ssh://git@github.com/motemen/ghq.git"))
        assert repo.url.geturl() == "ssh://git@github.com/motemen/ghq.git"

    def test_owner_only_is_invalid(self, make_config):
        with pytest.raises(InvalidRepositoryError):
            new_remote_repository(urlsplit("https://github.com/motemen"), make_config())

    def test_blog_is_invalid(self, make_config):
        with pytest.raises(InvalidRepositoryError) as exc_info:
            new_remote_repository(urlsplit("https://github.com/blog/post"), make_config())
        assert "github.com/blog/post" in str(exc_info.value)


class TestOtherVariants:
    """Tests for gist and DarcsHub."""

    def test_gist_is_git(self):
        repo = GitHubGistRepository(urlsplit("https://gist.github.com/1234567"))
        assert repo.is_valid()
        assert repo.resolve_backend()[0] is GIT_BACKEND

    def test_darcshub_needs_user_and_repo(self):
        assert DarcsHubRepository(urlsplit("https://hub.darcs.net/user/repo")).is_valid()
        assert not DarcsHubRepository(urlsplit("https://hub.darcs.net/user")).is_valid()
        assert not DarcsHubRepository(urlsplit("https://hub.darcs.net/user/repo/x")).is_valid()

    def test_darcshub_backend(self):
        repo = DarcsHubRepository(urlsplit("https://hub.darcs.net/user/repo"))
        assert repo.resolve_backend()[0] is DARCS_BACKEND


class TestOtherRepositoryDetection:
    """Tests for the backend auto-detection order."""

    def resolve(self, url, config, succeeding=(), go_import=None):
        repo = OtherRepository(urlsplit(url), config=config,
                               go_import=go_import or go_import_client(error=NoImportMetaFoundError()))
        with patch('repoget.domain.remote_repository.run_silently',
                   side_effect=succeeding_commands(*succeeding)) as mock_check:
            result = repo.resolve_backend()
        return result, mock_check

    def test_url_rule_wins(self, make_config):
        config = make_config(url_rules={"https://example.org/hg/": {"vcs": "hg"}})
        (backend, _), mock_check = self.resolve("https://example.org/hg/repo", config, ("git",))
        assert backend is MERCURIAL_BACKEND
        mock_check.assert_not_called()

    def test_longest_url_rule_wins(self, make_config):
        config = make_config(url_rules={
            "https://example.org/": {"vcs": "git"},
            "https://example.org/svn/": {"vcs": "svn"},
        })
        (backend, _), _ = self.resolve("https://example.org/svn/repo", config)
        assert backend is SUBVERSION_BACKEND

    def test_scheme_hint(self, make_config):
        (backend, _), mock_check = self.resolve("bzr+ssh://example.org/repo", make_config())
        assert backend is BAZAAR_BACKEND
        mock_check.assert_not_called()

    def test_svn_host_tries_svn_first(self, make_config):
        (backend, _), mock_check = self.resolve("https://svn.example.org/repo", make_config(),
                                                ("svn", "git"))
        assert backend is SUBVERSION_BACKEND
        assert mock_check.call_args_list[0][0][0][0] == "svn"

    def test_git_ls_remote(self, make_config):
        (backend, _), mock_check = self.resolve("https://example.org/repo", make_config(), ("git",))
        assert backend is GIT_BACKEND
        mock_check.assert_called_once_with(["git", "ls-remote", "https://example.org/repo"])

    def test_go_import(self, make_config):
        client = go_import_client(result=("git", urlsplit("https://go.googlesource.com/net")))
        (backend, repo_url), _ = self.resolve("https://golang.org/x/net", make_config(),
                                              go_import=client)
        assert backend is GIT_BACKEND
        assert repo_url.geturl() == "https://go.googlesource.com/net"

    def test_go_import_unknown_vcs_falls_through(self, make_config):
        client = go_import_client(result=("mod", urlsplit("https://proxy.example.org")))
        (backend, _), _ = self.resolve("https://example.org/repo", make_config(), ("hg",),
                                       go_import=client)
        assert backend is MERCURIAL_BACKEND

    def test_go_import_network_error_falls_through(self, make_config):
        client = go_import_client(error=requests.ConnectionError("refused"))
        (backend, _), _ = self.resolve("https://example.org/repo", make_config(), ("svn",),
                                       go_import=client)
        assert backend is SUBVERSION_BACKEND

    def test_nothing_detected(self, make_config):
        with pytest.raises(BackendUndetectableError) as exc_info:
            self.resolve("https://example.org/repo", make_config())
        assert "https://example.org/repo" in str(exc_info.value)
