"""Tests for the local repository index, list queries and unique subpaths."""

import os
from urllib.parse import urlsplit

import pytest

from repoget.exit_codes import UsageError, USAGE_ERROR
from repoget.services import LocalRepositoryIndex, RepositoryQuery, unique_subpaths
from repoget.services.local_index import url_path_parts


@pytest.fixture
def two_roots(tmp_path, monkeypatch):
    primary = tmp_path / "primary"
    secondary = tmp_path / "secondary"
    primary.mkdir()
    secondary.mkdir()
    monkeypatch.setenv("REPOGET_ROOT", f"{primary}{os.pathsep}{secondary}")
    return os.path.realpath(str(primary)), os.path.realpath(str(secondary))


def rel_paths(repos):
    return [repo.rel_path for repo in repos]


class TestRoots:
    """Tests for root resolution."""

    def test_env_roots_in_order(self, two_roots, make_config):
        index = LocalRepositoryIndex(make_config())
        assert index.roots() == list(two_roots)
        assert index.primary_root() == two_roots[0]

    def test_config_roots(self, tmp_path, make_config):
        config = make_config(general={"roots": [str(tmp_path / "a"), str(tmp_path / "b"),
                                                str(tmp_path / "a")]})
        index = LocalRepositoryIndex(config)
        assert index.roots() == [str(tmp_path / "a"), str(tmp_path / "b")]

    def test_default_root(self, isolated_env):
        index = LocalRepositoryIndex()
        assert index.roots() == [os.path.join(str(isolated_env), "repoget")]

    def test_url_rule_roots_only_with_all(self, tmp_path, make_config):
        config = make_config(
            general={"roots": [str(tmp_path / "main")]},
            url_rules={"https://ghe.example.com/": {"root": str(tmp_path / "work")}},
        )
        index = LocalRepositoryIndex(config)
        assert index.roots(all_roots=False) == [str(tmp_path / "main")]
        assert index.roots() == [str(tmp_path / "main"), str(tmp_path / "work")]
        assert index.root_for_url(urlsplit("https://ghe.example.com/team/tool")) == \
            str(tmp_path / "work")
        assert index.root_for_url(urlsplit("https://github.com/a/b")) == str(tmp_path / "main")


class TestWalk:
    """Tests for walking the roots."""

    def test_only_three_level_checkouts(self, root, make_repo, make_config):
        make_repo(root, "github.com/motemen/ghq")
        make_repo(root, "github.com/motemen")
        make_repo(root, "example.org/a/b/c")
        os.makedirs(os.path.join(root, "github.com", "motemen", "empty"))

        repos = LocalRepositoryIndex(make_config()).repositories()

        assert rel_paths(repos) == ["github.com/motemen/ghq"]

    def test_sorted_within_root(self, root, make_repo, make_config):
        for rel in ["github.com/b/z", "github.com/a/y", "example.org/c/x"]:
            make_repo(root, rel)

        repos = LocalRepositoryIndex(make_config()).repositories()

        assert rel_paths(repos) == ["example.org/c/x", "github.com/a/y", "github.com/b/z"]

    def test_primary_root_first(self, two_roots, make_repo, make_config):
        primary, secondary = two_roots
        make_repo(secondary, "a.example/a/a")
        make_repo(primary, "z.example/z/z")

        repos = LocalRepositoryIndex(make_config()).repositories()

        assert [(r.root_path, r.rel_path) for r in repos] == [
            (primary, "z.example/z/z"),
            (secondary, "a.example/a/a"),
        ]

    def test_missing_root_is_skipped(self, tmp_path, make_repo, make_config, monkeypatch):
        existing = tmp_path / "existing"
        existing.mkdir()
        monkeypatch.setenv("REPOGET_ROOT", f"{tmp_path / 'missing'}{os.pathsep}{existing}")
        make_repo(str(existing), "github.com/motemen/ghq")

        repos = LocalRepositoryIndex(make_config()).repositories()

        assert rel_paths(repos) == ["github.com/motemen/ghq"]

    def test_unreadable_directory_is_skipped(self, root, make_repo, make_config, monkeypatch):
        make_repo(root, "github.com/motemen/ghq")
        make_repo(root, "secret.example/a/b")
        blocked = os.path.join(root, "secret.example")
        real_scandir = os.scandir

        def scandir(path):
            if os.fspath(path) == blocked:
                raise PermissionError(13, "Permission denied", blocked)
            return real_scandir(path)

        monkeypatch.setattr(os, "scandir", scandir)

        repos = LocalRepositoryIndex(make_config()).repositories()

        assert rel_paths(repos) == ["github.com/motemen/ghq"]

    def test_vcs_filter(self, root, make_repo, make_config):
        make_repo(root, "github.com/motemen/ghq", ".git")
        make_repo(root, "hg.example.org/team/notes", ".hg")

        index = LocalRepositoryIndex(make_config())

        assert rel_paths(index.repositories(vcs="hg")) == ["hg.example.org/team/notes"]
        assert rel_paths(index.repositories(vcs="git")) == ["github.com/motemen/ghq"]

    def test_visit_callback(self, root, make_repo, make_config):
        make_repo(root, "github.com/motemen/ghq")
        seen = []

        LocalRepositoryIndex(make_config()).walk(seen.append)

        assert rel_paths(seen) == ["github.com/motemen/ghq"]


class TestFromURL:
    """Tests for mapping URLs onto destinations."""

    def test_url_path_parts_strips_git(self):
        url = urlsplit("ssh://git@github.com/motemen/ghq.git")
        assert url_path_parts(url) == ["github.com", "motemen", "ghq"]

    def test_new_destination_under_primary(self, two_roots, make_config):
        repo = LocalRepositoryIndex(make_config()).from_url(
            urlsplit("https://github.com/motemen/ghq.git"))
        assert repo.full_path == os.path.join(two_roots[0], "github.com", "motemen", "ghq")
        assert repo.rel_path == "github.com/motemen/ghq"

    def test_existing_checkout_in_other_root_wins(self, two_roots, make_repo, make_config):
        path = make_repo(two_roots[1], "github.com/motemen/ghq")
        repo = LocalRepositoryIndex(make_config()).from_url(
            urlsplit("https://github.com/motemen/ghq"))
        assert repo.full_path == path
        assert repo.root_path == two_roots[1]

    def test_url_rule_root(self, tmp_path, make_config):
        config = make_config(
            general={"roots": [str(tmp_path / "main")]},
            url_rules={"https://ghe.example.com/": {"root": str(tmp_path / "work")}},
        )
        repo = LocalRepositoryIndex(config).from_url(urlsplit("https://ghe.example.com/team/tool"))
        assert repo.full_path == os.path.join(str(tmp_path / "work"), "ghe.example.com", "team", "tool")

    def test_is_under_primary_root(self, two_roots, make_repo, make_config):
        make_repo(two_roots[0], "github.com/a/one")
        make_repo(two_roots[1], "github.com/b/two")
        index = LocalRepositoryIndex(make_config())

        under = {repo.rel_path: index.is_under_primary_root(repo) for repo in index.repositories()}

        assert under == {"github.com/a/one": True, "github.com/b/two": False}


class TestFind:
    """Tests for name lookups used by look."""

    def test_exact_subpath(self, root, make_repo, make_config):
        make_repo(root, "github.com/motemen/ghq")
        make_repo(root, "github.com/motemen/gore")

        found = LocalRepositoryIndex(make_config()).find("ghq")

        assert rel_paths(found) == ["github.com/motemen/ghq"]

    def test_ambiguous(self, root, make_repo, make_config):
        make_repo(root, "github.com/motemen/ghq")
        make_repo(root, "gitlab.com/someone/ghq")

        assert len(LocalRepositoryIndex(make_config()).find("ghq")) == 2

    def test_falls_back_to_reference(self, root, make_config):
        # a directory without VCS markers is still found through its URL
        os.makedirs(os.path.join(root, "github.com", "motemen", "ghq"))

        found = LocalRepositoryIndex(make_config()).find("https://github.com/motemen/ghq")

        assert rel_paths(found) == ["github.com/motemen/ghq"]

    def test_nothing(self, root, make_config):
        assert LocalRepositoryIndex(make_config()).find("motemen/nothing") == []


class TestRepositoryQuery:
    """Tests for list filtering."""

    @pytest.fixture
    def repos(self, root, make_repo, make_config):
        make_repo(root, "github.com/motemen/ghq")
        make_repo(root, "github.com/motemen/gore")
        make_repo(root, "gitlab.com/Motemen/tool")
        return LocalRepositoryIndex(make_config()).repositories()

    def matching(self, repos, query, **kwargs):
        q = RepositoryQuery(query, **kwargs)
        return [repo.rel_path for repo in repos if q.matches(repo)]

    def test_empty_query_matches_all(self, repos):
        assert len(self.matching(repos, "")) == 3

    def test_fuzzy_is_a_substring_of_owner_and_project(self, repos):
        assert self.matching(repos, "men/go") == ["github.com/motemen/gore"]

    def test_exact_has_no_substring_semantics(self, repos):
        assert self.matching(repos, "men/go", exact=True) == []
        assert self.matching(repos, "motemen/ghq", exact=True) == ["github.com/motemen/ghq"]

    def test_smart_case(self, repos):
        assert self.matching(repos, "motemen/t") == ["gitlab.com/Motemen/tool"]
        assert self.matching(repos, "Motemen") == ["gitlab.com/Motemen/tool"]

    def test_forced_case_sensitivity(self, repos):
        assert self.matching(repos, "motemen", ignore_case=False) == [
            "github.com/motemen/ghq", "github.com/motemen/gore"]
        assert len(self.matching(repos, "MOTEMEN", ignore_case=True)) == 3

    def test_host_is_pinned(self, repos):
        assert self.matching(repos, "gitlab.com/motemen") == ["gitlab.com/Motemen/tool"]
        assert self.matching(repos, "github.com/tool") == []

    def test_url_query_becomes_relative_path(self, repos, make_config):
        assert self.matching(repos, "https://github.com/motemen/ghq.git", exact=True,
                             config=make_config()) == ["github.com/motemen/ghq"]
        assert self.matching(repos, "git@github.com:motemen/gore.git",
                             config=make_config()) == ["github.com/motemen/gore"]

    def test_exact_with_ignore_case_is_a_usage_error(self):
        with pytest.raises(UsageError) as exc_info:
            RepositoryQuery("ghq", exact=True, ignore_case=True)
        assert exc_info.value.exit_code == USAGE_ERROR


class TestUniqueSubpaths:
    """Tests for unique mode."""

    def test_same_checkout_in_two_roots(self, two_roots, make_repo, make_config):
        make_repo(two_roots[0], "github.com/motemen/ghq")
        make_repo(two_roots[1], "github.com/motemen/ghq")
        index = LocalRepositoryIndex(make_config())

        assert unique_subpaths(index.repositories(), index) == ["ghq"]

    def test_shortest_unique_subpath(self, root, make_repo, make_config):
        make_repo(root, "github.com/motemen/ghq")
        make_repo(root, "github.com/x-motemen/ghq")
        make_repo(root, "github.com/motemen/gore")
        make_repo(root, "github.com/dotfiles/dotfiles")
        make_repo(root, "gitlab.com/dotfiles/dotfiles")
        index = LocalRepositoryIndex(make_config())

        assert sorted(unique_subpaths(index.repositories(), index)) == sorted([
            "motemen/ghq",
            "x-motemen/ghq",
            "gore",
            "github.com/dotfiles/dotfiles",
            "gitlab.com/dotfiles/dotfiles",
        ])
