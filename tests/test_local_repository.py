"""Tests for the LocalRepository domain object."""

import os

import pytest

from repoget.domain import LocalRepository


class TestLocalRepository:
    """Tests for construction and derived paths."""

    def test_from_path_parts(self, tmp_path):
        repo = LocalRepository.from_path_parts(str(tmp_path), ["github.com", "motemen", "ghq"])
        assert repo.full_path == os.path.join(str(tmp_path), "github.com", "motemen", "ghq")
        assert repo.rel_path == "github.com/motemen/ghq"
        assert repo.root_path == str(tmp_path)
        assert repo.path_parts == ("github.com", "motemen", "ghq")

    def test_from_full_path(self, tmp_path):
        path = os.path.join(str(tmp_path), "github.com", "motemen", "ghq")
        repo = LocalRepository.from_full_path(str(tmp_path), path)
        assert repo.rel_path == "github.com/motemen/ghq"
        assert repo.host == "github.com"
        assert repo.name == "ghq"

    @pytest.mark.parametrize("rel", [
        "github.com/motemen",
        "github.com/motemen/ghq/cmdutil",
        "",
    ])
    def test_from_full_path_requires_three_segments(self, tmp_path, rel):
        path = os.path.join(str(tmp_path), *rel.split("/")) if rel else str(tmp_path)
        assert LocalRepository.from_full_path(str(tmp_path), path) is None

    def test_from_full_path_outside_root(self, tmp_path):
        outside = os.path.join(str(tmp_path), "other", "a", "b", "c")
        assert LocalRepository.from_full_path(os.path.join(str(tmp_path), "root"), outside) is None

    def test_subpaths_shortest_first(self):
        repo = LocalRepository.from_path_parts("/r", ["github.com", "motemen", "ghq"])
        assert repo.subpaths() == ["ghq", "motemen/ghq", "github.com/motemen/ghq"]

    def test_non_host_path(self):
        repo = LocalRepository.from_path_parts("/r", ["github.com", "motemen", "ghq"])
        assert repo.non_host_path() == "motemen/ghq"

    def test_matches_is_exact(self):
        repo = LocalRepository.from_path_parts("/r", ["github.com", "motemen", "ghq"])
        assert repo.matches("ghq")
        assert repo.matches("motemen/ghq")
        assert repo.matches("github.com/motemen/ghq")
        assert not repo.matches("men/ghq")
        assert not repo.matches("GHQ")

    def test_vcs_and_to_dict(self, tmp_path, make_repo):
        make_repo(str(tmp_path), "github.com/motemen/ghq", ".hg")
        repo = LocalRepository.from_path_parts(str(tmp_path), ["github.com", "motemen", "ghq"])

        assert repo.vcs().name == "mercurial"
        d = repo.to_dict()
        assert d['rel_path'] == "github.com/motemen/ghq"
        assert d['vcs'] == "mercurial"
        assert d['host'] == "github.com"

    def test_path_parts_round_trip(self, tmp_path):
        built = LocalRepository.from_path_parts(str(tmp_path), ["github.com", "motemen", "ghq"])
        parsed = LocalRepository.from_full_path(str(tmp_path), built.full_path)
        assert parsed == built
        assert parsed.path_parts == ("github.com", "motemen", "ghq")

    def test_is_immutable(self):
        repo = LocalRepository.from_path_parts("/r", ["a.com", "b", "c"])
        with pytest.raises(AttributeError):
            repo.rel_path = "x"
