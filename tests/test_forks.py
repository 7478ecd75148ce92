"""Tests for writing forks and aliased branch constraints into composer.json."""

import copy
import json

import pytest

from composerfork.composer.forks import add_forked_deps, add_forks, apply_forks, build_constraint, resolve_alias
from composerfork.composer.manifest import ComposerJsonService
from composerfork.constants import ManifestSection, RemoteName
from composerfork.descriptors import ForkDescriptor, ForkSet


def _fork(name="vendor/pkg", **kwargs):
    fields = dict(
        composer_name=name,
        org="vendor",
        repo="pkg",
        remote_url=f"git@github.com:creative-commoners/{name.split('/')[-1]}.git",
        remote_name=RemoteName.CC,
    )
    fields.update(kwargs)
    return ForkDescriptor(**fields)


def _forks(*descriptors):
    return ForkSet(descriptors)


class TestAddForks:
    """Test adding vcs repositories."""

    def test_adds_vcs_repositories(self):
        doc = {"name": "my/project"}

        add_forks(doc, _forks(_fork("vendor/a"), _fork("vendor/b")))

        assert doc["repositories"] == {
            "vendor/a": {"type": "vcs", "url": "git@github.com:creative-commoners/a.git"},
            "vendor/b": {"type": "vcs", "url": "git@github.com:creative-commoners/b.git"},
        }

    def test_overwrites_existing_entry(self):
        doc = {"repositories": {"vendor/pkg": {"type": "path", "url": "../pkg"}, "other/x": {"type": "vcs", "url": "x"}}}

        add_forks(doc, _forks(_fork()))

        assert doc["repositories"]["vendor/pkg"] == {
            "type": "vcs", "url": "git@github.com:creative-commoners/pkg.git"
        }
        assert doc["repositories"]["other/x"] == {"type": "vcs", "url": "x"}


class TestResolveAlias:
    """Test picking the version a branch is aliased as."""

    @pytest.mark.parametrize("existing,expected", [
        ("^5.2", "5.x-dev"),
        ("^5.2 || ^6", "6.x-dev"),
        ("5.x-dev", "5.x-dev"),
        ("5.2.x-dev", "5.2.x-dev"),
        ("~5.2", "~5.2"),
        ("5.2.4", "5.2.4"),
        ("dev-main as 5.1.x-dev", "5.1.x-dev"),
    ])
    def test_from_existing_constraint(self, existing, expected):
        doc = {"require": {"vendor/pkg": existing}}

        assert resolve_alias(doc, _fork(pr_branch="x", base_branch="4"), ManifestSection.REQUIRE) == expected

    def test_not_operator_falls_back_to_base_branch(self):
        doc = {"require": {"vendor/pkg": "!=4.0"}}

        assert resolve_alias(doc, _fork(pr_branch="x", base_branch="5"), ManifestSection.REQUIRE) == "5.x-dev"
        assert resolve_alias(doc, _fork(pr_branch="x"), ManifestSection.REQUIRE) is None

    def test_base_branch_when_no_existing_constraint(self):
        assert resolve_alias({}, _fork(pr_branch="x", base_branch="5.1"), ManifestSection.REQUIRE) == "5.1.x-dev"
        assert resolve_alias({}, _fork(pr_branch="x", base_branch="main"), ManifestSection.REQUIRE) == "dev-main"

    def test_no_alias(self):
        assert resolve_alias({}, _fork(branch="x"), ManifestSection.REQUIRE) is None

    def test_own_branch_is_not_an_alias(self):
        doc = {"require": {"vendor/pkg": "dev-fix"}}

        assert resolve_alias(doc, _fork(branch="fix"), ManifestSection.REQUIRE) is None
        assert resolve_alias(doc, _fork(branch="fix", base_branch="5"), ManifestSection.REQUIRE) == "5.x-dev"

    def test_other_branch_is_kept(self):
        doc = {"require": {"vendor/pkg": "dev-main"}}

        assert resolve_alias(doc, _fork(branch="fix"), ManifestSection.REQUIRE) == "dev-main"

    @pytest.mark.parametrize("existing", ["~5.2", "*", ">=5 <6", "5.2.*"])
    def test_range_alias_warns(self, existing, caplog):
        doc = {"require": {"vendor/pkg": existing}}

        with caplog.at_level("WARNING", logger="composerfork.composer.forks"):
            alias = resolve_alias(doc, _fork(branch="x"), ManifestSection.REQUIRE)

        assert alias == existing
        assert "not a single version" in caplog.text

    @pytest.mark.parametrize("existing", ["5.2.4", "5.x-dev", "^5.2"])
    def test_point_alias_does_not_warn(self, existing, caplog):
        doc = {"require": {"vendor/pkg": existing}}

        with caplog.at_level("WARNING", logger="composerfork.composer.forks"):
            resolve_alias(doc, _fork(branch="x"), ManifestSection.REQUIRE)

        assert "not a single version" not in caplog.text

    def test_unparseable_constraint_used_as_is(self):
        doc = {"require": {"vendor/pkg": "some nonsense"}}

        assert resolve_alias(doc, _fork(branch="x"), ManifestSection.REQUIRE) == "some nonsense"

    def test_supported_modules_sentinel(self):
        doc = {"require": {"silverstripe/supported-modules": "^5.2"}}
        fork = _fork("silverstripe/supported-modules", pr_branch="update-list", base_branch="5")

        assert resolve_alias(doc, fork, ManifestSection.REQUIRE) == "999.999.999"


class TestBuildConstraint:
    """Test the final constraint string."""

    def test_with_alias(self):
        assert build_constraint("feature-x", "5.x-dev") == "dev-feature-x as 5.x-dev"

    def test_without_alias(self):
        assert build_constraint("feature-x", None) == "dev-feature-x"

    def test_alias_naming_the_branch_is_dropped(self):
        assert build_constraint("fix", "dev-fix") == "dev-fix"
        assert build_constraint("5", "5.x-dev") == "5.x-dev"

    def test_numeric_branch(self):
        assert build_constraint("5.1", None) == "5.1.x-dev"


class TestAddForkedDeps:
    """Test the per-fork constraint writing."""

    def test_pr_with_base_branch_and_no_existing_constraint(self):
        doc = {}

        add_forked_deps(doc, _forks(_fork(pr_branch="feature-x", base_branch="5")))

        assert doc == {"require": {"vendor/pkg": "dev-feature-x as 5.x-dev"}}

    def test_existing_range_is_collapsed(self):
        doc = {"require": {"vendor/pkg": "^5.2", "php": "^8.1"}}

        add_forked_deps(doc, _forks(_fork(pr_branch="pulls/5/fix", base_branch="5.2")))

        assert doc["require"] == {"vendor/pkg": "dev-pulls/5/fix as 5.x-dev", "php": "^8.1"}

    def test_branch_reference(self):
        doc = {"require": {"vendor/pkg": "5.x-dev"}}

        add_forked_deps(doc, _forks(_fork(branch="my-fix")))

        assert doc["require"]["vendor/pkg"] == "dev-my-fix as 5.x-dev"

    def test_require_dev_is_preferred(self):
        doc = {"require": {"vendor/pkg": "^4"}, "require-dev": {"vendor/pkg": "^5"}}

        add_forked_deps(doc, _forks(_fork(pr_branch="x")))

        assert doc["require-dev"]["vendor/pkg"] == "dev-x as 5.x-dev"
        assert doc["require"]["vendor/pkg"] == "^4"

    def test_descriptor_without_branch_is_skipped(self):
        doc = {"require": {"vendor/a": "^1"}}
        original = copy.deepcopy(doc)

        add_forked_deps(doc, _forks(_fork("vendor/a"), _fork("vendor/b", branch="fix")))

        assert doc["require"]["vendor/a"] == original["require"]["vendor/a"]
        assert doc["require"]["vendor/b"] == "dev-fix"

    def test_supported_modules_ignores_existing_constraint(self):
        doc = {"require-dev": {"silverstripe/supported-modules": "^5"}}

        add_forked_deps(doc, _forks(_fork("silverstripe/supported-modules", pr_branch="update-list", base_branch="5")))

        assert doc["require-dev"]["silverstripe/supported-modules"] == "dev-update-list as 999.999.999"

    def test_php_platform_override(self):
        doc = {"require": {"php": "^8.1"}, "config": {"platform": {"php": "8.3.0"}}}

        add_forked_deps(doc, _forks(_fork("php", branch="next")))

        assert doc["require"]["php"] == "dev-next as 8.3.0"

    @pytest.mark.parametrize("existing", ["^5.2", "5.x-dev", "~5.2", None])
    def test_idempotent(self, existing):
        doc = {"require": {"vendor/pkg": existing}} if existing else {}
        forks = _forks(_fork(pr_branch="feature-x", base_branch="5"))

        add_forked_deps(doc, forks)
        first = copy.deepcopy(doc)
        add_forked_deps(doc, forks)

        assert doc == first

    @pytest.mark.parametrize("name,existing,fields,expected", [
        ("vendor/pkg", None, {"branch": "fix"}, "dev-fix"),
        ("vendor/pkg", "!=4.0", {"branch": "fix"}, "dev-fix"),
        ("vendor/pkg", "!=4.0", {"pr_branch": "fix", "base_branch": "5"}, "dev-fix as 5.x-dev"),
        ("vendor/pkg", None, {"branch": "5"}, "5.x-dev"),
        ("vendor/pkg", "^5.2", {"branch": "5.2"}, "5.2.x-dev as 5.x-dev"),
        ("silverstripe/supported-modules", "^5", {"pr_branch": "update-list", "base_branch": "5"},
         "dev-update-list as 999.999.999"),
        ("silverstripe/supported-modules", None, {"branch": "main"}, "dev-main as 999.999.999"),
    ])
    def test_repeat_run_does_not_drift(self, name, existing, fields, expected):
        """A second run writes the same constraint and never aliases a branch as itself."""
        doc = {"require": {name: existing}} if existing else {}
        forks = _forks(_fork(name, **fields))

        add_forked_deps(doc, forks)
        assert doc["require"][name] == expected
        add_forked_deps(doc, forks)

        assert doc["require"][name] == expected


class TestApplyForks:
    """Test the full read-modify-write."""

    def test_apply_forks(self, tmp_path):
        (tmp_path / "composer.json").write_text(json.dumps({
            "name": "my/project",
            "require": {"silverstripe/framework": "^5.2"},
        }))
        service = ComposerJsonService(str(tmp_path))
        forks = _forks(_fork(
            "silverstripe/framework",
            remote_url="git@github.com:creative-commoners/silverstripe-framework.git",
            pr_branch="pulls/5/fix-thing",
            base_branch="5",
        ))

        apply_forks(service, forks)

        written = (tmp_path / "composer.json").read_text(encoding="utf-8")
        assert json.loads(written) == {
            "name": "my/project",
            "require": {"silverstripe/framework": "dev-pulls/5/fix-thing as 5.x-dev"},
            "repositories": {
                "silverstripe/framework": {
                    "type": "vcs",
                    "url": "git@github.com:creative-commoners/silverstripe-framework.git",
                },
            },
        }
        assert written.endswith("\n")
        assert "git@github.com:creative-commoners/silverstripe-framework.git" in written
