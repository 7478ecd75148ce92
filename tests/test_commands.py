"""Tests for composer argument construction and markdown input preparation."""

import pytest

from composerfork.composer.commands import (
    default_project_name,
    detect_php_version,
    normalize_recipe,
    prepare_composer_args,
    prepare_composer_command,
    validate_package_name,
)
from composerfork.errors import ComposerForkError
from composerfork.prepare_input import prepare_input


class TestRecipes:
    """Test recipe shortcuts and package name validation."""

    def test_shortcuts(self):
        assert normalize_recipe("sink") == "silverstripe/recipe-kitchen-sink"
        assert normalize_recipe("cms") == "silverstripe/recipe-cms"
        assert normalize_recipe("my/recipe") == "my/recipe"

    @pytest.mark.parametrize("name,valid", [
        ("silverstripe/recipe-cms", True),
        ("vendor/pkg_name.x", True),
        ("Vendor/pkg", False),
        ("no-slash", False),
        ("vendor/pkg/extra", False),
    ])
    def test_validate_package_name(self, name, valid):
        assert validate_package_name(name) is valid


class TestComposerArgs:
    """Test composer argument lists."""

    def test_require_gets_no_install(self):
        args = prepare_composer_args(["--prefer-source", "--no-interaction"], "require")

        assert args == ["--no-interaction", "--prefer-source", "--no-install", "--no-audit"]

    def test_install(self):
        assert prepare_composer_args([], "install") == ["--no-interaction"]

    def test_create_command(self):
        command = prepare_composer_command([], "create", "silverstripe/installer", "5.x-dev")

        assert command == [
            "create",
            "--no-interaction",
            "--no-install",
            "--no-audit",
            "--no-scripts",
            "silverstripe/installer:5.x-dev",
        ]

    def test_create_requires_recipe(self):
        with pytest.raises(ComposerForkError):
            prepare_composer_command([], "create")

    def test_other_command(self):
        assert prepare_composer_command(["--dev"], "update") == [
            "update", "--no-interaction", "--dev", "--no-install", "--no-audit"
        ]


class TestDetectPhpVersion:
    """Test picking a PHP version from a recipe's requirements."""

    def test_lowest_allowed(self):
        assert detect_php_version({"php": "^8.1", "silverstripe/framework": "^5"}) == "8.1"
        assert detect_php_version({"php": "^7.4 || ^8.0"}) == "7.4"

    def test_missing_php(self):
        with pytest.raises(ComposerForkError, match="no direct constraint for PHP"):
            detect_php_version({"silverstripe/framework": "^5"})

    def test_invalid_constraint(self):
        with pytest.raises(ComposerForkError):
            detect_php_version({"php": "banana"})

    def test_no_lower_bound(self):
        with pytest.raises(ComposerForkError, match="no lower bound"):
            detect_php_version({"php": "<8.0"})


class TestDefaultProjectName:
    """Test project names derived from recipe and constraint."""

    @pytest.mark.parametrize("recipe,constraint,expected", [
        ("silverstripe/recipe-kitchen-sink", "5.x-dev", "sink--5-x"),
        ("silverstripe/installer", "^5.1", "installer--5-1"),
        ("silverstripe/recipe-cms", "5.2.0@beta", "cms--5-2-0"),
    ])
    def test_names(self, recipe, constraint, expected):
        assert default_project_name(recipe, constraint) == expected

    def test_with_prs(self):
        assert default_project_name("silverstripe/recipe-core", "dev-main", with_prs=True) == "core--main--with-prs"


class TestPrepareInput:
    """Test turning markdown link lists into arguments."""

    TEXT = "- https://github.com/a/b/pull/1\n- https://github.com/c/d/pull/2\n"

    def test_spaces(self):
        assert prepare_input(self.TEXT) == "https://github.com/a/b/pull/1 https://github.com/c/d/pull/2"

    def test_pr(self):
        assert prepare_input(self.TEXT, "pr") == (
            "--pr=https://github.com/a/b/pull/1 --pr=https://github.com/c/d/pull/2"
        )

    def test_format_is_case_insensitive(self):
        assert prepare_input(self.TEXT, "PR").startswith("--pr=")

    def test_rejects_non_list_lines(self):
        with pytest.raises(ComposerForkError, match="Expected URLs in markdown list"):
            prepare_input("https://github.com/a/b/pull/1")

    def test_rejects_unknown_format(self):
        with pytest.raises(ComposerForkError, match="Format not accepted"):
            prepare_input(self.TEXT, "csv")
