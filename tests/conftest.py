"""Shared fixtures: an in-memory stand-in for the GitHub client."""

import json

import pytest

from composerfork.errors import RemoteFetchError


class FakeGitHubClient:
    """Serves composer.json files and pull requests from dicts, counting calls."""

    def __init__(self, manifests=None, pulls=None):
        self.manifests = manifests or {}
        self.pulls = pulls or {}
        self.file_calls = []
        self.pull_calls = []

    def get_file_contents(self, owner, repo, path, ref=None):
        self.file_calls.append((owner, repo, path, ref))
        key = f"{owner}/{repo}"
        if key not in self.manifests:
            raise RemoteFetchError(f"Couldn't fetch {path} from {key}: github returned HTTP 404")
        content = self.manifests[key]
        if isinstance(content, dict):
            return json.dumps(content).encode("utf-8")
        return content

    def get_pull_request(self, owner, repo, number):
        self.pull_calls.append((owner, repo, number))
        key = f"{owner}/{repo}#{number}"
        if key not in self.pulls:
            raise RemoteFetchError(f"Couldn't fetch pull request {key}: github returned HTTP 404")
        return self.pulls[key]


def pull_request(head_org, repo, head_ref, base_ref):
    """A minimal pull request payload."""
    return {
        "head": {
            "ref": head_ref,
            "user": {"login": head_org},
            "repo": {"ssh_url": f"git@github.com:{head_org}/{repo}.git"},
        },
        "base": {"ref": base_ref},
    }


@pytest.fixture
def fake_client():
    return FakeGitHubClient(
        manifests={
            "silverstripe/silverstripe-framework": {"name": "silverstripe/framework", "type": "silverstripe-vendormodule"},
            "silverstripe/silverstripe-admin": {"name": "silverstripe/admin"},
            "creative-commoners/silverstripe-admin": {"name": "silverstripe/admin"},
            "silverstripe/supported-modules": {"name": "silverstripe/supported-modules"},
            "someone/no-name": {"description": "no name here"},
            "someone/broken": b"{not json",
        },
        pulls={
            "silverstripe/silverstripe-framework#10": pull_request(
                "creative-commoners", "silverstripe-framework", "pulls/5/fix-thing", "5"
            ),
            "silverstripe/silverstripe-admin#20": pull_request(
                "silverstripe-security", "silverstripe-admin", "5.1-patch", "5.1"
            ),
            "silverstripe/supported-modules#30": pull_request(
                "jane", "supported-modules", "update-list", "5"
            ),
        },
    )
