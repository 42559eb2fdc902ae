"""Shared test fixtures."""

import pytest

from issuedash.errors import TransportError
from issuedash.models import DashboardConfig, IssueRow, Label
from issuedash.providers.base import JsonSource


class FakeSource(JsonSource):
    """In-memory JsonSource: path → list of records, or an exception to raise."""

    def __init__(self, pages: dict[str, list[dict] | Exception]) -> None:
        self.pages = pages
        self.requested: list[str] = []

    def get_paginated(self, path: str) -> list[dict]:
        self.requested.append(path)
        result = self.pages.get(path)
        if result is None:
            raise TransportError(path, "GitHub API returned 404: Not Found", 404)
        if isinstance(result, Exception):
            raise result
        return result


def label_node(name: str, color: str = "0366d6") -> dict:
    return {
        "id": 1,
        "name": name,
        "color": color,
        "url": f"https://api.github.com/repos/jdoss/quickvm/labels/{name}",
        "default": False,
    }


def issue_node(repo: str = "jdoss/quickvm", number: int = 1, labels: list[dict] | None = None, **extra) -> dict:
    node = {
        "id": 1000 + number,
        "number": number,
        "repository_url": f"https://api.github.com/repos/{repo}",
        "html_url": f"https://github.com/{repo}/issues/{number}",
        "title": f"Issue {number}",
        "state": "open",
        "comments": 2,
        "created_at": "2024-03-01T09:30:00Z",
        "updated_at": "2024-03-05T17:00:00Z",
        "labels": labels or [],
        "user": {"login": "jdoss"},
    }
    node.update(extra)
    return node


def repo_node(full_name: str) -> dict:
    return {"id": 1, "name": full_name.split("/", 1)[1], "full_name": full_name, "private": False}


@pytest.fixture
def bug_label() -> Label:
    return Label(name="bug", color="d73a4a", url="https://api.github.com/repos/jdoss/quickvm/labels/bug")


@pytest.fixture
def deps_label() -> Label:
    return Label(
        name="dependencies",
        color="0366d6",
        url="https://api.github.com/repos/jdoss/quickvm/labels/dependencies",
    )


@pytest.fixture
def issue_row(bug_label: Label) -> IssueRow:
    return IssueRow(
        repository="https://api.github.com/repos/jdoss/quickvm",
        title="Fix null check",
        url="https://github.com/jdoss/quickvm/issues/42",
        created_at="2024-03-01T09:30:00Z",
        updated_at="2024-03-05T17:00:00Z",
        comments=3,
        labels=[bug_label],
    )


@pytest.fixture
def dashboard_config() -> DashboardConfig:
    return DashboardConfig(user="jdoss", orgs=["quickvm"])
