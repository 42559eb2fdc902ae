"""Issue collection: discover repositories, fetch issues, project rows, split off bot issues."""

import logging
import re
from collections.abc import Iterable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from pydantic import ValidationError

from issuedash.errors import DiscoveryError, FetchError, MalformedDataError, TransportError
from issuedash.models import DEFAULT_BOT_LABEL, DashboardConfig, IssueRow, RawIssue, RawRepository, Report
from issuedash.providers.base import JsonSource

logger = logging.getLogger(__name__)

# Organization repos with a digit in the name (app2024, demo-3) are scratch or archive copies.
_NUMERIC_NAME = re.compile(r"[0-9]")


# ---------------------------------------------------------------------------
# Repository discovery
# ---------------------------------------------------------------------------


def _list_repositories(source: JsonSource, account: str, path: str) -> list[RawRepository]:
    try:
        nodes = source.get_paginated(path)
    except TransportError as exc:
        raise DiscoveryError(account, exc) from exc
    try:
        return [RawRepository.model_validate(node) for node in nodes]
    except ValidationError as exc:
        raise MalformedDataError(path, exc) from exc


def personal_repositories(source: JsonSource, user: str) -> list[str]:
    """All repositories owned by the user, unfiltered."""
    repos = [repo.full_name for repo in _list_repositories(source, user, f"/users/{user}/repos")]
    logger.info("%s: %d personal repositories", user, len(repos))
    return repos


def organization_repositories(source: JsonSource, org: str) -> list[str]:
    """Repositories of an organization, minus those whose name contains a digit."""
    repos = _list_repositories(source, org, f"/orgs/{org}/repos")
    kept = [repo.full_name for repo in repos if not _NUMERIC_NAME.search(repo.name)]
    logger.info("%s: %d of %d repositories kept", org, len(kept), len(repos))
    return kept


def discover(source: JsonSource, user: str, orgs: Iterable[str]) -> set[str]:
    repos = set(personal_repositories(source, user))
    for org in orgs:
        repos.update(organization_repositories(source, org))
    return repos


# ---------------------------------------------------------------------------
# Issue fetching
# ---------------------------------------------------------------------------


def fetch_issues(source: JsonSource, repo: str) -> list[RawIssue]:
    """Open issues of one repository, in API order.

    The issues endpoint also lists pull requests; those carry a pull_request key
    and are dropped before decoding.
    """
    path = f"/repos/{repo}/issues"
    try:
        nodes = source.get_paginated(path)
    except TransportError as exc:
        raise FetchError(repo, exc) from exc

    issues = []
    for node in nodes:
        if "pull_request" in node:
            continue
        try:
            issues.append(RawIssue.model_validate(node))
        except ValidationError as exc:
            raise MalformedDataError(repo, exc) from exc
    logger.debug("%s: %d issues (%d records)", repo, len(issues), len(nodes))
    return issues


def fetch_all_issues(source: JsonSource, repos: Sequence[str], max_workers: int = 1) -> list[RawIssue]:
    """Concatenate fetch_issues over repos in input order.

    Any failure aborts the whole call. With max_workers > 1 repositories are
    fetched concurrently; the first failure cancels fetches that have not started.
    """
    if max_workers <= 1 or len(repos) <= 1:
        issues: list[RawIssue] = []
        for repo in repos:
            issues.extend(fetch_issues(source, repo))
        return issues

    with ThreadPoolExecutor(max_workers=max_workers) as pool:
        futures = [pool.submit(fetch_issues, source, repo) for repo in repos]
        done, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()
        failed = [future for future in futures if future in done and future.exception() is not None]
        if failed:
            raise failed[0].exception()  # type: ignore[misc]
        return [issue for future in futures for issue in future.result()]


# ---------------------------------------------------------------------------
# Projection and classification
# ---------------------------------------------------------------------------


def project(raw: RawIssue) -> IssueRow:
    return IssueRow(
        repository=raw.repository_url,
        title=raw.title,
        url=raw.html_url,
        created_at=raw.created_at,
        updated_at=raw.updated_at,
        comments=raw.comments,
        labels=list(raw.labels),
    )


def is_bot(row: IssueRow, bot_label: str = DEFAULT_BOT_LABEL) -> bool:
    # Only the first label counts: Dependabot puts its label first.
    return bool(row.labels) and row.labels[0].name == bot_label


def partition(
    rows: Iterable[IssueRow], bot_label: str = DEFAULT_BOT_LABEL
) -> tuple[list[IssueRow], list[IssueRow]]:
    """Split rows into (bot, other), keeping relative order in each."""
    bot: list[IssueRow] = []
    other: list[IssueRow] = []
    for row in rows:
        (bot if is_bot(row, bot_label) else other).append(row)
    return bot, other


# ---------------------------------------------------------------------------
# Whole run
# ---------------------------------------------------------------------------


def build_report(config: DashboardConfig, source: JsonSource) -> Report:
    personal = personal_repositories(source, config.user)
    organizational: list[str] = []
    for org in config.orgs:
        organizational.extend(organization_repositories(source, org))

    personal_rows = [project(raw) for raw in fetch_all_issues(source, personal, config.max_workers)]
    org_rows = [project(raw) for raw in fetch_all_issues(source, organizational, config.max_workers)]
    bot, other = partition(personal_rows, config.bot_label)

    logger.info(
        "%d personal issues (%d from bots), %d organization issues",
        len(personal_rows),
        len(bot),
        len(org_rows),
    )
    return Report(personal_other=other, personal_bot=bot, organizational=org_rows)
