"""Exceptions raised by the dashboard pipeline. The CLI turns any of them into exit status 1."""


class DashboardError(RuntimeError):
    pass


class TransportError(DashboardError):
    def __init__(self, path: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{path}: {message}")
        self.path = path
        self.status_code = status_code


class DiscoveryError(DashboardError):
    """Listing the repositories of a user or organization failed."""

    def __init__(self, account: str, cause: Exception) -> None:
        super().__init__(f"Could not list repositories of '{account}': {cause}")
        self.account = account
        self.cause = cause


class FetchError(DashboardError):
    """Listing the issues of one repository failed."""

    def __init__(self, repo: str, cause: Exception) -> None:
        super().__init__(f"Could not fetch issues of '{repo}': {cause}")
        self.repo = repo
        self.cause = cause


class MalformedDataError(DashboardError):
    """A record returned by the API is missing a field or has the wrong type."""

    def __init__(self, source: str, cause: Exception) -> None:
        super().__init__(f"Malformed record from '{source}': {cause}")
        self.source = source
        self.cause = cause
