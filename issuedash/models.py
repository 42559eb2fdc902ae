"""Shared pydantic models — the contract between the GitHub feed, the pipeline and the renderer."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_BOT_LABEL = "dependencies"


class Label(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    name: str
    color: str = Field(pattern=r"^[0-9a-fA-F]{6}$")
    url: str


class RawIssue(BaseModel):
    """One issue exactly as /repos/{owner}/{repo}/issues returns it (unused keys ignored)."""

    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    repository_url: str  # https://api.github.com/repos/owner/name
    title: str
    html_url: str
    created_at: str
    updated_at: str
    comments: int = Field(ge=0)
    labels: list[Label]

    @field_validator("created_at", "updated_at")
    @classmethod
    def _iso_timestamp(cls, value: str) -> str:
        # Kept as the original string; only checked for shape.
        parsed = datetime.fromisoformat(value)
        if "T" not in value or parsed.tzinfo is None:
            raise ValueError(f"expected a date-time with timezone, got {value!r}")
        return value


class RawRepository(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore", strict=True)

    name: str
    full_name: str  # owner/name, used as the RepositoryId


class IssueRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    repository: str
    title: str
    url: str
    created_at: str
    updated_at: str
    comments: int = Field(ge=0)
    labels: list[Label]


class DashboardConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: str
    orgs: list[str] = []
    bot_label: str = DEFAULT_BOT_LABEL
    max_workers: int = Field(default=1, ge=1)


class Report(BaseModel):
    """The three tables handed to the renderer."""

    model_config = ConfigDict(frozen=True)

    personal_other: list[IssueRow]
    personal_bot: list[IssueRow]
    organizational: list[IssueRow]
