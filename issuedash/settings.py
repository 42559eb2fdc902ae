"""Settings resolution: CLI flags, then environment / .env, then the TOML config file."""

from functools import lru_cache
from pathlib import Path

import tomlkit
import typer
from pydantic import AliasChoices, Field, SecretStr, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from issuedash.errors import DashboardError
from issuedash.models import DEFAULT_BOT_LABEL, DashboardConfig

CONFIG_PATH = Path.home() / ".config" / "issuedash" / "config.toml"


class DashSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="ISSUEDASH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Who to track
    user: str | None = None
    orgs: list[str] = []

    # GitHub
    github_token: SecretStr | None = Field(
        default=None,
        # GITHUB_PAT is what the scheduled workflow exports
        validation_alias=AliasChoices("github_token", "issuedash_github_token", "github_pat"),
    )
    github_auth: str = "token"  # "token" | "gh-cli"

    # Pipeline
    bot_label: str = DEFAULT_BOT_LABEL
    max_workers: int = Field(default=1, ge=1)

    # Output
    output: Path = Path("docs/index.html")
    title: str = "Issue dashboard"

    def dashboard_config(self) -> DashboardConfig:
        if not self.user:
            raise DashboardError("No user configured. Pass --user or set ISSUEDASH_USER.")
        return DashboardConfig(
            user=self.user,
            orgs=self.orgs,
            bot_label=self.bot_label,
            max_workers=self.max_workers,
        )


@lru_cache(maxsize=4)
def _load_toml(path: Path) -> tomlkit.TOMLDocument:
    """Load the config file, returning an empty document if missing."""
    if not path.exists():
        return tomlkit.document()
    with path.open() as f:
        return tomlkit.load(f)


def get_settings(config_path: Path | None = None, **overrides: object) -> DashSettings:
    """Resolve and validate settings.

    Precedence (highest to lowest):
    1. overrides (CLI flags); None values are ignored
    2. ISSUEDASH_* env vars and .env in cwd (GITHUB_TOKEN / GITHUB_PAT for the token)
    3. the TOML file (--config, else ~/.config/issuedash/config.toml)
    4. field defaults
    """
    path = config_path or CONFIG_PATH
    if config_path is not None and not config_path.exists():
        typer.echo(f"Config file {config_path} not found.")
        raise typer.Exit(1)

    # tomlkit containers wrap every value; unwrap to plain Python before validation
    file_values = _load_toml(path).unwrap()

    cli_values = {k: v for k, v in overrides.items() if v is not None and v != []}
    try:
        from_env = DashSettings()
        env_values = {name: getattr(from_env, name) for name in from_env.model_fields_set}
        settings = DashSettings(**{**file_values, **env_values, **cli_values})
    except ValidationError as exc:
        typer.echo(f"Invalid configuration:\n{exc}")
        raise typer.Exit(1) from exc

    if not settings.user:
        typer.echo(f"Missing user. Pass --user, set ISSUEDASH_USER, or add user = \"...\" to {path}")
        raise typer.Exit(1)
    if settings.github_auth == "token" and not settings.github_token:
        typer.echo(
            "Missing GitHub credentials. Set GITHUB_TOKEN (or ISSUEDASH_GITHUB_TOKEN), "
            'or set github_auth = "gh-cli" to use the gh CLI.'
        )
        raise typer.Exit(1)

    return settings
