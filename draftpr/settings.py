"""Settings resolution with a 5-step profile precedence chain."""

import os
from collections.abc import Mapping
from functools import lru_cache
from pathlib import Path

import tomlkit
from pydantic import SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

from draftpr.errors import ConfigError

CONFIG_PATH = Path.home() / ".config" / "draftpr" / "config.toml"

BACKENDS = ("gh-cli", "api")


class DraftSettings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="DRAFTPR_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    default_profile: str | None = None

    # Netlify
    site: str | None = None  # deploy-preview-<n>--<site>.netlify.app
    entry_path: str | None = None  # skips the prompt when set

    # Tracker
    backend: str = "gh-cli"  # "gh-cli" | "api"
    github_host: str = "github.com"
    github_token: SecretStr | None = None  # api backend; falls back to `gh auth token`
    github_repo: str | None = None  # owner/repo, inferred from the git remote if unset

    # Pull request
    remote: str = "origin"
    base_branch: str | None = None
    assignee: str = "@me"
    template_path: str | None = None
    plugin_dir: str = ".github/draft"


@lru_cache(maxsize=1)
def _load_toml() -> tomlkit.TOMLDocument:
    """Load ~/.config/draftpr/config.toml, returning empty document if missing."""
    if not CONFIG_PATH.exists():
        return tomlkit.document()
    return tomlkit.load(CONFIG_PATH.open())


def _list_profiles(config: Mapping) -> list[str]:
    # tomlkit Table implements MutableMapping but not dict, so check Mapping
    return [k for k, v in config.items() if isinstance(v, Mapping)]


def _cwd_env_profile() -> str | None:
    """Read DRAFTPR_DEFAULT_PROFILE from .env in cwd without full settings instantiation."""
    env_file = Path(".env")
    if not env_file.exists():
        return None
    for line in env_file.read_text().splitlines():
        line = line.strip()
        if line.startswith("DRAFTPR_DEFAULT_PROFILE="):
            return line.split("=", 1)[1].strip().strip("\"'")
    return None


def get_settings(profile: str | None = None) -> DraftSettings:
    """Resolve the active profile and return a fully populated DraftSettings.

    Precedence (highest to lowest):
    1. profile argument (--profile CLI flag)
    2. DRAFTPR_DEFAULT_PROFILE env var
    3. default_profile key in ~/.config/draftpr/config.toml
    4. DRAFTPR_DEFAULT_PROFILE in .env in cwd
    5. First profile defined in ~/.config/draftpr/config.toml

    With no profile at all, settings come from env vars and defaults only.
    """
    toml_config = _load_toml()

    active = (
        profile
        or os.environ.get("DRAFTPR_DEFAULT_PROFILE")
        or toml_config.get("default_profile")
        or _cwd_env_profile()
        or ((_profiles := _list_profiles(toml_config)) and _profiles[0] or None)
    )

    profile_defaults: dict = {}
    if active:
        if active in toml_config and isinstance(toml_config[active], Mapping):
            profile_defaults = dict(toml_config[active])
        else:
            profiles = _list_profiles(toml_config)
            raise ConfigError(f"Profile '{active}' not found in {CONFIG_PATH}. Available: {profiles or '(none)'}")

    settings = DraftSettings(**profile_defaults)

    if settings.backend not in BACKENDS:
        raise ConfigError(f"Unknown backend '{settings.backend}'. Valid: {', '.join(BACKENDS)}")

    return settings
