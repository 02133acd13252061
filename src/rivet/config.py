# SPDX-License-Identifier: MIT
# Copyright (c) 2025 Blackcat Informatics® Inc.
"""Runtime settings sourced from the process environment."""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Final

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .constants import BOOTSTRAP_URL, DEFAULT_FOUNDRY_DIR, DEFAULT_SHELL, VERSION_FILE_NAME
from .logging import VERBOSE_ENV

_ENV_FIELDS: Final[dict[str, str]] = {
    "RIVET_VERSION_FILE": "version_file",
    "RIVET_INSTALL_URL": "install_url",
    "RIVET_TERMINATE_TIMEOUT": "terminate_timeout",
    "RIVET_PROBE_TIMEOUT": "probe_timeout",
    "RIVET_EMOJI": "use_emoji",
    "SHELL": "shell",
    "FOUNDRY_DIR": "foundry_dir",
}
_FALSEY: Final[frozenset[str]] = frozenset({"", "0", "false", "no", "off"})


class ConfigError(Exception):
    """Raised when configuration input is invalid."""


class RivetSettings(BaseModel):
    """Immutable settings controlling resolution, installation and supervision."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    version_file: str = Field(default=VERSION_FILE_NAME, description="Declaration file name searched for upwards.")
    install_url: str = Field(default=BOOTSTRAP_URL, description="Bootstrap installer URL.")
    terminate_timeout: float = Field(default=10.0, ge=0, description="Seconds a signalled child may take to exit.")
    probe_timeout: float = Field(default=30.0, gt=0, description="Seconds allowed for version probes and downloads.")
    use_emoji: bool = Field(default=True, description="Prefix status lines with emoji.")
    shell: str = Field(default=DEFAULT_SHELL, description="Login shell; selects the startup file to re-source.")
    foundry_dir: Path = Field(
        default_factory=lambda: Path(DEFAULT_FOUNDRY_DIR).expanduser(),
        description="Foundry home; its bin directory holds foundryup.",
    )

    @field_validator("version_file")
    @classmethod
    def _reject_path_separators(cls, value: str) -> str:
        if not value or "/" in value or "\\" in value:
            raise ValueError("version_file must be a bare file name")
        return value

    @field_validator("use_emoji", mode="before")
    @classmethod
    def _coerce_flag(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().lower() not in _FALSEY
        return value

    @field_validator("foundry_dir", mode="after")
    @classmethod
    def _expand_foundry_dir(cls, value: Path) -> Path:
        return value.expanduser()

    @property
    def helper_bin_dir(self) -> Path:
        """Return the directory where the bootstrap places ``foundryup``."""

        return self.foundry_dir / "bin"

    @classmethod
    def from_environ(cls, environ: Mapping[str, str]) -> RivetSettings:
        """Build settings from ``environ``, ignoring unset or blank variables.

        Args:
            environ: Environment mapping, typically :data:`os.environ`.

        Returns:
            RivetSettings: Validated settings instance.

        Raises:
            ConfigError: If any supplied value fails validation.
        """

        payload: dict[str, str] = {}
        for env_name, field_name in _ENV_FIELDS.items():
            value = environ.get(env_name)
            if value is None:
                continue
            # Explicitly blank flags mean "off"; other blank values fall back to defaults.
            if not value.strip() and field_name != "use_emoji":
                continue
            payload[field_name] = value
        try:
            return cls.model_validate(payload)
        except ValidationError as exc:
            raise ConfigError(_summarise(exc)) from exc


def environment_help() -> list[tuple[str, str]]:
    """Return ``(variable, description)`` pairs for every supported variable."""

    fields = RivetSettings.model_fields
    records = [(env_name, fields[field_name].description or "") for env_name, field_name in _ENV_FIELDS.items()]
    records.append((VERBOSE_ENV, "Emit diagnostic tracing to stderr."))
    return records


def _summarise(exc: ValidationError) -> str:
    reverse = {field: env for env, field in _ENV_FIELDS.items()}
    parts = []
    for error in exc.errors():
        location = str(error["loc"][0]) if error["loc"] else "settings"
        parts.append(f"{reverse.get(location, location)}: {error['msg']}")
    return "; ".join(parts)


__all__ = ["ConfigError", "RivetSettings", "environment_help"]
