"""Application configuration."""

from __future__ import annotations

from pathlib import Path

import platformdirs
from pydantic import Field, model_validator
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from mergemend.core.base import BaseConfig
from mergemend.core.log import Logger
from mergemend.core.yaml_settings import YamlWithIncludesSettingsSource


class GitConfig(BaseConfig):
    """How the git executable is invoked."""

    executable: str = Field(
        default="git",
        description="git executable name or path",
    )
    timeout: int = Field(
        default=30,
        description="Seconds before a git command is killed",
    )
    max_output_size: int = Field(
        default=512 * 1024,
        description=(
            "Captured stdout/stderr are each cut off silently at this "
            "many characters. The cap applies to the returned result; "
            "the subprocess output is still buffered in full while "
            "the command runs"
        ),
    )


class ConflictConfig(BaseConfig):
    """Conflict parsing and resolution settings."""

    max_file_size: int = Field(
        default=1024 * 1024,
        description="Files larger than this (bytes) are not parsed",
    )
    context_lines: int = Field(
        default=3,
        description="Lines of context kept before and after each hunk",
    )
    suggest_template: str | None = Field(
        default=None,
        description=(
            "Override for the resolution-analysis prompt. Fields: "
            "{file}, {extension}, {language}, {context_before}, "
            "{ours_branch}, {ours}, {theirs_branch}, {theirs}, "
            "{base_section}, {context_after}"
        ),
    )


class Config(BaseConfig):
    """Application configuration loaded from YAML/env/CLI.

    Owns the Logger; closing the Config closes the logger and its
    sinks.
    """

    git: GitConfig = Field(
        default_factory=GitConfig,
        description="git invocation settings",
    )
    conflicts: ConflictConfig = Field(
        default_factory=ConflictConfig,
        description="Conflict parsing and resolution settings",
    )
    logger: Logger = Field(
        default_factory=Logger,
        description="Logger configuration",
    )
    log_root: Path = Field(
        default_factory=(
            lambda: Path(platformdirs.user_state_dir("mergemend"))
        ),
        description="Root directory for log files",
    )
    session: str = Field(
        default="mergemend",
        description="Name used for log directories and the service name",
    )

    @model_validator(mode='after')
    def _setup_logger(self) -> 'Config':
        """Configure the logger once the whole config is loaded."""
        self.logger.setup(log_root=self.log_root, session=self.session)
        return self


class State(BaseSettings):
    """Top-level settings object built by the CLI.

    Priority (highest first): constructor arguments, YAML layers
    (see YamlWithIncludesSettingsSource), .env, environment
    variables such as MERGEMEND_CONFIG__GIT__TIMEOUT=60.
    """

    config: Config = Field(
        default_factory=Config,
        description="Application configuration",
    )
    include: list[str] | None = Field(
        default=None,
        description=(
            "Additional YAML files to deep merge over the defaults "
            "(--include on the command line)"
        ),
    )

    model_config = SettingsConfigDict(
        yaml_file="mergemend.yaml",
        env_file=".env",
        env_prefix="MERGEMEND_",
        env_nested_delimiter="__",
        cli_parse_args=True,
        cli_implicit_flags=True,
        cli_use_class_docs_for_groups=True,
        extra='ignore',
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            YamlWithIncludesSettingsSource(settings_cls),
            dotenv_settings,
            env_settings,
            file_secret_settings,
        )

    def close(self):
        self.config.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):  # noqa: U100
        self.close()
        return False


__all__ = ["State", "Config", "GitConfig", "ConflictConfig"]
