"""YAML configuration loading with include directive support."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"
PROJECT_FILE = "mergemend.yaml"


def cli_includes(argv: list[str] | None = None) -> list[str]:
    """Collect the values of every --include option in argv."""
    argv = sys.argv if argv is None else argv
    includes = []
    for i, arg in enumerate(argv[1:], start=1):
        if arg == "--include" and i + 1 < len(argv):
            includes.append(argv[i + 1])
        elif arg.startswith("--include="):
            includes.append(arg.split("=", 1)[1])
    return includes


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """YAML settings source layering several files.

    Deep merges, lowest priority first: package defaults, the user
    config file, ./mergemend.yaml, then any --include files. Each
    file may pull in others with an include: key (a path or a list
    of paths, relative to the including file).
    """

    def __init__(self, settings_cls: type[BaseSettings], yaml_file=None):
        base = yaml_file or settings_cls.model_config.get("yaml_file")
        includes = cli_includes()
        if includes:
            if base:
                base = ([base] if isinstance(base, (str, os.PathLike))
                        else list(base))
                yaml_file = base + includes
            else:
                yaml_file = includes
        else:
            yaml_file = base
        super().__init__(settings_cls, yaml_file)

    def _read_files(self, files, *args, **kwargs):  # noqa: ARG002
        """Load and deep merge every configuration layer that exists.

        Args:
            files: The configured yaml_file plus --include files

        Returns:
            Merged configuration dictionary
        """
        candidates = [
            DEFAULTS_FILE,
            Path(user_config_dir("mergemend", appauthor=False))
            / PROJECT_FILE,
        ]
        if files:
            if isinstance(files, (str, os.PathLike)):
                files = [files]
            candidates.extend(Path(f).expanduser() for f in files)

        result = {}
        seen = set()
        for path in candidates:
            key = path.resolve()
            if key in seen or not path.is_file():
                continue
            seen.add(key)
            result = deep_merge(result, load_yaml(path))
        return result


def load_yaml(filepath: Path, visited: frozenset[Path] = frozenset()) -> dict:
    """Load a YAML file, resolving include: directives recursively.

    Raises:
        ValueError: On a circular include
        FileNotFoundError: If an included file does not exist
    """
    filepath = filepath.resolve()
    if filepath in visited:
        raise ValueError(f"Circular include: {filepath}")
    visited = visited | {filepath}

    with open(filepath, encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    includes = data.pop("include", None) or []
    if isinstance(includes, str):
        includes = [includes]

    merged = {}
    for include in includes:
        path = Path(include).expanduser()
        if not path.is_absolute():
            path = filepath.parent / path
        merged = deep_merge(merged, load_yaml(path, visited))
    return deep_merge(merged, data)


def deep_merge(base: dict, override: dict) -> dict:
    """Return base with override merged in; override wins."""
    result = base.copy()
    for key, value in override.items():
        if isinstance(result.get(key), dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
