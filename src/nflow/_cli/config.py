"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path

_PATH_KEYS = ("variables", "display", "edits", "output", "graph")


class ConfigError(Exception):
    """Error in nflow configuration."""


@dataclass(slots=True, frozen=True)
class NflowConfig:
    """Configuration loaded from the ``[tool.nflow]`` table of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    variables: Path | None = None
    display: Path | None = None
    edits: Path | None = None
    output: Path | None = None
    graph: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    current = (start_dir if start_dir is not None else Path.cwd()).resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        if current.parent == current:
            return None
        current = current.parent


def _parse_path(section: dict[str, object], key: str, project_root: Path) -> Path | None:
    if key not in section:
        return None
    value = section[key]
    if not isinstance(value, str):
        msg = f"Invalid [tool.nflow].{key}: expected string path"
        raise ConfigError(msg)
    path = Path(value)
    return path if path.is_absolute() else project_root / path


def load_config(pyproject_path: Path) -> NflowConfig:
    """Load and validate the ``[tool.nflow]`` table of a pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed NflowConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("nflow", {})
    if not isinstance(section, dict):
        msg = "Invalid [tool.nflow] configuration: expected a table"
        raise ConfigError(msg)

    unknown = sorted(set(section) - set(_PATH_KEYS))
    if unknown:
        msg = f"Unknown [tool.nflow] key(s): {', '.join(unknown)}"
        raise ConfigError(msg)

    return NflowConfig(
        **{key: _parse_path(section, key, project_root) for key in _PATH_KEYS},
        project_root=project_root,
    )


def get_config() -> NflowConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        NflowConfig (may be empty if no pyproject.toml or no [tool.nflow] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return NflowConfig()
    return load_config(pyproject_path)
