import tomllib
from dataclasses import dataclass
from pathlib import Path

import tomlkit

STATE_DIR_NAME = ".stackyard"


@dataclass(frozen=True)
class LoadedConfig:
    """In-memory representation of `.stackyard/config.toml`."""

    worktrees_dir: str | None
    default_target: str | None

    @staticmethod
    def empty() -> "LoadedConfig":
        return LoadedConfig(worktrees_dir=None, default_target=None)


def load_config(config_dir: Path) -> LoadedConfig:
    """Load config.toml from the given directory if present; otherwise return defaults.

    Example config:
      [workspaces]
      dir = "../myrepo-worktrees"
      default_target = "main"
    """

    cfg_path = config_dir / "config.toml"
    if not cfg_path.exists():
        return LoadedConfig.empty()

    data = tomllib.loads(cfg_path.read_text(encoding="utf-8"))
    section = data.get("workspaces", {})
    worktrees_dir = section.get("dir")
    default_target = section.get("default_target")
    return LoadedConfig(
        worktrees_dir=str(worktrees_dir) if worktrees_dir is not None else None,
        default_target=str(default_target) if default_target is not None else None,
    )


def save_config(config_dir: Path, config: LoadedConfig) -> None:
    """Save LoadedConfig to config.toml, preserving formatting.

    Creates the config directory if it doesn't exist.
    """
    config_dir.mkdir(parents=True, exist_ok=True)
    cfg_path = config_dir / "config.toml"

    if cfg_path.exists():
        doc = tomlkit.parse(cfg_path.read_text(encoding="utf-8"))
    else:
        doc = tomlkit.document()

    if "workspaces" not in doc:
        doc["workspaces"] = tomlkit.table()

    section = doc["workspaces"]
    for key, value in (("dir", config.worktrees_dir), ("default_target", config.default_target)):
        if value is None:
            section.pop(key, None)  # type: ignore[union-attr]
        else:
            section[key] = value  # type: ignore[index]

    cfg_path.write_text(tomlkit.dumps(doc), encoding="utf-8")


def read_trunk_from_pyproject(repo_root: Path) -> str | None:
    """Read trunk branch configuration from pyproject.toml.

    Returns:
        Configured trunk branch name from [tool.stackyard], or None if not configured
    """
    pyproject_path = repo_root / "pyproject.toml"

    if not pyproject_path.exists():
        return None

    with pyproject_path.open("rb") as f:
        data = tomllib.load(f)

    tool_section = data.get("tool")
    if tool_section is None:
        return None

    stackyard_section = tool_section.get("stackyard")
    if stackyard_section is None:
        return None

    return stackyard_section.get("trunk_branch")


def write_trunk_to_pyproject(repo_root: Path, trunk: str) -> None:
    """Write trunk branch configuration to pyproject.toml.

    Creates or updates the [tool.stackyard] section with trunk_branch setting.
    Preserves existing formatting and comments using tomlkit.
    """
    pyproject_path = repo_root / "pyproject.toml"

    if pyproject_path.exists():
        with pyproject_path.open("r", encoding="utf-8") as f:
            doc = tomlkit.load(f)
    else:
        doc = tomlkit.document()

    if "tool" not in doc:
        doc["tool"] = tomlkit.table()  # type: ignore[index]

    if "stackyard" not in doc["tool"]:  # type: ignore[operator]
        doc["tool"]["stackyard"] = tomlkit.table()  # type: ignore[index]

    doc["tool"]["stackyard"]["trunk_branch"] = trunk  # type: ignore[index]

    with pyproject_path.open("w", encoding="utf-8") as f:
        tomlkit.dump(doc, f)
