"""Global configuration data structures and loading.

Provides immutable global config data loaded from ~/.stackyard/config.toml.
Loaded once at the CLI entry point and stored in StackyardContext.
"""

import os
import tomllib
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from stackyard.core.commit_graph import DEFAULT_COMMIT_WINDOW


@dataclass(frozen=True)
class GlobalConfig:
    """Immutable global configuration data.

    commit_window: number of commits shown in the lane graph
    rebase_on_open: reconcile a workspace with its target when it is first displayed
    show_intent: show workspace intent next to branch names in listings
    """

    commit_window: int
    rebase_on_open: bool
    show_intent: bool

    @staticmethod
    def defaults() -> "GlobalConfig":
        return GlobalConfig(
            commit_window=DEFAULT_COMMIT_WINDOW,
            rebase_on_open=True,
            show_intent=True,
        )


class GlobalConfigOps(ABC):
    """Abstract interface for global config operations.

    Provides dependency injection for global config access, enabling
    in-memory implementations for tests without touching filesystem.
    """

    @abstractmethod
    def exists(self) -> bool:
        """Check if global config exists."""
        ...

    @abstractmethod
    def load(self) -> GlobalConfig:
        """Load global config.

        Raises:
            FileNotFoundError: If config doesn't exist
            ValueError: If config values are malformed
        """
        ...

    @abstractmethod
    def save(self, config: GlobalConfig) -> None:
        """Save global config."""
        ...

    @abstractmethod
    def path(self) -> Path:
        """Get the path to the global config file (for error messages)."""
        ...

    def load_or_defaults(self) -> GlobalConfig:
        if not self.exists():
            return GlobalConfig.defaults()
        return self.load()


def _read_bool(data: dict[str, Any], key: str, default: bool, config_path: Path) -> bool:
    value = data.get(key, default)
    if not isinstance(value, bool):
        raise ValueError(f"'{key}' must be true or false in {config_path}, got {value!r}")
    return value


class FilesystemGlobalConfigOps(GlobalConfigOps):
    """Production implementation that reads/writes ~/.stackyard/config.toml."""

    def exists(self) -> bool:
        return self.path().exists()

    def load(self) -> GlobalConfig:
        """Load global config from ~/.stackyard/config.toml.

        Missing keys fall back to defaults.
        """
        config_path = self.path()

        if not config_path.exists():
            raise FileNotFoundError(f"Global config not found at {config_path}")

        data = tomllib.loads(config_path.read_text(encoding="utf-8"))
        defaults = GlobalConfig.defaults()

        window = data.get("commit_window", defaults.commit_window)
        if isinstance(window, bool) or not isinstance(window, int) or window < 1:
            raise ValueError(f"'commit_window' must be a positive integer in {config_path}")

        return GlobalConfig(
            commit_window=window,
            rebase_on_open=_read_bool(data, "rebase_on_open", defaults.rebase_on_open, config_path),
            show_intent=_read_bool(data, "show_intent", defaults.show_intent, config_path),
        )

    def save(self, config: GlobalConfig) -> None:
        """Save global config to ~/.stackyard/config.toml.

        Raises:
            PermissionError: If directory or file cannot be written
        """
        config_path = self.path()
        parent = config_path.parent

        if parent.exists() and not os.access(parent, os.W_OK):
            raise PermissionError(
                f"Cannot write to directory: {parent}\n"
                f"The directory exists but is not writable."
            )

        parent.mkdir(parents=True, exist_ok=True)

        content = f"""# Global stackyard configuration
commit_window = {config.commit_window}
rebase_on_open = {str(config.rebase_on_open).lower()}
show_intent = {str(config.show_intent).lower()}
"""
        config_path.write_text(content, encoding="utf-8")

    def path(self) -> Path:
        override = os.environ.get("STACKYARD_CONFIG")
        if override:
            return Path(override).expanduser()
        return Path.home() / ".stackyard" / "config.toml"


class InMemoryGlobalConfigOps(GlobalConfigOps):
    """Test implementation that stores config in memory without touching filesystem."""

    def __init__(self, config: GlobalConfig | None = None) -> None:
        """Initialize in-memory config ops.

        Args:
            config: Initial config state (None = config doesn't exist)
        """
        self._config = config

    def exists(self) -> bool:
        return self._config is not None

    def load(self) -> GlobalConfig:
        if self._config is None:
            raise FileNotFoundError(f"Global config not found at {self.path()}")
        return self._config

    def save(self, config: GlobalConfig) -> None:
        self._config = config

    def path(self) -> Path:
        return Path("/fake/stackyard/config.toml")
