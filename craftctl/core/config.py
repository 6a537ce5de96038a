"""craftctl runtime configuration and settings."""
import os
from dataclasses import dataclass, field, fields, replace
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULT_CONFIG_FILE = "craftctl.yml"


class ConfigError(Exception):
    """Raised when the craftctl config file cannot be used."""
    pass


@dataclass
class ControllerConfig:
    """Runtime configuration for the lifecycle controller.

    Attributes:
        container_name: Name of the managed container (default: minecraft-server)
        service_name: Compose service whose logs are streamed (default: minecraft)
        compose_file: Compose definition, relative to project_dir
        data_dir: Server data directory archived by backups
        backup_dir: Directory receiving backup archives
        console_command: RCON client bundled in the server image
        console_timeout: Timeout in seconds for one console round trip (default: 10)
        supervisor_timeout: Timeout in seconds for docker compose actions (default: 300)
        lock_timeout: Seconds to wait for the lifecycle lock (0 = fail immediately)
        project_dir: Directory relative paths are resolved against
    """

    container_name: str = "minecraft-server"
    service_name: str = "minecraft"
    compose_file: str = "docker-compose.yml"
    data_dir: str = "data"
    backup_dir: str = "."
    console_command: str = "rcon-cli"
    console_timeout: int = 10
    supervisor_timeout: int = 300
    lock_timeout: int = 0
    project_dir: Path = field(default_factory=Path.cwd)

    @property
    def compose_path(self) -> Path:
        return self._resolve(self.compose_file)

    @property
    def data_path(self) -> Path:
        return self._resolve(self.data_dir)

    @property
    def backup_path(self) -> Path:
        return self._resolve(self.backup_dir)

    @property
    def lock_path(self) -> Path:
        return Path(self.project_dir) / ".craftctl.lock"

    def _resolve(self, value: str) -> Path:
        path = Path(value).expanduser()
        if path.is_absolute():
            return path
        return Path(self.project_dir) / path

    @classmethod
    def from_env(cls, base: Optional["ControllerConfig"] = None) -> "ControllerConfig":
        """Create config from environment variables.

        Environment variables:
            CRAFTCTL_CONTAINER_NAME: Managed container name
            CRAFTCTL_SERVICE_NAME: Compose service name
            CRAFTCTL_COMPOSE_FILE: Compose definition path
            CRAFTCTL_DATA_DIR: Server data directory
            CRAFTCTL_BACKUP_DIR: Backup destination directory
            CRAFTCTL_CONSOLE_COMMAND: RCON client inside the container
            CRAFTCTL_CONSOLE_TIMEOUT: Console timeout in seconds
            CRAFTCTL_SUPERVISOR_TIMEOUT: Compose action timeout in seconds
            CRAFTCTL_LOCK_TIMEOUT: Lifecycle lock wait in seconds

        Args:
            base: Config whose values are used where no variable is set

        Returns:
            ControllerConfig instance with values from environment or base

        Raises:
            ConfigError: If a numeric variable is not an integer
        """
        base = base or cls()
        return cls(
            container_name=os.getenv("CRAFTCTL_CONTAINER_NAME", base.container_name),
            service_name=os.getenv("CRAFTCTL_SERVICE_NAME", base.service_name),
            compose_file=os.getenv("CRAFTCTL_COMPOSE_FILE", base.compose_file),
            data_dir=os.getenv("CRAFTCTL_DATA_DIR", base.data_dir),
            backup_dir=os.getenv("CRAFTCTL_BACKUP_DIR", base.backup_dir),
            console_command=os.getenv("CRAFTCTL_CONSOLE_COMMAND", base.console_command),
            console_timeout=_env_int("CRAFTCTL_CONSOLE_TIMEOUT", base.console_timeout),
            supervisor_timeout=_env_int("CRAFTCTL_SUPERVISOR_TIMEOUT", base.supervisor_timeout),
            lock_timeout=_env_int("CRAFTCTL_LOCK_TIMEOUT", base.lock_timeout),
            project_dir=base.project_dir,
        )

    @classmethod
    def from_file(cls, config_path: Path, project_dir: Optional[Path] = None) -> "ControllerConfig":
        """Load overrides from a YAML file.

        Raises:
            ConfigError: If the file is unreadable, not a mapping, or has unknown keys
        """
        config_path = Path(config_path)
        try:
            with open(config_path) as f:
                raw = yaml.safe_load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        except yaml.YAMLError as e:
            raise ConfigError(f"Invalid YAML in {config_path}: {e}") from e

        raw = raw or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {config_path} must contain a mapping")

        return cls._from_mapping(raw, project_dir or Path.cwd(), source=config_path)

    @classmethod
    def _from_mapping(cls, raw: Dict[str, Any], project_dir: Path, source: Path) -> "ControllerConfig":
        allowed = {f.name for f in fields(cls)} - {"project_dir"}
        unknown = sorted(set(raw) - allowed)
        if unknown:
            raise ConfigError(
                f"Unknown setting(s) in {source}: {', '.join(unknown)}"
            )

        config = cls(project_dir=project_dir)
        overrides = {}
        for key, value in raw.items():
            expected = type(getattr(config, key))
            try:
                overrides[key] = expected(value)
            except (TypeError, ValueError) as e:
                raise ConfigError(f"Invalid value for '{key}' in {source}: {value!r}") from e
        return replace(config, **overrides)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(f"{name} must be a whole number of seconds, got {raw!r}") from e


def find_config(config_path: Optional[str] = None) -> Optional[Path]:
    """Locate the active craftctl config file, if any."""
    if config_path:
        return Path(config_path)

    if env_config := os.environ.get("CRAFTCTL_CONFIG"):
        return Path(env_config)

    candidate = Path.cwd() / DEFAULT_CONFIG_FILE
    if candidate.exists():
        return candidate

    return None


def load_config(config_path: Optional[str] = None) -> ControllerConfig:
    """Build the effective config: defaults, then YAML file, then environment."""
    path = find_config(config_path)
    base = None
    if path is not None:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        base = ControllerConfig.from_file(path, project_dir=Path.cwd())
    return ControllerConfig.from_env(base)


# Global config instance (can be overridden)
_config: Optional[ControllerConfig] = None


def get_config() -> ControllerConfig:
    """Get the global craftctl configuration.

    Returns:
        ControllerConfig instance (creates from file and environment if not set)
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: Optional[ControllerConfig]):
    """Set the global craftctl configuration.

    Args:
        config: ControllerConfig instance to use globally (None resets it)
    """
    global _config
    _config = config
