"""Configuration settings and models for the backup application."""

import os
import platform
from enum import Enum
from pathlib import Path
from typing import Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator

DEFAULT_BACKUP_SUBPATH = "Backups/AppData"

# Environment variables the OneDrive client sets, in order of preference
CLOUD_ROOT_VARIABLES = ("OneDrive", "OneDriveConsumer", "OneDriveCommercial")


class ConflictPolicy(str, Enum):
    """What to do when an item already exists at the destination."""
    OVERWRITE = "overwrite"
    SKIP_EXISTING = "skip-existing"
    FORCE = "force"


class MirrorBackend(str, Enum):
    """Directory mirroring implementations."""
    AUTO = "auto"
    ROBOCOPY = "robocopy"
    PYTHON = "python"


class HostPaths(BaseModel):
    """Base directories provided by the host environment."""
    cloud_root: Optional[Path] = None
    local_app_data: Path
    roaming_app_data: Path
    user_home: Path
    machine_name: str

    @classmethod
    def from_env(cls, cloud_root: Optional[Path] = None,
                 machine_name: Optional[str] = None) -> "HostPaths":
        """Resolve host paths from environment variables.

        Args:
            cloud_root: Explicit OneDrive folder, overrides the environment
            machine_name: Explicit machine name, overrides the environment

        Returns:
            Resolved host paths
        """
        home = Path(os.getenv('USERPROFILE') or Path.home())

        if cloud_root is None:
            for variable in CLOUD_ROOT_VARIABLES:
                value = os.getenv(variable)
                if value:
                    cloud_root = Path(value)
                    break

        return cls(
            cloud_root=cloud_root,
            local_app_data=Path(os.getenv('LOCALAPPDATA') or home / 'AppData' / 'Local'),
            roaming_app_data=Path(os.getenv('APPDATA') or home / 'AppData' / 'Roaming'),
            user_home=home,
            machine_name=machine_name or os.getenv('COMPUTERNAME') or platform.node() or 'localhost'
        )


class MirrorOptions(BaseModel):
    """Options for the directory mirror primitive."""
    backend: MirrorBackend = MirrorBackend.AUTO
    retries: int = 2
    wait_seconds: int = 5

    @field_validator('retries', 'wait_seconds')
    @classmethod
    def validate_non_negative(cls, v):
        if v < 0:
            raise ValueError('must be zero or greater')
        return v


class AppConfig(BaseModel):
    """Main configuration class."""
    backup_subpath: str = DEFAULT_BACKUP_SUBPATH
    cloud_root: Optional[Path] = None
    machine_name: Optional[str] = None
    mirror: MirrorOptions = Field(default_factory=MirrorOptions)
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    @field_validator('backup_subpath')
    @classmethod
    def validate_backup_subpath(cls, v):
        if not v or Path(v).is_absolute():
            raise ValueError('backup_subpath must be a relative path inside the OneDrive folder')
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        if v.upper() not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            raise ValueError(f'unknown log level: {v}')
        return v.upper()

    @classmethod
    def from_yaml(cls, config_path: Union[str, Path]) -> "AppConfig":
        """Load configuration from YAML file."""
        config_path = Path(config_path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f) or {}

        return cls(**config_data)

    @classmethod
    def load(cls, config_path: Optional[Union[str, Path]] = None) -> "AppConfig":
        """Load configuration from YAML if the file exists, defaults otherwise."""
        if config_path is not None and Path(config_path).exists():
            return cls.from_yaml(config_path)
        return cls()

    def to_yaml(self, config_path: Union[str, Path]) -> None:
        """Save configuration to YAML file."""
        config_path = Path(config_path)
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, 'w', encoding='utf-8') as f:
            yaml.safe_dump(self.model_dump(mode='json', exclude_none=True), f,
                           default_flow_style=False, indent=2)

    def host_paths(self) -> HostPaths:
        """Host paths with the configured overrides applied."""
        return HostPaths.from_env(cloud_root=self.cloud_root, machine_name=self.machine_name)
