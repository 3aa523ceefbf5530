"""Configuration management for the application data backup tool."""

from .settings import AppConfig, ConflictPolicy, HostPaths, MirrorBackend, MirrorOptions

__all__ = ["AppConfig", "ConflictPolicy", "HostPaths", "MirrorBackend", "MirrorOptions"]
