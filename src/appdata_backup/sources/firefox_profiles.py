"""Firefox profile discovery and selection."""

import logging
import random
import string
from pathlib import Path
from typing import List, Optional

logger = logging.getLogger(__name__)

DEFAULT_RELEASE_SUFFIX = ".default-release"
DEFAULT_SUFFIX = ".default"
PROFILE_NAME_ALPHABET = string.ascii_lowercase + string.digits
PROFILE_NAME_LENGTH = 8


def find_profiles(profiles_dir: Path) -> List[Path]:
    """List profile directories, sorted by name."""
    if not profiles_dir.is_dir():
        return []
    return sorted(p for p in profiles_dir.iterdir() if p.is_dir())


def match_default_profile(profiles: List[Path]) -> Optional[Path]:
    """Pick the ``*.default-release`` profile, else a ``*.default`` one."""
    for suffix in (DEFAULT_RELEASE_SUFFIX, DEFAULT_SUFFIX):
        for profile in profiles:
            if profile.name.endswith(suffix):
                return profile
    return None


def select_backup_profile(profiles_dir: Path) -> Optional[Path]:
    """Select the profile to back up.

    Falls back to the most recently modified profile when no default
    profile exists. Returns None when there is no profile at all.
    """
    profiles = find_profiles(profiles_dir)
    profile = match_default_profile(profiles)
    if profile is None and profiles:
        profile = max(profiles, key=lambda p: p.stat().st_mtime)
        logger.info(f"No default Firefox profile, using most recent: {profile.name}")
    return profile


def new_profile_name(profiles_dir: Path) -> str:
    """Generate an unused random profile directory name."""
    while True:
        stem = "".join(random.choices(PROFILE_NAME_ALPHABET, k=PROFILE_NAME_LENGTH))
        name = f"{stem}{DEFAULT_RELEASE_SUFFIX}"
        if not (profiles_dir / name).exists():
            return name


def select_restore_profile(profiles_dir: Path, decisions=None,
                           interactive: bool = False, simulate: bool = False) -> Path:
    """Select, or create, the profile to restore into.

    Args:
        profiles_dir: Firefox ``Profiles`` directory
        decisions: Decision provider used for interactive selection
        interactive: Whether to offer a choice among non-default profiles
        simulate: Return the path of a new profile without creating it

    Returns:
        Profile directory to restore into
    """
    profiles = find_profiles(profiles_dir)
    profile = match_default_profile(profiles)
    if profile is not None:
        return profile

    if interactive and profiles and decisions is not None:
        choice = decisions.choose_profile(profiles)
        if choice is not None and 0 <= choice < len(profiles):
            return profiles[choice]
        logger.info("No profile chosen, creating a new one")

    profile = profiles_dir / new_profile_name(profiles_dir)
    if simulate:
        logger.info(f"Would create Firefox profile {profile}")
    else:
        profile.mkdir(parents=True)
        logger.warning(f"Created Firefox profile {profile}; register it in profiles.ini to use it")
    return profile
