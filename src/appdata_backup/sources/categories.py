"""Registry of application categories and the files that belong to them."""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from ..config.settings import HostPaths

RootRule = Callable[[HostPaths], Path]


class ItemKind(str, Enum):
    """How an item is transferred."""
    FILE = "file"
    DIRECTORY = "directory"


@dataclass(frozen=True)
class ItemSpec:
    """A file or directory inside a category.

    ``name`` is relative to the item's root and is also the item's relative
    path inside the category's backup folder, so backup and restore share
    one layout. A ``pattern`` restricts a directory item to the matching
    top-level files.
    """
    name: str
    kind: ItemKind = ItemKind.FILE
    pattern: Optional[str] = None
    root: Optional[RootRule] = None


@dataclass(frozen=True)
class Category:
    """A group of application files backed up and restored as one unit."""
    key: str
    label: str
    root: RootRule
    items: Tuple[ItemSpec, ...]
    processes: Tuple[str, ...] = ()
    profile_based: bool = False


def _chromium_root(vendor: str, product: str) -> RootRule:
    def rule(paths: HostPaths) -> Path:
        return paths.local_app_data / vendor / product / "User Data" / "Default"
    return rule


def _firefox_profiles(paths: HostPaths) -> Path:
    return paths.roaming_app_data / "Mozilla" / "Firefox" / "Profiles"


def _user_home(paths: HostPaths) -> Path:
    return paths.user_home


def _roaming_microsoft(paths: HostPaths) -> Path:
    return paths.roaming_app_data / "Microsoft"


def _local_outlook(paths: HostPaths) -> Path:
    return paths.local_app_data / "Microsoft" / "Outlook"


CHROMIUM_ITEMS = tuple(
    ItemSpec(name) for name in ("Bookmarks", "Preferences", "Login Data", "Web Data", "Favicons")
)

FIREFOX_ITEMS = tuple(
    ItemSpec(name) for name in (
        "places.sqlite", "prefs.js", "key4.db", "logins.json",
        "favicons.sqlite", "addonStartup.json.lz4",
    )
)

CATEGORIES: Dict[str, Category] = {
    category.key: category for category in (
        Category(
            key="chrome",
            label="Google Chrome",
            root=_chromium_root("Google", "Chrome"),
            items=CHROMIUM_ITEMS,
            processes=("chrome.exe",),
        ),
        Category(
            key="edge",
            label="Microsoft Edge",
            root=_chromium_root("Microsoft", "Edge"),
            items=CHROMIUM_ITEMS,
            processes=("msedge.exe",),
        ),
        Category(
            key="firefox",
            label="Mozilla Firefox",
            root=_firefox_profiles,
            items=FIREFOX_ITEMS,
            processes=("firefox.exe",),
            profile_based=True,
        ),
        Category(
            key="favorites",
            label="Internet Explorer Favorites",
            root=_user_home,
            items=(ItemSpec("Favorites", ItemKind.DIRECTORY),),
            processes=("iexplore.exe",),
        ),
        Category(
            key="outlook",
            label="Microsoft Outlook",
            root=_roaming_microsoft,
            items=(
                ItemSpec("Templates", ItemKind.DIRECTORY, pattern="*.oft"),
                ItemSpec("Outlook", ItemKind.DIRECTORY, pattern="*.rwz"),
                ItemSpec("RoamCache", ItemKind.DIRECTORY, pattern="Stream_Autocomplete*",
                         root=_local_outlook),
            ),
            processes=("outlook.exe",),
        ),
    )
}


def get_category(key: str) -> Category:
    """Look up a registered category.

    Raises:
        KeyError: If ``key`` is not a registered category
    """
    return CATEGORIES[key]


def select_categories(keys: Iterable[str]) -> List[Category]:
    """Return the requested categories in registry order."""
    wanted = {get_category(key).key for key in keys}
    return [category for key, category in CATEGORIES.items() if key in wanted]


def item_root(category: Category, item: ItemSpec, paths: HostPaths,
              category_root: Optional[Path] = None) -> Path:
    """Resolve the live directory an item lives in.

    Args:
        category: Category owning the item
        item: Item to resolve
        paths: Host base directories
        category_root: Already resolved category root (e.g. a selected
            Firefox profile); defaults to the category's root rule

    Returns:
        Directory containing ``item.name``
    """
    if item.root is not None:
        return item.root(paths)
    if category_root is not None:
        return category_root
    return category.root(paths)
