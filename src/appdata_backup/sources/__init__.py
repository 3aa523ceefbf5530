"""Application categories and live path resolution."""

from .categories import CATEGORIES, Category, ItemKind, ItemSpec, get_category, select_categories

__all__ = ["CATEGORIES", "Category", "ItemKind", "ItemSpec", "get_category", "select_categories"]
