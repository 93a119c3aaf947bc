import glob
import hashlib
import os

from flask import current_app

from pagetree.signals import navigation_cache_cleared, page_uncached, sitemap_changed

NAVIGATION_CACHE_PATTERN = "navigation-*.json"


def rendered_page_file(path: str) -> str:
    digest = hashlib.md5(path.encode("utf-8")).hexdigest()
    return os.path.join(current_app.config["CACHE_DIR"], f"{digest}.page")


def _remove(file_path: str) -> bool:
    if not os.path.exists(file_path):
        return False
    try:
        os.remove(file_path)
        return True
    except OSError as e:
        current_app.logger.error(f"Failed to delete cache file {file_path}: {e}")
        return False


def invalidate_rendered_page(sender, path: str, **extra) -> None:
    """Remove the static render of a path, with and without a trailing slash."""
    for variant in (path, f"{path}/"):
        if _remove(rendered_page_file(variant)):
            current_app.logger.debug(f"Uncached rendered page '{variant}'")


def clear_navigation_cache(sender, **extra) -> None:
    cache_dir = current_app.config["CACHE_DIR"]
    for file_path in glob.glob(os.path.join(cache_dir, NAVIGATION_CACHE_PATTERN)):
        _remove(file_path)
    current_app.logger.debug("Navigation cache cleared")


def log_sitemap_change(sender, page_id=None, **extra) -> None:
    current_app.logger.info(f"Sitemap changed (page {page_id}), search engines may be notified")


def register_cache_receivers(app) -> None:
    page_uncached.connect(invalidate_rendered_page)
    navigation_cache_cleared.connect(clear_navigation_cache)
    sitemap_changed.connect(log_sitemap_change)
