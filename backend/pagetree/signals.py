"""
Signals the page tree sends to the outside world.

navigation_cache_cleared: a structural change may affect any navigation.
page_uncached: drop rendered copies of ``path``.
sitemap_changed: pages were added or removed, search engines may be pinged.
"""
from blinker import Namespace

_signals = Namespace()

navigation_cache_cleared = _signals.signal("navigation-cache-cleared")
page_uncached = _signals.signal("page-uncached")
sitemap_changed = _signals.signal("sitemap-changed")
