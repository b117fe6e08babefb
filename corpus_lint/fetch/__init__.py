"""External link checking.

This package requests the external URLs articles link to and reports the
ones that fail.
"""

from .links import LinkResult, check_external_links, check_url, collect_external_urls

__all__ = ["LinkResult", "check_external_links", "check_url", "collect_external_urls"]
