"""
Tools for the relay.

- search_url: LinkedIn people-search URL builder
- phantombuster: PhantomBuster launch/output API client
"""

from phantom_relay.tools.phantombuster import PhantomBusterClient, StatusReport
from phantom_relay.tools.search_url import build_search_url

__all__ = ["PhantomBusterClient", "StatusReport", "build_search_url"]
