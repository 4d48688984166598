"""
Destination classification for direct-vs-relayed execution.

A caller running in a sandbox (a browser, typically) can reach services on
its own machine but is blocked by cross-origin policy from most remote
origins. Whoever issues the call uses this predicate to decide whether to
call the target directly or ask the relay to forward it.
"""

from urllib.parse import urlsplit


LOOPBACK_HOSTS = frozenset({"localhost", "127.0.0.1", "::1"})


def is_local_url(url: str) -> bool:
    """
    Return True if the URL's host is a loopback identifier.

    Pure string inspection after parsing; no name resolution is performed.
    Anything that cannot be parsed is treated as remote.

    Args:
        url: The target URL

    Returns:
        True for localhost, 127.0.0.1 and ::1, False otherwise
    """
    if not isinstance(url, str):
        return False
    try:
        host = urlsplit(url.strip()).hostname
    except ValueError:
        return False
    return host in LOOPBACK_HOSTS
