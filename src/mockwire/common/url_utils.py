"""
mockwire URL Utilities

URL helpers shared by the listener and the interception bridge.
"""

from urllib.parse import urlsplit, urlunsplit


def request_target(path: str, query: str = '') -> str:
    """
    Build the request target (path plus query string) seen by the listener.

    Args:
        path: Request path
        query: Raw query string, without the leading '?'

    Returns:
        Path with the query string appended when present
    """
    path = path or '/'
    return f"{path}?{query}" if query else path


def redirect_url(url: str, host: str, port: int) -> str:
    """
    Point a URL at another host and port, keeping path, query and fragment.

    The rewritten URL always uses plain http, since the mock server does not
    terminate TLS.

    Args:
        url: Original URL
        host: Host to redirect to
        port: Port to redirect to

    Returns:
        Redirected URL

    Example:
        redirect_url('https://api.example.com/ajax_info_1?id=1', '127.0.0.1', 9001)
        # 'http://127.0.0.1:9001/ajax_info_1?id=1'
    """
    parsed = urlsplit(url)
    return urlunsplit((
        'http',
        f"{host}:{port}",
        parsed.path or '/',
        parsed.query,
        parsed.fragment
    ))
