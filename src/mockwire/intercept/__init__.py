"""
mockwire Interception Module

Redirects outbound requests made through a host automation environment
(e.g. a browser behind mitmproxy) to the mock server.
"""

from .bridge import InterceptionBridge, HOOK_ATTRIBUTE

__all__ = [
    'InterceptionBridge',
    'HOOK_ATTRIBUTE',
]
