"""
mockwire Mitmproxy Interception Host

Mitmproxy addon exposing the ``on_resource_requested`` hook slot used by the
interception bridge. Point a browser (or any client) at the proxy and the
requests that match a mapping are redirected to the mock server before they
reach the network.

Usage:
    host = MitmInterceptionHost()
    server = MockServer(interception_host=host).start(9001)
    # add `host` to the addons of a running mitmproxy master
"""

import logging
from typing import Any, Callable, Dict, Optional

from mitmproxy import http


logger = logging.getLogger("mockwire.intercept")


class FlowRequestController:
    """Controller handed to hooks; rewrites the destination of one flow."""

    def __init__(self, flow: http.HTTPFlow):
        self.flow = flow

    def change_url(self, new_url: str) -> None:
        """Send the request to ``new_url`` instead of its original destination."""
        self.flow.request.url = new_url


class MitmInterceptionHost:
    """
    Mitmproxy addon that hands every request to a replaceable hook.

    mitmproxy calls ``request()`` once the client request headers and body
    have been read, before anything is sent upstream.
    """

    def __init__(self, on_resource_requested: Optional[Callable] = None):
        """
        Initialize interception host.

        Args:
            on_resource_requested: Initial hook, called as
                hook(host, request_data, controller)
        """
        self.on_resource_requested = on_resource_requested

    @staticmethod
    def request_data(flow: http.HTTPFlow) -> Dict[str, Any]:
        """Describe a flow's request the way hooks receive it."""
        req = flow.request
        return {
            'method': req.method,
            'url': req.pretty_url,
            'postData': req.get_text(strict=False) or '',
            'headers': dict(req.headers)
        }

    def request(self, flow: http.HTTPFlow) -> None:
        """Called by mitmproxy for each client request."""
        hook = self.on_resource_requested
        if not callable(hook):
            return

        try:
            hook(self, self.request_data(flow), FlowRequestController(flow))
        except Exception as e:
            # A failing hook must not take the proxy down
            logger.error(f"Interception hook failed for {flow.request.pretty_url}: {e}")
