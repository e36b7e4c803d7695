"""
mockwire Interception Bridge

Redirects outbound requests issued inside a host automation environment to
the mock server. The host exposes a hook slot, ``on_resource_requested``,
called as ``hook(context, request_data, controller)`` for every outbound
request; ``controller.change_url(url)`` changes the request destination.

The bridge only reads the mapping store. It never changes it.
"""

import logging
from typing import Any, Callable, Dict, List, Optional

from ..common.url_utils import redirect_url
from ..mock.matcher import RequestDescriptor, matching_patterns
from ..mock.models import RequestPattern
from ..mock.store import MappingStore


logger = logging.getLogger("mockwire.intercept")

HOOK_ATTRIBUTE = 'on_resource_requested'

ResourceHook = Callable[[Any, Dict[str, Any], Any], Any]


class InterceptionBridge:
    """
    Installs a redirecting hook on an interception host.

    Every stored pattern and the pending one are checked against each
    outbound request. Each match rewrites the destination, so when several
    patterns match, the last rewrite is the one that sticks.

    Example:
        host = MitmInterceptionHost()
        bridge = InterceptionBridge(store, host)
        bridge.install(9001)
        # matching requests seen by the host now go to http://127.0.0.1:9001
        bridge.release()
    """

    def __init__(
        self,
        store: MappingStore,
        host: Optional[Any] = None,
        redirect_host: str = "127.0.0.1"
    ):
        """
        Initialize interception bridge.

        Args:
            store: Mapping store to read patterns from
            host: Object exposing the on_resource_requested hook slot, or None
            redirect_host: Host that matching requests are redirected to
        """
        self.store = store
        self.host = host
        self.redirect_host = redirect_host
        self.port = 0
        self.installed = False
        self._previous_hook: Optional[ResourceHook] = None

    @property
    def available(self) -> bool:
        """True if an interception host is present."""
        return self.host is not None and hasattr(self.host, HOOK_ATTRIBUTE)

    def install(self, port: int) -> bool:
        """
        Install the redirecting hook for the given server port.

        Nothing is installed without a host, without stored mappings or
        without a port. Installing again only updates the port; the hook that
        was in place before the first install is kept as the one to chain to
        and to restore.

        Args:
            port: Port of the running mock server

        Returns:
            True if the hook is installed
        """
        if not self.available or not port or len(self.store) == 0:
            return False

        self.port = port
        if not self.installed:
            previous = getattr(self.host, HOOK_ATTRIBUTE)
            self._previous_hook = previous if callable(previous) else None
            setattr(self.host, HOOK_ATTRIBUTE, self.handle_request)
            self.installed = True
            logger.debug(f"Interception hook installed for port {port}")

        return True

    def release(self) -> None:
        """Remove the hook and restore the previous one."""
        if not self.installed:
            return

        setattr(self.host, HOOK_ATTRIBUTE, self._previous_hook)
        self._previous_hook = None
        self.installed = False
        logger.debug("Interception hook released")

    def patterns(self) -> List[RequestPattern]:
        """Stored patterns in order, followed by the pending one."""
        patterns = [entry.request for entry in self.store.entries]
        if self.store.pending is not None:
            patterns.append(self.store.pending)
        return patterns

    def handle_request(self, context: Any, request_data: Dict[str, Any], controller: Any) -> None:
        """
        Hook called by the host for each outbound request.

        Args:
            context: Host context, passed through to the previous hook
            request_data: Dict with 'method', 'url' and 'postData'
            controller: Object with change_url(new_url)
        """
        if self._previous_hook is not None:
            self._previous_hook(context, request_data, controller)

        url = request_data.get('url') or ''
        request = RequestDescriptor.from_raw(
            request_data.get('method', 'GET'),
            url,
            request_data.get('postData')
        )

        for _ in matching_patterns(self.patterns(), request):
            new_url = redirect_url(url, self.redirect_host, self.port)
            logger.info(f"Redirect the call to the mock server: '{url}' -> '{new_url}'")
            controller.change_url(new_url)
