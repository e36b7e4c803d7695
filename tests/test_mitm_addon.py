"""
Tests for the mitmproxy interception host.

Uses real mitmproxy request objects wrapped in a mock flow, so no proxy is
started.
"""

from unittest.mock import Mock

import pytest
from mitmproxy import http

from mockwire.intercept.bridge import InterceptionBridge
from mockwire.intercept.mitm_addon import FlowRequestController, MitmInterceptionHost
from mockwire.mock.store import MappingStore


def make_flow(method='GET', url='https://www.example.com/ajax_info_1?id=7', content=b''):
    """Create a mock flow carrying a real mitmproxy request."""
    flow = Mock()
    flow.request = http.Request.make(method, url, content)
    return flow


class TestFlowRequestController:
    """Test rewriting flow destinations."""

    def test_change_url(self):
        flow = make_flow()

        FlowRequestController(flow).change_url('http://127.0.0.1:9001/ajax_info_1?id=7')

        assert flow.request.scheme == 'http'
        assert flow.request.host == '127.0.0.1'
        assert flow.request.port == 9001
        assert flow.request.path == '/ajax_info_1?id=7'


class TestMitmInterceptionHost:
    """Test the addon's request hook."""

    def test_request_data(self):
        flow = make_flow('POST', 'http://www.example.com/ajax_info_2', b'member_id=1')

        data = MitmInterceptionHost.request_data(flow)

        assert data['method'] == 'POST'
        assert data['url'] == flow.request.pretty_url
        assert data['postData'] == 'member_id=1'
        assert isinstance(data['headers'], dict)

    def test_without_hook(self):
        """Test that requests pass through untouched when no hook is set."""
        flow = make_flow()

        MitmInterceptionHost().request(flow)

        assert flow.request.host == 'www.example.com'

    def test_hook_receives_host_data_and_controller(self):
        hook = Mock()
        host = MitmInterceptionHost(hook)
        flow = make_flow()

        host.request(flow)

        context, data, controller = hook.call_args[0]
        assert context is host
        assert data['method'] == 'GET'
        assert isinstance(controller, FlowRequestController)
        assert controller.flow is flow

    def test_failing_hook_is_contained(self):
        host = MitmInterceptionHost(Mock(side_effect=ValueError('broken hook')))

        host.request(make_flow())


class TestMitmWithBridge:
    """Test the addon together with the interception bridge."""

    @pytest.fixture
    def host(self):
        store = MappingStore()
        store.define_pattern({'url': 'ajax_info', 'method': 'GET'}).attach_response({'responseText': 'x'})
        host = MitmInterceptionHost()
        InterceptionBridge(store, host=host).install(9001)
        return host

    def test_matching_flow_is_redirected(self, host):
        flow = make_flow('GET', 'https://www.example.com/ajax_info_1?id=7')

        host.request(flow)

        assert flow.request.scheme == 'http'
        assert flow.request.host == '127.0.0.1'
        assert flow.request.port == 9001
        assert flow.request.path == '/ajax_info_1?id=7'

    def test_other_flow_is_untouched(self, host):
        flow = make_flow('GET', 'https://www.example.com/static/app.js')

        host.request(flow)

        assert flow.request.host == 'www.example.com'
        assert flow.request.port == 443
