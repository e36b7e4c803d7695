"""
Tests for mockwire Mapping Store and mapping models.
"""

import logging
from unittest.mock import Mock

import pytest

from mockwire.errors import UnmatchedPatternError
from mockwire.mock.models import MappingEntry, RequestPattern, ResponsePlan
from mockwire.mock.store import MappingStore


class TestRequestPattern:
    """Test RequestPattern dataclass."""

    def test_from_dict(self):
        pattern = RequestPattern.from_dict({'url': 'ajax_info_1', 'method': 'GET'})

        assert pattern.url == 'ajax_info_1'
        assert pattern.method == 'GET'
        assert pattern.data is None

    def test_blank_fields_are_absent(self):
        """Test that empty strings mean 'match anything'."""
        pattern = RequestPattern.from_dict({'url': '', 'method': '', 'data': ''})

        assert pattern.is_wildcard

    def test_coerce_rejects_other_types(self):
        with pytest.raises(TypeError):
            RequestPattern.coerce('ajax_info_1')

    def test_to_dict_skips_absent_fields(self):
        assert RequestPattern(url='x').to_dict() == {'url': 'x'}


class TestResponsePlan:
    """Test ResponsePlan dataclass."""

    def test_from_camel_case_dict(self):
        plan = ResponsePlan.from_dict({
            'status': 201,
            'headers': {'Content-Type': 'text/plain'},
            'responseTime': 5000,
            'isTimeout': 'false',
            'responseText': 'Mock Response 2',
            'responseFile': './mytest.txt'
        })

        assert plan.status == 201
        assert plan.headers == {'Content-Type': 'text/plain'}
        assert plan.response_time == 5000
        assert plan.is_timeout == 'false'
        assert plan.response_text == 'Mock Response 2'
        assert plan.response_file == './mytest.txt'

    def test_from_snake_case_dict(self):
        plan = ResponsePlan.from_dict({'response_text': 'ok', 'is_timeout': True})

        assert plan.response_text == 'ok'
        assert plan.is_timeout is True

    def test_to_dict_uses_wire_names(self):
        data = ResponsePlan(status=200, response_text='ok').to_dict()

        assert data == {'status': 200, 'isTimeout': False, 'responseText': 'ok'}


class TestMappingStore:
    """Test MappingStore operations."""

    def test_initial_state(self):
        store = MappingStore()

        assert len(store) == 0
        assert store.entries == ()
        assert store.pending is None

    def test_define_pattern_sets_pending(self):
        store = MappingStore()

        result = store.define_pattern({'url': 'ajax_info_1'})

        assert result is store
        assert store.pending == RequestPattern(url='ajax_info_1')
        assert len(store) == 0

    def test_define_pattern_escapes_data_quotes(self):
        """Test that quotes in the body pattern are escaped."""
        store = MappingStore()

        store.define_pattern({'data': '"id": 1'})

        assert store.pending.data == '\\"id\\": 1'

    def test_define_pattern_leaves_url_alone(self):
        store = MappingStore()

        store.define_pattern({'url': 'a"b'})

        assert store.pending.url == 'a"b'

    def test_define_pattern_overwrites_pending(self, caplog):
        """Test that the last when() wins if response() was never called."""
        store = MappingStore()

        with caplog.at_level(logging.WARNING, logger='mockwire.mock'):
            store.define_pattern({'url': 'first'})
            store.define_pattern({'url': 'second'})

        assert store.pending.url == 'second'
        assert 'never received a .response()' in caplog.text

    def test_attach_response_appends_entry(self):
        store = MappingStore()

        store.define_pattern({'url': 'ajax_info_1', 'method': 'GET'})
        result = store.attach_response({'status': 200, 'responseText': 'Mock Response 1'})

        assert result is store
        assert len(store) == 1
        assert store.pending is None
        assert store.entries[0] == MappingEntry(
            request=RequestPattern(method='GET', url='ajax_info_1'),
            response=ResponsePlan(status=200, response_text='Mock Response 1')
        )

    def test_attach_response_without_pattern(self):
        """Test that response() without when() fails and appends nothing."""
        store = MappingStore()

        with pytest.raises(UnmatchedPatternError):
            store.attach_response({'status': 200})

        assert len(store) == 0

    def test_attach_response_twice(self):
        """Test that one pattern can only be consumed once."""
        store = MappingStore()
        store.define_pattern({'url': 'x'}).attach_response({'status': 200})

        with pytest.raises(UnmatchedPatternError):
            store.attach_response({'status': 500})

        assert len(store) == 1

    def test_empty_pattern_can_be_attached(self):
        store = MappingStore()

        store.define_pattern({}).attach_response({'responseText': 'catch-all'})

        assert store.entries[0].request.is_wildcard

    def test_insertion_order(self):
        store = MappingStore()
        for name in ('a', 'b', 'c'):
            store.define_pattern({'url': name}).attach_response({'responseText': name})

        assert [e.request.url for e in store.entries] == ['a', 'b', 'c']

    def test_entries_snapshot_is_stable(self):
        """Test that a snapshot taken earlier is not changed by later mutations."""
        store = MappingStore()
        store.define_pattern({'url': 'a'}).attach_response({})
        snapshot = store.entries

        store.define_pattern({'url': 'b'}).attach_response({})
        store.reset()

        assert len(snapshot) == 1

    def test_reset(self):
        store = MappingStore()
        store.define_pattern({'url': 'a'}).attach_response({})
        store.define_pattern({'url': 'b'})

        result = store.reset()

        assert result is store
        assert len(store) == 0
        assert store.pending is None

    def test_reset_is_idempotent(self):
        store = MappingStore()

        store.reset()
        store.reset()

        assert len(store) == 0

    def test_listeners(self):
        on_change = Mock()
        on_reset = Mock()
        store = MappingStore(on_change=on_change, on_reset=on_reset)

        store.define_pattern({'url': 'a'})
        on_change.assert_not_called()

        store.attach_response({})
        on_change.assert_called_once_with(store)

        store.reset()
        on_reset.assert_called_once_with(store)

    def test_to_dict(self):
        store = MappingStore()
        store.define_pattern({'url': 'a'}).attach_response({'status': 204})
        store.define_pattern({'method': 'GET'})

        data = store.to_dict()

        assert data['total'] == 1
        assert data['mappings'][0]['request'] == {'url': 'a'}
        assert data['mappings'][0]['response']['status'] == 204
        assert data['pending'] == {'method': 'GET'}
