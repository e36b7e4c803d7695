"""
Tests for mockwire mapping files.

Tests loading JSON and YAML mapping files and registering them on a server.
"""

import json

import pytest
import yaml
from fastapi.testclient import TestClient

from mockwire.errors import UnmatchedPatternError
from mockwire.mock.mapping_file import (
    apply_mappings,
    entries_to_dict,
    load_mappings,
    parse_mappings,
)
from mockwire.mock.models import RequestPattern
from mockwire.mock.server import MockServer


SAMPLE_MAPPINGS = [
    {
        'request': {'url': 'ajax_info_1', 'method': 'GET'},
        'response': {'status': 200, 'responseText': 'Mock Response 1'}
    },
    {
        'request': {'url': 'ajax_info_2', 'method': 'POST', 'data': 'member_id=1'},
        'response': {'status': 200, 'responseTime': 10, 'responseText': 'Mock Response 2'}
    },
]


@pytest.fixture
def json_file(tmp_path):
    path = tmp_path / 'mappings.json'
    path.write_text(json.dumps({'mappings': SAMPLE_MAPPINGS}), encoding='utf-8')
    return path


@pytest.fixture
def yaml_file(tmp_path):
    path = tmp_path / 'mappings.yaml'
    path.write_text(yaml.safe_dump(SAMPLE_MAPPINGS), encoding='utf-8')
    return path


class TestLoadMappings:
    """Test loading mapping files."""

    def test_load_json(self, json_file):
        entries = load_mappings(str(json_file))

        assert len(entries) == 2
        assert entries[0].request == RequestPattern(method='GET', url='ajax_info_1')
        assert entries[1].response.response_time == 10

    def test_load_yaml_list(self, yaml_file):
        entries = load_mappings(str(yaml_file))

        assert [e.request.url for e in entries] == ['ajax_info_1', 'ajax_info_2']

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_mappings(str(tmp_path / 'missing.json'))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{not json', encoding='utf-8')

        with pytest.raises(ValueError):
            load_mappings(str(path))


class TestParseMappings:
    """Test building entries from parsed data."""

    def test_wrapped_format(self):
        assert len(parse_mappings({'mappings': SAMPLE_MAPPINGS})) == 2

    def test_list_format(self):
        assert len(parse_mappings(SAMPLE_MAPPINGS)) == 2

    def test_empty(self):
        assert parse_mappings(None) == []
        assert parse_mappings({'mappings': None}) == []

    def test_unknown_dict(self):
        with pytest.raises(ValueError) as exc_info:
            parse_mappings({'requests': []})

        assert 'mappings' in str(exc_info.value)

    def test_unexpected_type(self):
        with pytest.raises(ValueError):
            parse_mappings('mappings')

    def test_missing_response(self):
        with pytest.raises(UnmatchedPatternError):
            parse_mappings([{'request': {'url': 'a'}}])

    def test_missing_request(self):
        with pytest.raises(UnmatchedPatternError):
            parse_mappings([{'response': {'status': 200}}])

    def test_round_trip_format(self):
        entries = parse_mappings(SAMPLE_MAPPINGS)

        data = entries_to_dict(entries)

        assert data['mappings'][0]['request'] == {'method': 'GET', 'url': 'ajax_info_1'}


class TestApplyMappings:
    """Test registering entries on a server."""

    def test_apply(self, json_file):
        server = MockServer()

        result = apply_mappings(server, load_mappings(str(json_file)))

        assert result is server
        assert len(server.store) == 2
        client = TestClient(server.app)
        assert client.get('/ajax_info_1').text == 'Mock Response 1'
        assert client.post('/ajax_info_2', content=b'member_id=1').text == 'Mock Response 2'

    def test_apply_escapes_body_quotes(self):
        server = MockServer()
        entries = parse_mappings([{'request': {'data': '"id": 1'}, 'response': {'status': 202}}])

        apply_mappings(server, entries)

        assert server.store.entries[0].request.data == '\\"id\\": 1'
        assert TestClient(server.app).post('/x', content=b'{"id": 1}').status_code == 202
