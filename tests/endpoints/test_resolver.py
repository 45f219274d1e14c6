"""
Tests for endpoint resolution
"""
import json
import logging
import os
from unittest.mock import patch

import pytest

from minimal_client.endpoints.naming import sanitize_and_checksum
from minimal_client.endpoints.resolver import (
    EndpointDirectory,
    EndpointEntry,
    ResolutionFailure,
    parse_endpoint_directory,
    resolve,
    resolve_endpoint_name,
)

REQUESTER_ENDPOINTS = json.dumps({
    "endpoints": [
        {"endpoint_name": "REQUESTER_ENDPOINT", "endpoint_key": "my key!"}
    ]
})


class TestParseEndpointDirectory:
    """Test parsing of the ENDPOINTS document"""

    def test_entries_in_order(self):
        directory = parse_endpoint_directory(json.dumps({
            "endpoints": [
                {"endpoint_name": "A", "endpoint_key": "first", "extra": 1},
                {"endpoint_name": "B", "endpoint_key": "second"},
            ]
        }))
        assert directory.has_endpoints is True
        assert directory.entries == (
            EndpointEntry("A", "first"),
            EndpointEntry("B", "second"),
        )

    def test_mistyped_fields_kept_as_placeholders(self):
        directory = parse_endpoint_directory(json.dumps({
            "endpoints": [
                "not an object",
                {"endpoint_name": 7, "endpoint_key": "k"},
                {"endpoint_name": "A", "endpoint_key": ["k"]},
            ]
        }))
        assert directory.entries == (
            EndpointEntry(),
            EndpointEntry(None, "k"),
            EndpointEntry("A", None),
        )

    def test_missing_endpoints_array(self):
        assert parse_endpoint_directory('{"other": []}') == EndpointDirectory()
        assert parse_endpoint_directory('{"endpoints": {}}') == EndpointDirectory()
        assert parse_endpoint_directory('[1, 2]') == EndpointDirectory()

    def test_malformed_json_raises(self):
        with pytest.raises(ValueError):
            parse_endpoint_directory("{not json")

    def test_lookup_first_match_wins(self):
        directory = EndpointDirectory(
            entries=(
                EndpointEntry("A", None),
                EndpointEntry("A", "first"),
                EndpointEntry("A", "second"),
            ),
            has_endpoints=True,
        )
        assert directory.lookup("A") == EndpointEntry("A", "first")
        assert directory.lookup("B") is None


class TestResolve:
    """Test the pure resolution logic"""

    def test_absent_config(self):
        result = resolve(None, "REQUESTER_ENDPOINT", "add_two_ints")
        assert result.name == "add_two_ints"
        assert result.failure == ResolutionFailure.CONFIG_ABSENT
        assert not result.resolved

    @pytest.mark.parametrize("config", [
        "{not json",
        '{"endpoints": [{"endpoint_name": "X", "endpoint_key": "k", "weight": NaN}]}',
        '{"endpoints": [{"endpoint_name": "X", "endpoint_key": "k", "weight": Infinity}]}',
        '{"endpoints": [{"endpoint_name": "X", "endpoint_key": "k", "weight": -Infinity}]}',
        '{"endpoints": [{"endpoint_name": "X", "endpoint_key": "a\\ud800b"}]}',
        '{"endpoints": [{"endpoint_name": "X", "endpoint_key": "a\udcffb"}]}',
    ])
    def test_malformed_config(self, config):
        result = resolve(config, "X", "add_two_ints")
        assert result.name == "add_two_ints"
        assert result.failure == ResolutionFailure.CONFIG_MALFORMED
        assert "Error parsing ENDPOINTS" in result.detail

    def test_successful_resolution(self):
        result = resolve(REQUESTER_ENDPOINTS, "REQUESTER_ENDPOINT", "add_two_ints")
        assert result.resolved
        assert result.name == sanitize_and_checksum("my key!")
        assert result.name == "ros2_my_key_234868954"

    def test_accepts_parsed_directory(self):
        directory = parse_endpoint_directory(REQUESTER_ENDPOINTS)
        result = resolve(directory, "REQUESTER_ENDPOINT", "add_two_ints")
        assert result.name == "ros2_my_key_234868954"

    def test_no_match(self):
        result = resolve(REQUESTER_ENDPOINTS, "OTHER", "add_two_ints")
        assert result.name == "add_two_ints"
        assert result.failure == ResolutionFailure.NO_MATCH
        assert "OTHER" in result.detail

    def test_match_is_case_sensitive(self):
        result = resolve(REQUESTER_ENDPOINTS, "requester_endpoint", "add_two_ints")
        assert result.failure == ResolutionFailure.NO_MATCH

    def test_first_match_wins(self):
        config = json.dumps({
            "endpoints": [
                {"endpoint_name": "X", "endpoint_key": "first"},
                {"endpoint_name": "X", "endpoint_key": "second"},
            ]
        })
        assert resolve(config, "X", "d").name == sanitize_and_checksum("first")

    def test_skips_entries_without_string_key(self):
        config = json.dumps({
            "endpoints": [
                {"endpoint_name": "X"},
                {"endpoint_name": "X", "endpoint_key": 12},
                {"endpoint_name": "X", "endpoint_key": "second"},
            ]
        })
        assert resolve(config, "X", "d").name == sanitize_and_checksum("second")

    @pytest.mark.parametrize("config", [
        '{}',
        '{"endpoints": "nope"}',
        '[]',
        '"just a string"',
        '{"endpoints": [{"endpoint_name": "X"}]}',
        '{"endpoints": [{"endpoint_name": "X", "endpoint_key": null}]}',
    ])
    def test_incomplete_config(self, config):
        result = resolve(config, "X", "fallback")
        assert result.name == "fallback"
        assert result.failure == ResolutionFailure.CONFIG_INCOMPLETE

    def test_empty_endpoints_is_no_match(self):
        result = resolve('{"endpoints": []}', "X", "fallback")
        assert result.failure == ResolutionFailure.NO_MATCH

    def test_deeply_nested_document_falls_back(self):
        config = "[" * 100000 + "]" * 100000
        result = resolve(config, "X", "fallback")
        assert result.name == "fallback"
        assert result.failure == ResolutionFailure.CONFIG_MALFORMED


class TestResolveEndpointName:
    """Test environment-driven resolution"""

    def test_missing_env_returns_default(self, caplog):
        with patch.dict(os.environ, clear=True):
            with caplog.at_level(logging.WARNING):
                name = resolve_endpoint_name("X", "default")
        assert name == "default"
        assert "ENDPOINTS not set" in caplog.text

    def test_malformed_json_returns_default(self, caplog):
        with patch.dict(os.environ, {"ENDPOINTS": "{not json"}):
            with caplog.at_level(logging.WARNING):
                name = resolve_endpoint_name("REQUESTER_ENDPOINT", "add_two_ints")
        assert name == "add_two_ints"
        assert "Error parsing ENDPOINTS" in caplog.text

    def test_undecodable_environment_returns_default(self, caplog):
        environ = {"ENDPOINTS": '{"endpoints": [{"endpoint_name": "X", "endpoint_key": "a\udcffb"}]}'}
        with caplog.at_level(logging.WARNING):
            name = resolve_endpoint_name("X", "fallback", environ=environ)
        assert name == "fallback"
        assert "Error parsing ENDPOINTS" in caplog.text

    def test_successful_resolution(self, caplog):
        with patch.dict(os.environ, {"ENDPOINTS": REQUESTER_ENDPOINTS}):
            with caplog.at_level(logging.WARNING):
                name = resolve_endpoint_name("REQUESTER_ENDPOINT", "add_two_ints")
        assert name == sanitize_and_checksum("my key!")
        assert caplog.text == ""

    def test_no_match_returns_default(self, caplog):
        with patch.dict(os.environ, {"ENDPOINTS": REQUESTER_ENDPOINTS}):
            with caplog.at_level(logging.WARNING):
                name = resolve_endpoint_name("OTHER", "add_two_ints")
        assert name == "add_two_ints"
        assert "Endpoint OTHER not found" in caplog.text

    def test_explicit_environ(self):
        environ = {"ENDPOINTS": REQUESTER_ENDPOINTS}
        assert resolve_endpoint_name("REQUESTER_ENDPOINT", "d", environ=environ) == "ros2_my_key_234868954"
        assert resolve_endpoint_name("REQUESTER_ENDPOINT", "d", environ={}) == "d"
