"""Tests for request building."""

from collections.abc import MutableMapping
from typing import cast

import pytest

from http_call_orchestrator.domain.request import (
    Method,
    append_query,
    build_request,
    parse_method,
    strip_scheme,
)
from http_call_orchestrator.exceptions import ConfigurationError


class TestGetRequests:
    """GET bodies become the query string."""

    def test_body_becomes_query_string_in_insertion_order(self) -> None:
        request = build_request("GET", "api.example.com", "/items", {"a": 1, "b": 2})
        assert request.path == "/items?a=1&b=2"
        assert request.body == b""

    def test_empty_body_leaves_path_untouched(self) -> None:
        assert build_request("GET", "api.example.com", "/items", {}).path == "/items"
        assert build_request("GET", "api.example.com", "/items").path == "/items"

    def test_get_has_no_content_length(self) -> None:
        request = build_request("GET", "api.example.com", "/items", {"a": 1})
        assert request.header("Content-Length") is None

    def test_values_render_like_json_scalars(self) -> None:
        path = append_query("/search", {"active": True, "deleted": False, "owner": None})
        assert path == "/search?active=true&deleted=false&owner=null"

    def test_values_are_not_url_encoded(self) -> None:
        # Known defect: reserved characters pass through verbatim.
        path = append_query("/search", {"q": "a&b=c d"})
        assert path == "/search?q=a&b=c d"

    def test_non_mapping_body_is_rejected(self) -> None:
        with pytest.raises(ConfigurationError):
            build_request("GET", "api.example.com", "/items", ["a", "b"])


class TestWriteRequests:
    """POST/PUT/DELETE bodies are serialized."""

    def test_post_serializes_compact_json_with_content_length(self) -> None:
        request = build_request("POST", "api.example.com", "/users", {"name": "Ada", "age": 36})
        assert request.body == b'{"name":"Ada","age":36}'
        assert request.headers["Content-Length"] == str(len(request.body))

    def test_content_length_counts_bytes_not_characters(self) -> None:
        request = build_request("PUT", "api.example.com", "/users/1", {"name": "Zoë"})
        assert request.body == '{"name":"Zoë"}'.encode()
        assert request.headers["Content-Length"] == "15"

    def test_explicit_content_length_is_kept(self) -> None:
        request = build_request(
            "POST", "api.example.com", "/users", {"a": 1}, {"Content-Length": "99"}
        )
        assert request.headers["Content-Length"] == "99"

    def test_missing_body_defaults_to_empty_object(self) -> None:
        request = build_request("DELETE", "api.example.com", "/users/1")
        assert request.body == b"{}"
        assert request.headers["Content-Length"] == "2"

    def test_non_json_content_type_sends_text_as_is(self) -> None:
        request = build_request(
            "POST", "api.example.com", "/notes", "plain words", {"Content-Type": "text/plain"}
        )
        assert request.body == b"plain words"
        assert request.headers["Content-Type"] == "text/plain"

    def test_non_json_content_type_rejects_structured_body(self) -> None:
        with pytest.raises(ConfigurationError):
            build_request(
                "POST", "api.example.com", "/notes", {"a": 1}, {"Content-Type": "text/plain"}
            )

    def test_unserializable_body_is_a_configuration_error(self) -> None:
        with pytest.raises(ConfigurationError):
            build_request("POST", "api.example.com", "/users", {"when": object()})


class TestHeaders:
    """Header defaults and immutability."""

    def test_json_defaults_added_when_absent(self) -> None:
        request = build_request("GET", "api.example.com", "/items")
        assert request.headers["Content-Type"] == "application/json"
        assert request.headers["Accept"] == "application/json"

    def test_defaults_respect_existing_headers_case_insensitively(self) -> None:
        request = build_request(
            "GET", "api.example.com", "/items", None, {"accept": "text/html"}
        )
        assert request.header("Accept") == "text/html"
        assert "Accept" not in request.headers

    def test_caller_headers_are_not_mutated(self) -> None:
        headers = {"Authorization": "Bearer token"}
        build_request("POST", "api.example.com", "/users", {"a": 1}, headers)
        assert headers == {"Authorization": "Bearer token"}

    def test_descriptor_headers_are_read_only(self) -> None:
        request = build_request("GET", "api.example.com", "/items")
        with pytest.raises(TypeError):
            cast(MutableMapping[str, str], request.headers)["X-Extra"] = "1"


class TestMethodAndHost:
    """Method validation and host normalisation."""

    @pytest.mark.parametrize("method", ["PATCH", "HEAD", "OPTIONS", ""])
    def test_unsupported_methods_fail_locally(self, method: str) -> None:
        with pytest.raises(ConfigurationError) as exc_info:
            build_request(method, "api.example.com", "/items")
        assert "Unsupported HTTP method" in str(exc_info.value)

    def test_method_is_case_insensitive(self) -> None:
        assert parse_method("delete") is Method.DELETE

    def test_only_get_skips_the_body(self) -> None:
        assert Method.GET.writes_body is False
        assert all(m.writes_body for m in (Method.POST, Method.PUT, Method.DELETE))

    def test_https_prefix_is_stripped(self) -> None:
        request = build_request("GET", "https://api.example.com", "/items")
        assert request.host == "api.example.com"
        assert strip_scheme("api.example.com") == "api.example.com"
