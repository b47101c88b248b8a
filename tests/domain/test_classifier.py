"""Tests for response decoding and classification."""

import pytest

from http_call_orchestrator.domain.classifier import (
    NetworkErrorOutcome,
    ServerErrorOutcome,
    SuccessOutcome,
    accepts_json,
    classify,
    decode_payload,
)
from http_call_orchestrator.exceptions import NetworkError, ServerError


class TestDecodePayload:
    """Tests for decode_payload."""

    def test_json_object_gets_status_code_merged(self) -> None:
        assert decode_payload(b'{"x":1}', 200, json_accepted=True) == {"x": 1, "statusCode": 200}

    def test_explicit_status_field_is_preserved(self) -> None:
        payload = decode_payload(b'{"statusCode": 201, "ok": true}', 200, json_accepted=True)
        assert payload == {"statusCode": 201, "ok": True}

    def test_unparseable_json_falls_back_to_raw_text(self) -> None:
        assert decode_payload(b"<html>oops</html>", 502, json_accepted=True) == "<html>oops</html>"

    def test_empty_body_under_json_accept_is_empty_text(self) -> None:
        assert decode_payload(b"", 204, json_accepted=True) == ""

    def test_json_array_is_returned_unchanged(self) -> None:
        assert decode_payload(b"[1, 2]", 200, json_accepted=True) == [1, 2]

    @pytest.mark.parametrize("body", [b"null", b"5", b"true", b'"hi"'])
    def test_scalar_json_is_returned_as_raw_text(self, body: bytes) -> None:
        assert decode_payload(body, 200, json_accepted=True) == body.decode()

    def test_non_json_accept_gets_envelope(self) -> None:
        payload = decode_payload(b"hello", 200, json_accepted=False)
        assert payload == {"data": "hello", "statusCode": 200}

    def test_invalid_utf8_is_replaced_not_dropped(self) -> None:
        payload = decode_payload(b"ok\xff", 200, json_accepted=True)
        assert payload == "ok\ufffd"


class TestClassify:
    """Tests for classify."""

    @pytest.mark.parametrize("status_code", [200, 201, 204, 302, 399])
    def test_below_400_is_success(self, status_code: int) -> None:
        outcome = classify({"a": 1}, status_code)
        assert outcome == SuccessOutcome(value={"a": 1}, status_code=status_code)

    @pytest.mark.parametrize("status_code", [400, 404, 500, 503])
    def test_400_and_above_is_server_error(self, status_code: int) -> None:
        outcome = classify("nope", status_code)
        assert outcome == ServerErrorOutcome(status_code=status_code, payload="nope")


class TestOutcomeErrors:
    """Failure outcomes convert into the errors callers see."""

    def test_server_error_with_text_payload(self) -> None:
        error = ServerErrorOutcome(status_code=500, payload="boom").to_error()
        assert isinstance(error, ServerError)
        assert error.status_code == 500
        assert error.payload == "boom"
        assert "Received 500 code. Response treated as rejection. Full response: boom" in str(
            error
        )

    def test_server_error_with_mapping_payload_uses_message(self) -> None:
        payload = {"msg": "fail", "message": "Upstream failed", "statusCode": 500}
        error = ServerErrorOutcome(status_code=500, payload=payload).to_error()
        assert str(error) == "Upstream failed"
        assert error.payload == payload

    def test_network_error_keeps_cause_and_unknown_status(self) -> None:
        cause = ConnectionResetError("reset by peer")
        error = NetworkErrorOutcome(status_code=None, cause=cause).to_error()
        assert isinstance(error, NetworkError)
        assert error.status_code is None
        assert error.cause is cause


def test_accepts_json_matches_media_type_case_insensitively() -> None:
    assert accepts_json({"accept": "Application/JSON; charset=utf-8"}) is True
    assert accepts_json({"Accept": "text/html"}) is False
    assert accepts_json({}) is False


def test_scalar_json_server_error_keeps_body_in_message() -> None:
    outcome = classify(decode_payload(b"null", 500, json_accepted=True), 500)

    assert outcome == ServerErrorOutcome(status_code=500, payload="null")
    assert str(outcome.to_error()).endswith("Full response: null")
