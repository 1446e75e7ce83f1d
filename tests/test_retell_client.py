import asyncio
import json

import httpx
import pytest

from vocalhire.integrations.retell import (
    RetellClient,
    RetellError,
    sign_payload,
    verify_signature,
)

API_KEY = "key_123"
NOW_MS = 1_700_000_000_000


def test_signature_round_trip():
    body = json.dumps({"event": "call_ended", "call": {"call_id": "c1"}})
    signature = sign_payload(body, API_KEY, timestamp_ms=NOW_MS)
    assert verify_signature(body, API_KEY, signature, now_ms=NOW_MS + 1000)


def test_signature_rejects_tampered_body():
    signature = sign_payload('{"a": 1}', API_KEY, timestamp_ms=NOW_MS)
    assert not verify_signature('{"a": 2}', API_KEY, signature, now_ms=NOW_MS)


def test_signature_rejects_wrong_key():
    signature = sign_payload("{}", "other-key", timestamp_ms=NOW_MS)
    assert not verify_signature("{}", API_KEY, signature, now_ms=NOW_MS)


def test_signature_rejects_stale_timestamp():
    signature = sign_payload("{}", API_KEY, timestamp_ms=NOW_MS)
    assert not verify_signature("{}", API_KEY, signature, tolerance_seconds=300, now_ms=NOW_MS + 301_000)


@pytest.mark.parametrize("header", [None, "", "garbage", "v=abc,d=123", "d=deadbeef"])
def test_signature_rejects_malformed_header(header):
    assert not verify_signature("{}", API_KEY, header, now_ms=NOW_MS)


def make_client(handler):
    return RetellClient(api_key=API_KEY, base_url="https://api.retell.test", transport=httpx.MockTransport(handler))


def test_list_agent_calls_request_shape():
    seen = {}

    def handler(request):
        seen["path"] = request.url.path
        seen["auth"] = request.headers["Authorization"]
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[{"call_id": "c1"}])

    calls = asyncio.run(make_client(handler).list_agent_calls("agent1"))

    assert calls == [{"call_id": "c1"}]
    assert seen["path"] == "/v2/list-calls"
    assert seen["auth"] == f"Bearer {API_KEY}"
    assert seen["body"] == {
        "sort_order": "descending",
        "limit": 50,
        "filter_criteria": {"agent_id": ["agent1"]},
    }


def test_list_recent_calls_unwraps_calls_key():
    def handler(request):
        assert request.url.path == "/v1/calls"
        assert request.url.params["limit"] == "50"
        return httpx.Response(200, json={"calls": [{"call_id": "c9"}]})

    assert asyncio.run(make_client(handler).list_recent_calls()) == [{"call_id": "c9"}]


def test_unlink_sends_null_agent():
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"phone_number": "+14155551234"})

    asyncio.run(make_client(handler).update_phone_number("+14155551234", inbound_agent_id=None))

    assert seen["method"] == "PATCH"
    assert seen["path"] == "/update-phone-number/+14155551234"
    assert seen["body"] == {"inbound_agent_id": None}


def test_http_error_becomes_retell_error():
    def handler(request):
        return httpx.Response(422, json={"error_message": "area code unavailable"})

    with pytest.raises(RetellError) as exc_info:
        asyncio.run(make_client(handler).create_phone_number(999))

    assert exc_info.value.status_code == 422
    assert "area code unavailable" in exc_info.value.body
    assert "area code unavailable" in exc_info.value.message


def test_transport_error_becomes_retell_error():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(RetellError) as exc_info:
        asyncio.run(make_client(handler).get_call("c1"))

    assert exc_info.value.status_code is None


def test_non_json_success_becomes_retell_error():
    def handler(request):
        return httpx.Response(200, text="<html>gateway</html>")

    with pytest.raises(RetellError) as exc_info:
        asyncio.run(make_client(handler).get_call("c1"))

    assert exc_info.value.status_code == 200
    assert exc_info.value.body == "<html>gateway</html>"
    assert "Invalid JSON" in exc_info.value.message
