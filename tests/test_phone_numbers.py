import asyncio

import pytest

from conftest import OTHER_ORG, TEST_ORG, add_phone_number, add_response, make_token
from vocalhire.models import PhoneNumber, Response
from vocalhire.services.call_reconciler import WebhookReconciler, introduction_name
from vocalhire.services.phone_number_service import PhoneNumberService


def phone_number(db, phone_number_id):
    db.expire_all()
    return db.query(PhoneNumber).filter(PhoneNumber.id == phone_number_id).one()


def test_requires_session(client):
    assert client.get("/api/phone-numbers").status_code == 401


def test_requires_organization(client):
    headers = {"Authorization": f"Bearer {make_token(org_id=None)}"}
    r = client.get("/api/phone-numbers", headers=headers)

    assert r.status_code == 401
    assert r.json()["error"]["code"] == "UNAUTHORIZED"


def test_rejects_invalid_token(client):
    r = client.get("/api/phone-numbers", headers={"Authorization": "Bearer not-a-jwt"})
    assert r.status_code == 401


def test_list_is_scoped_to_organization(client, db, auth_headers):
    add_phone_number(db, "+14155550001")
    add_phone_number(db, "+14155550002", organization_id=OTHER_ORG)

    r = client.get("/api/phone-numbers", headers=auth_headers)

    assert r.status_code == 200
    assert [p["number"] for p in r.json()["phoneNumbers"]] == ["+14155550001"]


def test_service_lists_only_organization_numbers(db, retell):
    add_phone_number(db, "+14155550001")
    add_phone_number(db, "+14155550002", organization_id=OTHER_ORG)
    add_phone_number(db, "+14155550003")

    numbers = PhoneNumberService(db, retell).list_for_organization(TEST_ORG)

    assert sorted(p.number for p in numbers) == ["+14155550001", "+14155550003"]
    assert all(isinstance(p, PhoneNumber) for p in numbers)


def test_list_available(client, db, auth_headers, interview):
    add_phone_number(db, "+14155550001")
    add_phone_number(db, "+14155550002", is_available=False, agent_linked="agent1", interview_id="iv1")

    r = client.get("/api/phone-numbers/available", headers=auth_headers)

    assert [p["number"] for p in r.json()["phoneNumbers"]] == ["+14155550001"]


@pytest.mark.parametrize("area_code", ["415", 415, " 650 "])
def test_acquire_persists_available_number(client, db, provider, auth_headers, area_code):
    provider.on("POST", "/create-phone-number", {"phone_number": "+14155557777"})

    r = client.post(
        "/api/phone-numbers/acquire",
        json={"areaCode": area_code, "nickname": "Recruiting line"},
        headers=auth_headers,
    )

    assert r.status_code == 200, r.text
    body = r.json()["phoneNumber"]
    assert body["number"] == "+14155557777"
    assert body["isAvailable"] is True
    assert body["organizationId"] == TEST_ORG

    stored = phone_number(db, body["id"])
    assert stored.number == "+14155557777"
    assert stored.nickname == "Recruiting line"
    assert provider.sent("POST", "/create-phone-number") == [{"area_code": int(str(area_code).strip())}]


@pytest.mark.parametrize("area_code", ["41", "4155", "abc", "", None, "4 5", "٤١٥", -41])
def test_acquire_rejects_invalid_area_code(client, db, provider, auth_headers, area_code):
    r = client.post("/api/phone-numbers/acquire", json={"areaCode": area_code}, headers=auth_headers)

    assert r.status_code == 400
    assert "Must be a 3-digit number" in r.json()["error"]["message"]
    assert provider.requests == []
    assert db.query(PhoneNumber).count() == 0


def test_acquire_provider_failure(client, db, provider, auth_headers):
    provider.on("POST", "/create-phone-number", {"error_message": "No numbers in area code"}, status=400)

    r = client.post("/api/phone-numbers/acquire", json={"areaCode": "415"}, headers=auth_headers)

    assert r.status_code == 500
    assert "No numbers in area code" in r.json()["error"]["message"]
    assert db.query(PhoneNumber).count() == 0


def test_link_sets_postconditions(client, db, provider, auth_headers, interview):
    row = add_phone_number(db, "+14155551234", nickname=None)
    provider.on("PATCH", "/update-phone-number/+14155551234", {"phone_number": "+14155551234"})

    r = client.post(
        "/api/phone-numbers/link",
        json={"phoneNumberId": row.id, "agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.status_code == 200, r.text
    stored = phone_number(db, row.id)
    assert stored.is_available is False
    assert stored.agent_linked == "agent1"
    assert stored.interview_id == "iv1"

    [sent] = provider.sent("PATCH", "/update-phone-number/+14155551234")
    assert sent["inbound_agent_id"] == "agent1"
    assert sent["nickname"] == "Interview Phone"
    assert sent["inbound_webhook_url"] == "https://app.vocalhire.test/api/response-webhook"
    assert sent["metadata"] == {"interview_id": "iv1", "phone_number": "+14155551234"}


@pytest.mark.parametrize("payload,message", [
    ({"agentId": "agent1", "interviewId": "iv1"}, "Missing phone number ID"),
    ({"phoneNumberId": 1, "interviewId": "iv1"}, "Missing agent ID"),
    ({"phoneNumberId": 1, "agentId": "agent1"}, "Missing interview ID"),
])
def test_link_requires_fields(client, auth_headers, payload, message):
    r = client.post("/api/phone-numbers/link", json=payload, headers=auth_headers)

    assert r.status_code == 400
    assert r.json()["error"]["message"] == message


def test_link_provider_failure_leaves_row_untouched(client, db, provider, auth_headers, interview):
    row = add_phone_number(db, "+14155551234")
    provider.on("PATCH", "/update-phone-number/+14155551234", {"error_message": "agent not found"}, status=404)

    r = client.post(
        "/api/phone-numbers/link",
        json={"phoneNumberId": row.id, "agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.status_code == 500
    assert r.json()["error"]["code"] == "PROVIDER_ERROR"
    stored = phone_number(db, row.id)
    assert stored.is_available is True
    assert stored.agent_linked is None


def test_link_other_organizations_number_is_not_found(client, db, provider, auth_headers, interview):
    row = add_phone_number(db, "+14155551234", organization_id=OTHER_ORG)

    r = client.post(
        "/api/phone-numbers/link",
        json={"phoneNumberId": row.id, "agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.status_code == 404
    assert provider.requests == []


def test_unlink_clears_link(client, db, provider, auth_headers, interview):
    row = add_phone_number(db, "+14155551234", is_available=False, agent_linked="agent1", interview_id="iv1")
    provider.on("PATCH", "/update-phone-number/+14155551234", {"phone_number": "+14155551234"})

    r = client.post("/api/phone-numbers/unlink", json={"phoneNumberId": row.id}, headers=auth_headers)

    assert r.status_code == 200
    stored = phone_number(db, row.id)
    assert stored.is_available is True
    assert stored.agent_linked is None
    assert stored.interview_id is None
    assert provider.sent("PATCH", "/update-phone-number/+14155551234") == [{"inbound_agent_id": None}]


def test_unlink_requires_id(client, auth_headers):
    r = client.post("/api/phone-numbers/unlink", json={}, headers=auth_headers)
    assert r.status_code == 400


def agent_call(call_id, **fields):
    return {"call_id": call_id, "agent_id": "agent1", "end_timestamp": 1_700_000_100_000,
            "start_timestamp": 1_700_000_000_000, **fields}


def test_list_agent_calls_backfills_missing(client, db, provider, auth_headers, interview):
    add_response(db, "existing", name="Known")
    provider.on("POST", "/v2/list-calls", [
        agent_call("existing"),
        agent_call("new1", transcript="User: Hello, my name is Sam Carter. I applied last week."),
        agent_call("new2", call_analysis={"call_summary": "Good", "user_sentiment": "Positive",
                                          "call_successful": True}),
    ])
    provider.on("POST", "/v1/calls/new1/analyzation", {})

    r = client.post(
        "/api/phone-numbers/list-agent-calls",
        json={"agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert body["success"] is True
    assert body["totalCalls"] == 3
    assert body["newCalls"] == 2
    assert sorted(body["callIds"]) == ["new1", "new2"]
    assert body["failedCallIds"] == []
    assert sorted(resp["callId"] for resp in body["responses"]) == ["existing", "new1", "new2"]

    db.expire_all()
    new1 = db.query(Response).filter(Response.call_id == "new1").one()
    assert new1.name == "Sam Carter"
    assert new1.is_ended is True
    assert new1.is_analysed is False
    assert new1.details["metadata"] == {"interview_id": "iv1"}

    new2 = db.query(Response).filter(Response.call_id == "new2").one()
    assert new2.name == "Phone Caller"
    assert new2.is_analysed is True
    assert new2.analytics["call_summary"] == "Good"

    # Analysis is only requested for the call that had none
    assert len(provider.sent("POST", "/v1/calls/new1/analyzation")) == 1
    assert provider.sent("POST", "/v1/calls/new2/analyzation") == []


def test_list_agent_calls_skips_calls_in_progress(client, db, provider, auth_headers, interview):
    provider.on("POST", "/v2/list-calls", [{"call_id": "live", "agent_id": "agent1"}])

    r = client.post(
        "/api/phone-numbers/list-agent-calls",
        json={"agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.json()["totalCalls"] == 1
    assert r.json()["newCalls"] == 0


def test_list_agent_calls_survives_analysis_trigger_failure(client, db, provider, auth_headers, interview):
    provider.on("POST", "/v2/list-calls", [agent_call("new1")])
    provider.on("POST", "/v1/calls/new1/analyzation", {"error_message": "busy"}, status=503)

    r = client.post(
        "/api/phone-numbers/list-agent-calls",
        json={"agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.status_code == 200
    assert r.json()["callIds"] == ["new1"]


def test_list_agent_calls_provider_failure(client, provider, auth_headers, interview):
    provider.on("POST", "/v2/list-calls", {"error_message": "bad key"}, status=401)

    r = client.post(
        "/api/phone-numbers/list-agent-calls",
        json={"agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.status_code == 500
    assert "bad key" in r.json()["error"]["message"]


def test_list_agent_calls_requires_ids(client, auth_headers):
    r = client.post("/api/phone-numbers/list-agent-calls", json={"interviewId": "iv1"}, headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Missing agent ID"


def test_phone_number_calls_syncs_linked_number(client, db, provider, auth_headers, interview):
    row = add_phone_number(db, "+14155551234", is_available=False, agent_linked="agent1", interview_id="iv1")
    provider.on("GET", "/v1/calls", {"calls": [
        {"call_id": "p1", "phone_number": "+14155551234", "end_timestamp": 1_700_000_100_000},
        {"call_id": "p2", "phone_number": "+19995550000", "end_timestamp": 1_700_000_100_000},
        {"call_id": "p3", "phone_number": "+14155551234"},
    ]})
    provider.on("POST", "/v1/calls/p1/analyzation", {})

    r = client.get(
        "/api/phone-numbers/calls",
        params={"interviewId": "iv1", "phoneNumberId": row.id},
        headers=auth_headers,
    )

    assert r.status_code == 200, r.text
    body = r.json()
    assert [resp["callId"] for resp in body["responses"]] == ["p1"]
    assert body["phoneNumber"]["number"] == "+14155551234"


def test_phone_number_calls_requires_interview(client, auth_headers):
    r = client.get("/api/phone-numbers/calls", headers=auth_headers)

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Missing interview ID"


def test_provider_calls_for_number_adds_plus(client, provider, auth_headers):
    provider.on("GET", "/v1/calls", {"calls": [
        {"call_id": "p1", "to_number": "+14155551234"},
        {"call_id": "p2", "to_number": "+19995550000"},
    ]})

    r = client.get("/api/phone-numbers/calls/14155551234", headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["phoneNumber"] == "+14155551234"
    assert [c["call_id"] for c in r.json()["calls"]] == ["p1"]


def test_provider_calls_for_number_skips_malformed_calls(client, provider, auth_headers):
    provider.on("GET", "/v1/calls", {"calls": [
        {"call_id": "bad", "to_number": "+14155551234", "transcript_object": [{"content": "no role"}]},
        {"call_id": "good", "to_number": "+14155551234"},
    ]})

    r = client.get("/api/phone-numbers/calls/14155551234", headers=auth_headers)

    assert r.status_code == 200, r.text
    assert [c["call_id"] for c in r.json()["calls"]] == ["good"]


def test_list_agent_calls_tolerates_non_object_custom_analysis(client, db, provider, auth_headers, interview):
    provider.on("POST", "/v2/list-calls", [
        agent_call("odd", call_analysis={"call_summary": "Fine", "custom_analysis_data": "n/a"}),
    ])

    r = client.post(
        "/api/phone-numbers/list-agent-calls",
        json={"agentId": "agent1", "interviewId": "iv1"},
        headers=auth_headers,
    )

    assert r.status_code == 200, r.text
    assert r.json()["callIds"] == ["odd"]
    assert r.json()["failedCallIds"] == []

    db.expire_all()
    row = db.query(Response).filter(Response.call_id == "odd").one()
    assert row.analytics["metric_scores"] == {}
    assert row.analytics["call_summary"] == "Fine"


def test_backfill_records_failed_calls_and_continues(db, retell, provider, interview):
    provider.on("POST", "/v2/list-calls", [
        agent_call("first", call_analysis={"call_summary": "ok"}),
        agent_call("bad", call_analysis={"call_summary": "ok"}),
        agent_call("last", call_analysis={"call_summary": "ok"}),
    ])

    def extractor(call):
        if call.call_id == "bad":
            raise KeyError("transcript")
        return introduction_name(call)

    reconciler = WebhookReconciler(db, retell, backfill_name_extractor=extractor)
    result = asyncio.run(reconciler.list_agent_calls("agent1", "iv1"))

    assert result.total_calls == 3
    assert result.call_ids == ["first", "last"]
    assert result.failed_call_ids == ["bad"]
    assert result.new_calls == 2

    db.expire_all()
    stored = {r.call_id for r in db.query(Response).all()}
    assert stored == {"first", "last"}
