from conftest import OTHER_ORG, add_response, make_token
from vocalhire.models import Feedback, Interview, Response


def test_get_interview(client, auth_headers, interview):
    r = client.get("/api/interviews/iv1", headers=auth_headers)

    assert r.status_code == 200
    body = r.json()["interview"]
    assert body["name"] == "Backend Engineer"
    assert body["metricWeights"] == {"communication": 0.6, "technical": 0.4}


def test_other_organizations_interview_is_not_found(client, interview):
    headers = {"Authorization": f"Bearer {make_token(org_id=OTHER_ORG)}"}
    assert client.get("/api/interviews/iv1", headers=headers).status_code == 404


def test_org_from_nested_claim(client, interview):
    token = make_token(org_id=None, o={"id": "org_test"})
    r = client.get("/api/interviews/iv1", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 200


def test_session_cookie_is_accepted(client, interview):
    client.cookies.set("__session", make_token())
    assert client.get("/api/interviews/iv1").status_code == 200


def test_update_interview_agent(client, db, auth_headers, interview):
    r = client.post("/api/interviews/iv1/update", json={"agentId": "agent2"}, headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["interview"]["agentId"] == "agent2"
    db.expire_all()
    assert db.get(Interview, "iv1").agent_id == "agent2"


def test_update_interview_agent_requires_agent(client, auth_headers, interview):
    r = client.post("/api/interviews/iv1/update", json={}, headers=auth_headers)

    assert r.status_code == 400
    assert r.json()["error"]["message"] == "Missing agent_id in request body"


def test_patch_interview(client, db, auth_headers, interview):
    r = client.patch("/api/interviews/iv1", json={"isActive": False}, headers=auth_headers)

    assert r.status_code == 200
    assert r.json()["interview"]["isActive"] is False
    db.expire_all()
    row = db.get(Interview, "iv1")
    assert row.is_active is False
    assert row.name == "Backend Engineer"


def test_list_interviewers(client, auth_headers, interviewer):
    r = client.get("/api/interviewers", headers=auth_headers)

    assert r.status_code == 200
    assert [i["name"] for i in r.json()] == ["Sweet Shimmer"]

    r = client.get(f"/api/interviewers/{interviewer.id}", headers=auth_headers)
    assert r.json()["interviewer"]["agentId"] == "agent1"


def test_list_responses(client, db, auth_headers, interview):
    add_response(db, "c1", candidate_status="SELECTED")
    add_response(db, "c2")

    r = client.get("/api/responses", params={"interviewId": "iv1"}, headers=auth_headers)
    assert sorted(resp["callId"] for resp in r.json()["responses"]) == ["c1", "c2"]

    r = client.get("/api/responses", params={"interviewId": "iv1", "status": "SELECTED"}, headers=auth_headers)
    assert [resp["callId"] for resp in r.json()["responses"]] == ["c1"]


def test_list_responses_rejects_unknown_status(client, auth_headers, interview):
    r = client.get("/api/responses", params={"interviewId": "iv1", "status": "MAYBE"}, headers=auth_headers)
    assert r.status_code == 400


def test_update_response(client, db, auth_headers, interview):
    add_response(db, "c1")

    r = client.patch(
        "/api/responses/c1",
        json={"candidateStatus": "POTENTIAL", "isViewed": True},
        headers=auth_headers,
    )

    assert r.status_code == 200
    assert r.json()["response"]["candidateStatus"] == "POTENTIAL"
    db.expire_all()
    row = db.query(Response).filter(Response.call_id == "c1").one()
    assert row.candidate_status == "POTENTIAL"
    assert row.is_viewed is True


def test_delete_response(client, db, auth_headers, interview):
    add_response(db, "c1")

    r = client.delete("/api/responses/c1", headers=auth_headers)

    assert r.status_code == 204
    assert db.query(Response).count() == 0
    assert client.delete("/api/responses/c1", headers=auth_headers).status_code == 404


def test_responses_of_other_organization_are_hidden(client, db, interview):
    add_response(db, "c1")
    headers = {"Authorization": f"Bearer {make_token(org_id=OTHER_ORG)}"}

    assert client.get("/api/responses", params={"interviewId": "iv1"}, headers=headers).status_code == 404
    assert client.delete("/api/responses/c1", headers=headers).status_code == 404
    assert db.query(Response).count() == 1


def test_public_interview_hides_ownership(client, db, interview):
    interview.respondents = ["ada@example.com"]
    db.commit()

    r = client.get("/api/public/interviews/iv1")

    assert r.status_code == 200
    body = r.json()
    assert body["interviewerId"] == interview.interviewer_id
    assert "organizationId" not in body
    assert "respondents" not in body


def test_respondent_check(client, db, interview):
    add_response(db, "c1", email="Ada@Example.com")

    def check(email):
        r = client.post("/api/public/interviews/iv1/respondent-check", json={"email": email})
        return r.json()["isOldUser"]

    assert check("ada@example.com") is True
    assert check("grace@example.com") is False


def test_respondent_check_allow_list(client, db, interview):
    interview.respondents = ["grace@example.com"]
    db.commit()

    r = client.post("/api/public/interviews/iv1/respondent-check", json={"email": "ada@example.com"})
    assert r.json()["isOldUser"] is True

    r = client.post("/api/public/interviews/iv1/respondent-check", json={"email": "Grace@example.com"})
    assert r.json()["isOldUser"] is False


def test_candidate_save(client, db, interview):
    add_response(db, "c1")

    r = client.patch("/api/public/responses/c1", json={"isEnded": True, "tabSwitchCount": 3})

    assert r.status_code == 200
    db.expire_all()
    row = db.query(Response).filter(Response.call_id == "c1").one()
    assert row.is_ended is True
    assert row.tab_switch_count == 3


def test_candidate_save_unknown_call(client):
    assert client.patch("/api/public/responses/nope", json={"isEnded": True}).status_code == 404


def test_feedback(client, db, interview):
    r = client.post(
        "/api/public/feedback",
        json={"interviewId": "iv1", "email": "ada@example.com", "satisfaction": 2, "feedback": "Great"},
    )

    assert r.status_code == 201
    row = db.query(Feedback).one()
    assert row.satisfaction == 2
    assert row.feedback == "Great"


def test_feedback_rejects_out_of_range_satisfaction(client, db, interview):
    r = client.post("/api/public/feedback", json={"interviewId": "iv1", "satisfaction": 5})

    assert r.status_code == 400
    assert db.query(Feedback).count() == 0


def test_health(client):
    r = client.get("/api/health")

    assert r.status_code == 200
    assert r.json()["database"] == "connected"
    assert r.json()["voice_provider"] == "configured"
    assert client.get("/health").json()["status"] == "ok"
    assert client.get("/api/health/live").json() == {"alive": True}
