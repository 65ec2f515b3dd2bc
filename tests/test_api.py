"""HTTP tests against the FastAPI app with fake model clients."""

import inspect

import pytest
from fastapi.routing import APIRoute
from fastapi.testclient import TestClient

from painpoint_miner.api import create_app

from fakes import FakeAnalyzer, page_transport


@pytest.fixture
def client(make_service):
    return TestClient(create_app(make_service()))


def test_analyze_returns_camel_case(client):
    resp = client.post("/api/analyze", json={"content": "slow builds hurt\n\nci is slow"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["totalComments"] == 2
    assert body["painPoints"][0]["topic"] == "slow"
    assert body["potentialIdeas"] == ["A tool for slow"]
    assert "sentimentScore" in body


@pytest.mark.parametrize("payload", [{"content": ""}, {"content": "   "}, {}])
def test_analyze_blank_content_is_400(client, payload):
    resp = client.post("/api/analyze", json=payload)

    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid content format"}


def test_malformed_body_is_400(client):
    resp = client.post("/api/analyze", json={"content": [1, 2]})

    assert resp.status_code == 400
    assert resp.json()["error"] == "Invalid request format"


def test_chunk_failure_is_502(make_service):
    app = create_app(make_service(analyzer=FakeAnalyzer(fail_on=["broken comment"])))

    resp = TestClient(app).post("/api/analyze", json={"content": "broken comment"})

    assert resp.status_code == 502
    body = resp.json()
    assert body["error"].startswith("Failed to analyze content")
    assert body["chunk"] == 1
    assert body["totalChunks"] == 1


def test_filter_comments(client):
    resp = client.post("/api/filter-comments", json={"content": "<html>...</html>"})

    assert resp.status_code == 200
    assert resp.json() == {"comments": ["first comment", "second comment"]}


def test_generate_title(client):
    resp = client.post("/api/generate-title", json={
        "painPoints": [{"topic": "Invoicing", "count": 3, "sentiment": -0.5, "examples": []}],
        "ideas": ["A tool for invoices"],
    })

    assert resp.status_code == 200
    assert resp.json() == {"title": "Invoicing Pain For Freelancers"}


def test_analyze_idea(client):
    resp = client.post("/api/analyze-idea", json={"idea": "A tool for invoices"})

    assert resp.status_code == 200
    body = resp.json()
    assert body["similarApps"][0]["name"] == "Acme"
    assert body["marketPotential"]["growth"] == "growing"


def test_analyze_blank_idea_is_400(client):
    assert client.post("/api/analyze-idea", json={"idea": ""}).status_code == 400


def test_process_website(client):
    resp = client.post("/api/process-website", json={"url": "https://example.com"})

    assert resp.status_code == 200
    assert resp.json() == {
        "rawText": "Great thread\n\nAnother comment",
        "url": "https://r.jina.ai/https://example.com",
    }


def test_process_website_upstream_failure_is_502(make_service):
    client = TestClient(create_app(make_service(transport=page_transport(status=500))))

    resp = client.post("/api/process-website", json={"url": "https://example.com"})

    assert resp.status_code == 502
    assert "Failed to fetch website data" in resp.json()["error"]


def test_hn_comments(client):
    resp = client.get("/api/hn-comments", params={"query": "invoicing", "timeRange": "all"})

    assert resp.status_code == 200
    assert resp.json()["hits"][0]["comment_text"] == "<p>I hate invoicing</p>"


def test_hn_comments_negative_page_is_400(client):
    assert client.get("/api/hn-comments", params={"page": -1}).status_code == 400


def test_saved_analysis_lifecycle(client):
    created = client.post("/api/analyses", json={"content": "<html>thread</html>"})
    assert created.status_code == 201
    saved = created.json()
    assert saved["title"] == "Invoicing Pain For Freelancers"
    assert saved["analysis"]["totalComments"] == 2

    listed = client.get("/api/analyses").json()
    assert [a["id"] for a in listed] == [saved["id"]]
    assert client.get(f"/api/analyses/{saved['id']}").json()["title"] == saved["title"]

    with_idea = client.post(f"/api/analyses/{saved['id']}/ideas", json={"idea": "A tool for first"})
    assert with_idea.status_code == 200
    assert with_idea.json()["market_analysis"]["A tool for first"]["marketPotential"]["size"] == "$5k-10k MRR"

    retitled = client.post(f"/api/analyses/{saved['id']}/title")
    assert retitled.json()["title"] == "Invoicing Pain For Freelancers"

    assert client.delete(f"/api/analyses/{saved['id']}").status_code == 204
    missing = client.get(f"/api/analyses/{saved['id']}")
    assert missing.status_code == 404
    assert missing.json() == {"error": f"Analysis not found: {saved['id']}"}


def test_unknown_analysis_is_404(client):
    assert client.delete("/api/analyses/nope").status_code == 404
    assert client.post("/api/analyses/nope/ideas", json={"idea": "x"}).status_code == 404


def test_store_only_routes_are_sync(make_service):
    # Plain def routes run in the threadpool, keeping file I/O off the event loop.
    app = create_app(make_service())
    endpoints = {
        (route.path, method): route.endpoint
        for route in app.routes if isinstance(route, APIRoute)
        for method in route.methods
    }

    for key in [("/api/analyses", "GET"), ("/api/analyses/{analysis_id}", "GET"), ("/api/analyses/{analysis_id}", "DELETE")]:
        assert not inspect.iscoroutinefunction(endpoints[key]), key
