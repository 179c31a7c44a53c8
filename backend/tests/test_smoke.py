from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from hub_status.api.usage import get_admin_client
from hub_status.core.config import Settings, get_settings
from hub_status.core.database import get_db
from hub_status.main import app
from hub_status.services.anthropic_admin_client import AnthropicAdminClient

RECORD = {
    "core_metrics": {"num_sessions": 1, "lines_of_code": {"added": 4, "removed": 2}},
    "model_breakdown": [{"tokens": {"input": 30, "output": 10}, "estimated_cost": {"amount": 2.5}}],
}


@pytest.fixture
def credentials():
    return {"api_key": "sk-ant-admin-test"}


@pytest.fixture
def client(db_session, upstream, credentials):
    settings = Settings(USAGE_REPORT="claude_code")

    def _db():
        yield db_session

    app.dependency_overrides[get_db] = _db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_admin_client] = lambda: AnthropicAdminClient(
        api_key=credentials["api_key"],
        http=upstream.client(),
    )
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.json()['status'] == 'ok'


def test_refresh_then_read(client, upstream):
    upstream.reply(json={"data": [RECORD]})

    refresh = client.post('/api/usage/refresh')
    assert refresh.status_code == 200
    payload = refresh.json()
    assert payload['success'] is True
    assert payload['data']['input_tokens'] == 30
    assert payload['data']['estimated_cost_cents'] == 2.5
    assert payload['data']['lines_added'] == 4
    assert payload['data']['limits'] == {'daily_input': 700000, 'daily_output': 300000}

    stored = client.get('/api/usage')
    assert stored.status_code == 200
    assert stored.json()['path'] == 'hub_status/token_usage/claude'
    assert stored.json()['data'] == payload['data']


def test_refresh_messages_report(client, upstream):
    upstream.reply(json={"data": [{"results": [{"uncached_input_tokens": 3, "cache_read_input_tokens": 2, "output_tokens": 1}]}]})

    response = client.post('/api/usage/refresh', params={'report': 'messages'})

    assert response.status_code == 200
    data = response.json()['data']
    assert data['input_tokens'] == 5
    assert data['output_tokens'] == 1
    assert 'starting_at' in data and 'ending_at' in data


def test_read_before_any_refresh(client):
    assert client.get('/api/usage').status_code == 404


def test_unknown_report(client, upstream):
    response = client.post('/api/usage/refresh', params={'report': 'completions'})
    assert response.status_code == 400
    assert upstream.requests == []


def test_missing_credential(client, upstream, credentials):
    credentials["api_key"] = ""

    response = client.post('/api/usage/refresh')

    assert response.status_code == 503
    assert 'ANTHROPIC_ADMIN_KEY' in response.json()['detail']
    assert upstream.requests == []


def test_upstream_error_is_surfaced(client, upstream):
    upstream.reply(429, text='rate limited')

    response = client.post('/api/usage/refresh')

    assert response.status_code == 502
    detail = response.json()['detail']
    assert detail['upstream_status'] == 429
    assert detail['body'] == 'rate limited'
    assert client.get('/api/usage').status_code == 404
