import json

from typer.testing import CliRunner

from reddit_client.cli import app

runner = CliRunner()

ENV = {
    "REDDIT_CLIENT_ID": "app-id",
    "REDDIT_CLIENT_SECRET": "app-secret",
    "REDDIT_REFRESH_TOKEN": "refresh-1",
    "REDDIT_ACCESS_TOKEN": "access-1",
}

INBOX_URL = "https://oauth.reddit.com/message/inbox.json"


def _inbox_payload():
    return {
        "kind": "Listing",
        "data": {
            "children": [
                {
                    "kind": "t1",
                    "data": {
                        "name": "t1_def",
                        "author": "alice",
                        "subject": "reply",
                        "body": "hi",
                        "context": "/r/golang/comments/abc123/title/def/",
                        "created_utc": 1700000000,
                        "new": True,
                    },
                }
            ],
            "after": None,
            "before": None,
        },
    }


def test_refresh_cli_prints_tokens(requests_mock):
    requests_mock.post(
        "https://www.reddit.com/api/v1/access_token",
        json={"access_token": "access-2", "token_type": "bearer", "expires_in": 3600},
    )

    result = runner.invoke(app, ["refresh"], env=ENV)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["access_token"] == "access-2"
    assert payload["expires_in"] == 3600


def test_me_cli_accepts_flags(requests_mock):
    matcher = requests_mock.get("https://oauth.reddit.com/api/v1/me", json={"name": "alice"})

    result = runner.invoke(
        app,
        [
            "me",
            "--client-id",
            "id",
            "--client-secret",
            "secret",
            "--access-token",
            "tok",
            "--user-agent",
            "test-agent/1.0",
        ],
    )

    assert result.exit_code == 0
    assert json.loads(result.stdout)["name"] == "alice"
    assert matcher.last_request.headers["User-Agent"] == "test-agent/1.0"
    assert matcher.last_request.headers["Authorization"] == "Bearer tok"


def test_inbox_cli_json(requests_mock):
    matcher = requests_mock.get(INBOX_URL, json=_inbox_payload())

    result = runner.invoke(app, ["inbox", "--before", "t1_abc", "--json"], env=ENV)

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["messages"][0]["name"] == "t1_def"
    assert payload["messages"][0]["post_id"] == "abc123"
    assert "before=t1_abc" in matcher.last_request.url


def test_inbox_cli_renders_table(requests_mock):
    requests_mock.get(INBOX_URL, json=_inbox_payload())

    result = runner.invoke(app, ["inbox"], env=ENV)

    assert result.exit_code == 0
    assert "Inbox" in result.stdout
    assert "alice" in result.stdout


def test_api_error_exits_non_zero(requests_mock):
    requests_mock.get(
        "https://oauth.reddit.com/api/v1/me",
        status_code=401,
        json={"message": "Unauthorized", "error": 401},
    )

    result = runner.invoke(app, ["me"], env=ENV)

    assert result.exit_code == 1
    assert "status 401" in result.output


def test_missing_tokens_rejected():
    result = runner.invoke(
        app, ["me", "--client-id", "id", "--client-secret", "secret"], env={}
    )

    assert result.exit_code != 0


def test_split_id_cli():
    result = runner.invoke(app, ["split-id", "t3_abc123"])

    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"kind": "t3", "id": "abc123"}


def test_post_id_cli():
    result = runner.invoke(app, ["post-id", "/r/golang/comments/abc123/some_title/"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "abc123"


def test_show_metrics_prints_prometheus_text(requests_mock):
    requests_mock.get("https://oauth.reddit.com/api/v1/me", json={"name": "alice"})

    result = runner.invoke(app, ["me", "--show-metrics"], env=ENV)

    assert result.exit_code == 0
    assert 'reddit_api_calls_total{endpoint="/api/v1/me"} 1.0' in result.output


def test_show_metrics_counts_errors(requests_mock):
    requests_mock.get("https://oauth.reddit.com/api/v1/me", status_code=500, content=b"")

    result = runner.invoke(app, ["me", "--show-metrics"], env=ENV)

    assert result.exit_code == 1
    assert 'reddit_api_errors_total{endpoint="/api/v1/me"} 1.0' in result.output
