import pytest

from reddit_client import RedditClient


class RecordingMetrics:
    """Collect every metric the client emits."""

    def __init__(self):
        self.events = []

    def incr(self, name, tags, rate):
        self.events.append(("incr", name, None, list(tags), rate))

    def histogram(self, name, value, tags, rate):
        self.events.append(("histogram", name, value, list(tags), rate))

    def names(self):
        return [event[1] for event in self.events]


@pytest.fixture
def metrics():
    return RecordingMetrics()


@pytest.fixture
def client(metrics):
    with RedditClient(client_id="app-id", client_secret="app-secret", metrics=metrics) as c:
        yield c


@pytest.fixture
def session(client):
    return client.authenticated(refresh_token="refresh-1", access_token="access-1")
