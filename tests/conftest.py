import json

import pytest
import requests

import gpunet

# Example key from the web3.py docs, never funded
PRIVATE_KEY = "0x4c0883a69102937d6231471b5dbb6204fe5129617082792ae468d01a3f362318"
ADDRESS = "0x2c7536E3605D9C16a7a3D7b1898e529396a65c23"


def make_response(status=200, body=None, url="https://quest-api.gpu.net/api"):
    response = requests.Response()
    response.status_code = status
    response.url = url
    response.encoding = "utf-8"
    if body is None:
        response._content = b""
    elif isinstance(body, (bytes, str)):
        response._content = body.encode() if isinstance(body, str) else body
    else:
        response._content = json.dumps(body).encode()
        response.headers["Content-Type"] = "application/json"
    return response


class FakeSession(requests.Session):
    """Session whose routes are keyed by (method, url suffix).

    A route value is a response, an exception to raise, or a list consumed
    one item per call.
    """

    def __init__(self, routes=None):
        super().__init__()
        self.routes = dict(routes or {})
        self.calls = []

    def request(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        base = url.split("?")[0]
        for (route_method, suffix), outcome in self.routes.items():
            if route_method == method and (base == suffix or base.endswith(suffix)):
                if isinstance(outcome, list):
                    outcome = outcome.pop(0)
                if isinstance(outcome, Exception):
                    raise outcome
                return outcome
        raise requests.exceptions.ConnectionError(f"no route for {method} {url}")

    def paths(self):
        return [(method, url.split("?")[0]) for method, url, _ in self.calls]


class SleepRecorder:
    def __init__(self):
        self.delays = []

    def __call__(self, seconds):
        self.delays.append(seconds)


class FakeApi:
    """QuestApi stand-in that records which endpoints were hit"""

    def __init__(self, profile=None, streaks=None, tasks=None, verify_results=None, exp=None):
        self.profile = profile if profile is not None else {"id": "user-1"}
        self.streaks = list(streaks or [])
        self.tasks = list(tasks or [])
        self.verify_results = dict(verify_results or {})
        self.exp = exp if exp is not None else {"exp": 120}
        self.calls = []

    def get_profile(self):
        self.calls.append("profile")
        if isinstance(self.profile, Exception):
            raise self.profile
        return self.profile

    def update_streak(self):
        self.calls.append("streak")
        outcome = self.streaks.pop(0) if self.streaks else None
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def list_social_tasks(self):
        self.calls.append("tasks")
        return self.tasks

    def verify_social_task(self, task_id):
        self.calls.append(f"verify:{task_id}")
        outcome = self.verify_results.get(task_id, {"success": False})
        if isinstance(outcome, Exception):
            raise outcome
        return outcome

    def get_experience(self):
        self.calls.append("experience")
        return self.exp


class FakeAuth:
    def __init__(self, state=gpunet.AuthState.AUTHENTICATED, error=None):
        self.state = state
        self.error = error
        self.calls = []

    def authenticate(self, private_key, address=None):
        self.calls.append(private_key)
        if self.error:
            raise self.error
        payload = {"error": "bad signature"} if self.state is gpunet.AuthState.REJECTED else {"ok": True}
        return gpunet.AuthOutcome(self.state, address, payload)


@pytest.fixture
def sleep():
    return SleepRecorder()


@pytest.fixture
def cookie_file(tmp_path):
    return str(tmp_path / "cookies.json")


@pytest.fixture
def session():
    return FakeSession()


@pytest.fixture
def ctx(session, cookie_file):
    return gpunet.SessionContext(session=session, cookie_file=cookie_file)


@pytest.fixture
def valid_streak():
    return {"streak": 4, "longestStreak": 9, "lastVisitDate": "2026-10-18"}
