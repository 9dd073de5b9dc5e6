import pytest
import requests


class FakeResponse:
    def __init__(self, text="", status_code=200, json_data=None):
        self.text = text
        self.content = text.encode("utf-8")
        self.status_code = status_code
        self._json = json_data

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} Error")

    def json(self):
        return self._json


class FakeSession:
    """Mapea url -> FakeResponse o excepción. Registra cada llamada."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []

    def _dispatch(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        target = self.routes.get(url)
        if target is None:
            raise requests.ConnectionError(f"no route for {url}")
        if isinstance(target, Exception):
            raise target
        return target

    def get(self, url, **kwargs):
        return self._dispatch("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._dispatch("POST", url, **kwargs)


def profile_html(*titles):
    badges = "".join(
        f'<div class="profile-badge"><a href="#"><span class="ql-title-medium">{t}</span></a></div>'
        for t in titles
    )
    return f"<html><body><div class='profile-badges'>{badges}</div></body></html>"


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def make_session():
    return FakeSession


@pytest.fixture
def page():
    return profile_html


@pytest.fixture
def response():
    return FakeResponse
