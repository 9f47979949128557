# conftest.py - shared fixtures for the virtfusion tests

import json
from http import HTTPStatus
from unittest.mock import Mock

import pytest
import requests

from virtfusion import ProviderConfig


def make_response(status_code: int, body=None, text: str = None) -> requests.Response:
    """Build a real requests.Response carrying a JSON (or raw text) body"""
    response = requests.Response()
    response.status_code = status_code
    response.reason = HTTPStatus(status_code).phrase
    if text is None:
        text = "" if body is None else json.dumps(body)
    response._content = text.encode("utf-8")
    response.encoding = "utf-8"
    return response


@pytest.fixture
def respond():
    return make_response


@pytest.fixture
def config():
    return ProviderConfig(
        endpoint="cp.example.com",
        api_token="secret-token",
        default_os_template="Debian 12",
    )


@pytest.fixture
def session():
    """Stand-in for AuthenticatedSession; tests queue responses on session.request"""
    return Mock(spec=requests.Session)
