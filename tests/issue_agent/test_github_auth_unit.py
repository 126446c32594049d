"""Unit tests for GitHub App authentication."""

import asyncio
from typing import List

import httpx
import jwt
import pytest

from src.issue_agent.github.auth import (
    JWT_CLOCK_SKEW_SECONDS,
    JWT_LIFETIME_SECONDS,
    GitHubAppAuth,
)
from src.issue_agent.github.client import GitHubAPIError


def run_async(coro):
    return asyncio.run(coro)


def _auth(private_pem: str, handler=None, **kwargs) -> GitHubAppAuth:
    transport = httpx.MockTransport(handler) if handler is not None else None
    return GitHubAppAuth(app_id="12345", private_key=private_pem, transport=transport, **kwargs)


class TestCreateAppJwt:
    def test_claims(self, rsa_key_pair):
        private_pem, public_pem = rsa_key_pair
        token = _auth(private_pem).create_app_jwt(now=1_700_000_000)

        claims = jwt.decode(
            token,
            public_pem,
            algorithms=["RS256"],
            options={"verify_exp": False, "verify_iat": False},
        )

        assert claims["iss"] == "12345"
        assert claims["iat"] == 1_700_000_000 - JWT_CLOCK_SKEW_SECONDS
        assert claims["exp"] == 1_700_000_000 + JWT_LIFETIME_SECONDS

    def test_lifetime_within_github_limit(self):
        assert JWT_LIFETIME_SECONDS + JWT_CLOCK_SKEW_SECONDS <= 600


class TestGetApp:
    def test_sends_app_jwt(self, rsa_key_pair):
        private_pem, public_pem = rsa_key_pair
        seen: List[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"name": "git-issue-agent"})

        app = run_async(_auth(private_pem, handler).get_app())

        assert app["name"] == "git-issue-agent"
        assert seen[0].url == "https://api.github.com/app"
        scheme, token = seen[0].headers["Authorization"].split(" ", 1)
        assert scheme == "Bearer"
        assert jwt.decode(token, public_pem, algorithms=["RS256"])["iss"] == "12345"

    def test_rejected_credentials(self, rsa_key_pair):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(401, json={"message": "A JSON web token could not be decoded"})

        with pytest.raises(GitHubAPIError) as exc_info:
            run_async(_auth(rsa_key_pair[0], handler).get_app())
        assert exc_info.value.status_code == 401


class TestGetInstallationToken:
    def test_returns_token(self, rsa_key_pair):
        def handler(request: httpx.Request) -> httpx.Response:
            assert request.method == "POST"
            assert request.url.path == "/app/installations/42/access_tokens"
            return httpx.Response(201, json={"token": "ghs_abc", "expires_at": "..."})

        token = run_async(_auth(rsa_key_pair[0], handler).get_installation_token(42))
        assert token == "ghs_abc"

    def test_enterprise_base_url(self, rsa_key_pair):
        def handler(request: httpx.Request) -> httpx.Response:
            assert str(request.url) == (
                "https://ghe.example.com/api/v3/app/installations/42/access_tokens"
            )
            return httpx.Response(201, json={"token": "ghs_abc"})

        auth = _auth(rsa_key_pair[0], handler, base_url="https://ghe.example.com/api/v3")
        assert run_async(auth.get_installation_token(42)) == "ghs_abc"

    def test_missing_token(self, rsa_key_pair):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(201, json={})

        with pytest.raises(GitHubAPIError):
            run_async(_auth(rsa_key_pair[0], handler).get_installation_token(42))

    def test_network_error(self, rsa_key_pair):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        with pytest.raises(GitHubAPIError):
            run_async(_auth(rsa_key_pair[0], handler).get_installation_token(42))
