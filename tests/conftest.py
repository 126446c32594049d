"""Pytest configuration for all tests."""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import rsa


@pytest.fixture(scope="session")
def rsa_key_pair():
    """An RSA key pair as (private PEM, public PEM) strings."""
    key = rsa.generate_private_key(public_exponent=65537, key_size=2048)
    private_pem = key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    ).decode()
    public_pem = key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    ).decode()
    return private_pem, public_pem


@pytest.fixture
def agent_env(monkeypatch, tmp_path, rsa_key_pair):
    """Environment with every required setting present."""
    key_path = tmp_path / "app.pem"
    key_path.write_text(rsa_key_pair[0])

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("APP_ID", "12345")
    monkeypatch.setenv("PRIVATE_KEY_PATH", str(key_path))
    monkeypatch.setenv("WEBHOOK_SECRET", "s3cret-value")
    for name in (
        "ENTERPRISE_HOSTNAME",
        "GITHUB_TOKEN_CLASSIC",
        "GITHUB_ENTERPRISE_URL",
        "LOCAL_NETWORK_URL",
        "AGENT_TIMEOUT_SECONDS",
        "HOST",
        "PORT",
        "LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return key_path
