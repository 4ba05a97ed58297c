"""Shared pytest fixtures."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import pytest
from fakes import TEST_SALT, FakeClock, InMemoryAuthRecords, InMemoryMessages, InMemorySessions, InMemoryUsers, Wallet
from fastapi.testclient import TestClient

from web3signer.app import App
from web3signer.config import Config
from web3signer.core.modules.auth.flow import AuthFlow, AuthSettings
from web3signer.core.modules.message.ledger import SignatureLedger
from web3signer.core.modules.signature.verifier import SignatureVerifier
from web3signer.web.server import create_fastapi_app

SESSION_ID = "test-session"


@pytest.fixture
def clock():
    """Fixed clock at the start of a TOTP step; advance it explicitly."""
    return FakeClock()


@pytest.fixture
def users():
    return InMemoryUsers()


@pytest.fixture
def auth_records():
    return InMemoryAuthRecords()


@pytest.fixture
def sessions():
    return InMemorySessions()


@pytest.fixture
def messages(clock):
    return InMemoryMessages(clock)


@pytest.fixture
def verifier():
    return SignatureVerifier()


@pytest.fixture
def settings():
    return AuthSettings(mfa_server_salt=TEST_SALT)


@pytest.fixture
def flow(users, auth_records, sessions, messages, verifier, settings, clock):
    """Auth flow wired to in-memory storage."""
    return AuthFlow(
        users=users,
        auth_records=auth_records,
        sessions=sessions,
        messages=messages,
        verifier=verifier,
        settings=settings,
        clock=clock,
    )


@pytest.fixture
def ledger(flow, messages, verifier):
    return SignatureLedger(auth=flow, messages=messages, verifier=verifier)


@pytest.fixture
def wallet():
    """Wallet of private key 1, address 0x7e5f...5bdf."""
    return Wallet(1)


@pytest.fixture
def other_wallet():
    return Wallet(2)


@pytest.fixture
def session_id():
    return SESSION_ID


class FakeCore:
    """Core replacement exposing the flows without a database."""

    def __init__(self, auth: AuthFlow, ledger: SignatureLedger) -> None:
        self.auth = auth
        self.ledger = ledger

    @asynccontextmanager
    async def lifespan(self) -> AsyncGenerator[None]:
        yield


@pytest.fixture
def config():
    return Config(
        database_url="mongodb://localhost:27017/web3signer_test",
        session_secret_key="test-session-secret",
        mfa_server_salt=TEST_SALT,
    )


@pytest.fixture
def client(config, flow, ledger):
    """HTTP client over the full FastAPI app backed by in-memory storage."""
    app = App(config, core=FakeCore(flow, ledger))  # type: ignore[arg-type]
    with TestClient(create_fastapi_app(app, config)) as test_client:
        yield test_client
