"""Shared fixtures and utilities for tests."""

from functools import partial
import os
import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from api.services import persons as person_service
from core.config import Settings


CUSTOMER_ADDRESS = "0x1111111111111111111111111111111111111111"
PERFORMER_ADDRESS = "0x2222222222222222222222222222222222222222"
OTHER_ADDRESS = "0x3333333333333333333333333333333333333333"

# Answered by the in-process balance oracle
FUNDED_CONTRACT_ADDRESS = "0xaB8722B889D231d62c9eB35Eb1b557926F3B3289"
EMPTY_CONTRACT_ADDRESS = "0x9Ca2702c5bcc51D79d9a059D58607028aa36DD67"

PASSWORD = "12345678"


@pytest.fixture(scope="session", autouse=True)
def setup_test_env():
    """Set up test environment variables before running tests."""
    os.environ.setdefault("ENVIRONMENT", "test")
    os.environ.setdefault("ETH_NODE_URL", "test")
    os.environ.setdefault("LOG_JSON", "false")
    os.environ.setdefault("LOG_LEVEL", "WARNING")
    # Telegram is never called from tests
    os.environ.pop("TG_TOKEN", None)


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a throwaway SQLite file."""
    return Settings(
        app_env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        database_isolation_level="",
        database_create_schema=True,
        eth_node_url="test",
        tg_token=None,
        json_logs=False,
        log_level="WARNING",
    )


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    """Test client with the lifespan running, so the schema exists."""
    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def signup(client, login: str, ethereum_address: str = "", **extra) -> dict:
    """Register a person and return the user context."""
    response = client.post(
        "/signup",
        json={
            "login": login,
            "password": PASSWORD,
            "display_name": login.capitalize(),
            "ethereum_address": ethereum_address,
            **extra,
        },
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_admin(client, app, login: str = "admin") -> dict:
    """Admins are not created over HTTP; add one directly and log in."""
    client.portal.call(
        partial(
            person_service.add_person,
            app.state.db,
            login=login,
            password=PASSWORD,
            display_name="Admin",
            is_admin=True,
        )
    )
    response = client.post("/login", json={"login": login, "password": PASSWORD})
    assert response.status_code == 200, response.text
    return response.json()


def create_job(client, token: str, **overrides) -> dict:
    body = {
        "title": "Landing page",
        "description": "A one page site with a contact form",
        "budget": "120.5",
        "duration": 14,
        **overrides,
    }
    response = client.post("/jobs", json=body, headers=auth_headers(token))
    assert response.status_code == 201, response.text
    return response.json()


def apply(client, token: str, job_id: str, comment: str = "I can do it", price: str = "40") -> dict:
    response = client.post(
        f"/jobs/{job_id}/applications",
        json={"comment": comment, "price": price},
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


def create_contract(client, token: str, application: dict, price: str = "40") -> dict:
    response = client.post(
        "/contracts",
        json={
            "application_id": application["id"],
            "performer_id": application["applicant_id"],
            "title": "Landing page contract",
            "description": "Deliver the landing page",
            "price": price,
            "duration": 14,
        },
        headers=auth_headers(token),
    )
    assert response.status_code == 201, response.text
    return response.json()


@pytest.fixture
def customer(client):
    return signup(client, "customer", CUSTOMER_ADDRESS)


@pytest.fixture
def performer(client):
    return signup(client, "performer", PERFORMER_ADDRESS)


@pytest.fixture
def stranger(client):
    return signup(client, "stranger", OTHER_ADDRESS)


@pytest.fixture
def job(client, customer):
    return create_job(client, customer["token"])


@pytest.fixture
def application(client, performer, job):
    return apply(client, performer["token"], job["id"])


@pytest.fixture
def contract(client, customer, application):
    return create_contract(client, customer["token"], application)


def act(client, token: str, contract_id: str, action: str, **body):
    """Perform a contract action, sending a body only when one is given."""
    return client.post(
        f"/contracts/{contract_id}/{action}",
        json=body or None,
        headers=auth_headers(token),
    )


def advance(client, customer, performer, contract_id: str, until: str, address=FUNDED_CONTRACT_ADDRESS) -> dict:
    """Run the workflow until the contract reaches `until`."""
    steps = [
        ("accepted", performer, "accept", {}),
        ("deployed", customer, "deploy", {"contract_address": address}),
        ("signed", performer, "sign", {}),
        ("funded", customer, "fund", {}),
        ("approved", customer, "approve", {}),
        ("completed", performer, "complete", {}),
    ]
    for status, party, action, body in steps:
        response = act(client, party["token"], contract_id, action, **body)
        assert response.status_code == 200, response.text
        assert response.json()["status"] == status
        if status == until:
            return response.json()
    raise AssertionError(f"unknown status {until}")
