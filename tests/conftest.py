import base64

import pytest
from starlette.testclient import TestClient

from storefront.app import app
from storefront.entitlements import EntitlementStore, set_store


WEBHOOK_KEY = "whsec_" + base64.b64encode(b"storefront-test-signing-key").decode("ascii")


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in (
        "DODO_PAYMENTS_API_KEY",
        "DODO_PAYMENTS_ENVIRONMENT",
        "DODO_PAYMENTS_RETURN_URL",
        "DODO_PAYMENTS_WEBHOOK_KEY",
        "DEFAULT_PRODUCT_ID",
    ):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def store():
    fresh = EntitlementStore()
    set_store(fresh)
    yield fresh
    set_store(None)


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def webhook_key(monkeypatch):
    monkeypatch.setenv("DODO_PAYMENTS_WEBHOOK_KEY", WEBHOOK_KEY)
    return WEBHOOK_KEY
