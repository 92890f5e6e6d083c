import os

# Key material must be in the environment before orbita reads its settings
TEST_ENCRYPTION_KEY = "01" * 32
TEST_STATE_SECRET = "test-oauth-state-secret"

os.environ.setdefault("ENCRYPTION_KEY", TEST_ENCRYPTION_KEY)
os.environ.setdefault("OAUTH_STATE_SECRET", TEST_STATE_SECRET)
os.environ.setdefault("LOG_JSON", "false")

import pytest

from orbita.dependencies import reset_services


@pytest.fixture(autouse=True)
def fresh_services():
    """Give every test empty stores built from the test configuration"""
    reset_services()
    yield
    reset_services()


@pytest.fixture
def key_bytes():
    return bytes.fromhex(TEST_ENCRYPTION_KEY)
