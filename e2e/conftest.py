"""E2E test configuration and fixtures."""

import logging
from pathlib import Path

import pytest
import requests

# Test configuration
LEGACY_TAG = "2.7.5"
CURRENT_TAG = "3.4.1-ubuntu-ci"
AUTH_HEADER = "X-Warp10-Token"
FETCHED_HEADER = "X-Warp10-Fetched"
UPDATE_API = "/api/v0/update"
EXEC_API = "/api/v0/exec"

MACROS_FOLDER = Path(__file__).parent / "macros"

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logging.getLogger("urllib3").setLevel(logging.WARNING)
logging.getLogger("docker").setLevel(logging.WARNING)


@pytest.fixture
def warp10_request():
    """POST a body to a Warp 10 endpoint, optionally with a token header."""

    def post(container, path, body, token=None):
        headers = {"Content-Type": "text/plain"}
        if token is not None:
            headers[AUTH_HEADER] = token
        return requests.post(f"{container.get_url()}{path}", data=body, headers=headers, timeout=30)

    return post
