import os

import pytest
from fastapi.testclient import TestClient

# main.py loads config and logging at import time, so set the environment first.
os.environ.setdefault("LOG_CONFIG_PATH", "/tmp/echo-missing-logging.yml")

from services.echo.config import EchoConfig  # noqa: E402
from services.echo.main import create_app  # noqa: E402


@pytest.fixture
def echo_config():
    return EchoConfig(_env_file=None)


@pytest.fixture
def client(echo_config):
    return TestClient(create_app(echo_config))
