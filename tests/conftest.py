import pytest
from fastapi.testclient import TestClient

from main import create_app
from utils.config import Settings


class FakeClock:
    def __init__(self, now: str = "2026-10-19T09:30:00.000Z") -> None:
        self.now = now

    def __call__(self) -> str:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def settings(tmp_path):
    return Settings(orders_dir=str(tmp_path / "orders"), public_dir=str(tmp_path / "public"))


@pytest.fixture
def app(settings, clock):
    return create_app(settings, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c
