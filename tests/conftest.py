import pytest
from fastapi.testclient import TestClient

from app.api_service import create_app
from repos.device_repo import DeviceRepository
from fakes import API_KEY, FakeTelegram, make_settings


@pytest.fixture
def telegram():
    return FakeTelegram()


@pytest.fixture
def devices():
    return DeviceRepository()


@pytest.fixture
def client(telegram, devices):
    app = create_app(settings=make_settings(), device_repo=devices, telegram=telegram)
    return TestClient(app, headers={"X-Api-Key": API_KEY})
