import pytest

from wg_gen import manager


@pytest.fixture
def server():
    return manager.initialize("vpn.example.com", 51820, "10.0.0.0/24", "eth0")
