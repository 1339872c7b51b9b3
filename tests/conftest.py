import pytest


@pytest.fixture
def anyio_backend():
    # The service is built on asyncio (asyncio.Lock, get_running_loop, ...).
    return "asyncio"
