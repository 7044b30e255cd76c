"""Fixtures serving the mock API on a local port."""
import threading

import pytest
from werkzeug.serving import make_server

from mock_api import MockStore, create_app
from nail_booking import config
from nail_booking.client import build_client
from nail_booking.session_store import SessionStore


@pytest.fixture
def backend():
    """Mock API served from a background thread on a free port."""
    store = MockStore(bcrypt_rounds=4)
    server = make_server("127.0.0.1", 0, create_app(store), threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}", store
    server.shutdown()
    thread.join(timeout=5)


@pytest.fixture
def customer(backend):
    base_url, _ = backend
    return build_client(base_url=base_url, store=SessionStore(path=None))


@pytest.fixture
def admin(backend):
    base_url, _ = backend
    client = build_client(base_url=base_url, store=SessionStore(path=None))
    client.auth.login(config.MOCK_API_ADMIN["email"], config.MOCK_API_ADMIN["password"])
    return client
