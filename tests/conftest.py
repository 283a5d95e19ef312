# tests/conftest.py
"""
Conftest para los tests de nats-sub.
Los tests unitarios usan un cliente NATS de mentira (StubNats);
los de integración necesitan un nats-server en `nats_url` y se saltan si no hay.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

import pytest
import pytest_asyncio
from nats.aio.client import Client as NatsClient
from nats.aio.msg import Msg

# reply v1 de JetStream: $JS.ACK.<stream>.<consumer>.<delivered>.<sseq>.<cseq>.<ts-ns>.<pending>
JS_REPLY = "$JS.ACK.ORDERS.worker.3.42.7.1700000000000000000.5"


# ------------------------- pytest.ini options -------------------------
def pytest_addoption(parser):
    parser.addini("nats_url", "NATS URL", default="nats://127.0.0.1:4222")


@pytest.fixture(scope="session")
def cfg(pytestconfig):
    return {"nats_url": pytestconfig.getini("nats_url")}


@pytest.fixture(autouse=True)
def _propagate_logs(monkeypatch):
    # el logger del paquete no propaga; caplog escucha en root
    monkeypatch.setattr(logging.getLogger("nats_sub"), "propagate", True)


# ------------------------- stubs -------------------------
class StubSubscription:
    def __init__(self, subject: str, queue: str, cb):
        self.subject = subject
        self.queue = queue
        self.cb = cb
        self.unsubscribed = False

    async def unsubscribe(self):
        self.unsubscribed = True


class StubNats:
    """Lo mínimo del Client de nats-py que usa el comando."""
    def __init__(self, fail_publish: bool = False, last_error: Optional[Exception] = None,
                 fail_connect: Optional[Exception] = None,
                 flush_error: Optional[Exception] = None):
        self.fail_publish = fail_publish
        self.fail_connect = fail_connect
        self.flush_error = flush_error
        self.options: Dict[str, Any] = {}
        self.last_error = last_error
        self.connected_url = None
        self.connect_opts: Optional[Dict[str, Any]] = None
        self.published: List[Tuple[str, bytes]] = []
        self.subscriptions: List[StubSubscription] = []
        self.flushed = 0
        self.closed = False

    async def connect(self, **opts):
        self.connect_opts = opts
        self.options = dict(opts)
        if self.fail_connect is not None:
            raise self.fail_connect

    async def subscribe(self, subject: str, queue: str = "", cb=None):
        sub = StubSubscription(subject, queue, cb)
        self.subscriptions.append(sub)
        return sub

    async def publish(self, subject: str, payload: bytes = b"", reply: str = "", headers=None):
        # cede el loop para que otros callbacks intenten colarse
        await asyncio.sleep(0)
        if self.fail_publish:
            raise ConnectionError(f"cannot publish to {subject}")
        self.published.append((subject, payload))

    async def flush(self, timeout: int = 10):
        self.flushed += 1
        if self.flush_error is not None:
            self.last_error = self.flush_error

    async def close(self):
        self.closed = True


@pytest.fixture
def stub_nats():
    return StubNats()


@pytest.fixture
def stub_nats_cls():
    return StubNats


@pytest.fixture
def js_reply():
    return JS_REPLY


def make_msg(subject: str = "orders.new", data: bytes = b"hello", reply: str = "",
             headers: Optional[Dict[str, Any]] = None, client=None) -> Msg:
    return Msg(_client=client, subject=subject, reply=reply, data=data, headers=headers)


@pytest.fixture
def make_msg_fn():
    return make_msg


# ------------------------- NATS client -------------------------
@pytest_asyncio.fixture
async def nc(cfg):
    url = cfg["nats_url"]
    client = NatsClient()
    try:
        await asyncio.wait_for(
            client.connect(url, name="pytest-nats-sub", allow_reconnect=False),
            timeout=3.0,
        )
    except Exception as e:
        pytest.skip(f"[nc] no se pudo conectar a {url}: {repr(e)}")

    try:
        yield client
    finally:
        if not client.is_closed:
            await client.drain()
