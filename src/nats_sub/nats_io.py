from __future__ import annotations
import ssl
from typing import Any, Awaitable, Callable, Dict, Optional

from nats.aio.client import Client as NATS

from nats_sub.config import Config
from nats_sub.errors import ConfigurationError
from nats_sub.logs.logger import get_logger

log = get_logger(__name__)


def _tls_context(cfg: Config) -> Optional[ssl.SSLContext]:
    if not (cfg.tlsca or cfg.tlscert or cfg.tlskey):
        return None
    if bool(cfg.tlscert) != bool(cfg.tlskey):
        raise ConfigurationError("tlscert and tlskey must be given together")
    ctx = ssl.create_default_context(purpose=ssl.Purpose.SERVER_AUTH, cafile=cfg.tlsca)
    if cfg.tlscert:
        ctx.load_cert_chain(cfg.tlscert, cfg.tlskey)
    return ctx


class ConnectionEvents:
    """
    Callbacks de estado de la conexión.
    Mientras no hay conexión establecida los errores van a DEBUG:
    si el connect inicial falla, la CLI ya imprime el error final.
    """
    def __init__(self, on_closed: Optional[Callable[[], Awaitable[None]]] = None):
        self.connected = False
        self._on_closed = on_closed

    async def error(self, e: Exception):
        if self.connected:
            log.error(f"NATS error: {e}")
        else:
            log.debug(f"NATS connect error: {e}")

    async def disconnected(self):
        log.info("Disconnected from NATS")

    async def reconnected(self):
        log.info("Reconnected to NATS")

    async def closed(self):
        log.debug("NATS connection closed")
        if self._on_closed is not None:
            await self._on_closed()


def connect_options(cfg: Config, events: Optional[ConnectionEvents] = None) -> Dict[str, Any]:
    """
    kwargs para Client.connect() a partir de la Config.
    nats-py cuenta el connect inicial contra max_reconnect_attempts: se conecta
    con 0 (falla rápido) y connect_nats aplica cfg.reconnects ya conectado.
    """
    events = events or ConnectionEvents()
    opts: Dict[str, Any] = {
        "servers": cfg.servers,
        "name": cfg.name,
        "connect_timeout": cfg.timeout,
        "inbox_prefix": cfg.inbox_prefix,
        "max_reconnect_attempts": 0,
        "error_cb": events.error,
        "disconnected_cb": events.disconnected,
        "reconnected_cb": events.reconnected,
        "closed_cb": events.closed,
    }
    if cfg.user:
        opts["user"] = cfg.user
        opts["password"] = cfg.password or ""
    if cfg.token:
        opts["token"] = cfg.token
    if cfg.creds:
        opts["user_credentials"] = cfg.creds
    if cfg.nkey:
        opts["nkeys_seed"] = cfg.nkey
    tls = _tls_context(cfg)
    if tls is not None:
        opts["tls"] = tls
    return opts


async def connect_nats(cfg: Config, client: Optional[NATS] = None,
                       on_closed: Optional[Callable[[], Awaitable[None]]] = None) -> NATS:
    """
    Conecta; cualquier fallo de conexión se propaga tal cual.
    `on_closed` se llama cuando el cliente queda cerrado (reconexiones agotadas o close()).
    """
    events = ConnectionEvents(on_closed)
    nc = client or NATS()
    await nc.connect(**connect_options(cfg, events))
    events.connected = True
    # el cliente relee la opción en cada reconexión
    nc.options["max_reconnect_attempts"] = cfg.reconnects
    log.debug(f"[NATS] Conectado → {nc.connected_url.geturl() if nc.connected_url else cfg.url}")
    return nc
