from __future__ import annotations
import asyncio
import signal
from typing import Optional

from nats.aio.client import Client as NATS

from nats_sub.config import Config
from nats_sub.core.types import SubscriptionRequest
from nats_sub.logs.logger import get_logger
from nats_sub.nats.subscriber import SubscriptionRunner, resolve_subject
from nats_sub.nats_io import connect_nats

log = get_logger(__name__)


async def run_sub(request: SubscriptionRequest, cfg: Config,
                  stop: Optional[asyncio.Event] = None,
                  client: Optional[NATS] = None) -> None:
    """
    Comando `sub` completo: resolver subject → conectar → suscribir → esperar.
    La conexión se cierra siempre al salir, con error o sin él.
    """
    request = resolve_subject(request, cfg.inbox_prefix)

    # el cliente se cierra solo si agota las reconexiones
    closed = asyncio.Event()

    async def on_closed():
        closed.set()

    nc = await connect_nats(cfg, client=client, on_closed=on_closed)
    try:
        runner = SubscriptionRunner(nc, request)
        await runner.run(stop, closed)
    finally:
        await nc.close()
        log.debug("[NATS] cerrado")


def install_stop_signals(stop: asyncio.Event) -> None:
    """SIGINT/SIGTERM ponen el evento de parada en lugar de matar el proceso."""
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, stop.set)
        except NotImplementedError:
            # Windows: sin add_signal_handler en el loop por defecto
            signal.signal(sig, lambda *_: loop.call_soon_threadsafe(stop.set))


async def main(request: SubscriptionRequest, cfg: Config) -> None:
    stop = asyncio.Event()
    install_stop_signals(stop)
    await run_sub(request, cfg, stop=stop)
