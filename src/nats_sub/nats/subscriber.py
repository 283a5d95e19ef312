from __future__ import annotations
import asyncio
import sys
from typing import Optional

from nats.aio.client import Client as NATS
from nats.aio.msg import Msg
from nats.aio.subscription import Subscription
from nats.errors import ConnectionClosedError
from nats.nuid import NUID

from nats_sub.config import DEFAULT_INBOX_PREFIX
from nats_sub.core.metadata import parse_delivery_metadata
from nats_sub.core.render import message_output, raw_output
from nats_sub.core.types import SubscriptionRequest
from nats_sub.errors import ConfigurationError
from nats_sub.logs.logger import get_logger

log = get_logger(__name__)

_nuid = NUID()


def new_inbox(prefix: str = DEFAULT_INBOX_PREFIX) -> str:
    return f"{prefix.rstrip('.')}.{_nuid.next().decode()}"


def resolve_subject(request: SubscriptionRequest,
                    inbox_prefix: str = DEFAULT_INBOX_PREFIX) -> SubscriptionRequest:
    """Devuelve una petición con subject no vacío, o ConfigurationError (antes de conectar)."""
    if not request.subject and request.inbox:
        return request.with_subject(new_inbox(inbox_prefix))
    if not request.subject:
        raise ConfigurationError("subject is required")
    return request


class MessageCounter:
    """
    Contador de mensajes de la suscripción.
    El lock protege el contador y también la salida: quien lo tiene
    escribe su mensaje completo y hace el ack antes de soltarlo.
    """
    def __init__(self) -> None:
        self.value = 0
        self.lock = asyncio.Lock()

    def next(self) -> int:
        self.value += 1
        return self.value


class SubscriptionRunner:
    """
    Encargado de:
      - suscribirse (normal o en queue group) al subject ya resuelto
      - pintar cada mensaje recibido en stdout
      - confirmar (ack) los mensajes JetStream si se pidió
      - esperar hasta que le cancelen o se cierre la conexión
    """
    def __init__(self, nc: NATS, request: SubscriptionRequest,
                 counter: Optional[MessageCounter] = None, out=None):
        if not request.subject:
            raise ConfigurationError("subject is required")
        self.nc = nc
        self.request = request
        self.counter = counter or MessageCounter()
        self._out = out
        self.sub: Optional[Subscription] = None

    @property
    def out(self):
        return self._out if self._out is not None else sys.stdout

    async def handle(self, msg: Msg) -> None:
        async with self.counter.lock:
            index = self.counter.next()

            info = parse_delivery_metadata(msg) if msg.reply else None
            acking = self.request.ack and info is not None

            try:
                if self.request.raw:
                    self.out.write(raw_output(msg.data))
                else:
                    self.out.write(message_output(
                        index, msg.subject, msg.reply, msg.headers, msg.data,
                        info, self.request.ack,
                    ))
                self.out.flush()
            finally:
                if acking:
                    await self._ack(msg)

    async def _ack(self, msg: Msg) -> None:
        try:
            await msg.respond(b"")
        except Exception as e:
            log.error(f"Acknowledging message via subject {msg.reply} failed: {e}")

    def _announce(self) -> None:
        if self.request.raw and not self.request.inbox:
            return
        if self.request.ack:
            log.info(f"Subscribing on {self.request.subject} with acknowledgement of JetStream messages")
        else:
            log.info(f"Subscribing on {self.request.subject}")

    async def start(self) -> Subscription:
        """
        Suscribe, hace flush y lanza el error asíncrono que haya dejado el cliente.
        Solo cuenta un error nuevo: last_error conserva los fallos del connect
        contra otros servidores del pool.
        """
        self._announce()
        before = self.nc.last_error

        if self.request.queue:
            self.sub = await self.nc.subscribe(self.request.subject, queue=self.request.queue, cb=self.handle)
        else:
            self.sub = await self.nc.subscribe(self.request.subject, cb=self.handle)
        await self.nc.flush()

        err = self.nc.last_error
        if err is not None and err is not before:
            raise err
        return self.sub

    async def run(self, stop: Optional[asyncio.Event] = None,
                  closed: Optional[asyncio.Event] = None) -> None:
        """
        Espera a `stop` (parada pedida) o a `closed` (el cliente se cerró solo).
        Si la conexión se cierra sin que se haya pedido parar, lanza ConnectionClosedError.
        """
        await self.start()
        try:
            await self._wait(stop, closed)
        finally:
            await self.stop()

    async def _wait(self, stop: Optional[asyncio.Event], closed: Optional[asyncio.Event]) -> None:
        waits = [asyncio.ensure_future(ev.wait()) for ev in (stop, closed) if ev is not None]
        if not waits:
            await asyncio.Future()
            return
        try:
            await asyncio.wait(waits, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for w in waits:
                w.cancel()

        stopped = stop is not None and stop.is_set()
        if closed is not None and closed.is_set() and not stopped:
            raise ConnectionClosedError

    async def stop(self) -> None:
        if self.sub is None:
            return
        sub, self.sub = self.sub, None
        try:
            await sub.unsubscribe()
        except Exception as e:
            log.debug(f"unsubscribe {self.request.subject}: {e}")
