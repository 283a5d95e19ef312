from __future__ import annotations
from typing import Optional

from nats.aio.msg import Msg
from nats.errors import NotJSMessageError

from .types import DeliveryMetadata


def parse_delivery_metadata(msg: Msg) -> Optional[DeliveryMetadata]:
    """
    Extrae la metadata JetStream del reply del mensaje.
    Devuelve None si no hay reply o si el reply no es un $JS.ACK válido;
    un mensaje así se trata como mensaje normal.
    """
    if not msg.reply:
        return None
    try:
        md = msg.metadata
    except (NotJSMessageError, ValueError, IndexError, OverflowError, OSError):
        # timestamp fuera de rango: fromtimestamp lanza OSError u OverflowError según plataforma
        return None
    if md is None:
        return None

    return DeliveryMetadata(
        stream=md.stream,
        consumer=md.consumer,
        delivered=int(md.num_delivered),
        consumer_seq=int(md.sequence.consumer),
        stream_seq=int(md.sequence.stream),
        pending=int(md.num_pending or 0),
        timestamp=md.timestamp,
    )
