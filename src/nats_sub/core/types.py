from __future__ import annotations
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Optional


# ==== Petición de suscripción ====

@dataclass(slots=True, frozen=True)
class SubscriptionRequest:
    """Lo que pide el usuario desde la CLI. Nunca se muta: resolver devuelve otra."""
    subject: str = ""
    queue: str = ""       # vacío = sin queue group
    raw: bool = False
    ack: bool = False
    inbox: bool = False

    def with_subject(self, subject: str) -> "SubscriptionRequest":
        return replace(self, subject=subject)


# ==== Metadata JetStream (viene codificada en el reply $JS.ACK...) ====

@dataclass(slots=True, frozen=True)
class DeliveryMetadata:
    stream: str
    consumer: str
    delivered: int
    consumer_seq: int
    stream_seq: int
    pending: int = 0
    timestamp: Optional[datetime] = None
