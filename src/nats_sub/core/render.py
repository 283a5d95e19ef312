from __future__ import annotations
from typing import Any, Iterator, Mapping, Optional, Tuple

import orjson

from .types import DeliveryMetadata


def quote(s: str) -> str:
    """Entrecomilla y escapa un subject (mismo aspecto que %q)."""
    return orjson.dumps(s).decode()


def payload_text(data: Optional[bytes]) -> str:
    if not data:
        return ""
    return data.decode("utf-8", errors="replace")


def summary_line(index: int, subject: str, reply: Optional[str],
                 info: Optional[DeliveryMetadata], acking: bool) -> str:
    """
    Línea de cabecera de cada mensaje. Tres variantes:
      - mensaje normal
      - mensaje normal con reply
      - mensaje JetStream (metadata parseada)
    """
    if info is None:
        if reply:
            return f"[#{index}] Received on {quote(subject)} with reply {quote(reply)}"
        return f"[#{index}] Received on {quote(subject)}"

    return (
        f"[#{index}] Received JetStream message: consumer: {info.stream} > {info.consumer}"
        f" / subject: {subject}"
        f" / delivered: {info.delivered}"
        f" / consumer seq: {info.consumer_seq}"
        f" / stream seq: {info.stream_seq}"
        f" / ack: {'true' if acking else 'false'}"
    )


def header_pairs(headers: Optional[Mapping[str, Any]]) -> Iterator[Tuple[str, str]]:
    """(nombre, valor) por cada valor de cada header, en el orden declarado."""
    if not headers:
        return
    for name, vals in headers.items():
        if isinstance(vals, (list, tuple)):
            for val in vals:
                yield name, str(val)
        else:
            yield name, str(vals)


def header_lines(headers: Optional[Mapping[str, Any]]) -> list[str]:
    return [f"{name}: {val}" for name, val in header_pairs(headers)]


def raw_output(data: Optional[bytes]) -> str:
    text = payload_text(data)
    if not text.endswith("\n"):
        text += "\n"
    return text


def message_output(index: int, subject: str, reply: Optional[str],
                   headers: Optional[Mapping[str, Any]], data: Optional[bytes],
                   info: Optional[DeliveryMetadata], acking: bool) -> str:
    """Bloque completo (sin modo raw) tal y como se escribe en stdout."""
    out = [summary_line(index, subject, reply, info, acking), "\n"]

    lines = header_lines(headers)
    if lines:
        for line in lines:
            out.append(line + "\n")
        out.append("\n")

    text = payload_text(data)
    out.append(text + "\n")
    # separador entre mensajes cuando el payload no termina en salto de línea
    if not text.endswith("\n"):
        out.append("\n")
    return "".join(out)
