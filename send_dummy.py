#!/usr/bin/env python3
"""
Publica unos mensajes de prueba para ver la salida de `nats-sub sub`.

Uso:
    python send_dummy.py --subject demo.sub --n 5
"""
import argparse
import asyncio
import time

import orjson
from nats.aio.client import Client as NATS

NATS_URL = "nats://127.0.0.1:4222"


async def main(url: str, subject: str, n: int):
    nc = NATS()
    await nc.connect(url)
    print(f"✅ Dummy conectado a: {nc.connected_url.geturl()}")

    for i in range(n):
        msg = {"seq": i + 1, "ts": int(time.time() * 1000), "text": f"hola {i + 1}"}
        data = orjson.dumps(msg)

        # alterna: normal / con headers / con reply
        kind = i % 3
        if kind == 0:
            await nc.publish(subject, data)
        elif kind == 1:
            await nc.publish(subject, data, headers={"X-Seq": str(i + 1), "X-Source": "send_dummy"})
        else:
            await nc.publish(subject, data, reply=nc.new_inbox())
        print(f"✅ Enviado {i + 1:02d}/{n}:", msg)

    await nc.flush()
    await nc.drain()
    print(f"🎯 Listo: {n} mensajes publicados en {subject}.")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Publica mensajes de prueba")
    parser.add_argument("--url", default=NATS_URL, help="URL de NATS")
    parser.add_argument("--subject", default="demo.sub", help="Subject destino")
    parser.add_argument("--n", type=int, default=6, help="Cantidad de mensajes")
    args = parser.parse_args()
    asyncio.run(main(args.url, args.subject, args.n))
