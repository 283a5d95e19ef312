#!/usr/bin/env python3
"""
Cliente de línea de comandos para suscribirse a subjects de NATS.

Uso:
    nats-sub sub orders.> --queue work --ack
    nats-sub sub --inbox
    nats-sub cheat sub
"""
from __future__ import annotations
import argparse
import asyncio
import sys
from typing import List, Optional

from nats_sub.cheats import CHEATS, cheat
from nats_sub.config import load_config
from nats_sub.core.types import SubscriptionRequest
from nats_sub.nats.runner import main as run_main

PROG = "nats-sub"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=PROG, description="NATS subscription client")

    conn = parser.add_argument_group("connection")
    conn.add_argument("-s", "--server", dest="url", help="NATS server url(s), comma separated")
    conn.add_argument("--user", help="Username or token")
    conn.add_argument("--password", help="Password")
    conn.add_argument("--creds", help="User credentials file")
    conn.add_argument("--nkey", help="User NKEY seed file")
    conn.add_argument("--token", help="Authentication token")
    conn.add_argument("--tlscert", help="TLS client certificate file")
    conn.add_argument("--tlskey", help="TLS client key file")
    conn.add_argument("--tlsca", help="TLS CA certificate file")
    conn.add_argument("--timeout", type=float, help="Connect timeout in seconds")
    conn.add_argument("--connection-name", dest="name", help="Connection name reported to the server")
    conn.add_argument("--inbox-prefix", help="Prefix for generated inbox subjects")
    conn.add_argument("--reconnects", type=int, help="Reconnect attempts per server after connecting, -1 for unlimited")
    conn.add_argument("--ini", help="INI file with a [NATS] section")

    cmds = parser.add_subparsers(dest="command", metavar="COMMAND")
    cmds.required = True

    sub = cmds.add_parser("sub", help="Generic subscription client")
    sub.add_argument("subject", nargs="?", default="", help="Subject to subscribe to")
    sub.add_argument("--queue", default="", help="Subscribe to a named queue group")
    sub.add_argument("-r", "--raw", action="store_true", help="Show the raw data received")
    sub.add_argument("--ack", action="store_true",
                     help="Acknowledge JetStream message that have the correct metadata")
    sub.add_argument("-i", "--inbox", action="store_true", help="Subscribes to a generate inbox")

    ch = cmds.add_parser("cheat", help="Cheatsheets for commands")
    ch.add_argument("section", nargs="?", choices=sorted(CHEATS), help="Command to show examples for")

    return parser


def request_from_args(args: argparse.Namespace) -> SubscriptionRequest:
    return SubscriptionRequest(
        subject=args.subject or "",
        queue=args.queue or "",
        raw=bool(args.raw),
        ack=bool(args.ack),
        inbox=bool(args.inbox),
    )


def config_from_args(args: argparse.Namespace):
    return load_config(
        args.ini,
        url=args.url,
        user=args.user,
        password=args.password,
        creds=args.creds,
        nkey=args.nkey,
        token=args.token,
        tlscert=args.tlscert,
        tlskey=args.tlskey,
        tlsca=args.tlsca,
        timeout=args.timeout,
        name=args.name,
        inbox_prefix=args.inbox_prefix,
        reconnects=args.reconnects,
    )


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    if args.command == "cheat":
        print(cheat(args.section), end="")
        return 0

    try:
        cfg = config_from_args(args)
        asyncio.run(run_main(request_from_args(args), cfg))
    except KeyboardInterrupt:
        return 0
    except Exception as e:
        print(f"{PROG}: error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
