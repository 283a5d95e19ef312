from __future__ import annotations
from typing import Dict

# Ejemplos de uso por comando (`nats-sub cheat <comando>`)
CHEATS: Dict[str, str] = {
    "sub": """\
# To subscribe to messages, in a queue group and acknowledge any JetStream ones
nats-sub sub source.subject --queue work --ack

# To subscribe to a randomly generated inbox
nats-sub sub --inbox

# To print only the message bodies
nats-sub sub source.subject --raw
""",
}


def cheat(section: str | None = None) -> str:
    if section:
        if section not in CHEATS:
            raise KeyError(f"no cheats for {section!r}, available: {', '.join(sorted(CHEATS))}")
        return CHEATS[section]
    return "\n".join(CHEATS[k] for k in sorted(CHEATS))
