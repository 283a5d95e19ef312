from __future__ import annotations
import configparser
import os
from dataclasses import dataclass, fields
from typing import Any, Dict, List, Optional

from nats_sub.errors import ConfigurationError

DEFAULT_URL = "nats://127.0.0.1:4222"
DEFAULT_INBOX_PREFIX = "_INBOX"
DEFAULT_TIMEOUT = 5.0

# clave INI [NATS] -> variable de entorno
ENV_KEYS: Dict[str, str] = {
    "url": "NATS_URL",
    "user": "NATS_USER",
    "password": "NATS_PASSWORD",
    "creds": "NATS_CREDS",
    "nkey": "NATS_NKEY",
    "token": "NATS_TOKEN",
    "tlscert": "NATS_CERT",
    "tlskey": "NATS_KEY",
    "tlsca": "NATS_CA",
    "timeout": "NATS_TIMEOUT",
    "name": "NATS_CONNECTION_NAME",
    "inbox_prefix": "NATS_INBOX_PREFIX",
    "reconnects": "NATS_RECONNECTS",
}


@dataclass(slots=True)
class Config:
    """Opciones de conexión. Prioridad: defaults < INI < entorno < flags de la CLI."""
    url: str = DEFAULT_URL
    user: Optional[str] = None
    password: Optional[str] = None
    creds: Optional[str] = None
    nkey: Optional[str] = None
    token: Optional[str] = None
    tlscert: Optional[str] = None
    tlskey: Optional[str] = None
    tlsca: Optional[str] = None
    timeout: float = DEFAULT_TIMEOUT
    name: str = "nats-sub"
    inbox_prefix: str = DEFAULT_INBOX_PREFIX
    # reconexiones por servidor una vez conectado (-1 = sin límite); el connect inicial no reintenta
    reconnects: int = -1

    @property
    def servers(self) -> List[str]:
        return [u.strip() for u in self.url.split(",") if u.strip()]


def _as_timeout(value: Any) -> float:
    try:
        t = float(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid timeout: {value!r}") from e
    if t <= 0:
        raise ConfigurationError(f"invalid timeout: {value!r}")
    return t


def _as_reconnects(value: Any) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError) as e:
        raise ConfigurationError(f"invalid reconnects: {value!r}") from e
    if n < -1:
        raise ConfigurationError(f"invalid reconnects: {value!r}")
    return n


def _read_ini(ini_path: str) -> Dict[str, str]:
    cfg = configparser.ConfigParser()
    if not cfg.read(ini_path):
        raise ConfigurationError(f"could not read config file: {ini_path}")
    if not cfg.has_section("NATS"):
        return {}
    return {k: v for k, v in cfg["NATS"].items() if k in ENV_KEYS and v != ""}


def _read_env(environ) -> Dict[str, str]:
    out = {}
    for key, env in ENV_KEYS.items():
        val = environ.get(env)
        if val:
            out[key] = val
    return out


def load_config(ini_path: Optional[str] = None, environ=None, **overrides: Any) -> Config:
    """
    Construye la Config. `ini_path` explícito debe poder leerse; el de
    NATS_SUB_INI también. Los overrides a None se ignoran (flags no pasados).
    """
    environ = os.environ if environ is None else environ

    values: Dict[str, Any] = {}
    ini = ini_path or environ.get("NATS_SUB_INI")
    if ini:
        values.update(_read_ini(ini))
    values.update(_read_env(environ))
    values.update({k: v for k, v in overrides.items() if v is not None})

    known = {f.name for f in fields(Config)}
    values = {k: v for k, v in values.items() if k in known}

    if "timeout" in values:
        values["timeout"] = _as_timeout(values["timeout"])
    if "reconnects" in values:
        values["reconnects"] = _as_reconnects(values["reconnects"])
    if "url" in values and not str(values["url"]).strip():
        raise ConfigurationError("server url must not be empty")

    return Config(**values)
