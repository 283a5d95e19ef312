from __future__ import annotations


class NatsSubError(RuntimeError):
    """Base de los errores propios del comando."""


class ConfigurationError(NatsSubError):
    """Falta el subject, o la configuración de conexión no es válida."""
