# crmsync/exceptions.py
from __future__ import annotations

from typing import Optional


class SyncError(RuntimeError):
    """
    Error base de la app.

    - public_message: texto que ve el cliente (sin detalles internos)
    - detail: mensaje completo, solo para logs del servidor
    - status_code: HTTP a devolver
    """

    status_code = 400
    default_message = "Request failed"

    def __init__(self, detail: str = "", public_message: Optional[str] = None) -> None:
        super().__init__(detail or public_message or self.default_message)
        self.detail = detail or public_message or self.default_message
        self.public_message = public_message or self.default_message


class NotFoundError(SyncError):
    """El email no corresponde a ninguna cuenta."""

    default_message = "User not found"


class ValidationError(SyncError):
    """Payload mal formado o campos obligatorios ausentes."""

    default_message = "Invalid request payload"

    def __init__(self, message: str) -> None:
        # los mensajes de validación no exponen nada interno
        super().__init__(message, public_message=message)


class StoreError(SyncError):
    """La base de datos rechazó la escritura (constraint, conexión...)."""

    default_message = "Failed to write to datastore"


class TrialCheckError(SyncError):
    status_code = 500
    default_message = "Failed to check trial status"


class AuthError(SyncError):
    status_code = 401
    default_message = "Invalid service credentials"


class MailError(SyncError):
    """SMTP sin configurar o el servidor rechazó el envío."""

    status_code = 500
    default_message = "Failed to send email"
