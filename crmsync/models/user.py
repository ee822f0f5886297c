# crmsync/models/user.py
from __future__ import annotations

import uuid

from crmsync.database import db
from crmsync.utils import iso_z, utcnow


def gen_user_id() -> str:
    """ID de 32 caracteres hex (mismo formato que usan los clientes externos)."""
    return uuid.uuid4().hex


class User(db.Model):
    """Cuenta autenticada. La búsqueda por email de los endpoints de sync resuelve aquí."""

    __tablename__ = "users"

    id = db.Column(db.String(64), primary_key=True, nullable=False, default=gen_user_id)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    full_name = db.Column(db.String(255), nullable=True)

    # 'web', 'mobile', 'desktop', 'admin', 'software'
    registration_source = db.Column(db.String(32), nullable=True)

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "email": self.email,
            "full_name": self.full_name,
            "registration_source": self.registration_source,
            "created_at": iso_z(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email}>"
