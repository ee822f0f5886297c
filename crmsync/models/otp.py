# crmsync/models/otp.py
from __future__ import annotations

from crmsync.database import db
from crmsync.utils import iso_z, utcnow


class AdminOtp(db.Model):
    """Código de un solo uso para el login de administración."""

    __tablename__ = "admin_otp"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    otp_code = db.Column(db.String(6), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    used = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)

    def as_dict(self) -> dict:
        # sin otp_code
        return {
            "id": self.id,
            "email": self.email,
            "expires_at": iso_z(self.expires_at),
            "used": self.used,
            "created_at": iso_z(self.created_at),
        }

    def __repr__(self) -> str:
        return f"<AdminOtp email={self.email} used={self.used}>"
