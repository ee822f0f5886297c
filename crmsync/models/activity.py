# crmsync/models/activity.py
from __future__ import annotations

from crmsync.database import db
from crmsync.utils import iso_z, utcnow


# ---------------------------------------------------------
# RESUMEN DE ACTIVIDAD (una fila por usuario, upsert)
# ---------------------------------------------------------
class UserActivity(db.Model):
    __tablename__ = "user_activities"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )

    login_count = db.Column(db.Integer, nullable=False, default=0)
    subscription_days_left = db.Column(db.Integer, nullable=True)

    # duraciones en segundos
    daily_time_spent = db.Column(db.Integer, nullable=False, default=0)
    total_time_spent = db.Column(db.Integer, nullable=False, default=0)

    last_active = db.Column(db.DateTime, nullable=True)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "login_count": self.login_count,
            "subscription_days_left": self.subscription_days_left,
            "daily_time_spent": self.daily_time_spent,
            "total_time_spent": self.total_time_spent,
            "last_active": iso_z(self.last_active),
            "updated_at": iso_z(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<UserActivity user={self.user_id} logins={self.login_count}>"


# ---------------------------------------------------------
# LOG DE VISITAS (append-only)
# ---------------------------------------------------------
class ActivityLog(db.Model):
    __tablename__ = "activity_logs"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)
    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    page_name = db.Column(db.String(255), nullable=True)
    page_url = db.Column(db.String(1024), nullable=True)
    time_spent = db.Column(db.Integer, nullable=False, default=0)  # segundos
    visit_date = db.Column(db.Date, nullable=True)

    timestamp = db.Column(db.DateTime, nullable=False, default=utcnow)

    __table_args__ = (
        db.Index("ix_activity_logs_user_visit", "user_id", "visit_date"),
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "user_id": self.user_id,
            "page_name": self.page_name,
            "page_url": self.page_url,
            "time_spent": self.time_spent,
            "visit_date": self.visit_date.isoformat() if self.visit_date else None,
            "timestamp": iso_z(self.timestamp),
        }

    def __repr__(self) -> str:
        return f"<ActivityLog id={self.id} user={self.user_id} page={self.page_name}>"
