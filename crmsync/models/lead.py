# crmsync/models/lead.py
from __future__ import annotations

from crmsync.database import db
from crmsync.utils import iso_z, utcnow

# Valores de negocio que usan el dashboard y el chequeo diario de trials
STATUS_NEW = "New"
STATUS_ACTIVE = "Active"
STATUS_INACTIVE = "Inactive"

PLAN_TRIAL = "Trial User"
PLAN_UNPAID = "Unpaid"

USER_TYPE_TRIAL = "Trial User"
USER_TYPE_PAID = "Paid User"


class Lead(db.Model):
    __tablename__ = "leads"

    id = db.Column(db.Integer, primary_key=True, autoincrement=True)

    name = db.Column(db.String(255), nullable=True)
    first_name = db.Column(db.String(120), nullable=True)
    last_name = db.Column(db.String(120), nullable=True)
    email = db.Column(db.String(255), nullable=True, index=True)
    phone = db.Column(db.String(64), nullable=True)
    company = db.Column(db.String(255), nullable=True)
    state = db.Column(db.String(120), nullable=True)
    gender = db.Column(db.String(32), nullable=True)
    exam_category = db.Column(db.String(120), nullable=True)
    how_did_you_hear = db.Column(db.String(255), nullable=True)

    source = db.Column(db.String(120), nullable=True)   # e.g. "Software Registration", "CSV"
    status = db.Column(db.String(32), nullable=False, default=STATUS_NEW)
    user_type = db.Column(db.String(32), nullable=True)
    plan = db.Column(db.String(120), nullable=True)
    referral_code = db.Column(db.String(64), nullable=True)
    subscription_plan = db.Column(db.String(64), nullable=True)

    value = db.Column(db.Float, nullable=True)
    amount_paid = db.Column(db.Float, nullable=False, default=0)

    trial_start_date = db.Column(db.DateTime, nullable=True)
    trial_end_date = db.Column(db.DateTime, nullable=True, index=True)
    subscription_start_date = db.Column(db.DateTime, nullable=True)
    subscription_end_date = db.Column(db.DateTime, nullable=True)
    next_payment_date = db.Column(db.DateTime, nullable=True)

    is_trial_active = db.Column(db.Boolean, nullable=False, default=True)
    is_subscription_active = db.Column(db.Boolean, nullable=False, default=False)

    # En SQLite JSON se mapea internamente a TEXT, no hay problema
    tags = db.Column(db.JSON, nullable=True)
    notes = db.Column(db.Text, nullable=True)

    # cuenta vinculada (registro desde el software) o dueño del import
    user_id = db.Column(
        db.String(64),
        db.ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )

    created_at = db.Column(db.DateTime, nullable=False, default=utcnow)
    updated_at = db.Column(db.DateTime, nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        db.Index("ix_leads_trial_check", "trial_end_date", "subscription_plan", "status"),
    )

    def as_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "first_name": self.first_name,
            "last_name": self.last_name,
            "email": self.email,
            "phone": self.phone,
            "company": self.company,
            "state": self.state,
            "gender": self.gender,
            "exam_category": self.exam_category,
            "how_did_you_hear": self.how_did_you_hear,
            "source": self.source,
            "status": self.status,
            "user_type": self.user_type,
            "plan": self.plan,
            "referral_code": self.referral_code,
            "subscription_plan": self.subscription_plan,
            "value": self.value,
            "amount_paid": self.amount_paid,
            "trial_start_date": iso_z(self.trial_start_date),
            "trial_end_date": iso_z(self.trial_end_date),
            "subscription_start_date": iso_z(self.subscription_start_date),
            "subscription_end_date": iso_z(self.subscription_end_date),
            "next_payment_date": iso_z(self.next_payment_date),
            "is_trial_active": self.is_trial_active,
            "is_subscription_active": self.is_subscription_active,
            "tags": self.tags,
            "notes": self.notes,
            "user_id": self.user_id,
            "created_at": iso_z(self.created_at),
            "updated_at": iso_z(self.updated_at),
        }

    def __repr__(self) -> str:
        return f"<Lead id={self.id} email={self.email} status={self.status}>"
