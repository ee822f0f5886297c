# crmsync/services/accounts.py
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from crmsync.database import db
from crmsync.exceptions import NotFoundError, StoreError, ValidationError
from crmsync.models import User
from crmsync.utils import normalize_email

logger = logging.getLogger(__name__)


def get_user_by_email(email: str) -> Optional[User]:
    email = normalize_email(email)
    if not email:
        return None
    return db.session.execute(
        select(User).where(func.lower(User.email) == email)
    ).scalars().first()


def resolve_user_id(email: str) -> str:
    """
    Email -> id de la cuenta. Falla cerrado: sin cuenta no hay escritura.
    """
    if not normalize_email(email):
        raise ValidationError("email is required")

    user = get_user_by_email(email)
    if not user:
        logger.warning("User not found for email=%s", email)
        raise NotFoundError(f"User not found: {email}")
    return user.id


def create_user(
    email: str,
    full_name: Optional[str] = None,
    registration_source: Optional[str] = None,
    user_id: Optional[str] = None,
) -> User:
    email = normalize_email(email)
    if not email:
        raise ValidationError("Email is required")
    if get_user_by_email(email):
        raise ValidationError("A user with this email address has already been registered")

    user = User(
        email=email,
        full_name=(full_name or "").strip() or None,
        registration_source=registration_source,
    )
    if user_id:
        user.id = user_id
    try:
        db.session.add(user)
        db.session.commit()
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error("create_user failed for email=%s: %s", email, e, exc_info=True)
        raise StoreError(str(e), public_message="Failed to create user") from e

    logger.info("Created user id=%s email=%s", user.id, email)
    return user


def get_or_create_user(
    email: str,
    full_name: Optional[str] = None,
    registration_source: Optional[str] = None,
) -> User:
    user = get_user_by_email(email)
    if user:
        return user
    return create_user(email, full_name=full_name, registration_source=registration_source)
