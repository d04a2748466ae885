"""
Passwordless sign-in with one-time passcodes.

Flow:
    request_code(email)  -> account found or created, fresh 6-digit code issued,
                            delivery dispatched, account parked in the pending slot
    validate(code)       -> code cleared, pending slot promoted to the signed-in slot
    resend_code()        -> new code for the pending account; the old one is dead
    sign_out()           -> signed-in slot cleared

Codes expire OTP_TTL_MINUTES after issuance (absolute). Expiry is checked
before the code itself, so an expired wrong code reports ExpiredCode.

The otp_code / otp_sent_at columns are written nowhere else.
"""

from __future__ import annotations

import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

import models
from config import settings
from repositories import user_repository
from services.session_context import SessionContext
from utils.exceptions import (
    EmptyEmail,
    ExpiredCode,
    InvalidCode,
    InvalidEmailFormat,
    SessionExpired,
)
from utils.logger import get_logger

logger = get_logger(__name__)

Dispatch = Callable[[str, str], None]


def otp_ttl() -> timedelta:
    return timedelta(minutes=settings.otp_ttl_minutes)


def generate_code(previous: Optional[str] = None) -> str:
    """Uniformly random 6-digit code, never equal to the code it replaces."""
    while True:
        code = str(100000 + secrets.randbelow(900000))
        if code != previous:
            return code


def is_expired(user: models.User, now: Optional[datetime] = None) -> bool:
    if user.otp_sent_at is None:
        return False
    now = now or datetime.utcnow()
    return now >= user.otp_sent_at + otp_ttl()


def _issue_code(db: Session, user: models.User, dispatch: Dispatch,
                now: Optional[datetime]) -> models.User:
    user.otp_code = generate_code(previous=user.otp_code)
    user.otp_sent_at = now or datetime.utcnow()
    db.commit()
    db.refresh(user)
    logger.info(f"Issued verification code for user {user.id}")
    dispatch(user.email, user.otp_code)
    return user


def _find_or_create_account(db: Session, email: str) -> models.User:
    user = user_repository.get_user_by_email(db, email)
    if user:
        return user
    try:
        user = user_repository.create_user(db, email=email)
    except IntegrityError:
        # Another request created the same account first
        db.rollback()
        return user_repository.get_user_by_email(db, email)
    logger.info(f"Created account {user.id} for new sign-in")
    return user


def request_code(db: Session, ctx: SessionContext, email: Optional[str],
                 dispatch: Dispatch, now: Optional[datetime] = None) -> models.User:
    """Start a sign-in for `email`. Raises EmptyEmail or InvalidEmailFormat."""
    email = user_repository.normalize_email(email)
    if not email:
        raise EmptyEmail()
    if not user_repository.is_valid_email(email):
        raise InvalidEmailFormat()

    user = _find_or_create_account(db, email)
    _issue_code(db, user, dispatch, now)
    ctx.pending_account_id = user.id
    return user


def pending_account(db: Session, ctx: SessionContext) -> Optional[models.User]:
    return user_repository.get_user(db, ctx.pending_account_id)


def current_account(db: Session, ctx: SessionContext) -> Optional[models.User]:
    return user_repository.get_user(db, ctx.authenticated_account_id)


def resend_code(db: Session, ctx: SessionContext, dispatch: Dispatch,
                now: Optional[datetime] = None) -> models.User:
    user = pending_account(db, ctx)
    if not user:
        raise SessionExpired()
    return _issue_code(db, user, dispatch, now)


def validate(db: Session, ctx: SessionContext, code, now: Optional[datetime] = None) -> models.User:
    """
    Verify `code` for the pending account and sign it in.

    Raises SessionExpired, ExpiredCode or InvalidCode. On any failure the
    pending slot is kept so the caller can retry or ask for a new code.
    """
    user = pending_account(db, ctx)
    if not user:
        raise SessionExpired()

    if not user.otp_code or user.otp_sent_at is None:
        logger.info(f"Rejected verification for user {user.id}: no outstanding code")
        raise InvalidCode()
    if is_expired(user, now):
        logger.info(f"Rejected verification for user {user.id}: code expired")
        raise ExpiredCode()
    # Clients may post the code as a JSON number; compare its exact digits
    supplied = "" if code is None else str(code)
    if supplied != user.otp_code:
        logger.info(f"Rejected verification for user {user.id}: wrong code")
        raise InvalidCode()

    user.otp_code = None
    user.otp_sent_at = None
    db.commit()
    db.refresh(user)

    ctx.authenticated_account_id = user.id
    ctx.pending_account_id = None
    logger.info(f"User {user.id} signed in")
    return user


def sign_out(ctx: SessionContext) -> None:
    ctx.authenticated_account_id = None
