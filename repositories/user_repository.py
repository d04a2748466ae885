from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session
from email_validator import validate_email, EmailNotValidError

import models
from utils.exceptions import ValidationError


def normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


def is_valid_email(email: str) -> bool:
    try:
        validate_email(email, check_deliverability=False)
    except EmailNotValidError:
        return False
    return True


def get_user(db: Session, user_id: Optional[int]):
    if user_id is None:
        return None
    return db.get(models.User, user_id)


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == normalize_email(email)).first()


def create_user(db: Session, email: str, name: Optional[str] = None):
    """Create an account; the display name defaults to the email's local part."""
    email = normalize_email(email)
    db_user = models.User(email=email, name=name or email.split("@")[0])
    db.add(db_user)
    db.commit()
    db.refresh(db_user)
    return db_user


def update_profile(db: Session, user: models.User, name: Optional[str] = None,
                   email: Optional[str] = None, bio: Optional[str] = None):
    errors = {}
    if name is not None:
        name = name.strip()
        if not name:
            errors.setdefault("name", []).append("can't be blank")
    if email is not None:
        email = normalize_email(email)
        if not email:
            errors.setdefault("email", []).append("can't be blank")
        elif not is_valid_email(email):
            errors.setdefault("email", []).append("is invalid")
        else:
            taken = get_user_by_email(db, email)
            if taken and taken.id != user.id:
                errors.setdefault("email", []).append("has already been taken")
    if errors:
        raise ValidationError(errors, message="Failed to update profile")

    if name is not None:
        user.name = name
    if email is not None:
        user.email = email
    if bio is not None:
        user.bio = bio
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise ValidationError({"email": ["has already been taken"]}, message="Failed to update profile")
    db.refresh(user)
    return user
