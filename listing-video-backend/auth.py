# auth.py

import logging
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from config import USER_HEADER
from database import get_db
from models import User


def get_or_create_user(db: Session, email: str) -> User:
    email = email.strip().lower()
    user = db.query(User).filter(User.email == email).first()
    if user:
        return user

    user = User(email=email)
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # Another request created the same user first
        db.rollback()
        return db.query(User).filter(User.email == email).one()
    db.refresh(user)
    logging.info(f"👤 Provisioned user {email}")
    return user


def get_current_user(
    x_user_email: Optional[str] = Header(default=None, alias=USER_HEADER),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolves the caller from the X-User-Email header.
    Sign-in itself happens upstream; this service only scopes data by user.
    """
    if not x_user_email or "@" not in x_user_email:
        raise HTTPException(status_code=401, detail="Missing or invalid X-User-Email header.")
    return get_or_create_user(db, x_user_email)
