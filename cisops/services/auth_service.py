from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from cisops.core.config import BaseAppSettings, settings
from cisops.core.exceptions import InvalidCredentialsError, UserAlreadyExistsError, UserNotFoundError
from cisops.core.security import create_access_token, hash_password, validate_password_strength, verify_password
from cisops.db.session import get_db
from cisops.models import models, schemas

logger = logging.getLogger(__name__)


@dataclass
class TokenBundle:
    access_token: str
    access_expires_at: datetime
    user_id: int


class AuthService:
    def __init__(self, db: Session):
        self.db = db

    def register(self, payload: schemas.UserRegister, role: str = models.UserRole.USER.value) -> models.User:
        """Create a user after checking password strength and uniqueness."""
        validate_password_strength(payload.password)
        username = payload.username.strip()
        email = payload.email.lower().strip()
        existing = (
            self.db.query(models.User)
            .filter(or_(models.User.username == username, models.User.email == email))
            .first()
        )
        if existing:
            raise UserAlreadyExistsError()

        user = models.User(
            username=username,
            email=email,
            password_hash=hash_password(payload.password),
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info("Registered user %s (id=%s, role=%s)", user.username, user.id, user.role)
        return user

    def login(self, payload: schemas.LoginRequest) -> TokenBundle:
        user = (
            self.db.query(models.User)
            .filter(models.User.username == payload.username.strip())
            .one_or_none()
        )
        if not user or not verify_password(payload.password, user.password_hash):
            logger.warning("Failed login for username=%s", payload.username)
            raise InvalidCredentialsError()
        return self._issue_token(user)

    def get_user(self, user_id: int) -> models.User:
        user = self.db.get(models.User, user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user

    def _issue_token(self, user: models.User) -> TokenBundle:
        expires_at = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
        token = create_access_token(str(user.id), role=user.role)
        return TokenBundle(access_token=token, access_expires_at=expires_at, user_id=user.id)


def ensure_default_admin(db: Session, app_settings: BaseAppSettings = settings) -> models.User | None:
    """Create the configured admin account unless an admin already exists."""
    if not app_settings.CREATE_DEFAULT_ADMIN:
        return None
    admin = (
        db.query(models.User)
        .filter(
            or_(
                models.User.username == app_settings.ADMIN_USERNAME,
                models.User.role == models.UserRole.ADMIN.value,
            )
        )
        .first()
    )
    if admin:
        logger.info("Default admin already exists.")
        return admin
    if not app_settings.ADMIN_PASSWORD:
        logger.warning("CREATE_DEFAULT_ADMIN is set but ADMIN_PASSWORD is empty; skipping")
        return None
    admin = models.User(
        username=app_settings.ADMIN_USERNAME,
        email=app_settings.ADMIN_EMAIL.lower(),
        password_hash=hash_password(app_settings.ADMIN_PASSWORD),
        role=models.UserRole.ADMIN.value,
    )
    db.add(admin)
    db.commit()
    db.refresh(admin)
    logger.info("Default admin created.")
    return admin


def get_auth_service(db: Annotated[Session, Depends(get_db)]) -> AuthService:
    return AuthService(db)
