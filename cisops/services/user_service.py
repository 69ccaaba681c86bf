from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from cisops.core.exceptions import UserAlreadyExistsError, UserNotFoundError
from cisops.db.session import get_db
from cisops.models import models, schemas

logger = logging.getLogger(__name__)


class UserService:
    """Admin management of user accounts."""

    def __init__(self, db: Session):
        self.db = db

    def list_users(self) -> list[models.User]:
        return self.db.query(models.User).order_by(models.User.username).all()

    def get_user(self, user_id: int) -> models.User:
        user = self.db.get(models.User, user_id)
        if not user:
            raise UserNotFoundError(user_id)
        return user

    def update_user(self, user_id: int, payload: schemas.UserUpdate) -> models.User:
        user = self.get_user(user_id)
        if payload.email is not None:
            email = payload.email.lower().strip()
            clash = (
                self.db.query(models.User)
                .filter(models.User.email == email, models.User.id != user_id)
                .first()
            )
            if clash:
                raise UserAlreadyExistsError()
            user.email = email
        if payload.role is not None:
            user.role = payload.role
        self.db.commit()
        self.db.refresh(user)
        logger.info("Updated user %s (role=%s)", user.id, user.role)
        return user

    def delete_user(self, user_id: int) -> None:
        user = self.get_user(user_id)
        self.db.delete(user)
        self.db.commit()
        logger.info("Deleted user %s", user_id)


def get_user_service(db: Annotated[Session, Depends(get_db)]) -> UserService:
    return UserService(db)
