from typing import Iterable

from fastapi import Depends, HTTPException, status
from sqlalchemy.orm import Session

from cisops.api.routes_auth import get_current_user_id
from cisops.core.audit import log_denied
from cisops.db.session import get_db
from cisops.models import models


def require_roles(allowed: Iterable[str]):
    allowed_set = set(r.lower() for r in allowed)

    def _dependency(user_id: int = Depends(get_current_user_id), db: Session = Depends(get_db)) -> models.User:
        user = db.get(models.User, user_id)
        if not user:
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user")
        if user.role.lower() not in allowed_set:
            log_denied("rbac.require_roles", user_id=user_id, reason=f"role={user.role}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return user

    return _dependency


admin_required = require_roles(["admin"])  # Convenience dependency
user_or_admin_required = require_roles(["user", "admin"])
