"""Common dependencies for authentication and role checks."""
import datetime as dt
from typing import Annotated, TypeAlias

from fastapi import Depends

from cisops.core.rbac import admin_required, user_or_admin_required
from cisops.models import models

CurrentUserDep: TypeAlias = Annotated[models.User, Depends(user_or_admin_required)]
AdminUserDep: TypeAlias = Annotated[models.User, Depends(admin_required)]


def get_now() -> dt.datetime:
    """Wall-clock instant for the request; overridden in tests."""
    return dt.datetime.now(dt.timezone.utc)


NowDep: TypeAlias = Annotated[dt.datetime, Depends(get_now)]
