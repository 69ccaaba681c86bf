from typing import Annotated, TypeAlias

from fastapi import APIRouter, Depends, Response

from cisops.api.dependencies import AdminUserDep
from cisops.core.audit import log_audit_event
from cisops.models import schemas
from cisops.services.user_service import UserService, get_user_service

router = APIRouter()

UserServiceDep: TypeAlias = Annotated[UserService, Depends(get_user_service)]


@router.get("/", response_model=list[schemas.UserOut])
def list_users(admin: AdminUserDep, svc: UserServiceDep):
    return svc.list_users()


@router.patch("/{user_id}", response_model=schemas.UserOut)
def update_user(user_id: int, payload: schemas.UserUpdate, admin: AdminUserDep, svc: UserServiceDep):
    user = svc.update_user(user_id, payload)
    log_audit_event("user.update", user_id=admin.id, target_user_id=user_id, role=user.role)
    return user


@router.delete("/{user_id}", status_code=204)
def delete_user(user_id: int, admin: AdminUserDep, svc: UserServiceDep):
    svc.delete_user(user_id)
    log_audit_event("user.delete", user_id=admin.id, target_user_id=user_id)
    return Response(status_code=204)
