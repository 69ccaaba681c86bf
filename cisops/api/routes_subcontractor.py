from typing import Annotated, TypeAlias

from fastapi import APIRouter, Depends, Response

from cisops.api.dependencies import AdminUserDep, CurrentUserDep
from cisops.core.audit import log_audit_event
from cisops.models import schemas
from cisops.services.subcontractor_service import SubcontractorService, get_subcontractor_service

router = APIRouter()

SubcontractorServiceDep: TypeAlias = Annotated[SubcontractorService, Depends(get_subcontractor_service)]


@router.get("/", response_model=list[schemas.SubcontractorOut])
def list_subcontractors(current_user: CurrentUserDep, svc: SubcontractorServiceDep):
    return svc.list_subcontractors()


@router.post("/", response_model=schemas.SubcontractorOut, status_code=201)
def create_subcontractor(payload: schemas.SubcontractorCreate, admin: AdminUserDep, svc: SubcontractorServiceDep):
    subcontractor = svc.create_subcontractor(payload, user_id=admin.id)
    log_audit_event("subcontractor.create", user_id=admin.id, subcontractor_id=subcontractor.id)
    return subcontractor


@router.get("/{subcontractor_id}", response_model=schemas.SubcontractorDetailOut)
def read_subcontractor(subcontractor_id: int, admin: AdminUserDep, svc: SubcontractorServiceDep):
    return svc.get_subcontractor(subcontractor_id)


@router.put("/{subcontractor_id}", response_model=schemas.SubcontractorOut)
def update_subcontractor(
    subcontractor_id: int,
    payload: schemas.SubcontractorUpdate,
    admin: AdminUserDep,
    svc: SubcontractorServiceDep,
):
    subcontractor = svc.update_subcontractor(subcontractor_id, payload)
    log_audit_event("subcontractor.update", user_id=admin.id, subcontractor_id=subcontractor_id)
    return subcontractor


@router.delete("/{subcontractor_id}", status_code=204)
def delete_subcontractor(subcontractor_id: int, admin: AdminUserDep, svc: SubcontractorServiceDep):
    svc.delete_subcontractor(subcontractor_id)
    log_audit_event("subcontractor.delete", user_id=admin.id, subcontractor_id=subcontractor_id)
    return Response(status_code=204)
