from typing import Annotated, TypeAlias

from fastapi import APIRouter, Depends, Response

from cisops.api.dependencies import AdminUserDep, CurrentUserDep, NowDep
from cisops.core.audit import log_audit_event
from cisops.models import schemas
from cisops.services.submission_service import SubmissionService, get_submission_service

router = APIRouter()

SubmissionServiceDep: TypeAlias = Annotated[SubmissionService, Depends(get_submission_service)]


@router.get("/", response_model=list[schemas.SubmissionOut])
def list_submissions(current_user: CurrentUserDep, svc: SubmissionServiceDep):
    return svc.list_submissions()


@router.post("/", response_model=schemas.SubmissionDetailOut, status_code=201)
def submit_return(
    payload: schemas.SubmissionCreate,
    admin: AdminUserDep,
    svc: SubmissionServiceDep,
    now: NowDep,
):
    submission = svc.submit_return(payload, now, user_id=admin.id)
    log_audit_event(
        "submission.create",
        user_id=admin.id,
        submission_id=submission.id,
        period=f"{submission.year:04d}-{submission.month:02d}",
    )
    return submission


@router.get("/{submission_id}", response_model=schemas.SubmissionDetailOut)
def read_submission(submission_id: int, current_user: CurrentUserDep, svc: SubmissionServiceDep):
    return svc.get_submission(submission_id)


@router.delete("/{submission_id}", status_code=204)
def delete_submission(submission_id: int, admin: AdminUserDep, svc: SubmissionServiceDep):
    svc.delete_submission(submission_id)
    log_audit_event("submission.delete", user_id=admin.id, submission_id=submission_id)
    return Response(status_code=204)
