from typing import List, Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query

from itad.core.authorization import Principal, Role, require_role
from itad.core.errors import NotFoundError
from itad.models.job import Job
from itad.schemas.booking import StatusUpdate
from itad.schemas.job import EvidenceCreate, JobResponse
from itad.services import job_lifecycle

router = APIRouter(prefix="/jobs", tags=["Jobs"])


def _check_company(x_company_id: int, principal: Principal) -> None:
    if int(x_company_id) != principal.company_id:
        raise HTTPException(status_code=403, detail="Company mismatch")


def _own_job(principal: Principal, job_id: str) -> Job:
    job = job_lifecycle.get_job(principal.company_id, job_id)
    if principal.role is Role.DRIVER and job.driver_id != principal.org_id:
        raise NotFoundError("Job", job_id)
    return job


@router.get("", response_model=List[JobResponse])
def list_jobs(
    status: Optional[str] = None,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.DRIVER)),
):
    _check_company(x_company_id, principal)

    driver_id = principal.org_id if principal.role is Role.DRIVER else None
    return job_lifecycle.list_jobs(
        principal.company_id,
        driver_id=driver_id,
        status=status,
        limit=limit,
        offset=offset,
    )


@router.get("/{job_id}", response_model=JobResponse)
def get_job(
    job_id: str,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.DRIVER)),
):
    _check_company(x_company_id, principal)
    return _own_job(principal, job_id)


@router.post("/{job_id}/status", response_model=JobResponse)
def update_job_status(
    job_id: str,
    payload: StatusUpdate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.DRIVER)),
):
    _check_company(x_company_id, principal)

    _own_job(principal, job_id)
    return job_lifecycle.update_job_status(
        principal.company_id, job_id, payload.status, actor_id=principal.user_id
    )


@router.post("/{job_id}/evidence", response_model=JobResponse)
def record_evidence(
    job_id: str,
    payload: EvidenceCreate,
    x_company_id: int = Header(..., alias="X-Company-Id"),
    principal: Principal = Depends(require_role(Role.ADMIN, Role.DRIVER)),
):
    _check_company(x_company_id, principal)

    _own_job(principal, job_id)
    return job_lifecycle.record_evidence(
        principal.company_id,
        job_id,
        photos=payload.photos,
        signature=payload.signature,
        seal_numbers=payload.seal_numbers,
        notes=payload.notes,
    )
