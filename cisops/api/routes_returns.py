from typing import Annotated, TypeAlias

from fastapi import APIRouter, Depends, Path, Query

from cisops.api.dependencies import CurrentUserDep, NowDep
from cisops.models import schemas
from cisops.services.cis.periods import MAX_YEAR, MIN_YEAR
from cisops.services.returns_service import ReturnsService, get_returns_service

router = APIRouter()

ReturnsServiceDep: TypeAlias = Annotated[ReturnsService, Depends(get_returns_service)]


@router.get("/tax-year", response_model=schemas.TaxYearOut)
def get_tax_year(current_user: CurrentUserDep, svc: ReturnsServiceDep, now: NowDep):
    """Current UK tax year (6 April - 5 April)."""
    return svc.tax_year(now)


@router.get("/monthly", response_model=schemas.MonthlyReturnOut)
def get_monthly_return(
    current_user: CurrentUserDep,
    svc: ReturnsServiceDep,
    now: NowDep,
    year: Annotated[int | None, Query(ge=MIN_YEAR, le=MAX_YEAR)] = None,
    month: Annotated[int | None, Query(ge=1, le=12)] = None,
):
    """Monthly return period with deadlines, invoices and totals."""
    return svc.monthly_return(now, year=year, month=month)


@router.get("/yearly/{year}", response_model=schemas.YearlyReturnOut)
def get_yearly_return(
    year: Annotated[int, Path(ge=MIN_YEAR, le=MAX_YEAR)],
    current_user: CurrentUserDep,
    svc: ReturnsServiceDep,
):
    return svc.yearly_return(year)
