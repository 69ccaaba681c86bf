from __future__ import annotations

import logging
from typing import Annotated

from fastapi import Depends
from sqlalchemy import or_
from sqlalchemy.orm import Session

from cisops import metrics
from cisops.core.exceptions import DuplicateSubcontractorError, SubcontractorNotFoundError
from cisops.db.session import get_db
from cisops.models import models, schemas

logger = logging.getLogger(__name__)

# Fields that must be unique across subcontractors
_UNIQUE_FIELDS = ("name", "company", "utr_number", "cis_number")


class SubcontractorService:
    def __init__(self, db: Session):
        self.db = db

    def list_subcontractors(self) -> list[models.Subcontractor]:
        return self.db.query(models.Subcontractor).order_by(models.Subcontractor.name).all()

    def get_subcontractor(self, subcontractor_id: int) -> models.Subcontractor:
        subcontractor = self.db.get(models.Subcontractor, subcontractor_id)
        if not subcontractor:
            raise SubcontractorNotFoundError(subcontractor_id)
        return subcontractor

    def create_subcontractor(
        self,
        payload: schemas.SubcontractorCreate,
        user_id: int | None = None,
    ) -> models.Subcontractor:
        self._ensure_unique(payload)
        subcontractor = models.Subcontractor(user_id=user_id, **payload.model_dump())
        self.db.add(subcontractor)
        self.db.commit()
        self.db.refresh(subcontractor)
        metrics.subcontractor_created()
        logger.info("Subcontractor created id=%s name=%s", subcontractor.id, subcontractor.name)
        return subcontractor

    def update_subcontractor(
        self,
        subcontractor_id: int,
        payload: schemas.SubcontractorUpdate,
    ) -> models.Subcontractor:
        subcontractor = self.get_subcontractor(subcontractor_id)
        self._ensure_unique(payload, exclude_id=subcontractor_id)
        for key, value in payload.model_dump().items():
            setattr(subcontractor, key, value)
        self.db.commit()
        self.db.refresh(subcontractor)
        # Stored invoice amounts are not recalculated; they reflect the status when written.
        logger.info("Subcontractor updated id=%s", subcontractor.id)
        return subcontractor

    def delete_subcontractor(self, subcontractor_id: int) -> None:
        subcontractor = self.get_subcontractor(subcontractor_id)
        self.db.delete(subcontractor)
        self.db.commit()
        logger.info("Subcontractor deleted id=%s", subcontractor_id)

    def _ensure_unique(self, payload: schemas.SubcontractorCreate, exclude_id: int | None = None) -> None:
        values = {field: getattr(payload, field) for field in _UNIQUE_FIELDS}
        query = self.db.query(models.Subcontractor).filter(
            or_(*(getattr(models.Subcontractor, field) == value for field, value in values.items()))
        )
        if exclude_id is not None:
            query = query.filter(models.Subcontractor.id != exclude_id)
        conflicts: list[str] = []
        for existing in query.all():
            for field, value in values.items():
                if getattr(existing, field) == value and field not in conflicts:
                    conflicts.append(field)
        if conflicts:
            logger.warning("Duplicate subcontractor rejected: %s", ", ".join(conflicts))
            raise DuplicateSubcontractorError(conflicts)


def get_subcontractor_service(db: Annotated[Session, Depends(get_db)]) -> SubcontractorService:
    return SubcontractorService(db)
