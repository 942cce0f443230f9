"""
Client-facing tax case endpoints
"""
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.database import get_db
from app.db.models import TaxCase, User
from app.db.schemas import TaxCaseOut
from app.utils.exceptions import AccessDeniedError, NotFoundError

router = APIRouter()


@router.get("", response_model=List[TaxCaseOut])
def get_cases(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """All tax cases of the signed-in client, newest first"""
    return (
        db.query(TaxCase)
        .filter(TaxCase.client_id == current_user.id)
        .order_by(TaxCase.created_at.desc(), TaxCase.id.desc())
        .all()
    )


@router.get("/{case_id}", response_model=TaxCaseOut)
def get_case(
    case_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    tax_case = db.query(TaxCase).filter(TaxCase.id == case_id).first()
    if not tax_case:
        raise NotFoundError("Case")
    if tax_case.client_id != current_user.id and not current_user.is_staff:
        raise AccessDeniedError()
    return tax_case
