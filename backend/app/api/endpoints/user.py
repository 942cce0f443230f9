from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_current_user, get_db
from app.db.models import User
from app.db.schemas import ProfileUpdate, UserProfile

router = APIRouter()

_STRIPPED_FIELDS = ("name", "phone", "address", "city", "state", "zip_code")


@router.get("/profile", response_model=UserProfile)
def get_profile(current_user: User = Depends(get_current_user)):
    return current_user


@router.patch("/profile", response_model=UserProfile)
def update_profile(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    body = payload.model_dump(exclude_unset=True)

    for field in _STRIPPED_FIELDS:
        if field in body:
            body[field] = (body[field] or "").strip() or None

    for key, value in body.items():
        setattr(current_user, key, value)

    db.commit()
    db.refresh(current_user)
    return current_user
