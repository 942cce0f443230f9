"""
Client appointment endpoints
"""
from datetime import timezone
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.database import get_db
from app.db.models import Appointment, AppointmentStatus, User
from app.db.schemas import AppointmentCreate, AppointmentOut
from app.services import background_jobs
from app.services.activity_service import activity_service

router = APIRouter()


@router.get("", response_model=List[AppointmentOut])
def get_appointments(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return (
        db.query(Appointment)
        .filter(Appointment.client_id == current_user.id)
        .order_by(Appointment.appointment_date.desc())
        .all()
    )


@router.post("", response_model=AppointmentOut)
def create_appointment(
    body: AppointmentCreate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if body.appointment_date is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Appointment date is required")

    # stored naive UTC like every other timestamp
    when = body.appointment_date
    if when.tzinfo is not None:
        when = when.astimezone(timezone.utc).replace(tzinfo=None)

    appointment = Appointment(
        client_id=current_user.id,
        appointment_date=when,
        notes=(body.notes or "").strip() or None,
        status=AppointmentStatus.scheduled,
    )
    db.add(appointment)
    activity_service.log(
        db,
        current_user.id,
        "appointment_scheduled",
        f"Appointment scheduled for {when.isoformat()}",
        commit=False,
    )
    db.commit()
    db.refresh(appointment)

    background_tasks.add_task(
        background_jobs.notify_appointment,
        current_user.name or current_user.email,
        current_user.email,
        appointment.appointment_date,
        appointment.notes,
    )
    return appointment
