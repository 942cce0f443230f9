from fastapi import APIRouter, BackgroundTasks, Depends
from sqlalchemy.orm import Session

from app.db.database import get_db
from app.db.models import ContactSubmission
from app.db.schemas import ContactCreate, ContactOut, ContactResponse
from app.services import background_jobs

router = APIRouter()


@router.post("", response_model=ContactResponse)
def submit_contact(
    body: ContactCreate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    """Public contact form. The office is notified by email after the response."""
    submission = ContactSubmission(
        name=body.name.strip(),
        email=str(body.email).lower(),
        phone=(body.phone or "").strip() or None,
        service=(body.service or "").strip() or None,
        message=body.message.strip(),
    )
    db.add(submission)
    db.commit()
    db.refresh(submission)

    background_tasks.add_task(
        background_jobs.notify_contact_submission,
        submission.name,
        submission.email,
        submission.message,
        phone=submission.phone,
        service=submission.service,
    )
    return ContactResponse(contact=ContactOut.model_validate(submission))
