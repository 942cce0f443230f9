"""
Staff back office (admin and preparer)
"""
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlalchemy import func
from sqlalchemy.orm import Session, joinedload

from app.api.deps import require_staff
from app.db.database import get_db
from app.db.models import (
    COMPLETED_CASE_STATUSES,
    Appointment,
    CaseStatus,
    ContactSubmission,
    Document,
    TaxCase,
    User,
    UserRole,
)
from app.db.schemas import (
    ActivityLogOut,
    AdminStats,
    AppointmentOut,
    AppointmentWithClient,
    ClientDetail,
    ClientSummary,
    ContactOut,
    DocumentOut,
    DocumentWithClient,
    TaxCaseCreate,
    TaxCaseOut,
    TaxCaseUpdate,
    TaxCaseWithClient,
    UserProfile,
)
from app.services import background_jobs
from app.services.activity_service import activity_service
from app.utils.exceptions import NotFoundError

router = APIRouter(dependencies=[Depends(require_staff)])


# ============================================================================
# Dashboard
# ============================================================================

@router.get("/stats", response_model=AdminStats)
def get_stats(db: Session = Depends(get_db)):
    total_clients = db.query(func.count(User.id)).filter(User.role == UserRole.client).scalar() or 0
    pending_cases = db.query(func.count(TaxCase.id)).filter(TaxCase.status == CaseStatus.pending).scalar() or 0
    completed_cases = (
        db.query(func.count(TaxCase.id))
        .filter(TaxCase.status.in_(COMPLETED_CASE_STATUSES))
        .scalar()
        or 0
    )
    total_refunds = (
        db.query(func.sum(TaxCase.final_amount))
        .filter(TaxCase.final_amount.isnot(None))
        .scalar()
    )
    return AdminStats(
        total_clients=total_clients,
        pending_cases=pending_cases,
        completed_cases=completed_cases,
        total_refunds=float(total_refunds or 0),
    )


@router.get("/activity", response_model=List[ActivityLogOut])
def get_activity(
    limit: int = Query(50, ge=1, le=200),
    user_id: Optional[int] = Query(None, alias="userId"),
    db: Session = Depends(get_db),
):
    return activity_service.recent(db, user_id=user_id, limit=limit)


# ============================================================================
# Clients
# ============================================================================

@router.get("/clients", response_model=List[ClientSummary])
def get_clients(db: Session = Depends(get_db)):
    clients = (
        db.query(User)
        .filter(User.role == UserRole.client)
        .order_by(User.created_at.desc(), User.id.desc())
        .all()
    )

    case_counts = dict(
        db.query(TaxCase.client_id, func.count(TaxCase.id)).group_by(TaxCase.client_id).all()
    )
    document_counts = dict(
        db.query(Document.client_id, func.count(Document.id)).group_by(Document.client_id).all()
    )

    summaries = []
    for client in clients:
        summary = ClientSummary.model_validate(client)
        summary.case_count = case_counts.get(client.id, 0)
        summary.document_count = document_counts.get(client.id, 0)
        summaries.append(summary)
    return summaries


@router.get("/clients/{client_id}", response_model=ClientDetail)
def get_client(client_id: int, db: Session = Depends(get_db)):
    client = db.query(User).filter(User.id == client_id, User.role == UserRole.client).first()
    if not client:
        raise NotFoundError("Client")

    documents = (
        db.query(Document)
        .filter(Document.client_id == client.id)
        .order_by(Document.created_at.desc(), Document.id.desc())
        .all()
    )
    cases = (
        db.query(TaxCase)
        .filter(TaxCase.client_id == client.id)
        .order_by(TaxCase.created_at.desc(), TaxCase.id.desc())
        .all()
    )
    appointments = (
        db.query(Appointment)
        .filter(Appointment.client_id == client.id)
        .order_by(Appointment.appointment_date.desc())
        .all()
    )
    return ClientDetail(
        client=UserProfile.model_validate(client),
        documents=[DocumentOut.model_validate(d) for d in documents],
        cases=[TaxCaseOut.model_validate(c) for c in cases],
        appointments=[AppointmentOut.model_validate(a) for a in appointments],
    )


@router.get("/documents", response_model=List[DocumentWithClient])
def get_all_documents(db: Session = Depends(get_db)):
    return (
        db.query(Document)
        .options(joinedload(Document.client))
        .order_by(Document.created_at.desc(), Document.id.desc())
        .all()
    )


# ============================================================================
# Tax cases
# ============================================================================

@router.get("/cases", response_model=List[TaxCaseWithClient])
def get_all_cases(
    case_status: Optional[CaseStatus] = Query(None, alias="status"),
    db: Session = Depends(get_db),
):
    query = db.query(TaxCase).options(joinedload(TaxCase.client))
    if case_status is not None:
        query = query.filter(TaxCase.status == case_status)
    return query.order_by(TaxCase.created_at.desc(), TaxCase.id.desc()).all()


@router.post("/cases", response_model=TaxCaseOut, status_code=status.HTTP_201_CREATED)
def create_case(
    body: TaxCaseCreate,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    if not body.client_id or not body.filing_year:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Client ID and filing year are required",
        )

    client = db.query(User).filter(User.id == body.client_id).first()
    if not client:
        raise NotFoundError("Client")

    tax_case = TaxCase(
        client_id=client.id,
        filing_year=body.filing_year,
        filing_status=body.filing_status,
        dependents=body.dependents,
        status=CaseStatus.pending,
    )
    db.add(tax_case)
    db.flush()
    activity_service.log(
        db,
        current_user.id,
        "case_created",
        f"Tax case {tax_case.id} created for client {client.id} ({body.filing_year})",
        commit=False,
    )
    db.commit()
    db.refresh(tax_case)
    return tax_case


@router.patch("/cases/{case_id}", response_model=TaxCaseOut)
def update_case(
    case_id: int,
    body: TaxCaseUpdate,
    background_tasks: BackgroundTasks,
    current_user: User = Depends(require_staff),
    db: Session = Depends(get_db),
):
    tax_case = db.query(TaxCase).filter(TaxCase.id == case_id).first()
    if not tax_case:
        raise NotFoundError("Case")

    changes = body.model_dump(exclude_unset=True)
    previous_status = tax_case.status

    if changes.get("status") is not None:
        tax_case.status = changes["status"]
    if "notes" in changes:
        tax_case.notes = changes["notes"]
    if "final_amount" in changes:
        tax_case.final_amount = changes["final_amount"]

    activity_service.log(
        db,
        current_user.id,
        "case_updated",
        f"Tax case {tax_case.id} updated: {', '.join(sorted(changes)) or 'no changes'}",
        commit=False,
    )
    db.commit()
    db.refresh(tax_case)

    if tax_case.status != previous_status:
        client = tax_case.client
        background_tasks.add_task(
            background_jobs.notify_case_status,
            client.name or client.email,
            client.email,
            tax_case.id,
            tax_case.filing_year,
            tax_case.status.value,
        )
    return tax_case


# ============================================================================
# Appointments & leads
# ============================================================================

@router.get("/appointments", response_model=List[AppointmentWithClient])
def get_all_appointments(db: Session = Depends(get_db)):
    return (
        db.query(Appointment)
        .options(joinedload(Appointment.client))
        .order_by(Appointment.appointment_date.desc())
        .all()
    )


@router.get("/contacts", response_model=List[ContactOut])
def get_contacts(db: Session = Depends(get_db)):
    return (
        db.query(ContactSubmission)
        .order_by(ContactSubmission.created_at.desc(), ContactSubmission.id.desc())
        .all()
    )
