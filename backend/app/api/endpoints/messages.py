"""
Client <-> preparer messaging
"""
from typing import Dict, List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.api.deps import get_current_user
from app.db.database import get_db
from app.db.models import STAFF_ROLES, Message, TaxCase, User
from app.db.schemas import ConversationOut, MessageCreate, MessageOut, UnreadCountResponse, UserPublic
from app.services.activity_service import activity_service
from app.utils.exceptions import AccessDeniedError, NotFoundError

router = APIRouter()
preparers_router = APIRouter()


@preparers_router.get("", response_model=List[UserPublic])
def list_preparers(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Staff members a client can write to"""
    return (
        db.query(User)
        .filter(User.role.in_(STAFF_ROLES), User.is_active == True)  # noqa: E712
        .order_by(User.name.asc(), User.id.asc())
        .all()
    )


@router.get("/conversations", response_model=List[ConversationOut])
def get_conversations(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """One entry per counterpart, most recent conversation first."""
    messages = (
        db.query(Message)
        .filter(or_(Message.sender_id == current_user.id, Message.recipient_id == current_user.id))
        .order_by(Message.created_at.desc(), Message.id.desc())
        .all()
    )

    conversations: Dict[int, dict] = {}
    for msg in messages:
        other = msg.recipient if msg.sender_id == current_user.id else msg.sender
        entry = conversations.get(other.id)
        if entry is None:
            entry = {"user": other, "last_message": msg, "unread_count": 0}
            conversations[other.id] = entry
        if msg.recipient_id == current_user.id and not msg.is_read:
            entry["unread_count"] += 1

    return [ConversationOut.model_validate(entry) for entry in conversations.values()]


@router.get("/unread-count", response_model=UnreadCountResponse)
def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    count = (
        db.query(Message)
        .filter(Message.recipient_id == current_user.id, Message.is_read == False)  # noqa: E712
        .count()
    )
    return UnreadCountResponse(count=count)


@router.get("/{user_id}", response_model=List[MessageOut])
def get_thread(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Full thread with one user, oldest first. Incoming messages are marked read."""
    thread = (
        db.query(Message)
        .filter(
            or_(
                (Message.sender_id == current_user.id) & (Message.recipient_id == user_id),
                (Message.sender_id == user_id) & (Message.recipient_id == current_user.id),
            )
        )
        .order_by(Message.created_at.asc(), Message.id.asc())
        .all()
    )

    unread = [m for m in thread if m.recipient_id == current_user.id and not m.is_read]
    if unread:
        for msg in unread:
            msg.is_read = True
        db.commit()

    return thread


@router.post("", response_model=MessageOut, status_code=status.HTTP_201_CREATED)
def send_message(
    body: MessageCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    text = body.message.strip()
    if not text:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Message cannot be empty")

    if body.recipient_id == current_user.id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot message yourself")

    recipient = db.query(User).filter(User.id == body.recipient_id).first()
    if not recipient:
        raise NotFoundError("Recipient")

    # clients only talk to staff
    if not current_user.is_staff and not recipient.is_staff:
        raise AccessDeniedError()

    if body.case_id is not None:
        tax_case = db.query(TaxCase).filter(TaxCase.id == body.case_id).first()
        if not tax_case:
            raise NotFoundError("Case")
        client_id = recipient.id if current_user.is_staff else current_user.id
        if tax_case.client_id != client_id:
            raise AccessDeniedError()

    msg = Message(
        sender_id=current_user.id,
        recipient_id=recipient.id,
        case_id=body.case_id,
        message=text,
    )
    db.add(msg)
    activity_service.log(db, current_user.id, "message_sent", f"Message sent to user {recipient.id}", commit=False)
    db.commit()
    db.refresh(msg)
    return msg
