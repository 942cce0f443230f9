"""
SQLAlchemy ORM Models (source of truth for the portal schema)
"""

from __future__ import annotations

import enum
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    Date,
    Enum as SQLEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    TIMESTAMP,
    UniqueConstraint,
)
from sqlalchemy.orm import relationship

from app.db.database import Base

# ============================================================================
# Enums
# ============================================================================

class UserRole(str, enum.Enum):
    """User roles. admin and preparer share portal access rights."""
    admin = "admin"
    preparer = "preparer"
    client = "client"

class CaseStatus(str, enum.Enum):
    """Tax case lifecycle"""
    pending = "pending"
    in_process = "in_process"
    sent_to_irs = "sent_to_irs"
    approved = "approved"
    refund_issued = "refund_issued"

class AppointmentStatus(str, enum.Enum):
    scheduled = "scheduled"
    completed = "completed"
    cancelled = "cancelled"

class FilingStatus(str, enum.Enum):
    """IRS filing status"""
    single = "single"
    married_filing_jointly = "married_filing_jointly"
    married_filing_separately = "married_filing_separately"
    head_of_household = "head_of_household"
    qualifying_widow = "qualifying_widow"

class DocumentCategory(str, enum.Enum):
    """Document categories"""
    id_document = "id_document"
    w2 = "w2"
    form_1099 = "form_1099"
    bank_statement = "bank_statement"
    receipt = "receipt"
    previous_return = "previous_return"
    social_security = "social_security"
    proof_of_address = "proof_of_address"
    other = "other"


STAFF_ROLES = (UserRole.admin, UserRole.preparer)
COMPLETED_CASE_STATUSES = (CaseStatus.approved, CaseStatus.refund_issued)


# ============================================================================
# Sessions
# ============================================================================

class SessionRecord(Base):
    """Server-side session store"""
    __tablename__ = "sessions"
    __table_args__ = (Index("IDX_session_expire", "expire"),)

    sid = Column(String(255), primary_key=True)
    sess = Column(JSON, nullable=False)
    expire = Column(TIMESTAMP, nullable=False)


# ============================================================================
# Users & identity
# ============================================================================

class User(Base):
    """Portal account (client, preparer or admin)"""
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)

    # Authentication
    email = Column(String(255), unique=True, nullable=False, index=True)
    password = Column(Text, nullable=False)
    role = Column(SQLEnum(UserRole), nullable=False, default=UserRole.client)

    # Profile
    name = Column(String(255), nullable=True)
    phone = Column(String(50), nullable=True)
    address = Column(Text, nullable=True)
    city = Column(String(100), nullable=True)
    state = Column(String(50), nullable=True)
    zip_code = Column(String(20), nullable=True)
    ssn = Column(String(20), nullable=True)
    date_of_birth = Column(Date, nullable=True)
    profile_image_url = Column(Text, nullable=True)

    # Timestamps
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
    is_active = Column(Boolean, nullable=False, default=True)
    last_login_at = Column(TIMESTAMP, nullable=True)

    # Relationships
    tax_cases = relationship("TaxCase", back_populates="client", cascade="all, delete-orphan")
    documents = relationship(
        "Document",
        back_populates="client",
        foreign_keys="Document.client_id",
        cascade="all, delete-orphan",
    )
    appointments = relationship("Appointment", back_populates="client", cascade="all, delete-orphan")
    sent_messages = relationship(
        "Message",
        back_populates="sender",
        foreign_keys="Message.sender_id",
        cascade="all, delete-orphan",
    )
    received_messages = relationship(
        "Message",
        back_populates="recipient",
        foreign_keys="Message.recipient_id",
        cascade="all, delete-orphan",
    )
    password_reset_tokens = relationship("PasswordResetToken", back_populates="user", cascade="all, delete-orphan")
    auth_identities = relationship("AuthIdentity", back_populates="user", cascade="all, delete-orphan")

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES


class PasswordResetToken(Base):
    __tablename__ = "password_reset_tokens"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    token_hash = Column(String(64), nullable=False, index=True)
    expires_at = Column(TIMESTAMP, nullable=False)
    used_at = Column(TIMESTAMP, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="password_reset_tokens")


class AuthIdentity(Base):
    """Federated login linked to a local user"""
    __tablename__ = "auth_identities"
    __table_args__ = (
        UniqueConstraint("provider", "provider_user_id", name="uq_auth_identities_provider_user"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    # Free-form: Supabase may report providers outside AuthProvider ("oauth" fallback)
    provider = Column(String(50), nullable=False)
    provider_user_id = Column(String(255), nullable=False)
    email = Column(String(255), nullable=True)
    first_name = Column(String(255), nullable=True)
    last_name = Column(String(255), nullable=True)
    avatar_url = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="auth_identities")


# ============================================================================
# Tax work
# ============================================================================

class TaxCase(Base):
    """A tax-filing engagement for one client"""
    __tablename__ = "tax_cases"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    filing_year = Column(Integer, nullable=False)
    filing_status = Column(SQLEnum(FilingStatus), nullable=True)
    dependents = Column(Integer, nullable=False, default=0)
    status = Column(SQLEnum(CaseStatus), nullable=False, default=CaseStatus.pending)
    final_amount = Column(Numeric(10, 2), nullable=True)
    notes = Column(Text, nullable=True)

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
    updated_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    client = relationship("User", back_populates="tax_cases")
    documents = relationship("Document", back_populates="tax_case", cascade="all, delete-orphan")
    messages = relationship("Message", back_populates="tax_case", cascade="all, delete-orphan")


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(Integer, ForeignKey("tax_cases.id", ondelete="CASCADE"), nullable=True, index=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    file_name = Column(Text, nullable=False)
    # Local path, or "r2:<key>" when stored in Cloudflare R2
    file_path = Column(Text, nullable=False)
    file_type = Column(String(255), nullable=True)
    file_size = Column(Integer, nullable=True)
    category = Column(SQLEnum(DocumentCategory), nullable=False, default=DocumentCategory.other)
    description = Column(Text, nullable=True)
    uploaded_by_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True)
    is_from_preparer = Column(Boolean, nullable=False, default=False)

    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    client = relationship("User", back_populates="documents", foreign_keys=[client_id])
    uploaded_by = relationship("User", foreign_keys=[uploaded_by_id])
    tax_case = relationship("TaxCase", back_populates="documents")


class Appointment(Base):
    __tablename__ = "appointments"

    id = Column(Integer, primary_key=True, autoincrement=True)
    client_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    appointment_date = Column(TIMESTAMP, nullable=False)
    status = Column(SQLEnum(AppointmentStatus), nullable=False, default=AppointmentStatus.scheduled)
    notes = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    client = relationship("User", back_populates="appointments")


class Message(Base):
    __tablename__ = "messages"
    __table_args__ = (Index("ix_messages_recipient_unread", "recipient_id", "is_read"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    case_id = Column(Integer, ForeignKey("tax_cases.id", ondelete="CASCADE"), nullable=True)
    sender_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    recipient_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    message = Column(Text, nullable=False)
    is_read = Column(Boolean, nullable=False, default=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)

    sender = relationship("User", back_populates="sent_messages", foreign_keys=[sender_id])
    recipient = relationship("User", back_populates="received_messages", foreign_keys=[recipient_id])
    tax_case = relationship("TaxCase", back_populates="messages")


# ============================================================================
# Public site & audit
# ============================================================================

class ContactSubmission(Base):
    __tablename__ = "contact_submissions"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), nullable=False)
    phone = Column(String(50), nullable=True)
    service = Column(String(255), nullable=True)
    message = Column(Text, nullable=False)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)


class ActivityLog(Base):
    __tablename__ = "activity_logs"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(String(100), nullable=False)
    details = Column(Text, nullable=True)
    created_at = Column(TIMESTAMP, nullable=False, default=datetime.utcnow)
