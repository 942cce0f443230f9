"""
Pydantic validation schemas

JSON bodies use camelCase on the wire (the portal frontend's convention);
snake_case field names are accepted on input as well.
"""
from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List
from datetime import date, datetime
from decimal import Decimal

from app.db.models import (
    AppointmentStatus,
    CaseStatus,
    DocumentCategory,
    FilingStatus,
    UserRole,
)
from app.utils.validators import validate_password_strength


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ============================================================================
# User / Auth Schemas
# ============================================================================

class UserPublic(CamelModel):
    """Identity fields carried in the auth cookie and /auth/me"""
    id: int
    email: str
    role: UserRole
    name: Optional[str] = None


class AuthResponse(BaseModel):
    user: UserPublic


class UserProfile(UserPublic):
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    date_of_birth: Optional[date] = None
    profile_image_url: Optional[str] = None
    is_active: bool = True
    created_at: datetime
    last_login_at: Optional[datetime] = None


class ProfileUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=255)
    phone: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zip_code: Optional[str] = None
    date_of_birth: Optional[date] = None


class RegisterRequest(CamelModel):
    email: EmailStr
    password: str
    name: str = Field(..., min_length=2, max_length=255)
    phone: Optional[str] = None

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


class OAuthTokenRequest(CamelModel):
    """Provider access token; the profile is looked up with the provider, never taken from the body."""
    access_token: str = ""


class OAuthLoginRequest(CamelModel):
    """Profile mapped from a provider session; email may be blank."""
    email: str = ""
    name: str = "User"
    provider: str = "oauth"
    provider_id: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: EmailStr


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    password: str

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password_strength(v)


class VerifyResetTokenResponse(BaseModel):
    valid: bool


class MessageResponse(BaseModel):
    success: bool = True
    message: str


# ============================================================================
# Tax Case Schemas
# ============================================================================

class TaxCaseOut(CamelModel):
    id: int
    client_id: int
    filing_year: int
    filing_status: Optional[FilingStatus] = None
    dependents: int = 0
    status: CaseStatus
    final_amount: Optional[Decimal] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime


class TaxCaseWithClient(TaxCaseOut):
    client: Optional[UserPublic] = None


class TaxCaseCreate(CamelModel):
    client_id: Optional[int] = None
    filing_year: Optional[int] = None
    filing_status: Optional[FilingStatus] = None
    dependents: int = Field(0, ge=0)


class TaxCaseUpdate(CamelModel):
    status: Optional[CaseStatus] = None
    notes: Optional[str] = None
    final_amount: Optional[Decimal] = Field(None, max_digits=10, decimal_places=2)


# ============================================================================
# Document Schemas
# ============================================================================

class DocumentOut(CamelModel):
    id: int
    case_id: Optional[int] = None
    client_id: int
    file_name: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    category: DocumentCategory
    description: Optional[str] = None
    uploaded_by_id: Optional[int] = None
    is_from_preparer: bool = False
    created_at: datetime


class DocumentWithClient(DocumentOut):
    client: Optional[UserPublic] = None


# ============================================================================
# Appointment Schemas
# ============================================================================

class AppointmentCreate(CamelModel):
    appointment_date: Optional[datetime] = None
    notes: Optional[str] = None


class AppointmentOut(CamelModel):
    id: int
    client_id: int
    appointment_date: datetime
    status: AppointmentStatus
    notes: Optional[str] = None
    created_at: datetime


class AppointmentWithClient(AppointmentOut):
    client: Optional[UserPublic] = None


# ============================================================================
# Messaging Schemas
# ============================================================================

class MessageCreate(CamelModel):
    recipient_id: int
    message: str = Field(..., min_length=1, max_length=5000)
    case_id: Optional[int] = None


class MessageOut(CamelModel):
    id: int
    case_id: Optional[int] = None
    sender_id: int
    recipient_id: int
    message: str
    is_read: bool
    created_at: datetime


class ConversationOut(CamelModel):
    user: UserPublic
    last_message: MessageOut
    unread_count: int = 0


class UnreadCountResponse(CamelModel):
    count: int


# ============================================================================
# Contact / Site Schemas
# ============================================================================

class ContactCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=255)
    email: EmailStr
    phone: Optional[str] = Field(None, max_length=50)
    service: Optional[str] = Field(None, max_length=100)
    message: str = Field(..., min_length=10)


class ContactOut(CamelModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    service: Optional[str] = None
    message: str
    created_at: datetime


class ContactResponse(BaseModel):
    success: bool = True
    contact: ContactOut


class ServiceOut(CamelModel):
    key: str
    title: str
    description: str
    whatsapp_url: str


class WhatsAppLinkOut(CamelModel):
    language: str
    message: str
    url: str


# ============================================================================
# Admin Schemas
# ============================================================================

class AdminStats(CamelModel):
    total_clients: int
    pending_cases: int
    completed_cases: int
    total_refunds: float


class ClientSummary(UserProfile):
    case_count: int = 0
    document_count: int = 0


class ClientDetail(BaseModel):
    client: UserProfile
    documents: List[DocumentOut]
    cases: List[TaxCaseOut]
    appointments: List[AppointmentOut]


class ActivityLogOut(CamelModel):
    id: int
    user_id: Optional[int] = None
    action: str
    details: Optional[str] = None
    created_at: datetime
