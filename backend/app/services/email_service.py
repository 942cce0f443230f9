from __future__ import annotations

from datetime import datetime
from html import escape
from typing import Dict, List, Optional, Union

import httpx

from app.core.config import settings
from app.core.logger import logger

RESEND_API_URL = "https://api.resend.com/emails"

COMPANY_INFO = {
    "name": "Highlight Tax Services",
    "phone": "+1 917-257-4554",
    "email": "servicestaxx@gmail.com",
    "address": "84 West 188th Street, Apt 3C, Bronx, NY 10468",
}

CATEGORY_LABELS = {
    "id_document": "ID Document / Cédula",
    "w2": "W-2 Form",
    "form_1099": "1099 Form",
    "bank_statement": "Bank Statement / Estado de Cuenta",
    "receipt": "Receipt / Recibo",
    "previous_return": "Previous Tax Return / Declaración Anterior",
    "social_security": "Social Security Card / Seguro Social",
    "proof_of_address": "Proof of Address / Comprobante de Domicilio",
    "other": "Other Document / Otro Documento",
}

STATUS_LABELS = {
    "pending": {"en": "Pending", "es": "Pendiente", "color": "#f39c12"},
    "in_process": {"en": "In Process", "es": "En Proceso", "color": "#3498db"},
    "sent_to_irs": {"en": "Sent to IRS", "es": "Enviado al IRS", "color": "#9b59b6"},
    "approved": {"en": "Approved", "es": "Aprobado", "color": "#2ECC71"},
    "refund_issued": {"en": "Refund Issued", "es": "Reembolso Emitido", "color": "#27ae60"},
}


def _wrap(body: str) -> str:
    year = datetime.utcnow().year
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<div style="background: #0A3D62; color: white; padding: 20px; text-align: center;">'
        f'<h1 style="margin: 0;">{COMPANY_INFO["name"]}</h1></div>'
        f'<div style="padding: 30px;">{body}'
        f'<p style="color: #666; font-size: 14px;">{COMPANY_INFO["phone"]} · {COMPANY_INFO["email"]}<br>'
        f'{COMPANY_INFO["address"]}</p></div>'
        f'<p style="color: #999; font-size: 12px; text-align: center;">© {year} {COMPANY_INFO["name"]}</p>'
        "</div>"
    )


class EmailService:
    """Transactional email with a provider toggle (dev logs, resend sends)."""

    def __init__(self) -> None:
        self.provider = (settings.EMAIL_PROVIDER or "dev").strip().lower()

    def send(self, to: Union[str, List[str]], subject: str, html: str) -> Dict[str, str]:
        recipients = [to] if isinstance(to, str) else list(to)
        provider = self.provider
        if provider == "dev":
            logger.info("[DEV EMAIL] to=%s subject=%s", ",".join(recipients), subject)
            return {"provider": "dev", "target": ",".join(recipients)}
        if provider == "resend":
            api_key = (settings.RESEND_API_KEY or "").strip()
            sender = (settings.RESEND_FROM_EMAIL or "").strip()
            if not api_key or not sender:
                raise ValueError("Resend email config missing (RESEND_API_KEY/RESEND_FROM_EMAIL)")
            payload = {
                "from": sender,
                "to": recipients,
                "subject": subject,
                "html": html,
            }
            headers = {
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            }
            with httpx.Client(timeout=20.0) as client:
                resp = client.post(RESEND_API_URL, json=payload, headers=headers)
                if resp.status_code >= 400:
                    raise ValueError(f"Resend email failed: {resp.status_code} {resp.text[:200]}")
            return {"provider": "resend", "target": ",".join(recipients)}
        raise ValueError(f"Unsupported EMAIL_PROVIDER: {provider}")

    # ── templates ────────────────────────────────────────────────────────────

    def send_welcome_email(self, name: str, email: str) -> Dict[str, str]:
        body = (
            f'<h2 style="color: #0A3D62;">Welcome / Bienvenido, {escape(name)}!</h2>'
            "<p>Your client portal account is ready. Upload your documents and follow your case online.</p>"
            "<p>Tu cuenta del portal está lista. Sube tus documentos y sigue tu caso en línea.</p>"
        )
        return self.send(
            email,
            "Bienvenido a Highlight Tax Services / Welcome to Highlight Tax Services",
            _wrap(body),
        )

    def send_contact_form_notification(
        self,
        name: str,
        email: str,
        message: str,
        phone: Optional[str] = None,
        service: Optional[str] = None,
    ) -> Dict[str, str]:
        rows = [
            f"<p><strong>Name:</strong> {escape(name)}</p>",
            f"<p><strong>Email:</strong> {escape(email)}</p>",
        ]
        if phone:
            rows.append(f"<p><strong>Phone:</strong> {escape(phone)}</p>")
        if service:
            rows.append(f"<p><strong>Service:</strong> {escape(service)}</p>")
        rows.append(f"<p><strong>Message:</strong></p><p>{escape(message)}</p>")
        body = '<h2 style="color: #0A3D62;">New Contact Form Submission</h2>' + "".join(rows)
        return self.send(settings.ADMIN_EMAIL, f"New Contact Form Submission - {name}", _wrap(body))

    def send_document_upload_notification(
        self,
        client_name: str,
        client_email: str,
        file_name: str,
        category: Optional[str] = None,
    ) -> Dict[str, str]:
        label = CATEGORY_LABELS.get(category or "other", CATEGORY_LABELS["other"])
        body = (
            '<h2 style="color: #0A3D62;">New Document Upload</h2>'
            f"<p><strong>Client:</strong> {escape(client_name)} ({escape(client_email)})</p>"
            f"<p><strong>File:</strong> {escape(file_name)}</p>"
            f"<p><strong>Category:</strong> {label}</p>"
        )
        return self.send(settings.ADMIN_EMAIL, f"New Document Upload - {client_name}", _wrap(body))

    def send_case_status_update(
        self,
        client_name: str,
        client_email: str,
        case_id: int,
        filing_year: int,
        new_status: str,
    ) -> Dict[str, str]:
        status = STATUS_LABELS.get(new_status, {"en": new_status, "es": new_status, "color": "#0A3D62"})
        body = (
            f"<p>Hello / Hola, {escape(client_name)}!</p>"
            f"<p>Your {filing_year} tax case (#{case_id}) has a new status:</p>"
            f"<p>Tu caso de impuestos {filing_year} (#{case_id}) tiene un nuevo estado:</p>"
            f'<p style="font-size: 20px; color: {status["color"]};"><strong>{status["en"]} / {status["es"]}</strong></p>'
        )
        return self.send(
            client_email,
            f"Case Status Update - {status['en']} / Actualización de Caso - {status['es']}",
            _wrap(body),
        )

    def send_password_reset_email(
        self,
        name: str,
        email: str,
        reset_token: str,
        expires_in_minutes: int,
    ) -> Dict[str, str]:
        reset_link = f"{settings.FRONTEND_URL}/reset-password?token={reset_token}"
        body = (
            '<h2 style="color: #0A3D62;">Password Reset / Restablecer Contraseña</h2>'
            f"<p>Hello / Hola, {escape(name)}!</p>"
            "<p>You requested to reset your password. / Has solicitado restablecer tu contraseña.</p>"
            f'<p><a href="{reset_link}">Reset Password / Restablecer Contraseña</a></p>'
            f"<p><strong>This link expires in {expires_in_minutes} minutes. / "
            f"Este enlace expira en {expires_in_minutes} minutos.</strong></p>"
            "<p>If you didn't request this, you can ignore this email.</p>"
        )
        return self.send(
            email,
            "Password Reset Request / Solicitud de Restablecimiento de Contraseña",
            _wrap(body),
        )

    def send_appointment_confirmation(
        self,
        client_name: str,
        client_email: str,
        appointment_date: datetime,
        notes: Optional[str] = None,
    ) -> List[Dict[str, str]]:
        when = appointment_date.strftime("%A, %B %d, %Y %I:%M %p")
        notes_html = f"<p><strong>Notes:</strong> {escape(notes)}</p>" if notes else ""
        client_body = (
            f"<p>Hello / Hola, {escape(client_name)}!</p>"
            f"<p>Your appointment is confirmed for <strong>{when}</strong>.</p>"
            f"<p>Tu cita está confirmada para <strong>{when}</strong>.</p>{notes_html}"
        )
        staff_body = (
            '<h2 style="color: #0A3D62;">New Appointment</h2>'
            f"<p><strong>Client:</strong> {escape(client_name)} ({escape(client_email)})</p>"
            f"<p><strong>Date:</strong> {when}</p>{notes_html}"
        )
        return [
            self.send(
                client_email,
                "Appointment Confirmation / Confirmación de Cita - Highlight Tax Services",
                _wrap(client_body),
            ),
            self.send(settings.ADMIN_EMAIL, f"New Appointment - {client_name} - {when}", _wrap(staff_body)),
        ]


email_service = EmailService()
