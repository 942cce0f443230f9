"""
Marketing site data: service catalog and WhatsApp lead links
"""
from typing import List, Optional

from fastapi import APIRouter, Query

from app.db.schemas import ServiceOut, WhatsAppLinkOut
from app.services import whatsapp_service

router = APIRouter()


@router.get("/services", response_model=List[ServiceOut])
def get_services(lang: Optional[str] = Query(None)):
    return whatsapp_service.service_catalog(lang)


@router.get("/whatsapp", response_model=WhatsAppLinkOut)
def get_whatsapp_link(
    lang: Optional[str] = Query(None),
    service: Optional[str] = Query(None),
):
    language = whatsapp_service.normalize_language(lang)
    message = whatsapp_service.greeting_message(language, service)
    return WhatsAppLinkOut(
        language=language,
        message=message,
        url=whatsapp_service.build_link(message),
    )
