"""
WhatsApp lead capture links.

Every link is ``https://wa.me/<number>?text=<url-encoded message>``.
"""
from typing import Dict, List, Optional
from urllib.parse import quote

from app.core.config import settings

DEFAULT_LANGUAGE = "en"

GREETINGS: Dict[str, str] = {
    "en": "Hello, I would like information about your tax services",
    "es": "Hola, quiero información sobre sus servicios de taxes",
    "fr": "Bonjour, je voudrais des informations sur vos services fiscaux",
    "pt": "Olá, gostaria de informações sobre seus serviços fiscais",
    "zh": "您好，我想了解您的税务服务信息",
    "ht": "Bonjou, mwen ta renmen enfòmasyon sou sèvis taks ou yo",
}

SERVICES: List[Dict[str, str]] = [
    {
        "key": "personal",
        "title": "Personal 1040",
        "description": "Individual federal and state returns with every credit you qualify for.",
    },
    {
        "key": "self_employed",
        "title": "Self-Employed/1099",
        "description": "Returns for contractors and gig workers, including deductible expenses.",
    },
    {
        "key": "business",
        "title": "Business Taxes (LLC, Schedule C)",
        "description": "Filing for LLCs and sole proprietors.",
    },
    {
        "key": "itin",
        "title": "ITIN",
        "description": "Application and renewal of Individual Taxpayer Identification Numbers.",
    },
    {
        "key": "bookkeeping",
        "title": "Bookkeeping Mensual",
        "description": "Monthly bookkeeping so your books are ready at tax time.",
    },
    {
        "key": "amendments",
        "title": "Tax Amendments (1040X)",
        "description": "Corrections to previously filed returns.",
    },
]


def normalize_language(language: Optional[str]) -> str:
    code = (language or "").strip().lower().split("-", 1)[0]
    return code if code in GREETINGS else DEFAULT_LANGUAGE


def build_link(message: str, number: Optional[str] = None) -> str:
    return f"https://wa.me/{number or settings.WHATSAPP_NUMBER}?text={quote(message, safe='')}"


def greeting_message(language: Optional[str] = None, service: Optional[str] = None) -> str:
    message = GREETINGS[normalize_language(language)]
    if service:
        message = f"{message}: {service}"
    return message


def service_link(service_title: str, language: Optional[str] = None) -> str:
    return build_link(greeting_message(language, service_title))


def service_catalog(language: Optional[str] = None) -> List[Dict[str, str]]:
    return [
        {**service, "whatsapp_url": service_link(service["title"], language)}
        for service in SERVICES
    ]
