import logging
import uuid
from typing import Any, Optional

from sqlmodel import Session, select

from rma_portal.models.error_type import ErrorType

logger = logging.getLogger(__name__)

DEFAULT_ERROR_TYPES: list[dict[str, Any]] = [
    {
        "error_id": "black-screen",
        "title": "Bleibt schwarz",
        "description": "Display zeigt kein Bild an",
        "category": "hardware",
        "icon_name": "Monitor",
        "instructions": (
            "1. Überprüfen Sie alle Kabelverbindungen\n"
            "2. Starten Sie das Gerät neu\n"
            "3. Warten Sie 30 Sekunden nach dem Einschalten\n"
            "4. Prüfen Sie die Helligkeit-Einstellungen\n"
            "5. Testen Sie mit einem anderen Eingangssignal"
        ),
        "required_checks": ["power", "socket", "restart"],
    },
    {
        "error_id": "lines",
        "title": "Linien im Bild",
        "description": "Störende Linien oder Streifen",
        "category": "hardware",
        "icon_name": "BarChart3",
        "sub_options": [
            {"id": "single-display", "label": "Nur ein Display betroffen"},
            {"id": "multiple-displays", "label": "Mehrere Displays betroffen"},
        ],
        "sub_option_field": "issue_scope",
    },
    {
        "error_id": "bootloop-hang",
        "title": "Display bleibt im Bootloop hängen",
        "description": "Display startet immer wieder neu und zeigt nur das Logo",
        "category": "software",
        "icon_name": "RotateCcw",
        "video_url": "https://youtu.be/uLx8zV649X0",
        "video_enabled": True,
        "required_checks": ["restart", "pause30min"],
    },
    {
        "error_id": "meldung-erscheint",
        "title": "Fehlermeldungen",
        "description": "Auf dem Display erscheint eine Fehlermeldung",
        "category": "software",
        "icon_name": "AlertTriangle",
        "sub_options": [
            {"id": "no-content-assigned", "label": "No Content Assigned"},
            {"id": "red-indicator", "label": "Rotes Ausrufezeichen in der App"},
        ],
        "sub_option_field": "specific_message",
    },
    {
        "error_id": "no-connection",
        "title": "Keine Verbindung",
        "description": "Display updatet nicht und hat keine Verbindung",
        "category": "network",
        "icon_name": "WifiOff",
        "required_checks": ["router", "transfer"],
    },
]


def list_active_error_types(session: Session) -> list[ErrorType]:
    q = select(ErrorType).where(ErrorType.is_active == True).order_by(ErrorType.category, ErrorType.title)  # noqa: E712
    return list(session.exec(q).all())


def get_error_type(session: Session, error_id: str, active_only: bool = True) -> Optional[ErrorType]:
    q = select(ErrorType).where(ErrorType.error_id == error_id)
    if active_only:
        q = q.where(ErrorType.is_active == True)  # noqa: E712
    return session.exec(q).first()


def create_error_type(session: Session, data: dict[str, Any]) -> ErrorType:
    error_type = ErrorType(**data)
    session.add(error_type)
    session.commit()
    session.refresh(error_type)
    return error_type


def update_error_type(session: Session, id: uuid.UUID, updates: dict[str, Any]) -> Optional[ErrorType]:
    error_type = session.get(ErrorType, id)
    if not error_type:
        return None
    for key, value in updates.items():
        setattr(error_type, key, value)
    session.add(error_type)
    session.commit()
    session.refresh(error_type)
    return error_type


def delete_error_type(session: Session, id: uuid.UUID) -> Optional[str]:
    """Delete an entry and return its title, or None if it does not exist."""
    error_type = session.get(ErrorType, id)
    if not error_type:
        return None
    title = error_type.title
    session.delete(error_type)
    session.commit()
    return title


def seed_default_error_types(session: Session) -> int:
    if session.exec(select(ErrorType.id)).first() is not None:
        return 0
    for row in DEFAULT_ERROR_TYPES:
        session.add(ErrorType(**row))
    session.commit()
    logger.info("seeded %d default error types", len(DEFAULT_ERROR_TYPES))
    return len(DEFAULT_ERROR_TYPES)
