"""Database layer."""

from persona_studio.db.models import AvatarModel, Base, ContentItemModel, PersonaModel
from persona_studio.db.repository import ContentRepository, PersonaRepository
from persona_studio.db.session import get_session, get_session_context, init_db

__all__ = [
    "Base",
    "get_session",
    "get_session_context",
    "init_db",
    # Models
    "AvatarModel",
    "ContentItemModel",
    "PersonaModel",
    # Repositories
    "ContentRepository",
    "PersonaRepository",
]
