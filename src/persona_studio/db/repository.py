"""Persistence for content items, personas and avatars.

Repositories open a short-lived session per call and hand back domain
objects, so nothing outside this module holds an ORM instance.
"""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, select, update
from sqlalchemy.orm import Session, sessionmaker

from persona_studio.db.models import AvatarModel, ContentItemModel, PersonaModel
from persona_studio.db.session import SessionLocal, get_session_context
from persona_studio.domain.enums import (
    ContentPlatform,
    ContentStatus,
    ContentType,
    VideoGenerationStatus,
)
from persona_studio.domain.models import ContentItem

UPDATABLE_FIELDS = frozenset(
    {
        "script",
        "audio_url",
        "video_url",
        "final_video_url",
        "video_task_id",
        "video_status",
        "scheduled_for",
        "published_at",
        "external_id",
        "external_url",
        "publish_attempts",
        "last_publish_error",
        "status",
    }
)


def to_content_item(model: ContentItemModel) -> ContentItem:
    """Convert an ORM row to the domain object."""
    return ContentItem(
        id=model.id,
        user_id=model.user_id,
        avatar_id=model.avatar_id,
        content_type=ContentType(model.content_type),
        platform=ContentPlatform(model.platform),
        status=ContentStatus(model.status),
        script=model.script,
        audio_url=model.audio_url,
        video_url=model.video_url,
        final_video_url=model.final_video_url,
        video_task_id=model.video_task_id,
        video_status=VideoGenerationStatus(model.video_status) if model.video_status else None,
        scheduled_for=model.scheduled_for,
        published_at=model.published_at,
        external_id=model.external_id,
        external_url=model.external_url,
        publish_attempts=model.publish_attempts or 0,
        last_publish_error=model.last_publish_error,
        created_at=model.created_at,
        updated_at=model.updated_at,
    )


def _column_values(values: dict[str, Any]) -> dict[str, Any]:
    unknown = set(values) - UPDATABLE_FIELDS
    if unknown:
        raise ValueError(f"Unknown content fields: {sorted(unknown)}")
    # Enum members are stored as their plain string values
    return {k: (v.value if hasattr(v, "value") else v) for k, v in values.items()}


class ContentRepository:
    """Content item storage with status-guarded writes."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or SessionLocal

    def create(
        self,
        user_id: str,
        platform: ContentPlatform,
        script: str | None = None,
        avatar_id: UUID | None = None,
        audio_url: str | None = None,
        video_task_id: str | None = None,
        video_status: VideoGenerationStatus | None = None,
        status: ContentStatus = ContentStatus.DRAFT,
    ) -> ContentItem:
        with get_session_context(self.session_factory) as session:
            model = ContentItemModel(
                user_id=user_id,
                avatar_id=avatar_id,
                content_type=platform.content_type.value,
                platform=platform.value,
                script=script,
                audio_url=audio_url,
                video_task_id=video_task_id,
                video_status=video_status.value if video_status else None,
                status=status.value,
                publish_attempts=0,
            )
            session.add(model)
            session.flush()
            session.refresh(model)
            return to_content_item(model)

    def get(self, content_id: UUID) -> ContentItem | None:
        with get_session_context(self.session_factory) as session:
            model = session.get(ContentItemModel, content_id)
            return to_content_item(model) if model else None

    def get_owned(self, user_id: str, content_id: UUID) -> ContentItem | None:
        """Fetch an item only if ``user_id`` owns it."""
        with get_session_context(self.session_factory) as session:
            model = session.execute(
                select(ContentItemModel).where(
                    ContentItemModel.id == content_id,
                    ContentItemModel.user_id == user_id,
                )
            ).scalar_one_or_none()
            return to_content_item(model) if model else None

    def list_for_user(
        self,
        user_id: str,
        status: ContentStatus | None = None,
        platform: ContentPlatform | None = None,
        content_type: ContentType | None = None,
        page: int = 1,
        limit: int = 20,
    ) -> tuple[list[ContentItem], int]:
        """List a user's items, newest first.

        Returns:
            Tuple of (items on the requested page, total matching items)
        """
        filters = [ContentItemModel.user_id == user_id]
        if status is not None:
            filters.append(ContentItemModel.status == status.value)
        if platform is not None:
            filters.append(ContentItemModel.platform == platform.value)
        if content_type is not None:
            filters.append(ContentItemModel.content_type == content_type.value)

        with get_session_context(self.session_factory) as session:
            total = session.execute(
                select(func.count()).select_from(ContentItemModel).where(*filters)
            ).scalar_one()
            rows = (
                session.execute(
                    select(ContentItemModel)
                    .where(*filters)
                    .order_by(ContentItemModel.created_at.desc())
                    .offset((page - 1) * limit)
                    .limit(limit)
                )
                .scalars()
                .all()
            )
            return [to_content_item(r) for r in rows], total

    def count_by_status(self, user_id: str) -> dict[ContentStatus, int]:
        """Number of the user's items in each status; absent statuses are zero."""
        with get_session_context(self.session_factory) as session:
            rows = session.execute(
                select(ContentItemModel.status, func.count())
                .where(ContentItemModel.user_id == user_id)
                .group_by(ContentItemModel.status)
            ).all()
        counts = {status: 0 for status in ContentStatus}
        for status, count in rows:
            counts[ContentStatus(status)] = count
        return counts

    def count_created_since(self, user_id: str, since: datetime) -> int:
        with get_session_context(self.session_factory) as session:
            return session.execute(
                select(func.count())
                .select_from(ContentItemModel)
                .where(
                    ContentItemModel.user_id == user_id,
                    ContentItemModel.created_at >= since,
                )
            ).scalar_one()

    def update_fields(self, content_id: UUID, **values: Any) -> ContentItem | None:
        """Unconditionally update editable fields."""
        columns = _column_values(values)
        with get_session_context(self.session_factory) as session:
            model = session.get(ContentItemModel, content_id)
            if model is None:
                return None
            for key, value in columns.items():
                setattr(model, key, value)
            session.flush()
            session.refresh(model)
            return to_content_item(model)

    def transition(
        self,
        content_id: UUID,
        expected_status: ContentStatus,
        **values: Any,
    ) -> bool:
        """Apply ``values`` only if the row is still in ``expected_status``.

        Returns:
            True if exactly one row was updated, False if the status changed
            underneath the caller.
        """
        columns = _column_values(values)
        with get_session_context(self.session_factory) as session:
            result = session.execute(
                update(ContentItemModel)
                .where(
                    ContentItemModel.id == content_id,
                    ContentItemModel.status == expected_status.value,
                )
                .values(**columns)
                .execution_options(synchronize_session=False)
            )
            return result.rowcount == 1

    def delete(self, user_id: str, content_id: UUID) -> bool:
        with get_session_context(self.session_factory) as session:
            result = session.execute(
                delete(ContentItemModel).where(
                    ContentItemModel.id == content_id,
                    ContentItemModel.user_id == user_id,
                )
            )
            return result.rowcount == 1

    def find_due(self, now: datetime, max_attempts: int = 0) -> list[ContentItem]:
        """Scheduled items whose time has come, earliest first.

        Items that already failed ``max_attempts`` times are left out; zero
        disables the cap.
        """
        query = select(ContentItemModel).where(
            ContentItemModel.status == ContentStatus.SCHEDULED.value,
            ContentItemModel.scheduled_for.is_not(None),
            ContentItemModel.scheduled_for <= now,
        )
        if max_attempts > 0:
            query = query.where(ContentItemModel.publish_attempts < max_attempts)

        with get_session_context(self.session_factory) as session:
            rows = (
                session.execute(query.order_by(ContentItemModel.scheduled_for.asc()))
                .scalars()
                .all()
            )
            return [to_content_item(r) for r in rows]

    def mark_published(
        self,
        content_id: UUID,
        expected_status: ContentStatus,
        published_at: datetime,
        external_id: str | None,
        external_url: str | None,
        clear_schedule: bool = False,
    ) -> bool:
        values: dict[str, Any] = {
            "status": ContentStatus.PUBLISHED,
            "published_at": published_at,
            "external_id": external_id,
            "external_url": external_url,
            "last_publish_error": None,
        }
        if clear_schedule:
            values["scheduled_for"] = None
        return self.transition(content_id, expected_status, **values)

    def record_publish_failure(self, content_id: UUID, error: str) -> None:
        """Count a failed attempt without touching the lifecycle state."""
        with get_session_context(self.session_factory) as session:
            session.execute(
                update(ContentItemModel)
                .where(ContentItemModel.id == content_id)
                .values(
                    publish_attempts=ContentItemModel.publish_attempts + 1,
                    last_publish_error=error,
                )
                .execution_options(synchronize_session=False)
            )

    def find_pending_video(self, limit: int = 50) -> list[ContentItem]:
        """Items whose video task has not reached a final state."""
        with get_session_context(self.session_factory) as session:
            rows = (
                session.execute(
                    select(ContentItemModel)
                    .where(
                        ContentItemModel.video_task_id.is_not(None),
                        ContentItemModel.video_status.in_(
                            [
                                VideoGenerationStatus.PENDING.value,
                                VideoGenerationStatus.PROCESSING.value,
                            ]
                        ),
                    )
                    .order_by(ContentItemModel.created_at.asc())
                    .limit(limit)
                )
                .scalars()
                .all()
            )
            return [to_content_item(r) for r in rows]


class PersonaRepository:
    """Persona and avatar lookups for one user."""

    def __init__(self, session_factory: sessionmaker[Session] | None = None) -> None:
        self.session_factory = session_factory or SessionLocal

    def get_persona(self, user_id: str) -> PersonaModel | None:
        with get_session_context(self.session_factory) as session:
            return session.execute(
                select(PersonaModel).where(PersonaModel.user_id == user_id)
            ).scalar_one_or_none()

    def upsert_persona(self, user_id: str, **fields: Any) -> PersonaModel:
        with get_session_context(self.session_factory) as session:
            persona = session.execute(
                select(PersonaModel).where(PersonaModel.user_id == user_id)
            ).scalar_one_or_none()
            if persona is None:
                persona = PersonaModel(user_id=user_id)
                session.add(persona)
            for key, value in fields.items():
                setattr(persona, key, value)
            session.flush()
            session.refresh(persona)
            return persona

    def list_avatars(self, user_id: str) -> list[AvatarModel]:
        """All avatars of a user, newest first."""
        with get_session_context(self.session_factory) as session:
            return list(
                session.execute(
                    select(AvatarModel)
                    .where(AvatarModel.user_id == user_id)
                    .order_by(AvatarModel.created_at.desc())
                )
                .scalars()
                .all()
            )

    def get_avatar_owned(self, user_id: str, avatar_id: UUID) -> AvatarModel | None:
        with get_session_context(self.session_factory) as session:
            return session.execute(
                select(AvatarModel).where(
                    AvatarModel.id == avatar_id,
                    AvatarModel.user_id == user_id,
                )
            ).scalar_one_or_none()

    def create_avatar(self, user_id: str, name: str) -> AvatarModel:
        with get_session_context(self.session_factory) as session:
            avatar = AvatarModel(user_id=user_id, name=name)
            session.add(avatar)
            session.flush()
            session.refresh(avatar)
            return avatar

    def set_avatar_voice(self, avatar_id: UUID, voice_id: str | None, voice_status: str) -> None:
        with get_session_context(self.session_factory) as session:
            session.execute(
                update(AvatarModel)
                .where(AvatarModel.id == avatar_id)
                .values(voice_id=voice_id, voice_status=voice_status)
                .execution_options(synchronize_session=False)
            )
