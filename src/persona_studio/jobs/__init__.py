"""Celery job definitions."""

from persona_studio.jobs.content_tasks import publish_due_task, refresh_video_status_task

__all__ = ["publish_due_task", "refresh_video_status_task"]
