"""Data models for webhook payloads."""

from autotag.models.events import PushEvent

__all__ = ["PushEvent"]
