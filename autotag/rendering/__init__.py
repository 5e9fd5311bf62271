"""Caption template rendering."""

from .engine import CaptionRenderer, translate_go_fields

__all__ = ["CaptionRenderer", "translate_go_fields"]
