"""Message content rules shared by channel messages and DMs."""
from __future__ import annotations


def normalize_text(text: str | None) -> str | None:
    if text is None:
        return None
    stripped = text.strip()
    return stripped or None


def normalize_image_ref(image_ref: str | None) -> str | None:
    if image_ref is None:
        return None
    stripped = image_ref.strip()
    return stripped or None

