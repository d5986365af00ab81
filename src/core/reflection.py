from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

DEFAULT_NOTE_TEXT = "For you"


@dataclass(frozen=True, slots=True)
class Reflection:
    """A note tagged with the mood it was written in, handed to the notes collaborator."""

    text: str
    band_name: str
    accent_color: str


ReflectionSink = Callable[[Reflection], object]


def compose_reflection(text: str | None, band_name: str, accent_color: str) -> Reflection:
    clean = (text or "").strip() or DEFAULT_NOTE_TEXT
    return Reflection(text=clean, band_name=band_name, accent_color=accent_color)
