"""
Mood -> colour theme mapping.

Bands are interpolation anchors rather than hard switches: a band's own
colours are shown at its centre, and toward either edge they blend to the
midpoint shared with the neighbouring band, so the theme never jumps when
mood crosses a boundary.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

MOOD_MIN = 0.0
MOOD_MAX = 100.0


class BandConfigError(ValueError):
    """Raised when mood bands overlap, leave gaps or do not cover [0, 100]."""


@dataclass(frozen=True, slots=True)
class MoodBand:
    name: str
    label: str
    start: float
    end: float
    background: str
    light: str
    mid: str
    particle: str


@dataclass(frozen=True, slots=True)
class ThemeColors:
    background: str
    light: str
    mid: str
    particle: str
    band_name: str
    band_label: str
    blend: float


DEFAULT_MOOD_BANDS: tuple[MoodBand, ...] = (
    MoodBand(
        name="Blue/Numbness",
        label="Quiet, a little numb",
        start=0.0,
        end=30.0,
        background="#BFE7FF",
        light="#E6F6FF",
        mid="#8CCBEF",
        particle="#7FB8E6",
    ),
    MoodBand(
        name="Red/Intensity",
        label="Heart racing",
        start=30.0,
        end=65.0,
        background="#FFC2CF",
        light="#FFE1E8",
        mid="#FF6B8A",
        particle="#FF61A6",
    ),
    MoodBand(
        name="Purple/Devotion",
        label="Completely smitten",
        start=65.0,
        end=100.0,
        background="#E4D2FF",
        light="#F3EAFF",
        mid="#D8B9FF",
        particle="#B88CFF",
    ),
)

_COLOR_FIELDS = ("background", "light", "mid", "particle")


def hex_to_rgb(value: str) -> tuple[int, int, int]:
    text = value.strip().lstrip("#")
    if len(text) != 6:
        raise ValueError(f"Invalid hex colour: {value!r}")
    return int(text[0:2], 16), int(text[2:4], 16), int(text[4:6], 16)


def rgb_to_hex(rgb: Sequence[int]) -> str:
    r, g, b = (max(0, min(255, int(channel))) for channel in rgb)
    return f"#{r:02X}{g:02X}{b:02X}"


def mix_hex(color_a: str, color_b: str, t: float) -> str:
    """Linear per-channel blend of two hex colours, ``t`` clamped to [0, 1]."""
    t = max(0.0, min(1.0, float(t)))
    a = hex_to_rgb(color_a)
    b = hex_to_rgb(color_b)
    return rgb_to_hex([round(a[i] + (b[i] - a[i]) * t) for i in range(3)])


def validate_bands(bands: Sequence[MoodBand]) -> tuple[MoodBand, ...]:
    """
    Check that bands are ordered, contiguous and cover [0, 100] exactly.

    Adjacent bands share their boundary value; the boundary belongs to the
    lower band at lookup time.
    """
    ordered = tuple(bands)
    if not ordered:
        raise BandConfigError("At least one mood band is required")
    if ordered[0].start != MOOD_MIN:
        raise BandConfigError(f"First band must start at {MOOD_MIN:g}, got {ordered[0].start:g}")
    if ordered[-1].end != MOOD_MAX:
        raise BandConfigError(f"Last band must end at {MOOD_MAX:g}, got {ordered[-1].end:g}")
    names: set[str] = set()
    for index, band in enumerate(ordered):
        if not band.name:
            raise BandConfigError(f"Band #{index} has no name")
        if band.name in names:
            raise BandConfigError(f"Duplicate band name: {band.name}")
        names.add(band.name)
        if band.end <= band.start:
            raise BandConfigError(f"Band {band.name} is empty or inverted ({band.start:g}..{band.end:g})")
        for field_name in _COLOR_FIELDS:
            try:
                hex_to_rgb(getattr(band, field_name))
            except (AttributeError, TypeError, ValueError) as exc:
                raise BandConfigError(f"Band {band.name} has invalid {field_name} colour") from exc
        if index > 0:
            previous = ordered[index - 1]
            if band.start < previous.end:
                raise BandConfigError(f"Bands {previous.name} and {band.name} overlap")
            if band.start > previous.end:
                raise BandConfigError(f"Gap between bands {previous.name} and {band.name}")
    return ordered


def band_index_for(bands: Sequence[MoodBand], mood: float) -> int:
    """Index of the band containing ``mood``; a shared boundary belongs to the lower band."""
    value = max(MOOD_MIN, min(MOOD_MAX, float(mood)))
    for index, band in enumerate(bands):
        if value <= band.end:
            return index
    return len(bands) - 1


class ColorMapper:
    """Pure mood -> ThemeColors function over a validated band set."""

    def __init__(self, bands: Sequence[MoodBand] = DEFAULT_MOOD_BANDS):
        self._bands = validate_bands(bands)

    @property
    def bands(self) -> tuple[MoodBand, ...]:
        return self._bands

    def band_for(self, mood: float) -> MoodBand:
        return self._bands[band_index_for(self._bands, mood)]

    def color_for(self, mood: float) -> ThemeColors:
        value = max(MOOD_MIN, min(MOOD_MAX, float(mood)))
        index = band_index_for(self._bands, value)
        band = self._bands[index]
        previous = self._bands[index - 1] if index > 0 else band
        following = self._bands[index + 1] if index + 1 < len(self._bands) else band
        t = (value - band.start) / (band.end - band.start)

        colors: dict[str, str] = {}
        for field_name in _COLOR_FIELDS:
            own = getattr(band, field_name)
            if t < 0.5:
                edge = mix_hex(getattr(previous, field_name), own, 0.5)
                colors[field_name] = mix_hex(edge, own, t * 2.0)
            else:
                edge = mix_hex(own, getattr(following, field_name), 0.5)
                colors[field_name] = mix_hex(own, edge, (t - 0.5) * 2.0)

        return ThemeColors(
            background=colors["background"],
            light=colors["light"],
            mid=colors["mid"],
            particle=colors["particle"],
            band_name=band.name,
            band_label=band.label,
            blend=t,
        )
