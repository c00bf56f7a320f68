from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple


class BackgroundKind(str, Enum):
    SOLID = "solid"
    GRADIENT = "gradient"


@dataclass(frozen=True)
class Background:
    kind: BackgroundKind
    colors: Tuple[str, ...]

    @property
    def base(self) -> str:
        return self.colors[0]

    @classmethod
    def solid(cls, color: str) -> "Background":
        return cls(BackgroundKind.SOLID, (color,))

    @classmethod
    def gradient(cls, start: str, end: str) -> "Background":
        return cls(BackgroundKind.GRADIENT, (start, end))


@dataclass(frozen=True)
class Theme:
    id: str
    name: str
    background: Background
    title_color: str
    text_color: str
    accent_color: str
    bullet_color: str
    overlay_color: str
    overlay_opacity: float
    secondary_accent: str


class ThemeName(str, Enum):
    PROFESSIONAL = "professional"
    DARK = "dark"
    MODERN = "modern"
    NATURE = "nature"
    CORPORATE = "corporate"
    SUNSET = "sunset"
    ROYAL = "royal"


DEFAULT_THEME = ThemeName.PROFESSIONAL

_THEMES: Dict[ThemeName, Theme] = {
    ThemeName.PROFESSIONAL: Theme(
        id="professional",
        name="Professional",
        background=Background.gradient("F8FAFC", "E2E8F0"),
        title_color="1E293B",
        text_color="475569",
        accent_color="3B82F6",
        bullet_color="3B82F6",
        overlay_color="0F172A",
        overlay_opacity=0.7,
        secondary_accent="60A5FA",
    ),
    ThemeName.DARK: Theme(
        id="dark",
        name="Dark Mode Pro",
        background=Background.gradient("0F0F23", "1A1A3E"),
        title_color="FFFFFF",
        text_color="CBD5E1",
        accent_color="06B6D4",
        bullet_color="22D3EE",
        overlay_color="000000",
        overlay_opacity=0.6,
        secondary_accent="67E8F9",
    ),
    ThemeName.MODERN: Theme(
        id="modern",
        name="Modern Minimal",
        background=Background.gradient("FAFAFA", "F5F5F5"),
        title_color="18181B",
        text_color="52525B",
        accent_color="7C3AED",
        bullet_color="8B5CF6",
        overlay_color="1E1B4B",
        overlay_opacity=0.75,
        secondary_accent="A78BFA",
    ),
    ThemeName.NATURE: Theme(
        id="nature",
        name="Nature Fresh",
        background=Background.gradient("ECFDF5", "D1FAE5"),
        title_color="064E3B",
        text_color="047857",
        accent_color="10B981",
        bullet_color="34D399",
        overlay_color="022C22",
        overlay_opacity=0.7,
        secondary_accent="6EE7B7",
    ),
    ThemeName.CORPORATE: Theme(
        id="corporate",
        name="Corporate Elite",
        background=Background.gradient("F0F9FF", "E0F2FE"),
        title_color="0C4A6E",
        text_color="0369A1",
        accent_color="0284C7",
        bullet_color="0EA5E9",
        overlay_color="082F49",
        overlay_opacity=0.75,
        secondary_accent="38BDF8",
    ),
    ThemeName.SUNSET: Theme(
        id="sunset",
        name="Sunset Vibes",
        background=Background.gradient("FFF7ED", "FFEDD5"),
        title_color="7C2D12",
        text_color="9A3412",
        accent_color="EA580C",
        bullet_color="F97316",
        overlay_color="431407",
        overlay_opacity=0.7,
        secondary_accent="FB923C",
    ),
    ThemeName.ROYAL: Theme(
        id="royal",
        name="Royal Purple",
        background=Background.gradient("FAF5FF", "F3E8FF"),
        title_color="581C87",
        text_color="7E22CE",
        accent_color="9333EA",
        bullet_color="A855F7",
        overlay_color="3B0764",
        overlay_opacity=0.75,
        secondary_accent="C084FC",
    ),
}

THEMES: Mapping[ThemeName, Theme] = MappingProxyType(_THEMES)


def get_theme(name: Optional[str]) -> Theme:
    """Look a theme up by name; unknown or empty names get the default theme."""
    try:
        return THEMES[ThemeName((name or "").strip().lower())]
    except ValueError:
        return THEMES[DEFAULT_THEME]


def available_themes() -> List[dict]:
    return [
        {
            "id": theme.id,
            "name": theme.name,
            "colors": {
                "primary": theme.accent_color,
                "secondary": theme.secondary_accent,
                "title": theme.title_color,
                "text": theme.text_color,
            },
            "preview": theme.background.base,
        }
        for theme in THEMES.values()
    ]
