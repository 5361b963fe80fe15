"""Color palette for ExamQt supporting light and dark themes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto


class Theme(Enum):
    """Application theme options."""
    LIGHT = auto()
    DARK = auto()


@dataclass(frozen=True)
class ThemeColors:
    """Color definitions for a specific theme."""
    light: str
    dark: str

    def get(self, theme: Theme) -> str:
        """Get color value for the specified theme."""
        return self.light if theme == Theme.LIGHT else self.dark


class ColorPalette:
    """Centralized color definitions for the application."""

    # Text colors
    TEXT_PRIMARY = ThemeColors(light="#000000", dark="#F5F5F5")
    TEXT_SECONDARY = ThemeColors(light="#666666", dark="#AAAAAA")

    # Background colors
    BACKGROUND_PRIMARY = ThemeColors(light="#FFFFFF", dark="#1E1E1E")
    BACKGROUND_SECONDARY = ThemeColors(light="#F5F5F5", dark="#2D2D2D")

    # Status colors
    SUCCESS = ThemeColors(light="#107C10", dark="#6FCF6F")
    WARNING = ThemeColors(light="#FFB900", dark="#FFC83D")
    ERROR = ThemeColors(light="#D13438", dark="#FF6B6B")

    # Score bands on the results page
    BAND_EXCELLENT = ThemeColors(light="#107C10", dark="#6FCF6F")  # Green
    BAND_GOOD = ThemeColors(light="#0078D4", dark="#4A9EFF")       # Blue
    BAND_AVERAGE = ThemeColors(light="#CA5010", dark="#F7A35C")    # Orange
    BAND_POOR = ThemeColors(light="#D13438", dark="#FF6B6B")       # Red

    # Border colors
    BORDER_PRIMARY = ThemeColors(light="#D1D1D1", dark="#555555")

    # Button colors
    BUTTON_PRIMARY_BG = ThemeColors(light="#0078D4", dark="#4A9EFF")
    BUTTON_PRIMARY_TEXT = ThemeColors(light="#FFFFFF", dark="#000000")
    BUTTON_SECONDARY_BG = ThemeColors(light="#F5F5F5", dark="#3A3A3A")
    BUTTON_HOVER_BG = ThemeColors(light="#E8E8E8", dark="#505050")

    @classmethod
    def for_band(cls, band: str) -> ThemeColors:
        return {
            "excellent": cls.BAND_EXCELLENT,
            "good": cls.BAND_GOOD,
            "average": cls.BAND_AVERAGE,
        }.get(band, cls.BAND_POOR)
