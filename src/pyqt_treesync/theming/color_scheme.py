"""
Status colours for synchronized regions.

A small semantic palette for the sync status indicator, with light and
dark variants.
"""

import logging
from dataclasses import dataclass
from typing import Tuple
from PyQt6.QtGui import QColor

logger = logging.getLogger(__name__)


@dataclass
class ColorScheme:
    """
    Semantic colours used to show a region's synchronization phase.

    Dark theme values are the defaults.
    """

    # Text Colors
    text_primary: Tuple[int, int, int] = (255, 255, 255)   # #ffffff - Primary text
    text_secondary: Tuple[int, int, int] = (204, 204, 204) # #cccccc - Idle / secondary labels

    # Status Indicators
    status_success: Tuple[int, int, int] = (0, 255, 100)   # Steady
    status_warning: Tuple[int, int, int] = (255, 170, 0)   # #ffaa00 - Loading
    status_error: Tuple[int, int, int] = (255, 0, 0)       # #ff0000 - Error
    status_info: Tuple[int, int, int] = (0, 170, 255)      # #00aaff - Building

    def to_qcolor(self, color_tuple: Tuple[int, int, int]) -> QColor:
        """Convert RGB tuple to QColor object."""
        return QColor(*color_tuple)

    def to_hex(self, color_tuple: Tuple[int, int, int]) -> str:
        """
        Convert RGB tuple to hex color string.

        Args:
            color_tuple: RGB color tuple (r, g, b)

        Returns:
            str: Hex color string (e.g., "#ff0000")
        """
        r, g, b = color_tuple
        return f"#{r:02x}{g:02x}{b:02x}"

    @classmethod
    def create_dark_theme(cls) -> 'ColorScheme':
        return cls()

    @classmethod
    def create_light_theme(cls) -> 'ColorScheme':
        """Darker status colours that stay readable on light backgrounds."""
        return cls(
            text_primary=(0, 0, 0),
            text_secondary=(85, 85, 85),
            status_success=(0, 150, 0),         # Darker green
            status_warning=(200, 100, 0),       # Darker orange
            status_error=(200, 0, 0),           # Darker red
            status_info=(0, 100, 200),          # Darker blue
        )
