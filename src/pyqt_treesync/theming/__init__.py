"""
Theming.

Semantic status colours for synchronization widgets.
"""

from .color_scheme import ColorScheme

__all__ = [
    "ColorScheme",
]
