"""
Surfaces: the main app screen and the expanded-notification screen.
"""
from .content_surface import ContentSurface
from .main_surface import MainSurface

__all__ = ["MainSurface", "ContentSurface"]
