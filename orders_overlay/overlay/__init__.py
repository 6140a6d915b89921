"""
Syntax overlay for the order editor.

    from orders_overlay.overlay import OverlayService

    service = OverlayService()
    context, content = service.evaluate("BUILD Homeworld 5 Destroyer", 10)
"""

from .content_generator import ContentGenerator, PerformanceMetrics
from .context_analyzer import ContextAnalyzer
from .models import (
    ContentKind,
    ContextType,
    ItemKind,
    OverlayContent,
    OverlayContext,
    OverlayItem,
    OverlaySection,
)
from .service import OverlayService

__all__ = [
    "ContentGenerator",
    "ContextAnalyzer",
    "ContentKind",
    "ContextType",
    "ItemKind",
    "OverlayContent",
    "OverlayContext",
    "OverlayItem",
    "OverlaySection",
    "OverlayService",
    "PerformanceMetrics",
]
