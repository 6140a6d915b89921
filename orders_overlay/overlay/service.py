"""
One overlay pipeline per editing session.

Wires a registry, analyzer and generator together so a host (the HTTP
surface, a test, an editor plugin) can go from (text, cursor) to renderable
content in one call. Instances are independent; give each session or
thread its own.
"""

from typing import Dict, Tuple

from orders_overlay.commands.registry import CommandRegistry
from orders_overlay.overlay.content_generator import ContentGenerator
from orders_overlay.overlay.context_analyzer import ContextAnalyzer
from orders_overlay.overlay.models import OverlayContent, OverlayContext
from orders_overlay.telemetry import OverlayTelemetry


class OverlayService:
    def __init__(
        self,
        registry: CommandRegistry = None,
        telemetry: OverlayTelemetry = None,
        use_cache: bool = True,
    ):
        self.telemetry = telemetry or (registry.telemetry if registry is not None else OverlayTelemetry())
        self.registry = registry or CommandRegistry(telemetry=self.telemetry)
        self.analyzer = ContextAnalyzer(self.registry, telemetry=self.telemetry, use_cache=use_cache)
        self.generator = ContentGenerator(self.registry, telemetry=self.telemetry, use_cache=use_cache)

    def evaluate(self, text, cursor_position=0) -> Tuple[OverlayContext, OverlayContent]:
        """Context and (size-checked) content for one editor event."""
        context = self.analyzer.analyze_context(text, cursor_position)
        content = self.generator.optimize_content(self.generator.generate_content(context))
        return context, content

    def clear_caches(self) -> None:
        self.analyzer.clear_caches()
        self.generator.clear_caches()

    def status(self) -> Dict:
        return {
            "healthy": self.registry.is_healthy(),
            "registry": self.registry.get_service_status().to_dict(),
            "analyzer_cache": self.analyzer.get_cache_stats(),
            "generator_cache": self.generator.get_cache_stats(),
            "telemetry": self.telemetry.get_session_stats(),
        }
