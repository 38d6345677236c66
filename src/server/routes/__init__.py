"""Route registration helpers."""

from .health import register_health_routes
from .logs import register_log_routes
from .summary import register_summary_routes

__all__ = [
    "register_health_routes",
    "register_log_routes",
    "register_summary_routes",
]
