"""
Utility modules for the slash-command bot.
"""

from slashbot.utils.logging import (
    get_logger,
    setup_logging,
    log_comment_event,
    log_workflow_step,
    log_api_call,
    log_error_with_context,
)
from slashbot.utils.metrics import (
    MetricsCollector,
    track_api_call,
    emit_metric,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "log_comment_event",
    "log_workflow_step",
    "log_api_call",
    "log_error_with_context",
    "MetricsCollector",
    "track_api_call",
    "emit_metric",
]
