"""
Metrics collection and emission for observability.

This module provides metrics tracking for:
- Comment event handling time
- Workflow steps completed
- Comments posted back to the issue
- GitHub API call latency
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from slashbot.utils.logging import get_logger, log_api_call

logger = get_logger(__name__)


class MetricsCollector:
    """
    Collects metrics while a single comment event is handled.

    Tracks:
    - Handling start/end time
    - Workflow steps completed
    - Comments posted
    - API call counts and latency per gateway operation
    """

    def __init__(self, delivery_id: Optional[str], repository: str, issue_number: int):
        self.delivery_id = delivery_id
        self.repository = repository
        self.issue_number = issue_number

        self.start_time: Optional[datetime] = None
        self.end_time: Optional[datetime] = None
        self.duration_ms: Optional[int] = None

        self.steps_completed: int = 0
        self.comments_posted: int = 0

        self.api_calls: Dict[str, int] = {}
        self.api_latencies: Dict[str, list[float]] = {}

        self.status: str = "running"
        self.error_message: Optional[str] = None

    def start(self) -> None:
        """Mark handling start."""
        self.start_time = datetime.now(timezone.utc)
        self.status = "running"

    def complete(self, status: str = "completed", error_message: Optional[str] = None) -> None:
        """
        Mark handling completion.

        Args:
            status: Final status ('completed', 'failed', 'ignored')
            error_message: Error message if a workflow step failed
        """
        self.end_time = datetime.now(timezone.utc)
        self.status = status
        self.error_message = error_message

        if self.start_time:
            duration = (self.end_time - self.start_time).total_seconds()
            self.duration_ms = int(duration * 1000)

        logger.info(
            f"Metrics collection completed for delivery {self.delivery_id}",
            extra={
                "delivery_id": self.delivery_id,
                "repository": self.repository,
                "issue_number": self.issue_number,
                "status": self.status,
                "duration_ms": self.duration_ms,
                "steps_completed": self.steps_completed,
                "comments_posted": self.comments_posted,
            }
        )

    def record_step(self) -> None:
        """Record one completed workflow step."""
        self.steps_completed += 1

    def record_comment(self) -> None:
        """Record one comment posted to the issue."""
        self.comments_posted += 1

    def record_api_call(self, operation: str, duration_ms: float) -> None:
        """
        Record API call and latency.

        Args:
            operation: Gateway operation name (e.g., 'create_tree')
            duration_ms: Call duration in milliseconds
        """
        self.api_calls[operation] = self.api_calls.get(operation, 0) + 1
        self.api_latencies.setdefault(operation, []).append(duration_ms)

    def get_metrics_summary(self) -> Dict[str, Any]:
        """
        Get summary of collected metrics.

        Returns:
            Dictionary of metrics
        """
        summary = {
            "delivery_id": self.delivery_id,
            "repository": self.repository,
            "issue_number": self.issue_number,
            "status": self.status,
            "start_time": self.start_time.isoformat() if self.start_time else None,
            "end_time": self.end_time.isoformat() if self.end_time else None,
            "duration_ms": self.duration_ms,
            "steps_completed": self.steps_completed,
            "comments_posted": self.comments_posted,
            "api_calls": self.api_calls,
        }

        if self.api_latencies:
            latency_stats = {}
            for operation, latencies in self.api_latencies.items():
                if latencies:
                    latency_stats[operation] = {
                        "count": len(latencies),
                        "min_ms": round(min(latencies), 2),
                        "max_ms": round(max(latencies), 2),
                        "avg_ms": round(sum(latencies) / len(latencies), 2),
                    }
            summary["api_latencies"] = latency_stats

        if self.error_message:
            summary["error_message"] = self.error_message

        return summary


@asynccontextmanager
async def track_api_call(
    metrics_collector: Optional[MetricsCollector],
    operation: str,
    logger_adapter,
    method: str = "",
    service: str = "github"
):
    """
    Context manager to track API call timing.

    Usage:
        async with track_api_call(metrics, "create_tree", logger, method="POST"):
            tree = await asyncio.to_thread(repo.create_git_tree, entries, base)

    Args:
        metrics_collector: Metrics collector (optional)
        operation: Gateway operation name
        logger_adapter: Logger for logging API calls
        method: HTTP method used by the operation
        service: Remote service name
    """
    start_time = time.time()
    error = None

    try:
        yield
    except Exception as e:
        error = e
        raise
    finally:
        duration_ms = (time.time() - start_time) * 1000

        if metrics_collector:
            metrics_collector.record_api_call(operation, duration_ms)

        log_api_call(
            logger_adapter,
            service=service,
            endpoint=operation,
            method=method,
            status_code=getattr(error, "status", None),
            duration_ms=duration_ms,
            error=str(error) if error else None
        )


def emit_metric(metric_name: str, value: float, **tags: Any) -> None:
    """
    Emit a metric point.

    Metrics are written to the structured log; a log shipper forwards them
    to whatever monitoring backend is in use.

    Args:
        metric_name: Metric name
        value: Metric value
        **tags: Metric tags/labels
    """
    logger.info(
        f"Metric: {metric_name}",
        extra={
            "metric_name": metric_name,
            "metric_value": value,
            "metric_tags": tags,
        }
    )
