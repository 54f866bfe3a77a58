"""
Comment Handler component.

Entry point for issue comment events: filters out events the bot must not
react to, acknowledges the comment, then runs the workflow bound to the
slash command the comment starts with.
"""

from typing import Optional

from slashbot.bot_config import BotConfig
from slashbot.models.comment_event import CommentEvent
from slashbot.models.workflow import CommentHandlingResult
from slashbot.services.command_classifier import classify_comment
from slashbot.services.gateway import GatewayError
from slashbot.services.github_gateway import GithubClientFactory
from slashbot.services.workflow_engine import WorkflowEngine
from slashbot.utils.logging import get_logger, log_comment_event, log_error_with_context
from slashbot.utils.metrics import MetricsCollector, emit_metric

logger = get_logger(__name__)


def format_acknowledgement(preamble: str, author: str, body: str, token: str) -> str:
    """
    Build the comment echoing the author's comment and the detected command.

    Args:
        preamble: Fixed greeting from the bot configuration
        author: Login of the comment author
        body: Verbatim comment body
        token: Detected slash command, or "None"

    Returns:
        Markdown comment body
    """
    return f"{preamble}\n{author} said\n```\n{body}\n```\nFound the slash command: `{token}`\n"


class CommentHandler:
    """Handles issue comment events for one GitHub App."""

    def __init__(self, client_factory: GithubClientFactory, config: BotConfig):
        self.client_factory = client_factory
        self.config = config

    async def handle(self, event: CommentEvent) -> CommentHandlingResult:
        """
        Handle one issue comment event.

        Remote failures are logged and reported in the result; they are never
        raised to the caller, so the delivery counts as processed.

        Args:
            event: Parsed comment event

        Returns:
            CommentHandlingResult describing what the bot did
        """
        event_logger = logger.with_context(
            delivery_id=event.delivery_id,
            installation_id=event.installation_id,
            repository=event.full_name,
            issue_number=event.issue_number,
        )
        log_comment_event(event_logger, event.full_name, event.issue_number, event.action, event.author)

        if event.action != "created":
            event_logger.debug(f"Ignoring comment event with action {event.action}")
            return CommentHandlingResult(status="ignored", reason=f"action {event.action}")

        if event.author.endswith(self.config.bot_author_suffix):
            event_logger.debug("Issue comment was created by a bot")
            return CommentHandlingResult(status="ignored", reason="bot author")

        metrics = MetricsCollector(event.delivery_id, event.full_name, event.issue_number)
        metrics.start()

        try:
            gateway = self.client_factory.create_gateway(event.installation_id, metrics=metrics)
            parsed = classify_comment(event.body)
            event_logger = event_logger.with_context(command=parsed.token)
            event_logger.info(f"Classified comment as {parsed.command.value}")

            acknowledged = await self._acknowledge(gateway, event, parsed.token, event_logger)
            if acknowledged:
                metrics.record_comment()

            engine = WorkflowEngine(gateway, self.config, metrics=metrics)
            workflow = await engine.run(parsed.command, event)
        except Exception as e:
            log_error_with_context(event_logger, f"Failed to handle comment event: {e}", e)
            metrics.complete(status="failed", error_message=str(e))
            raise

        error_message: Optional[str] = None
        if workflow is not None and not workflow.succeeded:
            error_message = workflow.error.message if workflow.error else None
            event_logger.warning(
                f"Workflow {workflow.command} stopped at {workflow.failed_step.value}",
                extra={"completed_steps": [step.value for step in workflow.completed_steps]}
            )
        elif workflow is not None:
            event_logger.info(f"Workflow {workflow.command} completed")

        metrics.complete(status="failed" if error_message else "completed", error_message=error_message)
        emit_metric("comment_events_processed", 1, command=parsed.command.value)

        return CommentHandlingResult(
            status="processed",
            command=parsed.token,
            acknowledged=acknowledged,
            workflow=workflow,
        )

    async def _acknowledge(self, gateway, event: CommentEvent, token: str, event_logger) -> bool:
        message = format_acknowledgement(self.config.preamble, event.author, event.body, token)
        event_logger.debug(f"Echoing comment on {event.full_name}#{event.issue_number} by {event.author}")
        try:
            await gateway.create_issue_comment(event.owner, event.repo, event.issue_number, message)
        except GatewayError as e:
            log_error_with_context(event_logger, "Failed to comment on pull request", e)
            return False
        return True
