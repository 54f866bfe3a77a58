"""
Webhook endpoints for GitHub App deliveries.
"""

import hashlib
import hmac
import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Header, HTTPException, Request

from slashbot.bot_config import load_bot_config
from slashbot.config import settings
from slashbot.models.api_response import WebhookResponse
from slashbot.models.comment_event import CommentEvent, PayloadError
from slashbot.services.comment_handler import CommentHandler
from slashbot.services.github_gateway import GithubClientFactory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/webhooks", tags=["webhooks"])

# Initialize comment handler
comment_handler = CommentHandler(GithubClientFactory(settings), load_bot_config(settings.bot_config_path))


def verify_webhook_signature(payload: bytes, signature: Optional[str], secret: str) -> bool:
    """
    Verify the X-Hub-Signature-256 header of a delivery.

    Args:
        payload: Raw request payload
        signature: Signature header value ('sha256=<hexdigest>')
        secret: Webhook secret shared with GitHub

    Returns:
        True if signature is valid, False otherwise
    """
    if not signature or not signature.startswith("sha256="):
        return False

    expected_signature = hmac.new(
        secret.encode(),
        payload,
        hashlib.sha256
    ).hexdigest()

    # Compare signatures (constant-time comparison)
    return hmac.compare_digest(signature[len("sha256="):], expected_signature)


async def process_comment_event_async(event: CommentEvent) -> None:
    """
    Process comment event in the background.

    Args:
        event: Comment event to process
    """
    try:
        await comment_handler.handle(event)
    except Exception as e:
        logger.error(f"Error processing comment event {event.delivery_id}: {e}", exc_info=True)


@router.post("/github", response_model=WebhookResponse)
async def handle_github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    x_github_event: str = Header("", alias="X-GitHub-Event"),
    x_github_delivery: Optional[str] = Header(None, alias="X-GitHub-Delivery"),
    x_hub_signature: Optional[str] = Header(None, alias="X-Hub-Signature-256")
) -> WebhookResponse:
    """
    Receive and process GitHub webhook deliveries.

    This endpoint:
    1. Validates the webhook signature when a secret is configured
    2. Ignores everything but created issue comments
    3. Parses the issue comment payload
    4. Returns 200 OK immediately and handles the comment in the background

    Raises:
        HTTPException: If signature validation fails or payload is invalid
    """
    try:
        payload = await request.body()

        if settings.webhook_secret and not verify_webhook_signature(
            payload, x_hub_signature, settings.webhook_secret
        ):
            logger.warning("Invalid webhook signature received")
            raise HTTPException(status_code=401, detail="Invalid webhook signature")

        if x_github_event == "ping":
            return WebhookResponse(status="pong", message="Webhook is configured")

        if x_github_event != "issue_comment":
            logger.info(f"Ignoring event type: {x_github_event}")
            return WebhookResponse(
                status="ignored",
                message=f"Event type {x_github_event} not processed"
            )

        try:
            payload_json: Dict[str, Any] = json.loads(payload)
            event = CommentEvent.from_payload(payload_json, delivery_id=x_github_delivery)
        except (json.JSONDecodeError, UnicodeDecodeError, PayloadError) as e:
            logger.error(f"Invalid issue comment event payload: {e}")
            raise HTTPException(status_code=400, detail="Invalid issue comment event payload")

        if event.action != "created":
            logger.info(f"Ignoring issue comment action: {event.action}")
            return WebhookResponse(
                status="ignored",
                message=f"Issue comment action {event.action} not processed"
            )

        logger.info(f"Received comment on {event.full_name}#{event.issue_number} by {event.author}")

        background_tasks.add_task(process_comment_event_async, event)

        return WebhookResponse(
            status="accepted",
            message=f"Comment on {event.full_name}#{event.issue_number} accepted for processing"
        )

    except HTTPException:
        raise
    except Exception as e:
        logger.error(f"Error handling webhook: {e}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error processing webhook")
