"""Business logic services package."""

from slashbot.services.command_classifier import classify_comment
from slashbot.services.comment_handler import CommentHandler, format_acknowledgement
from slashbot.services.gateway import (
    AuthenticationError,
    ConflictError,
    GatewayError,
    NotFoundError,
    RepositoryGateway,
)
from slashbot.services.github_gateway import GithubClientFactory, GithubGateway
from slashbot.services.workflow_engine import WorkflowEngine

__all__ = [
    'classify_comment',
    'CommentHandler',
    'format_acknowledgement',
    'RepositoryGateway',
    'GatewayError',
    'NotFoundError',
    'ConflictError',
    'AuthenticationError',
    'GithubClientFactory',
    'GithubGateway',
    'WorkflowEngine',
]
