"""Data models for the slash-command bot."""

from .api_response import WebhookResponse
from .command import ParsedCommand, SlashCommand
from .comment_event import CommentEvent, PayloadError
from .error import ErrorRecord
from .git import CommitAuthor, GitCommit, GitReference, PullRequestInfo, TreeEntry
from .workflow import CommentHandlingResult, WorkflowResult, WorkflowStep

__all__ = [
    # Command models
    "SlashCommand",
    "ParsedCommand",
    # Event models
    "CommentEvent",
    "PayloadError",
    # Git models
    "GitReference",
    "TreeEntry",
    "CommitAuthor",
    "GitCommit",
    "PullRequestInfo",
    # Workflow models
    "WorkflowStep",
    "WorkflowResult",
    "CommentHandlingResult",
    # Error models
    "ErrorRecord",
    # API response models
    "WebhookResponse",
]
