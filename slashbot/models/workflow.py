"""Workflow result data models."""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel

from .error import ErrorRecord
from .git import PullRequestInfo


class WorkflowStep(str, Enum):
    """Remote operations performed by the workflows, in execution order."""

    GET_BASE_REFERENCE = "get_base_reference"
    CREATE_BRANCH = "create_branch"
    CREATE_TREE = "create_tree"
    GET_BASE_COMMIT = "get_base_commit"
    CREATE_COMMIT = "create_commit"
    UPDATE_BRANCH = "update_branch"
    CREATE_PULL_REQUEST = "create_pull_request"
    POST_PULL_REQUEST_LINK = "post_pull_request_link"


class WorkflowResult(BaseModel):
    """Outcome of one workflow run.

    Objects created before a failing step are left in place; the result
    records how far the sequence got.
    """

    command: str
    completed_steps: List[WorkflowStep] = []
    failed_step: Optional[WorkflowStep] = None
    error: Optional[ErrorRecord] = None
    branch_ref: Optional[str] = None
    tree_sha: Optional[str] = None
    commit_sha: Optional[str] = None
    pull_request: Optional[PullRequestInfo] = None

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None


class CommentHandlingResult(BaseModel):
    """Outcome of handling one comment event."""

    status: str  # 'ignored' or 'processed'
    reason: Optional[str] = None
    command: Optional[str] = None
    acknowledged: bool = False
    workflow: Optional[WorkflowResult] = None
