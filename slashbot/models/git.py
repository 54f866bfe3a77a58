"""Git object data models returned by the repository gateway."""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, model_validator


class GitReference(BaseModel):
    """Named pointer to a commit (e.g. refs/heads/main)."""

    model_config = ConfigDict(frozen=True)

    ref: str
    sha: str


class TreeEntry(BaseModel):
    """Entry used to build a new tree on top of a base tree."""

    model_config = ConfigDict(frozen=True)

    path: str
    mode: str = "100644"  # regular file
    type: str = "blob"
    content: Optional[str] = None
    sha: Optional[str] = None

    @model_validator(mode="after")
    def _content_or_sha(self) -> "TreeEntry":
        if (self.content is None) == (self.sha is None):
            raise ValueError("Tree entry needs exactly one of content or sha")
        return self


class CommitAuthor(BaseModel):
    """Identity and timestamp recorded on a commit."""

    model_config = ConfigDict(frozen=True)

    name: str
    email: str
    date: Optional[datetime] = None


class GitCommit(BaseModel):
    """Commit object."""

    model_config = ConfigDict(frozen=True)

    sha: str
    message: str
    author: Optional[CommitAuthor] = None
    tree_sha: str
    parent_shas: List[str] = []


class PullRequestInfo(BaseModel):
    """Pull request opened by a workflow."""

    model_config = ConfigDict(frozen=True)

    number: int
    title: str
    url: str
    head: str
    base: str
