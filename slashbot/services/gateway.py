"""
Base interface for the remote repository gateway.

The workflow engine only talks to the hosting service through this
interface, so workflows can run against GitHub or an in-memory fake.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from slashbot.models.git import CommitAuthor, GitCommit, GitReference, PullRequestInfo, TreeEntry


class GatewayError(Exception):
    """Base exception for failed remote repository operations."""

    def __init__(self, operation: str, message: str, status: Optional[int] = None):
        super().__init__(f"{operation} failed: {message}")
        self.operation = operation
        self.message = message
        self.status = status


class NotFoundError(GatewayError):
    """The referenced repository, reference or object does not exist."""
    pass


class ConflictError(GatewayError):
    """The operation collides with existing state (e.g. reference exists)."""
    pass


class AuthenticationError(GatewayError):
    """The installation is not allowed to perform the operation."""
    pass


class RepositoryGateway(ABC):
    """Capabilities the workflows need from the code hosting service."""

    @abstractmethod
    async def get_reference(self, owner: str, repo: str, ref: str) -> GitReference:
        """
        Resolve a reference.

        Args:
            owner: Repository owner login
            repo: Repository name
            ref: Reference name relative to refs/ (e.g. 'heads/main')

        Returns:
            GitReference with the sha it points at

        Raises:
            NotFoundError: If the reference does not exist
        """
        pass

    @abstractmethod
    async def create_reference(self, owner: str, repo: str, ref: str, sha: str) -> GitReference:
        """
        Create a reference.

        Args:
            ref: Fully qualified reference name (e.g. 'refs/heads/topic')
            sha: Commit the reference points at

        Raises:
            ConflictError: If a reference with that name already exists
        """
        pass

    @abstractmethod
    async def update_reference(
        self,
        owner: str,
        repo: str,
        ref: str,
        sha: str,
        force: bool = False
    ) -> GitReference:
        """
        Repoint an existing reference.

        Args:
            ref: Fully qualified reference name
            sha: New commit sha
            force: Allow non fast-forward updates
        """
        pass

    @abstractmethod
    async def create_tree(
        self,
        owner: str,
        repo: str,
        base_tree: str,
        entries: List[TreeEntry]
    ) -> str:
        """
        Create a tree from a base tree and new entries.

        Args:
            base_tree: Sha of the base tree, or of a commit whose tree is used
            entries: Entries added on top of the base tree

        Returns:
            Sha of the new tree
        """
        pass

    @abstractmethod
    async def get_commit(self, owner: str, repo: str, sha: str) -> GitCommit:
        """Fetch a commit object."""
        pass

    @abstractmethod
    async def create_commit(
        self,
        owner: str,
        repo: str,
        message: str,
        author: CommitAuthor,
        tree_sha: str,
        parent_shas: List[str]
    ) -> GitCommit:
        """
        Create a commit. The tree and every parent must already exist.

        Returns:
            The created commit
        """
        pass

    @abstractmethod
    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str
    ) -> PullRequestInfo:
        """Open a pull request from head into base."""
        pass

    @abstractmethod
    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        """Post a comment on an issue or pull request."""
        pass
