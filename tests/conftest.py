"""
Shared fixtures: an in-memory, content-addressed repository gateway and
ready-made comment events.
"""

import hashlib
import json
from typing import Any, Dict, List, Optional, Tuple

import pytest

from slashbot.bot_config import load_bot_config
from slashbot.models.comment_event import CommentEvent
from slashbot.models.git import CommitAuthor, GitCommit, GitReference, PullRequestInfo, TreeEntry
from slashbot.services.gateway import ConflictError, GatewayError, NotFoundError, RepositoryGateway


def _hash(kind: str, payload: Any) -> str:
    return hashlib.sha1(f"{kind}:{json.dumps(payload, sort_keys=True, default=str)}".encode()).hexdigest()


class InMemoryGateway(RepositoryGateway):
    """Repository gateway holding one repository's objects in dictionaries."""

    def __init__(self):
        self.refs: Dict[str, str] = {}
        self.trees: Dict[str, Dict[str, Dict[str, str]]] = {}
        self.commits: Dict[str, GitCommit] = {}
        self.pull_requests: List[PullRequestInfo] = []
        self.comments: List[Tuple[int, str]] = []
        self.calls: List[str] = []
        self._failures: Dict[str, GatewayError] = {}

        root_tree = self._store_tree({"README.md": {"mode": "100644", "sha": _hash("blob", "hello")}})
        root = GitCommit(sha=_hash("commit", "root"), message="Initial commit", tree_sha=root_tree, parent_shas=[])
        self.commits[root.sha] = root
        self.refs["refs/heads/main"] = root.sha

    def fail_on(self, operation: str, error: Optional[GatewayError] = None) -> None:
        """Make every later call of an operation raise."""
        self._failures[operation] = error or GatewayError(operation, "injected failure", 500)

    def _enter(self, operation: str) -> None:
        self.calls.append(operation)
        if operation in self._failures:
            raise self._failures[operation]

    def _store_tree(self, entries: Dict[str, Dict[str, str]]) -> str:
        sha = _hash("tree", entries)
        self.trees[sha] = entries
        return sha

    async def get_reference(self, owner: str, repo: str, ref: str) -> GitReference:
        self._enter("get_reference")
        full_ref = f"refs/{ref}"
        if full_ref not in self.refs:
            raise NotFoundError("get_reference", "Not Found", 404)
        return GitReference(ref=full_ref, sha=self.refs[full_ref])

    async def create_reference(self, owner: str, repo: str, ref: str, sha: str) -> GitReference:
        self._enter("create_reference")
        if ref in self.refs:
            raise ConflictError("create_reference", "Reference already exists", 422)
        if sha not in self.commits:
            raise ConflictError("create_reference", "Object does not exist", 422)
        self.refs[ref] = sha
        return GitReference(ref=ref, sha=sha)

    async def update_reference(self, owner: str, repo: str, ref: str, sha: str, force: bool = False) -> GitReference:
        self._enter("update_reference")
        if ref not in self.refs:
            raise NotFoundError("update_reference", "Reference does not exist", 404)
        if sha not in self.commits:
            raise ConflictError("update_reference", "Object does not exist", 422)
        if not force and self.refs[ref] not in self.commits[sha].parent_shas:
            raise ConflictError("update_reference", "Update is not a fast forward", 422)
        self.refs[ref] = sha
        return GitReference(ref=ref, sha=sha)

    async def create_tree(self, owner: str, repo: str, base_tree: str, entries: List[TreeEntry]) -> str:
        self._enter("create_tree")
        if base_tree in self.commits:
            base_tree = self.commits[base_tree].tree_sha
        if base_tree not in self.trees:
            raise NotFoundError("create_tree", "Base tree does not exist", 404)
        merged = dict(self.trees[base_tree])
        for entry in entries:
            blob_sha = entry.sha or _hash("blob", entry.content)
            merged[entry.path] = {"mode": entry.mode, "sha": blob_sha}
        return self._store_tree(merged)

    async def get_commit(self, owner: str, repo: str, sha: str) -> GitCommit:
        self._enter("get_commit")
        if sha not in self.commits:
            raise NotFoundError("get_commit", "Not Found", 404)
        return self.commits[sha]

    async def create_commit(
        self,
        owner: str,
        repo: str,
        message: str,
        author: CommitAuthor,
        tree_sha: str,
        parent_shas: List[str]
    ) -> GitCommit:
        self._enter("create_commit")
        if tree_sha not in self.trees:
            raise ConflictError("create_commit", "Tree does not exist", 422)
        if any(parent not in self.commits for parent in parent_shas):
            raise ConflictError("create_commit", "Parent does not exist", 422)
        sha = _hash("commit", [message, author.model_dump(), tree_sha, parent_shas])
        commit = GitCommit(sha=sha, message=message, author=author, tree_sha=tree_sha, parent_shas=list(parent_shas))
        self.commits[sha] = commit
        return commit

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str
    ) -> PullRequestInfo:
        self._enter("create_pull_request")
        if f"refs/heads/{head}" not in self.refs:
            raise ConflictError("create_pull_request", "Validation Failed: head does not exist", 422)
        number = 100 + len(self.pull_requests)
        pull_request = PullRequestInfo(
            number=number,
            title=title,
            url=f"https://github.com/{owner}/{repo}/pull/{number}",
            head=head,
            base=base,
        )
        self.pull_requests.append(pull_request)
        return pull_request

    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        self._enter("create_issue_comment")
        self.comments.append((issue_number, body))


class FakeClientFactory:
    """Client factory handing out a fixed gateway."""

    def __init__(self, gateway: RepositoryGateway):
        self.gateway = gateway
        self.installations: List[Optional[int]] = []

    def create_gateway(self, installation_id, metrics=None):
        self.installations.append(installation_id)
        return self.gateway


@pytest.fixture
def gateway():
    """In-memory gateway with a main branch holding one commit."""
    return InMemoryGateway()


@pytest.fixture
def client_factory(gateway):
    """Client factory returning the in-memory gateway."""
    return FakeClientFactory(gateway)


@pytest.fixture
def bot_config():
    """Bot configuration bundled with the package."""
    return load_bot_config()


@pytest.fixture
def make_event():
    """Build comment events with sensible defaults."""
    def _make_event(**overrides) -> CommentEvent:
        fields = {
            "action": "created",
            "owner": "octo",
            "repo": "hello",
            "issue_number": 7,
            "author": "alice",
            "body": "/create-branch please",
            "installation_id": 42,
            "is_pull_request": True,
            "delivery_id": "delivery-1",
        }
        fields.update(overrides)
        return CommentEvent(**fields)

    return _make_event
