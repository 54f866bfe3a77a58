"""
GitHub implementation of the repository gateway.

Uses PyGithub for the REST calls and for GitHub App installation
authentication. PyGithub is synchronous, so every call runs in a worker
thread and is awaited before the next one starts.
"""

import asyncio
from typing import Any, Callable, Dict, List, Optional

import requests
from github import Auth, Github, GithubException, InputGitAuthor, InputGitTreeElement
from github.GithubObject import NotSet

from slashbot.config import ConfigurationError, Settings
from slashbot.models.git import CommitAuthor, GitCommit, GitReference, PullRequestInfo, TreeEntry
from slashbot.services.gateway import (
    AuthenticationError,
    ConflictError,
    GatewayError,
    NotFoundError,
    RepositoryGateway,
)
from slashbot.utils.logging import get_logger
from slashbot.utils.metrics import MetricsCollector, track_api_call

logger = get_logger(__name__)

GIT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


def translate_github_error(operation: str, error: Exception) -> GatewayError:
    """
    Map a PyGithub or transport exception onto the gateway error taxonomy.

    Args:
        operation: Gateway operation that failed
        error: Exception raised by PyGithub or requests

    Returns:
        GatewayError subclass matching the HTTP status
    """
    if not isinstance(error, GithubException):
        return GatewayError(operation, str(error))

    status = error.status
    message = str(error)
    if isinstance(error.data, dict) and error.data.get("message"):
        message = error.data["message"]

    if status == 404:
        return NotFoundError(operation, message, status)
    if status in (409, 422):
        return ConflictError(operation, message, status)
    if status in (401, 403):
        return AuthenticationError(operation, message, status)
    return GatewayError(operation, message, status)


class GithubGateway(RepositoryGateway):
    """
    Repository gateway backed by an installation-scoped PyGithub client.

    One instance serves one event. PyGithub wants tree and commit objects
    rather than shas when creating commits, so objects fetched or created
    through this gateway are kept for the rest of the event.
    """

    def __init__(self, client: Github, metrics: Optional[MetricsCollector] = None):
        self._client = client
        self._metrics = metrics
        self._repos: Dict[str, Any] = {}
        self._refs: Dict[tuple, Any] = {}
        self._trees: Dict[str, Any] = {}
        self._commits: Dict[str, Any] = {}

    async def get_reference(self, owner: str, repo: str, ref: str) -> GitReference:
        repository = self._repo(owner, repo)
        git_ref = await self._call("get_reference", "GET", repository.get_git_ref, ref)
        return GitReference(ref=git_ref.ref, sha=git_ref.object.sha)

    async def create_reference(self, owner: str, repo: str, ref: str, sha: str) -> GitReference:
        repository = self._repo(owner, repo)
        git_ref = await self._call("create_reference", "POST", repository.create_git_ref, ref=ref, sha=sha)
        self._refs[(owner, repo, git_ref.ref)] = git_ref
        return GitReference(ref=git_ref.ref, sha=git_ref.object.sha)

    async def update_reference(
        self,
        owner: str,
        repo: str,
        ref: str,
        sha: str,
        force: bool = False
    ) -> GitReference:
        git_ref = self._refs.get((owner, repo, ref))
        if git_ref is None:
            repository = self._repo(owner, repo)
            # get_git_ref takes the name without the leading refs/
            short_ref = ref[len("refs/"):] if ref.startswith("refs/") else ref
            git_ref = await self._call("get_reference", "GET", repository.get_git_ref, short_ref)
            self._refs[(owner, repo, git_ref.ref)] = git_ref
        await self._call("update_reference", "PATCH", git_ref.edit, sha, force=force)
        return GitReference(ref=git_ref.ref, sha=sha)

    async def create_tree(
        self,
        owner: str,
        repo: str,
        base_tree: str,
        entries: List[TreeEntry]
    ) -> str:
        repository = self._repo(owner, repo)
        base = await self._tree(repository, base_tree)
        elements = [
            InputGitTreeElement(
                path=entry.path,
                mode=entry.mode,
                type=entry.type,
                content=entry.content if entry.content is not None else NotSet,
                sha=entry.sha if entry.sha is not None else NotSet,
            )
            for entry in entries
        ]
        tree = await self._call("create_tree", "POST", repository.create_git_tree, elements, base)
        self._trees[tree.sha] = tree
        return tree.sha

    async def get_commit(self, owner: str, repo: str, sha: str) -> GitCommit:
        repository = self._repo(owner, repo)
        commit = await self._commit(repository, sha)
        return self._to_commit(commit)

    async def create_commit(
        self,
        owner: str,
        repo: str,
        message: str,
        author: CommitAuthor,
        tree_sha: str,
        parent_shas: List[str]
    ) -> GitCommit:
        repository = self._repo(owner, repo)
        tree = await self._tree(repository, tree_sha)
        parents = [await self._commit(repository, sha) for sha in parent_shas]
        git_author = InputGitAuthor(
            author.name,
            author.email,
            author.date.strftime(GIT_DATE_FORMAT) if author.date else NotSet,
        )
        commit = await self._call(
            "create_commit",
            "POST",
            repository.create_git_commit,
            message,
            tree,
            parents,
            author=git_author,
        )
        self._commits[commit.sha] = commit
        return self._to_commit(commit)

    async def create_pull_request(
        self,
        owner: str,
        repo: str,
        title: str,
        head: str,
        base: str,
        body: str
    ) -> PullRequestInfo:
        repository = self._repo(owner, repo)
        pull = await self._call(
            "create_pull_request",
            "POST",
            repository.create_pull,
            base=base,
            head=head,
            title=title,
            body=body,
        )
        return PullRequestInfo(number=pull.number, title=pull.title, url=pull.html_url, head=head, base=base)

    async def create_issue_comment(self, owner: str, repo: str, issue_number: int, body: str) -> None:
        repository = self._repo(owner, repo)
        issue = await self._call("get_issue", "GET", repository.get_issue, issue_number)
        await self._call("create_issue_comment", "POST", issue.create_comment, body)

    def _repo(self, owner: str, repo: str):
        full_name = f"{owner}/{repo}"
        if full_name not in self._repos:
            self._repos[full_name] = self._client.get_repo(full_name, lazy=True)
        return self._repos[full_name]

    async def _tree(self, repository, sha: str):
        if sha not in self._trees:
            # Accepts a commit sha as well and returns that commit's root tree
            self._trees[sha] = await self._call("get_tree", "GET", repository.get_git_tree, sha)
        return self._trees[sha]

    async def _commit(self, repository, sha: str):
        if sha not in self._commits:
            self._commits[sha] = await self._call("get_commit", "GET", repository.get_git_commit, sha)
        return self._commits[sha]

    async def _call(self, operation: str, method: str, func: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
        async with track_api_call(self._metrics, operation, logger, method=method):
            try:
                return await asyncio.to_thread(func, *args, **kwargs)
            except (GithubException, requests.exceptions.RequestException) as e:
                raise translate_github_error(operation, e) from e

    @staticmethod
    def _to_commit(commit) -> GitCommit:
        author = None
        if commit.author is not None:
            author = CommitAuthor(name=commit.author.name, email=commit.author.email, date=commit.author.date)
        return GitCommit(
            sha=commit.sha,
            message=commit.message,
            author=author,
            tree_sha=commit.tree.sha,
            parent_shas=[parent.sha for parent in commit.parents],
        )


class GithubClientFactory:
    """Creates installation-scoped gateways for a GitHub App."""

    def __init__(self, settings: Settings):
        self._settings = settings
        self._app_auth: Optional[Auth.AppAuth] = None

    def _get_app_auth(self) -> Auth.AppAuth:
        if self._app_auth is None:
            if self._settings.github_app_id is None:
                raise ConfigurationError("GitHub App id is not configured (set GITHUB_APP_ID)")
            self._app_auth = Auth.AppAuth(self._settings.github_app_id, self._settings.load_private_key())
        return self._app_auth

    def create_gateway(
        self,
        installation_id: Optional[int],
        metrics: Optional[MetricsCollector] = None
    ) -> RepositoryGateway:
        """
        Build a gateway authenticated as one installation of the app.

        Args:
            installation_id: Installation id taken from the event
            metrics: Collector that records API call timings

        Returns:
            GithubGateway for the installation

        Raises:
            ConfigurationError: If the app credentials or installation id are missing
        """
        if installation_id is None:
            raise ConfigurationError("Event carries no installation id")

        installation_auth = self._get_app_auth().get_installation_auth(installation_id)
        client = Github(base_url=self._settings.github_api_url, auth=installation_auth)
        logger.debug(f"Created GitHub client for installation {installation_id}",
                     extra={"installation_id": installation_id})
        return GithubGateway(client, metrics=metrics)
