"""
Workflow Engine component.

Runs the remote repository workflows bound to slash commands. Every step
feeds the next (reference -> tree -> commit -> reference), so steps run
strictly in order and the first failing step ends the run. Objects created
before the failure are left in place.
"""

from datetime import datetime, timezone
from typing import Awaitable, Callable, Dict, Optional

from slashbot.bot_config import BotConfig
from slashbot.models.command import SlashCommand
from slashbot.models.comment_event import CommentEvent
from slashbot.models.error import ErrorRecord
from slashbot.models.git import CommitAuthor
from slashbot.models.workflow import WorkflowResult, WorkflowStep
from slashbot.services.gateway import GatewayError, RepositoryGateway
from slashbot.utils.logging import get_logger, log_error_with_context, log_workflow_step
from slashbot.utils.metrics import MetricsCollector

logger = get_logger(__name__)


class StepFailed(Exception):
    """Internal signal that a step failed and the run must stop."""
    pass


class WorkflowRun:
    """Bookkeeping for a single workflow run."""

    def __init__(self, command: str, logger_adapter, metrics: Optional[MetricsCollector] = None):
        self.result = WorkflowResult(command=command)
        self._logger = logger_adapter
        self._metrics = metrics

    async def step(self, step: WorkflowStep, operation: Awaitable):
        """
        Await one remote operation as a named step.

        Raises:
            StepFailed: If the operation raised a GatewayError
        """
        command = self.result.command
        log_workflow_step(self._logger, command, step.value, "started")
        try:
            value = await operation
        except GatewayError as e:
            self.result.failed_step = step
            self.result.error = ErrorRecord(
                step=step.value,
                error_type=type(e).__name__,
                message=e.message,
                status_code=e.status,
                timestamp=datetime.now(timezone.utc),
            )
            log_error_with_context(
                self._logger,
                f"Workflow {command} aborted at {step.value}: {e}",
                e,
                command=command,
                step=step.value,
                completed_steps=[s.value for s in self.result.completed_steps],
            )
            raise StepFailed(step.value) from e

        self.result.completed_steps.append(step)
        if self._metrics:
            self._metrics.record_step()
        log_workflow_step(self._logger, command, step.value, "completed")
        return value


class WorkflowEngine:
    """Maps slash commands to gateway workflows and runs them."""

    def __init__(
        self,
        gateway: RepositoryGateway,
        config: BotConfig,
        metrics: Optional[MetricsCollector] = None
    ):
        self.gateway = gateway
        self.config = config
        self.metrics = metrics
        self._workflows: Dict[SlashCommand, Callable[[CommentEvent], Awaitable[WorkflowResult]]] = {
            SlashCommand.CREATE_BRANCH: self.create_branch_with_files,
            SlashCommand.CREATE_PR: self.open_pull_request,
            SlashCommand.TEST_PR: self.create_branch_and_pull_request,
        }

    def supports(self, command: SlashCommand) -> bool:
        return command in self._workflows

    async def run(self, command: SlashCommand, event: CommentEvent) -> Optional[WorkflowResult]:
        """
        Run the workflow bound to a command.

        Args:
            command: Classified slash command
            event: Comment event the command came from

        Returns:
            WorkflowResult, or None when no workflow is bound to the command
        """
        workflow = self._workflows.get(command)
        if workflow is None:
            logger.debug(f"No workflow bound to command {command.value}")
            return None
        return await workflow(event)

    def branch_name(self, event: CommentEvent) -> str:
        return self.config.branch_name(event.owner, event.repo, event.issue_number, event.author)

    async def create_branch_with_files(self, event: CommentEvent) -> WorkflowResult:
        """
        Create the bot branch from the base branch and commit the configured files to it.

        Args:
            event: Comment event that triggered the workflow

        Returns:
            WorkflowResult listing completed steps and the failing step, if any
        """
        run = self._start(SlashCommand.CREATE_BRANCH, event)
        try:
            await self._create_branch_with_files(run, event)
        except StepFailed:
            pass
        return run.result

    async def open_pull_request(self, event: CommentEvent) -> WorkflowResult:
        """
        Open a pull request from the bot branch into the base branch.

        The head branch must already exist.
        """
        run = self._start(SlashCommand.CREATE_PR, event)
        try:
            await self._open_pull_request(run, event)
        except StepFailed:
            pass
        return run.result

    async def create_branch_and_pull_request(self, event: CommentEvent) -> WorkflowResult:
        """
        Create the bot branch with files, open a pull request from it and
        link the pull request on the originating issue.
        """
        run = self._start(SlashCommand.TEST_PR, event)
        try:
            await self._create_branch_with_files(run, event)
            pull_request = await self._open_pull_request(run, event)
            link = self.config.link_comment_template.format(
                number=pull_request.number,
                title=pull_request.title,
                url=pull_request.url,
            )
            await run.step(
                WorkflowStep.POST_PULL_REQUEST_LINK,
                self.gateway.create_issue_comment(event.owner, event.repo, event.issue_number, link),
            )
            if self.metrics:
                self.metrics.record_comment()
        except StepFailed:
            pass
        return run.result

    def _start(self, command: SlashCommand, event: CommentEvent) -> WorkflowRun:
        run_logger = logger.with_context(
            delivery_id=event.delivery_id,
            repository=event.full_name,
            issue_number=event.issue_number,
        )
        run_logger.info(f"Running workflow {command.value}")
        return WorkflowRun(command.value, run_logger, self.metrics)

    async def _create_branch_with_files(self, run: WorkflowRun, event: CommentEvent) -> None:
        owner, repo = event.owner, event.repo
        branch_ref = f"refs/heads/{self.branch_name(event)}"

        base_ref = await run.step(
            WorkflowStep.GET_BASE_REFERENCE,
            self.gateway.get_reference(owner, repo, f"heads/{self.config.base_branch}"),
        )

        new_ref = await run.step(
            WorkflowStep.CREATE_BRANCH,
            self.gateway.create_reference(owner, repo, branch_ref, base_ref.sha),
        )
        run.result.branch_ref = new_ref.ref

        # The base commit sha stands in for its root tree
        tree_sha = await run.step(
            WorkflowStep.CREATE_TREE,
            self.gateway.create_tree(owner, repo, base_ref.sha, self.config.tree_entries()),
        )
        run.result.tree_sha = tree_sha

        base_commit = await run.step(
            WorkflowStep.GET_BASE_COMMIT,
            self.gateway.get_commit(owner, repo, base_ref.sha),
        )

        author = CommitAuthor(
            name=self.config.commit.author.name,
            email=self.config.commit.author.email,
            date=datetime.now(timezone.utc),
        )
        commit = await run.step(
            WorkflowStep.CREATE_COMMIT,
            self.gateway.create_commit(
                owner,
                repo,
                self.config.commit.message,
                author,
                tree_sha,
                [base_commit.sha],
            ),
        )
        run.result.commit_sha = commit.sha

        await run.step(
            WorkflowStep.UPDATE_BRANCH,
            self.gateway.update_reference(owner, repo, new_ref.ref, commit.sha, force=True),
        )

    async def _open_pull_request(self, run: WorkflowRun, event: CommentEvent):
        pull_request = await run.step(
            WorkflowStep.CREATE_PULL_REQUEST,
            self.gateway.create_pull_request(
                event.owner,
                event.repo,
                title=self.config.pull_request.title,
                head=self.branch_name(event),
                base=self.config.base_branch,
                body=self.config.pull_request.body,
            ),
        )
        run.result.pull_request = pull_request
        return pull_request
