"""
Bot behaviour configuration.

Branch names, the committed file manifest and the pull request text are read
from a YAML manifest and handed to the workflow engine when it is built.
"""

from pathlib import Path
from typing import List, Optional, Union

import yaml
from pydantic import BaseModel, ValidationError, field_validator

from slashbot.config import ConfigurationError
from slashbot.models.git import TreeEntry
from slashbot.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_PATH = Path(__file__).parent / "bot_config.yaml"


def _check_template(template: str, **placeholders) -> None:
    """Render a template with sample values, rejecting unknown placeholders."""
    try:
        template.format(**placeholders)
    except (KeyError, IndexError, AttributeError) as e:
        raise ValueError(
            f"Unknown placeholder {e} in {template!r}; expected one of {sorted(placeholders)}"
        ) from e
    except ValueError as e:
        raise ValueError(f"Malformed template {template!r}: {e}") from e


class CommitAuthorConfig(BaseModel):
    """Identity used for commits created by the bot."""

    name: str
    email: str


class CommitConfig(BaseModel):
    """Commit message and author."""

    message: str
    author: CommitAuthorConfig


class FileConfig(BaseModel):
    """File committed by the branch workflow."""

    path: str
    content: str
    mode: str = "100644"

    def to_tree_entry(self) -> TreeEntry:
        return TreeEntry(path=self.path, mode=self.mode, type="blob", content=self.content)


class PullRequestConfig(BaseModel):
    """Text of pull requests opened by the bot."""

    title: str
    body: str


class BotConfig(BaseModel):
    """Complete bot behaviour manifest."""

    preamble: str
    bot_author_suffix: str = "[bot]"
    base_branch: str = "main"
    branch_template: str
    commit: CommitConfig
    files: List[FileConfig]
    pull_request: PullRequestConfig
    link_comment_template: str = "Opened pull request #{number}: {url}"

    @field_validator("files")
    @classmethod
    def _files_not_empty(cls, files: List[FileConfig]) -> List[FileConfig]:
        if not files:
            raise ValueError("At least one file must be configured")
        return files

    @field_validator("branch_template")
    @classmethod
    def _branch_template_renders(cls, template: str) -> str:
        _check_template(template, owner="octo", repo="hello", issue_number=1, author="alice")
        return template

    @field_validator("link_comment_template")
    @classmethod
    def _link_template_renders(cls, template: str) -> str:
        _check_template(template, number=1, title="title", url="https://example.com/pull/1")
        return template

    def branch_name(self, owner: str, repo: str, issue_number: int, author: str) -> str:
        """
        Render the bot branch name for one event.

        Args:
            owner: Repository owner login
            repo: Repository name
            issue_number: Issue or pull request the command came from
            author: Login of the comment author

        Returns:
            Branch name without the refs/heads/ prefix
        """
        return self.branch_template.format(
            owner=owner,
            repo=repo,
            issue_number=issue_number,
            author=author,
        )

    def tree_entries(self) -> List[TreeEntry]:
        return [file.to_tree_entry() for file in self.files]


def load_bot_config(config_path: Optional[Union[str, Path]] = None) -> BotConfig:
    """
    Load and validate the bot manifest from YAML.

    Args:
        config_path: Path to the manifest. Uses the bundled bot_config.yaml if None.

    Returns:
        Validated BotConfig

    Raises:
        ConfigurationError: If the file is missing, unparseable or invalid
    """
    path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH

    if not path.exists():
        raise ConfigurationError(f"Bot configuration not found: {path}")

    try:
        with open(path, 'r') as f:
            raw = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse bot configuration {path}: {e}")
        raise ConfigurationError(f"Malformed bot configuration {path}: {e}") from e

    try:
        config = BotConfig(**raw)
    except (ValidationError, TypeError) as e:
        raise ConfigurationError(f"Invalid bot configuration {path}: {e}") from e

    logger.info(f"Loaded bot configuration from {path}")
    return config
