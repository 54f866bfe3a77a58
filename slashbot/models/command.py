"""Slash command data models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class SlashCommand(str, Enum):
    """Commands the bot recognises in a comment body."""

    NONE = "None"  # no slash command at the start of the comment
    CREATE_BRANCH = "/create-branch"
    CREATE_PR = "/create-pr"
    TEST_PR = "/testpr"
    UNKNOWN = "unknown"  # slash command present but not recognised

    @classmethod
    def from_token(cls, token: str) -> "SlashCommand":
        """Map a raw slash token to its command variant."""
        for command in cls:
            if command.value == token and command is not cls.UNKNOWN:
                return command
        return cls.UNKNOWN


class ParsedCommand(BaseModel):
    """Result of classifying a comment body."""

    model_config = ConfigDict(frozen=True)

    token: str  # verbatim token, or "None" when nothing matched
    command: SlashCommand
