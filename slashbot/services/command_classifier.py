"""
Command Classifier component.

Extracts the slash command a comment starts with.
"""

import re

from slashbot.models.command import ParsedCommand, SlashCommand

# A slash followed by an ASCII word, optionally continued by dash-separated words.
# Anchored at the start of the comment; only the first command counts.
SLASH_COMMAND_PATTERN = re.compile(r"/\w+(?:-\w+)*", re.ASCII)


def classify_comment(body: str) -> ParsedCommand:
    """
    Classify a comment body into a slash command.

    Args:
        body: Raw comment text

    Returns:
        ParsedCommand with the verbatim token, or the NONE variant when the
        comment does not start with a slash command
    """
    match = SLASH_COMMAND_PATTERN.match(body or "")
    if match is None:
        return ParsedCommand(token=SlashCommand.NONE.value, command=SlashCommand.NONE)

    token = match.group(0)
    return ParsedCommand(token=token, command=SlashCommand.from_token(token))
