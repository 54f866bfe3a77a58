"""Issue comment event data models."""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict


class PayloadError(ValueError):
    """Raised when a webhook payload cannot be turned into an event."""
    pass


class CommentEvent(BaseModel):
    """Issue comment event from a GitHub webhook delivery."""

    model_config = ConfigDict(frozen=True)

    action: str  # 'created', 'edited', 'deleted'
    owner: str
    repo: str
    issue_number: int
    author: str
    body: str
    installation_id: Optional[int] = None
    is_pull_request: bool = False
    delivery_id: Optional[str] = None

    @property
    def full_name(self) -> str:
        """Repository name in owner/name form."""
        return f"{self.owner}/{self.repo}"

    @classmethod
    def from_payload(cls, payload: Dict[str, Any], delivery_id: Optional[str] = None) -> "CommentEvent":
        """
        Build an event from a raw ``issue_comment`` webhook payload.

        Args:
            payload: Decoded JSON body of the delivery
            delivery_id: Value of the X-GitHub-Delivery header

        Returns:
            CommentEvent

        Raises:
            PayloadError: If a required field is missing or has the wrong type
        """
        if not isinstance(payload, dict):
            raise PayloadError("Payload is not a JSON object")

        try:
            repository = payload["repository"]
            issue = payload["issue"]
            comment = payload["comment"]
            installation = payload.get("installation") or {}

            return cls(
                action=payload["action"],
                owner=repository["owner"]["login"],
                repo=repository["name"],
                issue_number=issue["number"],
                author=comment["user"]["login"],
                body=comment["body"] if comment["body"] is not None else "",
                installation_id=installation.get("id"),
                is_pull_request="pull_request" in issue,
                delivery_id=delivery_id,
            )
        except (KeyError, TypeError) as e:
            raise PayloadError(f"Failed to parse issue comment event payload: missing {e}") from e
        except ValueError as e:
            raise PayloadError(f"Failed to parse issue comment event payload: {e}") from e
