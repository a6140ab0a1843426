"""
Transport-neutral message models.

The conversation core only sees IncomingMessage and produces Reply;
the Telegram adapter converts to and from the Bot API types.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


def normalize_command(token: str) -> str:
    """'/Month_Specific@my_bot' -> 'month_specific'"""
    command = token.lstrip("/")
    command = command.split("@", 1)[0]
    return command.lower()


class IncomingMessage(BaseModel):
    """A message received from a user."""
    model_config = ConfigDict(frozen=True)

    user_id: int = Field(..., description="Sender identity")
    chat_id: int = Field(..., description="Chat the reply goes to")
    text: str = Field(
        default="",
        description="Free text, or the command's arguments for commands"
    )
    command: Optional[str] = Field(
        default=None,
        description="Normalized command token, None for plain text"
    )

    @property
    def is_command(self) -> bool:
        return self.command is not None

    @classmethod
    def from_text(cls, user_id: int, chat_id: int, text: str) -> "IncomingMessage":
        """Build a message, recognizing a leading '/command' token."""
        text = text or ""
        stripped = text.strip()
        if stripped.startswith("/") and len(stripped) > 1:
            parts = stripped.split(maxsplit=1)
            return cls(
                user_id=user_id,
                chat_id=chat_id,
                command=normalize_command(parts[0]),
                text=parts[1] if len(parts) > 1 else "",
            )
        return cls(user_id=user_id, chat_id=chat_id, text=text)


class Reply(BaseModel):
    """A message to send back."""
    model_config = ConfigDict(frozen=True)

    chat_id: int
    text: str = Field(..., min_length=1)
    keyboard: Optional[list[list[str]]] = Field(
        default=None,
        description="Rows of selectable choices shown as reply buttons"
    )
    remove_keyboard: bool = Field(
        default=False,
        description="Hide any previously shown choices"
    )
    markdown: bool = False
