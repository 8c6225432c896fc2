"""
Message DTO used across providers.

Defines the `Message` dataclass and the `Role` literal representing the sender
role. Content may be either plain text or a sequence of `ContentPart` objects.
The system prompt is passed separately to providers, so history messages are
authored by either the user or the assistant; tool results travel inside user
messages.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Literal, Tuple, Union

from ..dto.tool_call import ToolCall
from .content_part import ContentPart


# Message roles used in canonical conversation history.
Role = Literal["user", "assistant"]


@dataclass(frozen=True)
class Message:
    """A canonical chat message.

    Summary:
        Represents one conversation turn where ``content`` is either a raw
        string or an ordered tuple of structured content parts. Lists passed
        at construction are frozen into tuples so a message cannot change
        after it has been handed to a provider.

    Attributes:
        role: The role of the message author (``"user"`` or ``"assistant"``).
        content: Either a plain text string or a tuple of `ContentPart` items.

    Methods:
        parts: Content normalized to a tuple of parts.
        is_structured: Returns True when content is a sequence of parts.
        text_or_joined: Produces a best-effort plain text view.
        tool_calls: The tool calls carried by this message, in order.
    """

    role: Role
    content: Union[str, Tuple[ContentPart, ...]]

    def __post_init__(self) -> None:
        if not isinstance(self.content, str):
            object.__setattr__(self, "content", tuple(self.content))

    @classmethod
    def user(cls, content: Union[str, Iterable[ContentPart]]) -> "Message":
        return cls(role="user", content=content if isinstance(content, str) else tuple(content))

    @classmethod
    def assistant(cls, content: Union[str, Iterable[ContentPart]]) -> "Message":
        return cls(role="assistant", content=content if isinstance(content, str) else tuple(content))

    def parts(self) -> Tuple[ContentPart, ...]:
        """Return the content as a tuple of parts (a string becomes one text part)."""
        if isinstance(self.content, str):
            return (ContentPart.text_part(self.content),)
        return self.content

    def is_structured(self) -> bool:
        """Return True if the message content is a structured sequence of parts."""
        return not isinstance(self.content, str)

    def text_or_joined(self) -> str:
        """Return a flattened string representation of the message content.

        If the content is already a string, it is returned as-is. For
        structured content, text values are concatenated with newlines and
        non-text parts are represented by bracketed type tokens for compact
        logging.
        """
        if isinstance(self.content, str):
            return self.content
        parts: List[str] = []
        for p in self.content:
            if p.text:
                parts.append(p.text)
            else:
                parts.append(f"[{p.type}]")
        return "\n".join(parts)

    def tool_calls(self) -> List[ToolCall]:
        return [p.tool_call for p in self.parts() if p.type == "tool_call" and p.tool_call is not None]


__all__ = [
    "Message",
    "Role",
]
