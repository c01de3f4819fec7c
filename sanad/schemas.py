"""Wire schemas for the legal assistant flow."""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .models import ConversationTurn


class MessagePart(BaseModel):
    text: str


class ChatMessage(BaseModel):
    """A chat history message as sent by the client."""

    role: Literal["user", "model"]
    parts: list[MessagePart]

    def to_turn(self) -> ConversationTurn:
        """Only the first part is replayed; a message without parts is empty."""
        text = self.parts[0].text if self.parts else ""
        return ConversationTurn(role=self.role, text=text)


class LegalAssistantInput(BaseModel):
    """Request accepted by the legal assistant flow."""

    model_config = ConfigDict(populate_by_name=True)

    query: str = Field(
        ...,
        description=(
            "The current legal question from the user. "
            "Can be in Tunisian Arabic, French, or English."
        ),
    )
    chat_history: list[ChatMessage] | None = Field(
        default=None,
        alias="chatHistory",
        description=(
            "The history of the conversation so far. "
            'The "model" role represents the AI assistant.'
        ),
    )

    def history(self) -> list[ConversationTurn]:
        return [message.to_turn() for message in self.chat_history or []]


class LegalAssistantOutput(BaseModel):
    """Structured output the model must return."""

    model_config = ConfigDict(str_strip_whitespace=True)

    explanation: str = Field(
        ...,
        min_length=1,
        description=(
            "The explanation of the legal steps and procedures in simple terms, "
            "provided in the language of the user's current query."
        ),
    )
