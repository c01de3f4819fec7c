"""Data models for the legal assistant retrieval pipeline."""

from dataclasses import dataclass, field
from typing import Any

USER_ROLE = "user"
MODEL_ROLE = "model"


@dataclass(frozen=True)
class Query:
    """A single question asked by the user."""

    text: str
    locale: str | None = None

    @property
    def is_blank(self) -> bool:
        return not self.text.strip()


@dataclass(frozen=True)
class ConversationTurn:
    """One prior message of the conversation, replayed by the caller."""

    role: str
    text: str


@dataclass(frozen=True)
class PromptTurn:
    """A conversation turn tagged with role flags for prompt rendering."""

    role: str
    text: str
    is_user: bool
    is_model: bool


@dataclass
class DocumentChunk:
    """Represents a chunk of indexed legal knowledge."""

    id: str
    text: str
    source: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def payload(self) -> dict[str, Any]:
        """Payload stored next to the vector in the store.

        Returns:
            The chunk metadata merged with its text and source label.
        """
        payload: dict[str, Any] = {**self.metadata, "text": self.text}
        if self.source:
            payload["source"] = self.source
        return payload


@dataclass(frozen=True)
class SearchHit:
    """A nearest-neighbour result returned by a vector store."""

    id: str
    score: float
    payload: dict[str, Any]


@dataclass(frozen=True)
class RetrievedChunk:
    """Text, source label and similarity of one retrieved chunk."""

    text: str
    source: str | None
    score: float

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"text": self.text}
        if self.source is not None:
            data["source"] = self.source
        data["score"] = self.score
        return data


@dataclass(frozen=True)
class RetrievedContext:
    """Retrieved chunks in descending score order plus their prompt rendering."""

    chunks: tuple[RetrievedChunk, ...] = ()
    assembled_text: str = ""

    @classmethod
    def empty(cls) -> "RetrievedContext":
        return cls()

    @property
    def is_empty(self) -> bool:
        return not self.chunks


@dataclass(frozen=True)
class GenerationRequest:
    """Everything the generation step needs for one call."""

    system_knowledge: str
    query: str
    retrieved_context: str | None = None
    history: tuple[PromptTurn, ...] = ()


@dataclass(frozen=True)
class Answer:
    """Final answer returned to the caller."""

    explanation: str
    retrieved_context_sources: tuple[RetrievedChunk, ...] | None = None

    def to_dict(self) -> dict[str, Any]:
        """Serialize using the public field names.

        Returns:
            The answer dictionary; ``retrievedContextSources`` is left out
            when no sources were retrieved.
        """
        data: dict[str, Any] = {"explanation": self.explanation}
        if self.retrieved_context_sources:
            data["retrievedContextSources"] = [
                source.to_dict() for source in self.retrieved_context_sources
            ]
        return data
