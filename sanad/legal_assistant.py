"""Tunisian legal assistant flow: retrieve, assemble, generate, shape."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .config import config
from .embeddings import EmbeddingService
from .errors import SanadError
from .generation import GenerationService
from .models import RetrievedContext
from .prompts import PromptAssembler, to_prompt_turns
from .retrieval import DocumentRetriever
from .schemas import LegalAssistantInput, LegalAssistantOutput
from .shaping import ResponseShaper
from .vector_store import get_vector_store

if TYPE_CHECKING:
    from .models import Answer

logger = config.get_logger(__name__)


class LegalAssistantFlow:
    """Answers legal questions using conversation history and retrieved context.

    The flow is stateless: the caller replays the conversation on every call,
    and a single attempt is made per call.
    """

    def __init__(
        self,
        retriever: DocumentRetriever | None = None,
        generator: GenerationService | None = None,
        collection_name: str | None = None,
        assembler: PromptAssembler | None = None,
        shaper: ResponseShaper | None = None,
    ) -> None:
        """Initialize the flow, building missing collaborators from config.

        Args:
            retriever: Document retriever. If None, one is built on the
                configured embedding model and vector store.
            generator: Generation service. If None, uses the configured model.
            collection_name: Knowledge collection. If None, uses
                config.LEGAL_DOCS_COLLECTION_NAME; retrieval is skipped when
                neither is set.
            assembler: Prompt assembler.
            shaper: Response shaper.
        """
        self.collection_name = collection_name or config.LEGAL_DOCS_COLLECTION_NAME
        if retriever is None and self.collection_name:
            try:
                retriever = build_retriever()
            except SanadError:
                logger.exception("Vector store unavailable. Retrieval is disabled.")
        self.retriever = retriever
        self.generator = generator or GenerationService()
        self.assembler = assembler or PromptAssembler()
        self.shaper = shaper or ResponseShaper()

        if not self.collection_name:
            logger.warning(
                "LEGAL_DOCS_COLLECTION_NAME is not set. Retrieval is disabled."
            )

    def _retrieve(self, query: str) -> RetrievedContext:
        if self.retriever is None or not self.collection_name:
            return RetrievedContext.empty()
        return self.retriever.retrieve(self.collection_name, query)

    def run(self, payload: LegalAssistantInput | dict[str, Any]) -> Answer:
        """Answer one request.

        Args:
            payload: ``{"query": ..., "chatHistory": [...]}`` or the parsed model.

        Returns:
            The Answer with provenance when context was retrieved.

        Raises:
            GenerationFailure: If no explanation could be generated.
        """
        request = (
            payload
            if isinstance(payload, LegalAssistantInput)
            else LegalAssistantInput.model_validate(payload)
        )
        logger.info("Processing legal question: %s", request.query)

        retrieved = self._retrieve(request.query)
        history = to_prompt_turns(request.history())
        generation_request = self.assembler.assemble(
            request.query, history, retrieved
        )
        output = self.generator.generate(generation_request, LegalAssistantOutput)
        return self.shaper.shape(output, retrieved)

    def ask(
        self,
        query: str,
        chat_history: list[dict[str, Any]] | None = None,
    ) -> Answer:
        return self.run({"query": query, "chatHistory": chat_history})


def build_retriever() -> DocumentRetriever:
    """Build a retriever on the configured embedding model and vector store."""
    return DocumentRetriever(EmbeddingService(), get_vector_store())
