"""Sanad - retrieval-augmented Tunisian legal assistant."""

from .document_processing import DocumentLoader, TextChunker
from .embeddings import EmbeddingService
from .errors import (
    ConfigurationError,
    EmbeddingUnavailable,
    GenerationFailure,
    SanadError,
    StoreUnavailable,
)
from .generation import GenerationService
from .ingestion import IngestionPipeline, bootstrap_collection
from .legal_assistant import LegalAssistantFlow
from .models import (
    Answer,
    ConversationTurn,
    DocumentChunk,
    GenerationRequest,
    PromptTurn,
    Query,
    RetrievedChunk,
    RetrievedContext,
    SearchHit,
)
from .prompts import PromptAssembler, render_prompt, to_prompt_turns
from .retrieval import DocumentRetriever
from .schemas import LegalAssistantInput, LegalAssistantOutput
from .shaping import ResponseShaper
from .vector_store import FaissVectorStore, SQLiteVectorStore, get_vector_store

__all__ = [
    "Answer",
    "ConfigurationError",
    "ConversationTurn",
    "DocumentChunk",
    "DocumentLoader",
    "DocumentRetriever",
    "EmbeddingService",
    "EmbeddingUnavailable",
    "FaissVectorStore",
    "GenerationFailure",
    "GenerationRequest",
    "GenerationService",
    "IngestionPipeline",
    "LegalAssistantFlow",
    "LegalAssistantInput",
    "LegalAssistantOutput",
    "PromptAssembler",
    "PromptTurn",
    "Query",
    "ResponseShaper",
    "RetrievedChunk",
    "RetrievedContext",
    "SQLiteVectorStore",
    "SanadError",
    "SearchHit",
    "StoreUnavailable",
    "TextChunker",
    "bootstrap_collection",
    "get_vector_store",
    "render_prompt",
    "to_prompt_turns",
]
