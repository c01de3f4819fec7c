"""Test configuration and fixtures for Sanad tests.

This module provides reusable test fixtures organized by functionality:
- Constants and test data
- Mock services and API responses
- EmbeddingService and GenerationService fixtures
- Vector store fixtures
- Sample data factories
- Flow helpers
"""

import hashlib
from contextlib import contextmanager
from unittest.mock import Mock, patch

import numpy as np
import pytest

from sanad import (
    DocumentRetriever,
    EmbeddingService,
    FaissVectorStore,
    GenerationService,
    LegalAssistantFlow,
    SQLiteVectorStore,
)


class TestConstants:
    """Centralized test constants to avoid repetition across test files."""

    # API Configuration
    TEST_API_KEY = "test-key"
    TEST_EMBEDDING_MODEL = "text-embedding-3-small"
    TEST_CHAT_MODEL = "gpt-test"

    # Vector Configuration
    DIMENSION = 64
    COLLECTION = "legal_docs"


class MockEmbeddingService:
    """Mock embedding service for testing without API calls.

    Generates deterministic embeddings based on text content hash,
    ensuring consistent test results across runs.
    """

    def __init__(self, dimension: int = TestConstants.DIMENSION) -> None:
        self.dimension = dimension
        self.calls: list[str] = []

    def embed(self, text: str) -> np.ndarray:
        """Generate deterministic mock embedding based on text hash."""
        self.calls.append(text)
        seed = int.from_bytes(
            hashlib.sha256(text.lower().encode("utf-8")).digest()[:8],
            byteorder="big",
            signed=False,
        )
        rng = np.random.default_rng(seed)
        embedding = rng.normal(0, 1, self.dimension)
        return (embedding / np.linalg.norm(embedding)).astype(np.float32)

    def get_embeddings_batch(self, texts: list[str]) -> list[np.ndarray]:
        """Generate batch of mock embeddings."""
        return [self.embed(text) for text in texts]


class StubGenerationService:
    """Generation stub that records every request it receives."""

    def __init__(self, explanation: str | None = "Stub explanation") -> None:
        self.explanation = explanation
        self.requests = []

    def generate(self, request, output_schema):
        self.requests.append(request)
        if self.explanation is None:
            return None
        return output_schema(explanation=self.explanation)


def create_mock_openai_response(embeddings: list[list[float]]) -> Mock:
    """Create a mock OpenAI embeddings API response."""
    mock_response = Mock()
    mock_response.data = [Mock(embedding=emb) for emb in embeddings]
    return mock_response


def create_mock_chat_response(content: str | None) -> Mock:
    """Create a mock OpenAI chat completion response."""
    mock_response = Mock()
    mock_response.choices = [Mock(message=Mock(content=content))]
    return mock_response


@pytest.fixture
def openai_embeddings_api_mock():
    """Patch OpenAI embeddings.create and return the mock."""
    with patch("openai.resources.embeddings.Embeddings.create") as mock_create:
        yield mock_create


@pytest.fixture
def openai_embeddings_factory(openai_embeddings_api_mock):
    """Factory for creating OpenAI embeddings API mocks with different scenarios."""

    def _create_mock(
        scenario="single_success",
        embeddings=None,
        error_message="API Error",
    ):
        openai_embeddings_api_mock.reset_mock()
        openai_embeddings_api_mock.side_effect = None
        openai_embeddings_api_mock.return_value = None

        if scenario == "single_success":
            mock_embedding = embeddings or [0.1, 0.2, 0.3, 0.4, 0.5]
            openai_embeddings_api_mock.return_value = create_mock_openai_response(
                [mock_embedding]
            )
        elif scenario == "batch_success":
            mock_embeddings = embeddings or [
                [0.1, 0.2, 0.3],
                [0.4, 0.5, 0.6],
                [0.7, 0.8, 0.9],
            ]
            openai_embeddings_api_mock.return_value = create_mock_openai_response(
                mock_embeddings
            )
        elif scenario == "empty":
            openai_embeddings_api_mock.return_value = create_mock_openai_response([])
        elif scenario == "error":
            openai_embeddings_api_mock.side_effect = Exception(error_message)
        elif scenario == "multiple_batches":
            openai_embeddings_api_mock.side_effect = [
                create_mock_openai_response([[0.1, 0.2], [0.3, 0.4]]),
                create_mock_openai_response([[0.5, 0.6], [0.7, 0.8]]),
            ]

        return openai_embeddings_api_mock

    return _create_mock


@pytest.fixture
def embedding_service_factory():
    """Factory for creating EmbeddingService instances."""

    def _create_service(api_key=None, model=None, timeout=None):
        return EmbeddingService(
            api_key=api_key or TestConstants.TEST_API_KEY,
            model=model or TestConstants.TEST_EMBEDDING_MODEL,
            timeout=timeout,
        )

    return _create_service


@pytest.fixture
def embedding_service(embedding_service_factory):
    """Default EmbeddingService with test API key for most tests."""
    return embedding_service_factory()


@pytest.fixture
def generation_service():
    return GenerationService(
        api_key=TestConstants.TEST_API_KEY,
        model=TestConstants.TEST_CHAT_MODEL,
    )


@pytest.fixture
def generation_chat_mock_factory():
    """Factory mock fixture for GenerationService's chat.completions.create."""

    @contextmanager
    def _mock_chat(service, content: str | None = None, side_effect=None):
        with patch.object(service.client.chat.completions, "create") as mock_create:
            if side_effect is not None:
                mock_create.side_effect = side_effect
            else:
                mock_create.return_value = create_mock_chat_response(content)
            yield mock_create

    return _mock_chat


@pytest.fixture
def mock_embedding_service():
    return MockEmbeddingService()


@pytest.fixture
def temp_sqlite_store(tmp_path) -> SQLiteVectorStore:
    """Create temporary SQLite vector store for testing."""
    return SQLiteVectorStore(
        db_path=tmp_path / "test_store.db",
        vectors_dir=tmp_path / "vectors",
        dimension=TestConstants.DIMENSION,
    )


@pytest.fixture
def temp_faiss_store(tmp_path) -> FaissVectorStore:
    """Create temporary FAISS vector store for testing."""
    return FaissVectorStore(
        db_path=tmp_path / "test_store.db",
        index_dir=tmp_path / "faiss",
        dimension=TestConstants.DIMENSION,
    )


@pytest.fixture(params=["sqlite", "faiss"])
def vector_store(request, tmp_path):
    """Each test using this fixture runs against both backends."""
    if request.param == "sqlite":
        return request.getfixturevalue("temp_sqlite_store")
    return request.getfixturevalue("temp_faiss_store")


@pytest.fixture
def legal_texts():
    return [
        (
            "tenant-rights",
            "A tenant in Tunisia may not be evicted without a court decision.",
            "Code des obligations et des contrats",
        ),
        (
            "passport-renewal",
            "Le renouvellement du passeport se fait au poste de police "
            "avec un timbre fiscal.",
            "Ministère de l'Intérieur",
        ),
        (
            "data-protection",
            "Organic Act No. 2004-63 establishes personal data protection in Tunisia.",
            "Organic Act No. 2004-63",
        ),
        (
            "labour-contract",
            "An employment contract for an indefinite period can be ended "
            "with notice.",
            None,
        ),
    ]


@pytest.fixture
def populated_store_factory(mock_embedding_service, legal_texts):
    """Fill a store's collection with the sample legal texts."""

    def _populate(store, collection_name=TestConstants.COLLECTION):
        store.ensure_collection(collection_name)
        for point_id, text, source in legal_texts:
            payload = {"text": text}
            if source:
                payload["source"] = source
            store.upsert(
                collection_name,
                point_id,
                mock_embedding_service.embed(text),
                payload,
            )
        mock_embedding_service.calls.clear()
        return store

    return _populate


@pytest.fixture
def retriever_factory(mock_embedding_service):
    def _create(store, embedding_service=None, default_limit=3):
        return DocumentRetriever(
            embedding_service or mock_embedding_service,
            store,
            default_limit=default_limit,
        )

    return _create


@pytest.fixture
def legal_flow_factory(temp_sqlite_store, retriever_factory):
    """Factory for LegalAssistantFlow wired to test collaborators."""

    def _create(
        generator=None,
        store=None,
        embedding_service=None,
        collection_name=TestConstants.COLLECTION,
    ):
        retriever = retriever_factory(
            store if store is not None else temp_sqlite_store,
            embedding_service=embedding_service,
        )
        return LegalAssistantFlow(
            retriever=retriever,
            generator=generator or StubGenerationService(),
            collection_name=collection_name,
        )

    return _create


@pytest.fixture
def stub_generator_factory():
    """Factory for generation stubs returning a fixed explanation."""

    def _create(explanation: str | None = "Stub explanation"):
        return StubGenerationService(explanation)

    return _create
