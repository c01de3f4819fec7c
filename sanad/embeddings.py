"""OpenAI embeddings service."""

import numpy as np
from openai import OpenAI

from .config import config
from .errors import EmbeddingUnavailable

logger = config.get_logger(__name__)


class EmbeddingService:
    """Converts text into fixed-length vectors with a hosted embedding model."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the EmbeddingService with OpenAI API key and model.

        Args:
            api_key: OpenAI API key. If None,
                reads from OPENAI_API_KEY environment variable.
            model: Embedding model name. If None, uses config.EMBEDDING_MODEL.
            timeout: Request timeout in seconds. If None, uses
                config.REQUEST_TIMEOUT.
        """
        api_key = api_key or config.get_openai_api_key()
        default_headers = config.get_api_headers()
        self.client = OpenAI(
            api_key=api_key,
            base_url=config.OPENAI_BASE_URL,
            default_headers=default_headers or None,
            timeout=timeout if timeout is not None else config.REQUEST_TIMEOUT,
            max_retries=0,
        )
        self.model = model or config.EMBEDDING_MODEL

    def embed(self, text: str) -> np.ndarray:
        """Get embedding for a single text.

        Args:
            text: The input text to generate an embedding for.

        Returns:
            np.ndarray: The embedding vector for the input text.

        Raises:
            EmbeddingUnavailable: If the upstream call fails or returns no vector.
        """
        try:
            response = self.client.embeddings.create(
                model=self.model,
                input=text,
            )
        except Exception as e:
            logger.exception("Error generating embedding")
            msg = f"Failed to generate embedding: {e!s}"
            raise EmbeddingUnavailable(msg) from e

        if not response.data or not response.data[0].embedding:
            msg = "Failed to generate embedding: No embedding returned."
            raise EmbeddingUnavailable(msg)

        return np.array(response.data[0].embedding, dtype=np.float32)

    def get_embeddings_batch(
        self,
        texts: list[str],
        batch_size: int = 100,
    ) -> list[np.ndarray]:
        """Get embeddings for multiple texts in batches.

        Args:
            texts: List of input texts to generate embeddings for.
            batch_size: Number of texts to process in each batch.

        Returns:
            list[np.ndarray]: List of embedding vectors for the input texts.

        Raises:
            EmbeddingUnavailable: If a batch fails or comes back short.
        """
        embeddings = []

        for i in range(0, len(texts), batch_size):
            batch_texts = texts[i : i + batch_size]
            try:
                response = self.client.embeddings.create(
                    model=self.model,
                    input=batch_texts,
                )
            except Exception as e:
                logger.exception("Error generating batch embeddings")
                msg = f"Failed to generate embeddings: {e!s}"
                raise EmbeddingUnavailable(msg) from e

            if len(response.data) != len(batch_texts):
                msg = (
                    f"Expected {len(batch_texts)} embeddings, "
                    f"got {len(response.data)}"
                )
                raise EmbeddingUnavailable(msg)

            embeddings.extend(
                np.array(data.embedding, dtype=np.float32) for data in response.data
            )
            logger.info("Generated embeddings for batch %d", i // batch_size + 1)

        return embeddings
