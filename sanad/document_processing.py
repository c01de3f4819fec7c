"""Loading legal texts and splitting them into indexable chunks."""

import uuid
from pathlib import Path

import pypdf

from .config import config
from .models import DocumentChunk

logger = config.get_logger(__name__)


class DocumentLoader:
    """Handles loading of PDF and TXT documents."""

    @staticmethod
    def load_pdf(file_path: Path) -> str:
        """Load text content from a PDF file.

        Returns:
            The extracted text content from the PDF as a string.
        """
        try:
            with file_path.open("rb") as file:
                pdf_reader = pypdf.PdfReader(file)
                pages = [page.extract_text() or "" for page in pdf_reader.pages]
        except Exception:
            logger.exception("Error loading PDF %s", file_path)
            raise
        else:
            return "\n".join(pages)

    @staticmethod
    def load_txt(file_path: Path) -> str:
        """Load text content from a TXT file.

        Returns:
            The extracted text content from the TXT file as a string.
        """
        try:
            with file_path.open(encoding="utf-8") as file:
                text = file.read()
        except Exception:
            logger.exception("Error loading TXT %s", file_path)
            raise
        else:
            return text

    @classmethod
    def load_document(cls, file_path: Path) -> str:
        """Load document based on file extension.

        Args:
            file_path: Path to the document file.

        Returns:
            The text content of the document as a string.

        Raises:
            ValueError: If the file type is not supported.
        """
        file_ext = file_path.suffix.lower()
        if file_ext == ".pdf":
            return cls.load_pdf(file_path)
        if file_ext in {".txt", ".md"}:
            return cls.load_txt(file_path)
        msg = f"Unsupported file type: {file_ext}"
        raise ValueError(msg)


def chunk_point_id(source: str, chunk_index: int) -> str:
    """Stable id so re-ingesting a source replaces its previous points."""
    return str(uuid.uuid5(uuid.NAMESPACE_URL, f"{source}#{chunk_index}"))


class TextChunker:
    """Handles text chunking with fixed length and overlap strategy."""

    def __init__(self, chunk_size: int = 1000, overlap: int = 200) -> None:
        """Initialize the TextChunker with chunk size and overlap.

        Args:
            chunk_size: The size of each text chunk.
            overlap: The number of overlapping characters between chunks.

        Raises:
            ValueError: If the overlap is not smaller than the chunk size.
        """
        if overlap >= chunk_size:
            msg = "Chunk overlap must be smaller than chunk size"
            raise ValueError(msg)
        self.chunk_size = chunk_size
        self.overlap = overlap

    def chunk_text(self, text: str, source: str = "document") -> list[DocumentChunk]:
        """Split text into overlapping chunks.

        Returns:
            A list of DocumentChunk objects representing the text chunks.
        """
        chunks = []
        start = 0
        chunk_index = 0

        while start < len(text):
            end = start + self.chunk_size
            chunk_text = text[start:end]

            # Keep words whole unless that would shrink the chunk below half size
            if end < len(text) and not chunk_text.endswith(" "):
                last_space = chunk_text.rfind(" ")
                if last_space > self.chunk_size // 2:
                    end = start + last_space
                    chunk_text = text[start:end]

            if chunk_text.strip():
                chunks.append(
                    DocumentChunk(
                        id=chunk_point_id(source, chunk_index),
                        text=chunk_text.strip(),
                        source=source,
                        metadata={
                            "chunk_index": chunk_index,
                            "start_char": start,
                            "end_char": end,
                        },
                    )
                )
                chunk_index += 1

            if end >= len(text):
                break
            start = max(end - self.overlap, start + 1)

        logger.info("Text split into %d chunks", len(chunks))
        return chunks
