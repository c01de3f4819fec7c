"""Unit tests for document processing components."""

from pathlib import Path
from unittest.mock import Mock, patch

import pypdf
import pytest

from sanad import DocumentLoader, TextChunker
from sanad.document_processing import chunk_point_id


def test_load_txt_document(tmp_path):
    path = tmp_path / "bail.txt"
    path.write_text("Le locataire doit payer le loyer.", encoding="utf-8")

    assert DocumentLoader.load_document(path) == "Le locataire doit payer le loyer."


def test_load_markdown_document(tmp_path):
    path = tmp_path / "notes.MD"
    path.write_text("# Titre", encoding="utf-8")

    assert DocumentLoader.load_document(path) == "# Titre"


def test_load_pdf_joins_pages(tmp_path):
    path = tmp_path / "code.pdf"
    path.write_bytes(b"%PDF-1.4")

    pages = [
        Mock(**{"extract_text.return_value": "Page 1"}),
        Mock(**{"extract_text.return_value": None}),
        Mock(**{"extract_text.return_value": "Page 3"}),
    ]
    with patch("sanad.document_processing.pypdf.PdfReader") as reader:
        reader.return_value.pages = pages
        text = DocumentLoader.load_document(path)

    assert text == "Page 1\n\nPage 3"


def test_load_blank_pdf(tmp_path):
    path = tmp_path / "blank.pdf"
    writer = pypdf.PdfWriter()
    writer.add_blank_page(width=200, height=200)
    with path.open("wb") as file:
        writer.write(file)

    assert not DocumentLoader.load_document(path).strip()


def test_load_nonexistent_file():
    with pytest.raises(FileNotFoundError):
        DocumentLoader.load_document(Path("nonexistent_file.txt"))


def test_unsupported_file_type():
    with pytest.raises(ValueError, match="Unsupported file type"):
        DocumentLoader.load_document(Path("test.invalid"))


def test_chunker_rejects_overlap_not_smaller_than_size():
    with pytest.raises(ValueError, match="overlap must be smaller"):
        TextChunker(chunk_size=100, overlap=100)


def test_chunk_creation():
    chunker = TextChunker(chunk_size=100, overlap=20)
    text = "This is a test document. " * 20

    chunks = chunker.chunk_text(text, source="test_doc")

    assert len(chunks) > 1
    for i, chunk in enumerate(chunks):
        assert chunk.text
        assert chunk.source == "test_doc"
        assert chunk.metadata["chunk_index"] == i
        assert chunk.id == chunk_point_id("test_doc", i)
        assert chunk.payload()["source"] == "test_doc"
        assert chunk.payload()["text"] == chunk.text


def test_chunks_do_not_split_words():
    chunker = TextChunker(chunk_size=50, overlap=10)
    words = ["contrat", "bail", "locataire", "préavis", "tribunal"] * 10
    text = " ".join(words)

    chunks = chunker.chunk_text(text, "words")

    for chunk in chunks[:-1]:
        assert all(word in set(words) for word in chunk.text.split()[1:])
        assert chunk.text.split()[-1] in set(words)


@pytest.mark.parametrize("text", ["", "   \n  "])
def test_empty_text_chunking(text):
    assert TextChunker().chunk_text(text, "empty_source") == []


def test_chunk_overlap():
    chunker = TextChunker(chunk_size=50, overlap=10)
    text = "A" * 100

    chunks = chunker.chunk_text(text, "test")

    first_end = chunks[0].metadata["end_char"]
    second_start = chunks[1].metadata["start_char"]
    assert first_end - second_start == 10
    assert chunks[-1].metadata["end_char"] >= len(text)


def test_chunk_point_ids_are_stable():
    assert chunk_point_id("code.pdf", 0) == chunk_point_id("code.pdf", 0)
    assert chunk_point_id("code.pdf", 0) != chunk_point_id("code.pdf", 1)
    assert chunk_point_id("code.pdf", 0) != chunk_point_id("other.pdf", 0)
