"""Tests for ResponseShaper and Answer serialization."""

import pytest

from sanad import (
    Answer,
    GenerationFailure,
    LegalAssistantOutput,
    ResponseShaper,
    RetrievedChunk,
    RetrievedContext,
)


def test_shape_without_context_omits_sources():
    answer = ResponseShaper.shape(
        LegalAssistantOutput(explanation="Explanation"), RetrievedContext.empty()
    )

    assert answer == Answer(explanation="Explanation")
    assert answer.to_dict() == {"explanation": "Explanation"}


def test_shape_with_context_keeps_chunks_in_order():
    chunks = (
        RetrievedChunk(text="A", source="Code", score=0.91),
        RetrievedChunk(text="B", source=None, score=0.42),
    )
    context = RetrievedContext(chunks=chunks, assembled_text="...")

    answer = ResponseShaper.shape(LegalAssistantOutput(explanation="E"), context)

    assert answer.retrieved_context_sources == chunks
    assert answer.to_dict() == {
        "explanation": "E",
        "retrievedContextSources": [
            {"text": "A", "source": "Code", "score": 0.91},
            {"text": "B", "score": 0.42},
        ],
    }


def test_shape_without_output_fails():
    with pytest.raises(GenerationFailure, match="No explanation"):
        ResponseShaper.shape(None, RetrievedContext.empty())
