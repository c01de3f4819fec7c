"""Attach retrieval provenance to generated answers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .errors import GenerationFailure
from .models import Answer

if TYPE_CHECKING:
    from .models import RetrievedContext
    from .schemas import LegalAssistantOutput


class ResponseShaper:
    """Turns validated model output into the public Answer."""

    @staticmethod
    def shape(
        raw_output: LegalAssistantOutput | None,
        retrieved_context: RetrievedContext,
    ) -> Answer:
        """Build the Answer, omitting sources when nothing was retrieved.

        Returns:
            The final Answer.

        Raises:
            GenerationFailure: If there is no output to shape.
        """
        if raw_output is None:
            msg = "No explanation was produced"
            raise GenerationFailure(msg)

        return Answer(
            explanation=raw_output.explanation,
            retrieved_context_sources=retrieved_context.chunks or None,
        )
