"""Prompt assembly for the Tunisian legal assistant."""

from __future__ import annotations

from typing import TYPE_CHECKING

from .models import MODEL_ROLE, USER_ROLE, GenerationRequest, PromptTurn

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .models import ConversationTurn, RetrievedContext

DATA_PROTECTION_KNOWLEDGE = """
Key Information on Tunisian Data Protection and Sovereignty:

Legal Framework:
* Organic Act No. 2004-63: This law establishes the legal framework for personal \
data protection in Tunisia, including data processing notifications, data subject \
rights, and data transfers.
* Tunisian Constitution (2014): Article 24 of the Constitution protects privacy, \
including personal data, further strengthening data protection rights.
* INPDP (Instance nationale de protection des données personnelles): The INPDP is \
the regulatory body responsible for enforcing the data protection laws and \
ensuring compliance.

Key Aspects of Data Sovereignty in Tunisia:
* Data Subject Rights: Individuals in Tunisia have rights related to their personal \
data, including the right to access, rectify, and erase their data.
* Data Processing Requirements: The law outlines specific rules for data \
collection, storage, and processing, emphasizing transparency, purpose limitation, \
and fairness.
* Data Transfers: Tunisian law sets restrictions on transferring personal data \
outside the country, ensuring that data remains under Tunisian jurisdiction.
* Data Protection Authority: The INPDP is mandated to ensure compliance with the \
data protection provisions and can impose penalties for violations.
* Open Data Portal: Tunisia has established an Open Data Portal, promoting \
transparency and access to public data while ensuring data sovereignty.

Challenges and Considerations:
* Enforcement: While the INPDP has a legal mandate, there have been challenges in \
effectively enforcing the law and ensuring compliance across all sectors.
* Data Sovereignty in the Cloud: As Tunisia increasingly relies on cloud services, \
ensuring that data remains under Tunisian jurisdiction and meets data sovereignty \
requirements is a key challenge.
* Digital Surveillance: There are concerns about digital surveillance and the \
potential for the state to access personal data without proper safeguards, \
requiring vigilance in protecting data sovereignty.
"""


INSTRUCTIONS = (
    "You are an AI assistant specializing in Tunisian law.\n"
    "You will engage in a conversation with the user.\n"
    "First, identify the language of the user's CURRENT query "
    "(it will be Tunisian Arabic, French, or English).\n"
    "Then, respond in the SAME language you identified for the current query.\n"
    "Your response should be an explanation of the relevant legal steps "
    "and procedures in simple, easy-to-understand terms, pertinent to "
    "Tunisian law.\n"
    "Consider the previous messages in the conversation for context."
)

KNOWLEDGE_TEMPLATE = (
    "You have access to the following specific information regarding "
    "Tunisian data protection and sovereignty, use it if the user's query "
    "relates to these topics:\n"
    "--- DATA PROTECTION KNOWLEDGE START ---\n"
    "{knowledge}\n"
    "--- DATA PROTECTION KNOWLEDGE END ---"
)

RETRIEVED_CONTEXT_TEMPLATE = (
    "Additionally, consider the following information retrieved from "
    "our legal knowledge base which seems highly relevant to the "
    "user's current query:\n"
    "--- RETRIEVED CONTEXT START ---\n"
    "{context}\n"
    "--- RETRIEVED CONTEXT END ---\n"
    "When using information from the retrieved context, try to cite "
    "or refer to the source if available in the context."
)


def render_prompt(request: GenerationRequest) -> str:
    """Render a generation request into the prompt text sent to the model.

    Sections are joined by blank lines in a fixed order: instructions,
    static knowledge, retrieved context, previous conversation, query.

    Returns:
        The prompt string; identical requests render identically.
    """
    sections = [
        INSTRUCTIONS,
        KNOWLEDGE_TEMPLATE.format(knowledge=request.system_knowledge.strip()),
    ]

    if request.retrieved_context:
        sections.append(
            RETRIEVED_CONTEXT_TEMPLATE.format(context=request.retrieved_context)
        )

    if request.history:
        lines = ["Previous conversation:"]
        for turn in request.history:
            if turn.is_user:
                lines.append(f"User: {turn.text}")
            elif turn.is_model:
                lines.append(f"Assistant: {turn.text}")
        sections.append("\n".join(lines))

    sections.append(f"Current User Query: {request.query}")
    return "\n\n".join(sections)


def to_prompt_turns(history: Sequence[ConversationTurn]) -> tuple[PromptTurn, ...]:
    """Tag each turn with the role flags used when rendering the prompt."""
    return tuple(
        PromptTurn(
            role=turn.role,
            text=turn.text,
            is_user=turn.role == USER_ROLE,
            is_model=turn.role == MODEL_ROLE,
        )
        for turn in history
    )


class PromptAssembler:
    """Builds generation requests from the query, history and retrieved context."""

    def __init__(self, static_knowledge: str = DATA_PROTECTION_KNOWLEDGE) -> None:
        self.static_knowledge = static_knowledge

    def assemble(
        self,
        query: str,
        history: Sequence[ConversationTurn | PromptTurn],
        retrieved_context: RetrievedContext,
        static_knowledge: str | None = None,
    ) -> GenerationRequest:
        """Merge static knowledge, retrieved text, history and query.

        Returns:
            A new GenerationRequest; the assembler keeps no state between calls.
        """
        turns = tuple(
            turn if isinstance(turn, PromptTurn) else to_prompt_turns([turn])[0]
            for turn in history
        )
        return GenerationRequest(
            system_knowledge=(
                static_knowledge
                if static_knowledge is not None
                else self.static_knowledge
            ),
            query=query,
            retrieved_context=retrieved_context.assembled_text or None,
            history=turns,
        )
