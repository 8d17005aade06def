"""
@file: prompts.py
Utilities for constructing the system prompt that carries document content to the LLM.

The document content is always the last part of the prompt, so the retry controller can
rebuild a prompt around a shorter slice of the same content without re-deriving anything else.
"""

from typing import Optional

DOCUMENT_INSTRUCTIONS = (
    "You are a helpful AI assistant that answers questions based on the provided document. "
    "Only answer questions based on the document content. If the answer is not in the document, "
    "politely state that you couldn't find the information in the document."
)

MINIMAL_CONTEXT_PREAMBLE = (
    "The document was too large to include in full, so only a short excerpt from its beginning "
    "is provided below. Answer as well as you can from this excerpt, and say so if the excerpt "
    "does not contain enough information to answer the question."
)


def build_system_prompt(
    document_content: str,
    minimal: bool = False,
    instructions: Optional[str] = None
) -> str:
    """
    Construct the system prompt for a document question.

    Args:
        document_content (str): Context text assembled from the document.
        minimal (bool): Whether this is the last-resort minimal-context prompt.
        instructions (Optional[str]): Replacement for the default assistant instructions.

    Returns:
        str: A formatted system prompt ending with the document content.

    Example:
        >>> build_system_prompt("Plants convert light into energy.")
        "You are a helpful AI assistant ... \\n\\nDocument content:\\nPlants convert light into energy."
    """
    parts = [instructions or DOCUMENT_INSTRUCTIONS]
    if minimal:
        parts.append(MINIMAL_CONTEXT_PREAMBLE)
    parts.append(f"Document content:\n{document_content}")
    return "\n\n".join(parts)
