"""
Document Assistant - answers questions about one large document within a hard context budget.
"""

from doc_assistant.models import ContextBudget, Document, Query, Section

__version__ = "0.1.0"
__all__ = ["ContextBudget", "Document", "Query", "Section"]
