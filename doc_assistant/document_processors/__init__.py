"""
@file: __init__.py
Document processor factory for the document assistant.

This module provides a factory function to select the appropriate document processor
based on file type, and a helper that loads a file straight into a Document.

Exports:
    - extract_file_type: Classifies a file name as PDF, DOCX, TXT or Unknown.
    - get_processor_for_file_type: Returns a processor instance for a given file type.
    - load_document: Runs the matching processor and returns its Document.
"""

import logging

from .base_processor import BaseDocumentProcessor
from .docx_processor import DocxDocumentProcessor
from .page_extractor import PageExtractor, PaginatedSource, TextFragment, reconstruct_lines
from .pdf_processor import PDFDocumentProcessor, PyMuPDFSource
from .text_processor import FallbackDocumentProcessor, TextDocumentProcessor

TEXT_EXTENSIONS = {'txt', 'md', 'text'}

def extract_file_type(file_name):
    """
    Classify a file by its extension.

    Args:
        file_name (str or Path): File name or path.

    Returns:
        str: 'PDF', 'DOCX', 'TXT' or 'Unknown'.
    """
    name = str(file_name)
    ext = name.lower().rsplit('.', 1)[-1] if '.' in name else ''
    if ext == 'pdf':
        return 'PDF'
    if ext in ('docx', 'doc'):
        return 'DOCX'
    if ext in TEXT_EXTENSIONS:
        return 'TXT'
    return 'Unknown'

def get_processor_for_file_type(path, config=None):
    """
    Return the appropriate document processor instance for the given file type.

    Args:
        path: Path to the document file (str or Path).
        config: Configuration object for the processor.

    Returns:
        An instance of a document processor class suitable for the file type.
        Unknown types get the FallbackDocumentProcessor, which reads the file as text.
    """
    logger = logging.getLogger(__name__)
    file_type = extract_file_type(path)
    logger.info(f"Called get_processor_for_file_type(path={path}) -> {file_type}")
    if file_type == 'PDF':
        return PDFDocumentProcessor(config)
    if file_type == 'DOCX':
        return DocxDocumentProcessor(config)
    if file_type == 'TXT':
        return TextDocumentProcessor(config)
    return FallbackDocumentProcessor(config)

async def load_document(path, config=None, cancel_token=None):
    """
    Extract a file into a Document using the processor for its type.

    Args:
        path: Path to the document file.
        config: Configuration object.
        cancel_token (CancellationToken, optional): Cooperative cancellation.

    Returns:
        Document: The extracted document (a placeholder text when the source was unreadable).

    Raises:
        ProcessingError: If the file could not be read at all (e.g. it does not exist).
    """
    processor = get_processor_for_file_type(path, config)
    result = await processor.run(path, cancel_token=cancel_token)
    return result['document']

__all__ = [
    "BaseDocumentProcessor",
    "DocxDocumentProcessor",
    "FallbackDocumentProcessor",
    "PDFDocumentProcessor",
    "PageExtractor",
    "PaginatedSource",
    "PyMuPDFSource",
    "TextDocumentProcessor",
    "TextFragment",
    "extract_file_type",
    "get_processor_for_file_type",
    "load_document",
    "reconstruct_lines",
]
