"""
@file: pdf_processor.py
PDFDocumentProcessor: Extracts the text of PDF files for the document assistant.

This module defines PyMuPDFSource, a PaginatedSource backed by PyMuPDF (fitz), and
PDFDocumentProcessor, which runs the PageExtractor over it and returns a Document.

Dependencies:
- PyMuPDF (imported as fitz) for PDF parsing

Usage Example:
    processor = PDFDocumentProcessor(config)
    result = await processor.process("example.pdf")
    print(result['metadata']['page_count'])
    print(result['document'].text[:200])

Limitations:
- Scanned PDFs without a text layer produce empty pages (no OCR)
- Paragraph breaks inside a page are not recovered, only line breaks; pages are separated by a blank line
"""

from pathlib import Path

import fitz  # PyMuPDF

from .base_processor import BaseDocumentProcessor
from .page_extractor import PageExtractor, TextFragment

class PyMuPDFSource:
    """
    PaginatedSource over a PDF opened with PyMuPDF.

    Fragments are PyMuPDF words in content order (block, line, word), so a multi-column page
    yields each column in turn. y is the bottom of the word box so words sharing a baseline
    land on the same line.

    Pages are read synchronously: a fitz document is not thread-safe, so page_fragments never
    yields to the event loop and the pages of a batch are read one at a time.

    Args:
        path (str or Path, optional): PDF file to open.
        data (bytes, optional): In-memory PDF, used instead of path when given.
        name (str, optional): Display name for logs and placeholders.

    Raises:
        fitz.FileDataError / RuntimeError: If the PDF cannot be opened.
    """
    def __init__(self, path=None, data=None, name=None):
        self.name = name or (Path(path).name if path else 'document.pdf')
        if data is not None:
            self._doc = fitz.open(stream=data, filetype="pdf")
        else:
            self._doc = fitz.open(str(path))

    @property
    def page_count(self):
        return self._doc.page_count

    async def page_fragments(self, page_number):
        page = self._doc.load_page(page_number - 1)
        # x0, y0, x1, y1, word, block, line, word_no; content order, one column after another
        words = sorted(page.get_text("words"), key=lambda w: (w[5], w[6], w[7]))
        return [
            TextFragment(text=str(w[4]), x=float(w[0]), y=float(w[3]), width=float(w[2] - w[0]))
            for w in words
            if str(w[4]).strip()
        ]

    def close(self):
        self._doc.close()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

class PDFDocumentProcessor(BaseDocumentProcessor):
    """
    Processor for PDF (.pdf) files using PyMuPDF (fitz) and the batched PageExtractor.

    Returns a dictionary with 'document', 'metadata' and 'page_texts'. Unreadable PDFs are not
    an error: the document then holds a single placeholder describing the fault and the
    metadata is marked skipped.
    """
    def __init__(self, config=None, extractor=None):
        super().__init__(config)
        self.extractor = extractor or PageExtractor(config)

    async def process(self, file_path, metadata=None, cancel_token=None):
        """
        Extract the text of a PDF file.

        Args:
            file_path (str): Path to the PDF file
            metadata (dict, optional): Additional metadata to include
            cancel_token (CancellationToken, optional): Checked between page batches
        Returns:
            dict: {
                'document': Document with the page texts joined by blank lines,
                'metadata': Document-level metadata,
                'page_texts': List of text per page
            }
        """
        self.logger.debug(f"Processing PDF file: {file_path}")
        metadata = self._merge_metadata(file_path, metadata)
        try:
            source = PyMuPDFSource(file_path, name=metadata['filename_full'])
        except Exception as e:
            return self.placeholder_result(metadata, e)

        with source:
            result = await self.extractor.extract(source, cancel_token=cancel_token)
        if not result.ok:
            metadata['skipped'] = True
            metadata['skip_reason'] = f'conversion-error: {result.source_error}'
        metadata['page_count'] = len(result.pages)
        metadata['failed_pages'] = list(result.failed_pages)
        return self.build_result(result.text, metadata, page_texts=result.pages)
