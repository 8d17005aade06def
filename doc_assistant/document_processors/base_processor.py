"""
@file: base_processor.py
Shared plumbing for the per-format document processors.

A processor turns one file into a result dictionary:

    {'document': Document, 'metadata': dict, 'page_texts': list}

Subclasses implement ``async process``; callers use ``async run``, which logs the call
and converts unexpected failures into ProcessingError. Formats whose content cannot be
parsed return a placeholder document from ``process`` instead of raising.
"""

import logging
from pathlib import Path

from doc_assistant.exceptions import OperationCancelledError, ProcessingError
from doc_assistant.models import Document
from .page_extractor import SOURCE_PLACEHOLDER

class BaseDocumentProcessor:
    """
    Base class for format-specific processors.

    Args:
        config: Configuration object with get_nested (optional).
    """
    def __init__(self, config=None):
        self.config = config
        self.logger = logging.getLogger(self.__class__.__name__)

    def _get_config(self, key, default=None):
        """Config value for a dotted key, or default when there is no config."""
        if hasattr(self.config, 'get_nested'):
            return self.config.get_nested(key, default)
        return getattr(self.config, key, default)

    def extract_metadata(self, file_path):
        """
        File-level metadata derived from the path alone.

        Returns:
            dict: path (absolute), filename_full, filename_stem and file_type (lowercase
                extension without the dot, '' when there is none).
        """
        path = Path(file_path)
        return {
            'path': str(path.resolve()),
            'filename_full': path.name,
            'filename_stem': path.stem,
            'file_type': path.suffix.lstrip('.').lower(),
        }

    def _merge_metadata(self, file_path, metadata=None):
        extracted = self.extract_metadata(file_path)
        return {**extracted, **metadata} if metadata else extracted

    def placeholder_result(self, metadata, error):
        """Result for a source that could not be parsed: one placeholder page, metadata marked skipped."""
        self.logger.warning(f"Unable to extract text from {metadata['filename_full']}: {error}")
        metadata['skipped'] = True
        metadata['skip_reason'] = f'conversion-error: {error}'
        placeholder = SOURCE_PLACEHOLDER.format(name=metadata['filename_full'], error=error)
        return self.build_result(placeholder, metadata, page_texts=[placeholder])

    def build_result(self, text, metadata, page_texts=None):
        """
        Wrap extracted text as a Document and add text statistics to the metadata.

        char_count and word_count are always set; page_count is only estimated
        (500 words per page) when the processor did not record a real one.
        """
        document = Document(text=text, name=metadata.get('filename_full'))
        stats = document.stats()
        document_metadata = dict(metadata)
        document_metadata['char_count'] = document.length
        document_metadata['word_count'] = stats.word_count
        document_metadata.setdefault('page_count', stats.page_estimate)
        return {
            'document': document,
            'metadata': document_metadata,
            'page_texts': list(page_texts or []),
        }

    async def process(self, file_path, metadata=None, cancel_token=None):
        raise NotImplementedError("Subclasses must implement process()")

    async def run(self, file_path, metadata=None, cancel_token=None):
        """
        Process a file, logging the call.

        Raises:
            ProcessingError: For any failure other than cancellation (e.g. a missing file).
            OperationCancelledError: If the cancel token fired during extraction.
        """
        self.logger.info(f"Extracting {file_path}")
        try:
            return await self.process(file_path, metadata, cancel_token=cancel_token)
        except OperationCancelledError:
            self.logger.info(f"Extraction of {file_path} cancelled")
            raise
        except Exception as e:
            self.logger.error(f"Processing failed: {e}")
            raise ProcessingError(str(e)) from e
