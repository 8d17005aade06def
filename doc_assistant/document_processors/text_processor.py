"""
@file: text_processor.py
Processors for plain text (.txt, .md) files and for files of unknown type.
"""

import re
from pathlib import Path

from .base_processor import BaseDocumentProcessor

# Anything outside printable ASCII and line breaks is treated as binary noise.
NON_PRINTABLE_RE = re.compile(r'[^\x20-\x7E\r\n]')

UNSUPPORTED_CONTENT_MESSAGE = (
    "Document content from {name}. This file type ({file_type}) requires special processing. "
    "Please make sure you're uploading a text-based document for best results."
)

class TextDocumentProcessor(BaseDocumentProcessor):
    """
    Document processor for plain text files.

    Reads the file as UTF-8 (undecodable bytes are replaced) and returns it unchanged.
    """
    async def process(self, file_path, metadata=None, cancel_token=None):
        self.logger.debug(f"Processing text file: {file_path}")
        metadata = self._merge_metadata(file_path, metadata)
        with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
            text = f.read()
        return self.build_result(text, metadata)

class FallbackDocumentProcessor(BaseDocumentProcessor):
    """
    Best-effort processor for unrecognised file types.

    Decodes the raw bytes, strips anything that is not printable text, and if nothing
    readable remains returns a short message explaining that the type is unsupported.
    """
    async def process(self, file_path, metadata=None, cancel_token=None):
        self.logger.debug(f"Processing file of unknown type: {file_path}")
        metadata = self._merge_metadata(file_path, metadata)
        raw = Path(file_path).read_bytes()
        text = NON_PRINTABLE_RE.sub('', raw.decode('utf-8', errors='ignore'))
        if not text.strip():
            self.logger.warning(f"No readable text in {file_path}")
            metadata['skipped'] = True
            metadata['skip_reason'] = 'no-readable-text'
            text = UNSUPPORTED_CONTENT_MESSAGE.format(
                name=metadata['filename_full'],
                file_type=metadata['file_type'] or 'Unknown',
            )
        return self.build_result(text, metadata)
