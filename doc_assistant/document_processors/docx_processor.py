"""
@file: docx_processor.py
Processor for Word (.docx) files using python-docx.

Paragraphs and tables are emitted in body order; each paragraph becomes its own
blank-line separated block so the segmenter sees the document's paragraph structure.
Tables are rendered as Markdown rows.
"""

from docx import Document as DocxDocument
from docx.table import Table

from .base_processor import BaseDocumentProcessor

def _table_to_markdown(table):
    lines = []
    for r, row in enumerate(table.rows):
        cells = [cell.text.strip() for cell in row.cells]
        lines.append("| " + " | ".join(cells) + " |")
        if r == 0:
            lines.append("|" + "---|" * len(cells))
    return "\n".join(lines)

class DocxDocumentProcessor(BaseDocumentProcessor):
    """
    Document processor for .docx files.

    Unreadable files produce a placeholder document (metadata marked skipped) rather than an error.
    """
    async def process(self, file_path, metadata=None, cancel_token=None):
        self.logger.debug(f"Processing DOCX file: {file_path}")
        metadata = self._merge_metadata(file_path, metadata)
        try:
            doc = DocxDocument(str(file_path))
        except Exception as e:
            return self.placeholder_result(metadata, e)

        blocks = []
        for block in doc.iter_inner_content():
            if isinstance(block, Table):
                blocks.append(_table_to_markdown(block))
            else:
                text = block.text.strip()
                if text:
                    blocks.append(text)
        metadata['paragraph_count'] = len(blocks)
        return self.build_result("\n\n".join(blocks), metadata)
