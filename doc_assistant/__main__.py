"""
@file: __main__.py
Main entry point for the Document Assistant CLI.

This module provides a command-line interface for working with a single document, including:
- Asking questions about it (single or interactive mode)
- Printing the bounded context that would be sent for a question
- Listing candidate study topics
- Showing document statistics

It handles argument parsing, configuration loading, logging setup, and delegates to the appropriate handlers for each operation.
"""

#!/usr/bin/env python3

import argparse
import asyncio
import logging
import sys
from typing import Optional

from doc_assistant.config import get_config
from doc_assistant.exceptions import DocAssistantError
from doc_assistant.logging_setup import setup_logging
from doc_assistant.models import ContextBudget

logger = logging.getLogger(__name__)

def parse_args(argv=None) -> argparse.Namespace:
    """Parse command line arguments for the Document Assistant CLI.

    Returns:
        argparse.Namespace: Parsed command line arguments
    """
    parser = argparse.ArgumentParser(
        description="Document Assistant - ask questions about a large document within a context budget"
    )
    parser.add_argument(
        "--document",
        required=True,
        help="Path to the document (PDF, DOCX, TXT or any text-like file)"
    )

    operation_group = parser.add_mutually_exclusive_group(required=True)
    operation_group.add_argument(
        "--query",
        nargs="?",
        const="",
        help="Ask a question. If no question is provided, enters interactive mode."
    )
    operation_group.add_argument(
        "--context",
        metavar="QUESTION",
        help="Print the context that would be sent to the model for QUESTION"
    )
    operation_group.add_argument(
        "--topics",
        action="store_true",
        help="List candidate study topics found in the document"
    )
    operation_group.add_argument(
        "--stats",
        action="store_true",
        help="Show character, word and page counts for the document"
    )

    parser.add_argument(
        "--max-tokens",
        type=int,
        help="Context budget in tokens (overrides CONTEXT.MAX_TOKENS)"
    )
    parser.add_argument(
        "--show-attempts",
        action="store_true",
        help="List each completion attempt after the answer"
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )
    parser.add_argument(
        "--config",
        help="Path to configuration file"
    )
    return parser.parse_args(argv)

def _budget(args) -> Optional[ContextBudget]:
    if args.max_tokens:
        return ContextBudget(max_tokens=args.max_tokens)
    return None

async def _load(path, config):
    from doc_assistant.document_processors import load_document
    return await load_document(path, config)

def process_stats(document) -> int:
    stats = document.stats()
    print(f"Document: {document.name}")
    print(f"Characters: {document.length}")
    print(f"Words: {stats.word_count}")
    print(f"Estimated pages: {stats.page_estimate}")
    return 0

def process_topics(document, config) -> int:
    from doc_assistant.topics import TopicExtractor
    topics = TopicExtractor(config).extract(document)
    if not topics:
        print("No topics found")
        return 0
    for topic in topics:
        print(f"- {topic}")
    return 0

def process_context(document, question, config, budget=None) -> int:
    from doc_assistant.query.context_builder import ContextAssembler
    print(ContextAssembler(config).prepare(document, question, budget))
    return 0

async def process_query(document, query: str, config, budget=None, show_attempts=False) -> int:
    """Answer a query or enter interactive query mode.

    Args:
        document: The loaded Document
        query: Query string, or '' for interactive mode
        config: Configuration object
        budget: Optional context budget
        show_attempts: Print the attempt list after each answer

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    from doc_assistant.query import QueryProcessor, print_response

    processor = QueryProcessor(config)
    if query:
        response = await processor.process_query(document, query, budget=budget)
        print_response(response, show_attempts=show_attempts)
        return 0 if response.success else 1

    print("Enter your questions (type 'exit' to quit):")
    while True:
        try:
            query = input("\nQuestion: ").strip()
        except (KeyboardInterrupt, EOFError):
            print("\nExiting...")
            break
        if query.lower() in ('exit', 'quit'):
            break
        if not query:
            continue
        response = await processor.process_query(document, query, budget=budget)
        print_response(response, show_attempts=show_attempts)
    return 0

def main(argv=None) -> int:
    """Main entry point for the Document Assistant CLI.

    Returns:
        int: Exit code (0 for success, 1 for failure)
    """
    try:
        args = parse_args(argv)
        config = get_config(args.config)

        log_level = "DEBUG" if args.debug else config.get_nested('LOGGING.LEVEL', 'INFO')
        setup_logging(
            LOG_FILE=config.get_nested('LOGGING.LOG_FILE', 'logs/doc_assistant.log'),
            LEVEL=log_level
        )

        document = asyncio.run(_load(args.document, config))
        budget = _budget(args)

        if args.stats:
            return process_stats(document)
        if args.topics:
            return process_topics(document, config)
        if args.context is not None:
            return process_context(document, args.context, config, budget)
        return asyncio.run(process_query(document, args.query, config, budget, args.show_attempts))

    except DocAssistantError as e:
        logger.error(str(e))
        return 1
    except Exception as e:
        logger.critical(f"Unexpected error: {str(e)}", exc_info=True)
        return 1

if __name__ == "__main__":
    sys.exit(main())
