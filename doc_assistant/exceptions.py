"""
Custom exception hierarchy for the document assistant.

This module defines all custom exceptions used throughout the document assistant, organized by logical error domains:

- DocAssistantError: Base for all system-level errors
- ValidationError: For input or data validation failures
- ConfigurationError: For configuration issues
- ProcessingError: For document processing errors

Extraction errors are absorbed into placeholder text by the page extractor:
- PageExtractionError: A single page could not be read
- SourceUnreadableError: The whole source could not be opened or parsed

Completion errors inherit from APIError and drive the retry controller:
- TransportError: Network or service failure
- SizeLimitError: The service rejected the request because the input was too large
- RetriesExhaustedError: Every attempt, including the minimal-context one, failed

- OperationCancelledError: A cancellation token was triggered mid-flight
"""

class DocAssistantError(Exception):
    """Base exception for all document assistant errors."""
    pass

class ValidationError(DocAssistantError):
    """Raised when input or data validation fails anywhere in the system."""
    pass

class ConfigurationError(DocAssistantError):
    """Raised when configuration is invalid or missing."""
    pass

class ProcessingError(DocAssistantError):
    """Raised when document processing fails."""
    pass

class PageExtractionError(ProcessingError):
    """Raised when a single page of a paginated source cannot be read.

    Attributes:
        page_number (int): 1-based number of the failing page.
    """
    def __init__(self, message, page_number=None):
        super().__init__(message)
        self.page_number = page_number

class SourceUnreadableError(ProcessingError):
    """Raised when a whole source document cannot be opened or parsed."""
    pass

class APIError(DocAssistantError):
    """Raised when external API calls fail."""
    pass

class TransportError(APIError):
    """Raised when the completion service cannot be reached or fails to answer."""
    pass

class SizeLimitError(APIError):
    """Raised when the completion service rejects a request because of its input size."""
    pass

class RetriesExhaustedError(APIError):
    """Raised when every completion attempt failed.

    Attributes:
        attempts (list): The Attempt records that were made.
    """
    def __init__(self, message, attempts=None):
        super().__init__(message)
        self.attempts = list(attempts or [])

class OperationCancelledError(DocAssistantError):
    """Raised when a long-running extraction or retry chain is cancelled."""
    pass
