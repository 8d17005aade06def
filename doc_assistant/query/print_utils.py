"""
@file: print_utils.py
Utility functions for displaying query results in a user-friendly format.

This module provides functions to print QueryResponse objects and related output for the document assistant.
"""

def print_response(response, show_attempts=False):
    """
    Print the answer from a QueryResponse object in a user-friendly format.
    Args:
        response (QueryResponse): The response object to print.
        show_attempts (bool): Also list each completion attempt.
    """
    print("\nAnswer:")
    print("-" * 80)
    print(response.text)
    if show_attempts:
        print("\nAttempts:")
        print("-" * 80)
        for attempt in response.attempts:
            label = "minimal" if attempt.minimal else f"{attempt.content_chars} chars"
            print(f"- #{attempt.number} ({label}, cap {attempt.response_token_cap}): {attempt.state.value}")
    print(f"\nContext: {response.context_chars} chars, {response.processing_time:.2f}s")
