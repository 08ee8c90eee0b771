"""Shared utility functions for Notewise."""


def preview(text: str | None, limit: int = 100) -> str:
    """Single-line preview of a payload for debug logging.

    Args:
        text: The text to preview (None is treated as empty)
        limit: Maximum number of characters kept

    Returns:
        The first ``limit`` characters with newlines flattened to spaces
    """
    return (text or "")[:limit].replace("\n", " ")


def truncate(text: str | None, limit: int) -> str:
    """Cut text to at most ``limit`` characters."""
    return (text or "")[:limit]
