"""
Container ID helpers.

The daemon returns 64-char ids. Log lines and outcome records use the
12-char short form so they line up with `docker ps` output.
"""

CONTAINER_ID_SHORT_LENGTH = 12


def short_container_id(container_id: str) -> str:
    """
    Return the 12-char short form of a container id.

    Examples:
        >>> short_container_id("abc123def456789012345678901234567890")
        'abc123def456'
        >>> short_container_id("abc123")
        'abc123'
    """
    return (container_id or "")[:CONTAINER_ID_SHORT_LENGTH]
