"""
Image ID helpers.

Docker image IDs come in multiple formats:
- Full SHA256: "sha256:abc123def456..." (71 chars)
- Bare hex: "abc123def456..." (64 chars)

Staleness compares full ids; these helpers only shorten ids for display.
"""

from typing import Optional


def short_image_id(image_id: Optional[str]) -> str:
    """
    Shorten an image id to 12 chars without the sha256: prefix.

    Examples:
        >>> short_image_id("sha256:abc123def456789")
        'abc123def456'
        >>> short_image_id(None)
        ''
    """
    if not image_id:
        return ""
    return image_id.replace("sha256:", "")[:12]


def has_explicit_tag(image_ref: str) -> bool:
    """True if the reference carries a tag or a digest."""
    if "@" in image_ref:
        return True
    # A colon after the last slash is a tag; before it, a registry port
    return ":" in image_ref.rsplit("/", 1)[-1]


def with_default_tag(image_ref: str) -> str:
    """
    Append ':latest' to references that carry neither tag nor digest.

    Examples:
        >>> with_default_tag("nginx")
        'nginx:latest'
        >>> with_default_tag("registry.local:5000/app")
        'registry.local:5000/app:latest'
        >>> with_default_tag("ghcr.io/org/app:1.2")
        'ghcr.io/org/app:1.2'
    """
    if not image_ref or has_explicit_tag(image_ref):
        return image_ref
    return f"{image_ref}:latest"
