# viewer/markdown/preprocessors/__init__.py

from .fence_wrapper import fence_wrapper_default
from .image_resolver import image_resolver_default

PREPROCESSORS = [
    fence_wrapper_default,  # Show non-markdown files as a single code block
    image_resolver_default,  # Rewrite relative image targets to asset URLs
    # Order matters - they run sequentially
]


def decode_payload(payload, encoding="utf-8"):
    """Return ``payload`` as text, decoding byte buffers with ``encoding``."""
    if isinstance(payload, str):
        return payload
    if isinstance(payload, (bytes, bytearray, memoryview)):
        return bytes(payload).decode(encoding, errors="replace")
    raise TypeError(f"Cannot render payload of type {type(payload).__name__}")


def apply_preprocessors(text, context):
    """Apply all preprocessors in order"""
    for processor in PREPROCESSORS:
        text = processor(text, context)
    return text
