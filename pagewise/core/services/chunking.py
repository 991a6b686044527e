"""Paragraph-based text chunking with a verbatim character overlap."""

import re

from ..domain import TextChunk

PARAGRAPH_BREAK = re.compile(r"\n\n+")
PARAGRAPH_SEPARATOR = "\n\n"

DEFAULT_CHUNK_SIZE = 20000
DEFAULT_CHUNK_OVERLAP = 200


def chunk_text(
    text: str,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    overlap: int = DEFAULT_CHUNK_OVERLAP,
) -> list[TextChunk]:
    """Split text into overlapping chunks along paragraph boundaries.

    Paragraphs are accumulated into a buffer. When the next paragraph would
    push the buffer past ``chunk_size`` the buffer is closed as a chunk, and
    the new buffer starts with the last ``overlap`` characters of the closed
    one. A single paragraph longer than ``chunk_size`` is never split.

    Args:
        text: Document text (markdown).
        chunk_size: Target maximum chunk length in characters (must be positive).
        overlap: Number of trailing characters carried into the next chunk.

    Returns:
        Chunks with contiguous indices starting at 0. Always at least one
        chunk: text that yields nothing becomes a single chunk holding the
        stripped input (possibly empty).

    Raises:
        ValueError: If chunk_size is not positive or overlap is negative.
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    if overlap < 0:
        raise ValueError("overlap must be non-negative")

    chunks: list[TextChunk] = []
    buffer = ""

    for paragraph in PARAGRAPH_BREAK.split(text):
        if len(buffer) + len(paragraph) > chunk_size and buffer.strip():
            chunks.append(TextChunk(content=buffer.strip(), index=len(chunks)))
            carry = buffer[-overlap:] if overlap else ""
            buffer = carry + PARAGRAPH_SEPARATOR + paragraph
        else:
            buffer += (PARAGRAPH_SEPARATOR if buffer else "") + paragraph

    if buffer.strip():
        chunks.append(TextChunk(content=buffer.strip(), index=len(chunks)))

    if not chunks:
        chunks.append(TextChunk(content=text.strip(), index=0))

    return chunks
