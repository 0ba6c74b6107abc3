"""
Simulated Streaming
===================

Cuts an already-complete response into fixed-size fragments and yields
them with a small pause in between, for UIs that want a typing effect.

This is display-only post-processing:
- the whole response has been received before the first chunk is yielded
- nothing is decoded incrementally
- there is no cancellation; abandoning the iterator only skips the
  remaining pauses, the turn itself is already finished
"""

import asyncio
from typing import AsyncIterator

from aigent.types import ProviderResponse, StreamChunk


def chunk_text(text: str, size: int) -> list[str]:
    """
    Split text into pieces of at most `size` characters.

    Empty text yields a single empty piece so a stream always has one
    (final) chunk.
    """
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    if not text:
        return [""]
    return [text[i:i + size] for i in range(0, len(text), size)]


async def stream_response(
    response: ProviderResponse,
    chunk_size: int = 50,
    delay: float = 0.05
) -> AsyncIterator[StreamChunk]:
    """
    Yield a completed response as display chunks.

    Args:
        response: The full provider response
        chunk_size: Characters per chunk
        delay: Seconds to pause between chunks (not after the last one)

    Yields:
        StreamChunk objects; only the last has is_complete=True and usage
    """
    pieces = chunk_text(response.content, chunk_size)
    last = len(pieces) - 1

    for index, piece in enumerate(pieces):
        is_complete = index == last
        yield StreamChunk(
            content=piece,
            is_complete=is_complete,
            usage=response.usage if is_complete else None,
        )
        if not is_complete and delay > 0:
            await asyncio.sleep(delay)
