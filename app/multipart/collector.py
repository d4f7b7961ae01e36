"""Bounded accumulation of a request body from an async byte stream."""

import asyncio
from collections.abc import AsyncIterable, AsyncIterator

from app.core.errors import EmptyBody, PayloadTooLarge, StreamError, StreamTimeout
from app.core.logger import LogIcon, logger
from app.models.multipart import RawRequestBody


async def iter_chunks(data: bytes, chunk_size: int) -> AsyncIterator[bytes]:
    """Replay an already received body as a stream of chunks."""
    view = memoryview(data)
    for offset in range(0, len(view), chunk_size):
        yield bytes(view[offset:offset + chunk_size])


async def collect_bytes(
    stream: AsyncIterable[bytes],
    *,
    max_bytes: int,
    idle_timeout: float,
    total_timeout: float,
) -> bytes:
    """Read a whole request body into memory under a size cap and two timeouts.

    The size cap is checked after every chunk. ``idle_timeout`` bounds the wait
    for each chunk (the first one included); ``total_timeout`` bounds the whole
    read. On any failure the stream is closed and nothing partial is returned.

    Raises:
        PayloadTooLarge: Accumulated size exceeded ``max_bytes``.
        StreamTimeout: A chunk or the whole body did not arrive in time.
        StreamError: The underlying stream raised.
        EmptyBody: The stream ended without a single byte.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + total_timeout
    iterator = aiter(stream)
    buffer = bytearray()
    chunks = 0

    try:
        while True:
            remaining = deadline - loop.time()
            if remaining <= 0:
                raise StreamTimeout(f"Request body not complete after {total_timeout}s")

            wait = min(idle_timeout, remaining)
            try:
                async with asyncio.timeout(wait):
                    chunk = await anext(iterator)
            except StopAsyncIteration:
                break
            except TimeoutError:
                if wait < idle_timeout:
                    raise StreamTimeout(f"Request body not complete after {total_timeout}s") from None
                raise StreamTimeout(f"No data received for {idle_timeout}s") from None
            except Exception as ex:
                raise StreamError(f"Transport failed while reading body: {ex}") from ex

            buffer += chunk
            chunks += 1
            if len(buffer) > max_bytes:
                raise PayloadTooLarge(f"Request body exceeds {max_bytes} bytes")

        if not buffer:
            raise EmptyBody("Request body is empty")

        logger.debug("Request body collected", icon=LogIcon.STREAMING, size=len(buffer), chunks=chunks)
        return bytes(buffer)
    except (PayloadTooLarge, StreamTimeout, StreamError, EmptyBody) as ex:
        logger.warning("Request body rejected", icon=LogIcon.TIMEOUT, error=ex.code, received=len(buffer))
        raise
    finally:
        buffer.clear()
        if hasattr(iterator, "aclose"):
            await iterator.aclose()


async def collect(
    stream: AsyncIterable[bytes],
    boundary: bytes,
    *,
    max_bytes: int,
    idle_timeout: float,
    total_timeout: float,
) -> RawRequestBody:
    """Collect a multipart body and pair it with its boundary token."""
    data = await collect_bytes(stream, max_bytes=max_bytes, idle_timeout=idle_timeout, total_timeout=total_timeout)
    return RawRequestBody(data=data, boundary=boundary)
