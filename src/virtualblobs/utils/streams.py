"""Bounded-memory stream copying."""

from typing import BinaryIO

from ..config import DEFAULT_COPY_BUFFER_SIZE


def copy_stream(source: BinaryIO, target: BinaryIO, buffer_size: int = DEFAULT_COPY_BUFFER_SIZE) -> int:
    """
    Copy everything left in source into target.

    One buffer of ``buffer_size`` bytes is allocated and reused for every
    chunk, so peak memory does not depend on the payload size. Neither stream
    is closed.

    Args:
        source: Readable binary stream
        target: Writable binary stream
        buffer_size: Chunk size in bytes

    Returns:
        Number of bytes copied
    """
    if buffer_size <= 0:
        raise ValueError("buffer_size must be positive")

    buffer = bytearray(buffer_size)
    view = memoryview(buffer)
    readinto = getattr(source, "readinto", None)
    total = 0

    while True:
        if readinto is not None:
            length = readinto(view)
            if not length:
                break
            target.write(view[:length])
        else:
            chunk = source.read(buffer_size)
            if not chunk:
                break
            length = len(chunk)
            target.write(chunk)
        total += length

    return total
