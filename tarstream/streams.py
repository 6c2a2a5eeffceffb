"""Lazy byte producers used to compose an archive.

A byte producer is any iterable of bytes. Nothing here reads ahead: every
chunk is produced only when the consumer asks for it, and chunks from
upstream producers are passed on as they are, without re-chunking.
"""

import logging

from tarstream import constants


LOG = logging.getLogger(__name__)

DEFAULT_READ_SIZE = 1024 * 1024


class ContentSizeError(ValueError):
    """Raised when content does not match the size declared for it."""
    pass


def padding_for(length):
    """Return the zero bytes needed to round length up to a block."""
    remainder = length % constants.BLOCK_SIZE
    if remainder == 0:
        return b''
    return bytes(constants.BLOCK_SIZE - remainder)


def buffer_stream(data, chunk_size=constants.BLOCK_SIZE):
    """Yield a byte buffer in chunk_size slices.

    The final slice is zero padded up to the next block boundary. An empty
    buffer produces nothing at all.
    """
    if chunk_size <= 0 or chunk_size % constants.BLOCK_SIZE != 0:
        raise ValueError(
            'Chunk size must be a positive multiple of %d, not %d'
            % (constants.BLOCK_SIZE, chunk_size))

    view = memoryview(data)
    for offset in range(0, len(view), chunk_size):
        chunk = bytes(view[offset:offset + chunk_size])
        yield chunk + padding_for(len(chunk))


def concat_stream(first, second):
    """Drain first completely, then second.

    Upstream chunks are yielded verbatim. If the consumer stops early both
    producers are closed where they support it.
    """
    try:
        yield from first
        yield from second
    finally:
        for stream in (first, second):
            close = getattr(stream, 'close', None)
            if close:
                close()


def content_stream(chunks, size):
    """Pass lazy content through, padding the end to a block boundary.

    Only the remainder after the final chunk is padded, intermediate chunk
    boundaries are left exactly as the producer made them.

    Raises:
        ContentSizeError: If the producer yields more or fewer than size
            bytes. The error is raised when the mismatch is detected, before
            any offending bytes are passed on.
    """
    total = 0
    try:
        for chunk in chunks:
            if not chunk:
                continue
            total += len(chunk)
            if total > size:
                raise ContentSizeError(
                    'Content is longer than the declared size of %d bytes'
                    % size)
            yield bytes(chunk)
    finally:
        close = getattr(chunks, 'close', None)
        if close:
            close()

    if total != size:
        raise ContentSizeError(
            'Content ended after %d of %d declared bytes' % (total, size))
    padding = padding_for(total)
    if padding:
        yield padding


def file_stream(fileobj, read_size=DEFAULT_READ_SIZE):
    """Read a file-like object lazily in read_size chunks."""
    while True:
        chunk = fileobj.read(read_size)
        if not chunk:
            return
        yield chunk


def zero_stream(size, read_size=DEFAULT_READ_SIZE):
    """Produce size zero bytes without holding more than one chunk."""
    remaining = size
    chunk = bytes(min(read_size, size))
    while remaining > 0:
        if remaining < len(chunk):
            chunk = chunk[:remaining]
        remaining -= len(chunk)
        yield chunk


def drain(stream, sink):
    """Write every chunk of stream to sink, returning the byte count."""
    written = 0
    for chunk in stream:
        sink.write(chunk)
        written += len(chunk)
    LOG.debug('Wrote %d bytes' % written)
    return written


def pair_up(producers, concat):
    """Join a non-empty list of producers with concat, as a balanced tree.

    The delegation depth grows with the logarithm of the number of
    producers rather than linearly. concat takes two producers and returns
    the producer that drains the first and then the second.
    """
    producers = list(producers)
    if not producers:
        raise ValueError("There are no producers to concatenate")
    while len(producers) > 1:
        paired = []
        for i in range(0, len(producers) - 1, 2):
            paired.append(concat(producers[i], producers[i + 1]))
        if len(producers) % 2:
            paired.append(producers[-1])
        producers = paired
    return producers[0]


def concat_all(producers):
    """Concatenate a non-empty list of producers in order."""
    return pair_up(producers, concat_stream)
