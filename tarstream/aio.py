"""asyncio versions of the archive stream.

These mirror tarstream.streams and tarstream.archive for content which
arrives from async sources. Headers are built exactly as in the blocking
version; only the plumbing between producers differs.
"""

import asyncio
import inspect
import logging

from tarstream import constants
from tarstream import header
from tarstream import streams


LOG = logging.getLogger(__name__)


async def aiterate(producer):
    """Iterate over an async or a plain iterable of bytes."""
    if hasattr(producer, '__aiter__'):
        async for chunk in producer:
            yield chunk
    else:
        for chunk in producer:
            yield chunk


async def _aclose(producer):
    aclose = getattr(producer, 'aclose', None)
    if aclose:
        await aclose()
        return
    close = getattr(producer, 'close', None)
    if close:
        close()


async def afile_stream(fileobj, read_size=streams.DEFAULT_READ_SIZE):
    """Read an object with an async read() method in read_size chunks."""
    while True:
        chunk = await fileobj.read(read_size)
        if not chunk:
            return
        yield chunk


async def aexecutor_stream(fileobj, read_size=streams.DEFAULT_READ_SIZE):
    """Read a blocking file-like object without stalling the event loop.

    Each read() runs in the loop's default executor.
    """
    loop = asyncio.get_running_loop()
    while True:
        chunk = await loop.run_in_executor(None, fileobj.read, read_size)
        if not chunk:
            return
        yield chunk


async def abuffer_stream(data, chunk_size=constants.BLOCK_SIZE):
    for chunk in streams.buffer_stream(data, chunk_size):
        yield chunk


async def aconcat_stream(first, second):
    """Drain first completely, then second, passing chunks on verbatim."""
    try:
        async for chunk in aiterate(first):
            yield chunk
        async for chunk in aiterate(second):
            yield chunk
    finally:
        await _aclose(first)
        await _aclose(second)


async def acontent_stream(chunks, size):
    """Async counterpart of streams.content_stream."""
    total = 0
    try:
        async for chunk in aiterate(chunks):
            if not chunk:
                continue
            total += len(chunk)
            if total > size:
                raise streams.ContentSizeError(
                    'Content is longer than the declared size of %d bytes'
                    % size)
            yield bytes(chunk)
    finally:
        await _aclose(chunks)

    if total != size:
        raise streams.ContentSizeError(
            'Content ended after %d of %d declared bytes' % (total, size))
    padding = streams.padding_for(total)
    if padding:
        yield padding


def content_stream(descriptor, size, chunk_size):
    content = descriptor.content
    if content is None or isinstance(content,
                                     (bytes, bytearray, memoryview)):
        return abuffer_stream(content or b'', chunk_size)
    if hasattr(content, 'read'):
        if inspect.iscoroutinefunction(content.read):
            return acontent_stream(afile_stream(content), size)
        return acontent_stream(aexecutor_stream(content), size)
    if not hasattr(content, '__aiter__') and not hasattr(content, '__iter__'):
        raise header.PreconditionError(
            'Content of %s is not bytes, a file or an iterable of bytes'
            % descriptor.name)
    return acontent_stream(content, size)


def entry_stream(entry):
    if isinstance(entry, header.PaxEntry):
        return aconcat_stream(entry_stream(entry.pax),
                              entry_stream(entry.entry))
    return aconcat_stream(abuffer_stream(entry.header), entry.content)


class AsyncTarball(object):
    """A tar archive consumed with async for.

    Content may be bytes, a file-like object, or a plain or async iterable
    of bytes.
    """

    def __init__(self, descriptors, chunk_size=constants.BLOCK_SIZE):
        descriptors = list(descriptors)
        if not descriptors:
            raise header.PreconditionError(
                'An archive needs at least one entry')

        self.entries = [
            header.compose_entry(d, chunk_size=chunk_size,
                                 make_content=content_stream)
            for d in descriptors]
        LOG.debug('Composed async archive of %d entries' % len(self.entries))

        self.stream = aconcat_stream(
            streams.pair_up([entry_stream(entry) for entry in self.entries],
                            aconcat_stream),
            abuffer_stream(bytes(constants.TERMINATOR_SIZE)))

    def __aiter__(self):
        return self.stream

    async def write_to(self, sink):
        """Drain the archive into sink, awaiting sink.write if it is async.
        """
        written = 0
        async for chunk in self.stream:
            result = sink.write(chunk)
            if hasattr(result, '__await__'):
                await result
            written += len(chunk)
        return written
