"""Assemble entries into a complete tar archive stream."""

import logging

from tarstream import constants
from tarstream import header
from tarstream import streams


LOG = logging.getLogger(__name__)


class Tarball(object):
    """A tar archive of one or more entries, produced lazily.

    Every entry is validated and its header built when the Tarball is
    created, so an invalid descriptor fails before any output exists.
    Content is only read as the stream is consumed.
    """

    def __init__(self, descriptors, chunk_size=constants.BLOCK_SIZE):
        descriptors = list(descriptors)
        if not descriptors:
            raise header.PreconditionError(
                'An archive needs at least one entry')

        self.entries = [header.compose_entry(d, chunk_size=chunk_size)
                        for d in descriptors]
        LOG.debug('Composed archive of %d entries' % len(self.entries))

        self.stream = streams.concat_stream(
            streams.concat_all(entry.stream() for entry in self.entries),
            streams.buffer_stream(bytes(constants.TERMINATOR_SIZE)))

    def __iter__(self):
        return self.stream

    def write_to(self, sink):
        """Drain the archive into a writable file-like object."""
        return streams.drain(self.stream, sink)


def assemble(descriptors, chunk_size=constants.BLOCK_SIZE):
    """Return the lazy byte stream of an archive holding descriptors."""
    return Tarball(descriptors, chunk_size=chunk_size).stream
