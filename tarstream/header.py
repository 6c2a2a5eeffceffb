# Building USTAR header blocks from entry descriptors.
#
# A header block is 512 bytes laid out as described in constants.py. Values
# which do not fit the fixed fields (long paths, sizes of 8 GiB and more)
# are carried in a PAX extended header entry which is written immediately
# before the entry it describes.

from collections import namedtuple
import datetime
import logging

from tarstream import constants
from tarstream import octal
from tarstream import pax
from tarstream import paths
from tarstream import streams


LOG = logging.getLogger(__name__)


class PreconditionError(ValueError):
    """Raised when an entry or archive is described incorrectly.

    These are caller bugs rather than runtime conditions, and are raised
    before any archive bytes are produced.
    """
    pass


EntryDescriptor = namedtuple(
    'EntryDescriptor',
    ['name', 'mode', 'uid', 'gid', 'size', 'mtime', 'typeflag', 'linkname',
     'uname', 'gname', 'devmajor', 'devminor', 'content'],
    defaults=[constants.DEFAULT_MODE, 0, 0, None, 0, constants.TYPE_REGULAR,
              None, None, None, None, None, None])
EntryDescriptor.__doc__ = """A logical file to place in an archive.

size defaults to the length of content when content is a byte buffer, and
to zero otherwise. mtime is seconds since the epoch or a datetime. content
is a byte buffer, a file-like object, an iterable of bytes, or None.
"""

# header is the complete 512 byte block, pax_records the overflow records
# which must precede it in a PAX extended header entry.
HeaderBlock = namedtuple('HeaderBlock', ['header', 'pax_records'])


def _is_integer(value):
    return isinstance(value, int) and not isinstance(value, bool)


def _is_buffer(content):
    return isinstance(content, (bytes, bytearray, memoryview))


def _require_integer(descriptor, field, value):
    if not _is_integer(value) or value < 0:
        raise PreconditionError(
            '%s of %s must be a non-negative integer, not %r'
            % (field, descriptor.name, value))
    return value


def resolve_size(descriptor):
    """Return the content size for a descriptor, validating it."""
    content = descriptor.content
    if descriptor.size is None:
        if _is_buffer(content):
            return len(content)
        return 0

    size = _require_integer(descriptor, 'size', descriptor.size)
    if _is_buffer(content) and len(content) != size:
        raise PreconditionError(
            'size of %s is %d but %d bytes of content were supplied'
            % (descriptor.name, size, len(content)))
    return size


def resolve_mtime(descriptor):
    mtime = descriptor.mtime
    if mtime is None:
        return 0
    if isinstance(mtime, datetime.datetime):
        mtime = mtime.timestamp()
    if isinstance(mtime, float):
        mtime = round(mtime)
    return _require_integer(descriptor, 'mtime', mtime)


def validate(descriptor):
    """Check the preconditions on a descriptor.

    Raises:
        PreconditionError: If the descriptor cannot be archived.
    """
    if not isinstance(descriptor.name, str) or not descriptor.name:
        raise PreconditionError('Entry name must be a non-empty string')

    # Directory entries are not supported
    if descriptor.name.endswith('/'):
        raise PreconditionError(
            'Entry name %s denotes a directory' % descriptor.name)

    for field in ('mode', 'uid', 'gid'):
        value = getattr(descriptor, field)
        if value is not None:
            _require_integer(descriptor, field, value)

    if descriptor.typeflag not in constants.TYPEFLAGS:
        raise PreconditionError(
            'Unknown typeflag %r for %s'
            % (descriptor.typeflag, descriptor.name))

    if isinstance(descriptor.content, str):
        raise PreconditionError(
            'Content of %s must be bytes, not str' % descriptor.name)

    resolve_size(descriptor)
    resolve_mtime(descriptor)


def _put(buf, field, data):
    offset, length = field
    data = data[:length]
    buf[offset:offset + len(data)] = data


def _encode_text(value, limit):
    if not value:
        return b''
    return value.encode('utf-8')[:limit]


def checksum(buf):
    """Sum the header bytes with the checksum field read as spaces."""
    offset, length = constants.CHKSUM_FIELD
    return (sum(buf[:offset]) + ord(' ') * length
            + sum(buf[offset + length:]))


def build_header(descriptor):
    """Build the header block for a validated descriptor.

    Returns:
        A HeaderBlock. The descriptor is not modified and no content is
        read.
    """
    buf = bytearray(constants.BLOCK_SIZE)
    records = []

    prefix_and_name = paths.split_path(descriptor.name)
    if prefix_and_name is None:
        LOG.debug('Storing path of %s in a PAX record' % descriptor.name)
        records.append(pax.PaxExtendedHeader(constants.PAX_PATH,
                                             descriptor.name))
        _put(buf, constants.NAME_FIELD, paths.path_cut_name(descriptor.name))
    else:
        prefix, name = prefix_and_name
        _put(buf, constants.NAME_FIELD, name)
        _put(buf, constants.PREFIX_FIELD, prefix)

    mode = descriptor.mode
    if mode is None:
        mode = constants.DEFAULT_MODE
    _put(buf, constants.MODE_FIELD,
         octal.encode_truncated(mode, 7, constants.MAX_ID_VALUE))
    _put(buf, constants.UID_FIELD,
         octal.encode_truncated(descriptor.uid or 0, 7,
                                constants.MAX_ID_VALUE))
    _put(buf, constants.GID_FIELD,
         octal.encode_truncated(descriptor.gid or 0, 7,
                                constants.MAX_ID_VALUE))

    size = resolve_size(descriptor)
    _put(buf, constants.SIZE_FIELD,
         octal.encode_truncated(size, 11, constants.MAX_OCTAL_VALUE))
    if size > constants.MAX_OCTAL_VALUE:
        LOG.debug('Storing size %d of %s in a PAX record'
                  % (size, descriptor.name))
        records.append(pax.PaxExtendedHeader(constants.PAX_SIZE, size))

    mtime = resolve_mtime(descriptor)
    if mtime > constants.MAX_OCTAL_VALUE:
        LOG.debug('Truncating mtime %d of %s' % (mtime, descriptor.name))
    _put(buf, constants.MTIME_FIELD,
         octal.encode_truncated(mtime, 11, constants.MAX_OCTAL_VALUE))

    _put(buf, constants.TYPEFLAG_FIELD, descriptor.typeflag.encode('ascii'))
    _put(buf, constants.LINKNAME_FIELD,
         _encode_text(descriptor.linkname, constants.LINKNAME_FIELD[1]))
    _put(buf, constants.MAGIC_FIELD, constants.USTAR_MAGIC)
    _put(buf, constants.VERSION_FIELD, constants.USTAR_VERSION)
    _put(buf, constants.UNAME_FIELD, _encode_text(descriptor.uname, 31))
    _put(buf, constants.GNAME_FIELD, _encode_text(descriptor.gname, 31))
    _put(buf, constants.DEVMAJOR_FIELD, _encode_text(descriptor.devmajor, 7))
    _put(buf, constants.DEVMINOR_FIELD, _encode_text(descriptor.devminor, 7))

    _put(buf, constants.CHKSUM_FIELD,
         b'%s\0 ' % octal.encode_octal(checksum(buf), 6))
    return HeaderBlock(bytes(buf), tuple(records))


class PlainEntry(namedtuple('PlainEntry', ['header', 'content'])):
    """A header block followed by its padded content stream."""
    __slots__ = ()

    def stream(self):
        return streams.concat_stream(
            streams.buffer_stream(self.header), self.content)


class PaxEntry(namedtuple('PaxEntry', ['pax', 'entry'])):
    """A PAX extended header entry followed by the entry it describes.

    Both halves are PlainEntry instances, so nesting is exactly one deep.
    """
    __slots__ = ()

    def stream(self):
        return streams.concat_stream(self.pax.stream(), self.entry.stream())


def content_stream(descriptor, size, chunk_size):
    """Turn the content of a descriptor into a lazy padded producer."""
    content = descriptor.content
    if content is None:
        content = b''
    if _is_buffer(content):
        return streams.buffer_stream(content, chunk_size)
    if hasattr(content, 'read'):
        return streams.content_stream(streams.file_stream(content), size)
    if not hasattr(content, '__iter__'):
        raise PreconditionError(
            'Content of %s is not bytes, a file or an iterable of bytes'
            % descriptor.name)
    return streams.content_stream(content, size)


def _plain_entry(descriptor, chunk_size, make_content):
    block = build_header(descriptor)
    size = resolve_size(descriptor)
    return block, PlainEntry(
        block.header, make_content(descriptor, size, chunk_size))


def compose_entry(descriptor, chunk_size=constants.BLOCK_SIZE,
                  make_content=content_stream):
    """Validate a descriptor and compose its complete byte stream.

    Args:
        descriptor: An EntryDescriptor.
        chunk_size: Slice size for content supplied as a byte buffer.
        make_content: Called as make_content(descriptor, size, chunk_size)
            to build the padded content producer.

    Returns:
        A PlainEntry, or a PaxEntry when the header needs overflow records.
        Call stream() on the result for the lazy bytes.

    Raises:
        PreconditionError: If the descriptor is invalid.
    """
    validate(descriptor)
    if chunk_size <= 0 or chunk_size % constants.BLOCK_SIZE != 0:
        raise PreconditionError(
            'Chunk size must be a positive multiple of %d, not %r'
            % (constants.BLOCK_SIZE, chunk_size))

    block, entry = _plain_entry(descriptor, chunk_size, make_content)
    if not block.pax_records:
        return entry

    data = pax.encode_records(block.pax_records)
    pax_block, pax_entry = _plain_entry(
        EntryDescriptor(name=constants.PAX_HEADER_NAME,
                        size=len(data),
                        typeflag=constants.TYPE_EXTENDED_HEADER,
                        content=data),
        chunk_size, make_content)
    if pax_block.pax_records:
        raise RuntimeError('PAX header entry for %s needs its own PAX header'
                           % descriptor.name)
    return PaxEntry(pax_entry, entry)
