"""Decode the headers of an archive, block by block.

This is the inverse of header.build_header and is used to list archives
and to check what the writer produced. Content is skipped, or optionally
returned for small archives.
"""

from collections import namedtuple
import logging

from tarstream import compression
from tarstream import constants
from tarstream import header
from tarstream import octal
from tarstream import pax
from tarstream import streams


LOG = logging.getLogger(__name__)


DecodedHeader = namedtuple(
    'DecodedHeader',
    ['path', 'name', 'prefix', 'mode', 'uid', 'gid', 'size', 'mtime',
     'chksum', 'typeflag', 'linkname', 'magic', 'version', 'uname', 'gname',
     'devmajor', 'devminor', 'pax_records'])


class ArchiveFormatError(ValueError):
    """Raised when archive bytes are not a valid USTAR archive."""
    pass


class _BlockReader(object):
    """Read exact byte counts from a producer of arbitrary chunks."""

    def __init__(self, chunks):
        self._chunks = iter(chunks)
        self._buffer = bytearray()

    def read(self, length):
        while len(self._buffer) < length:
            chunk = next(self._chunks, None)
            if chunk is None:
                break
            self._buffer += chunk
        data = bytes(self._buffer[:length])
        del self._buffer[:length]
        return data

    def skip(self, length):
        while length > 0:
            skipped = len(self.read(min(length, streams.DEFAULT_READ_SIZE)))
            if skipped == 0:
                raise ArchiveFormatError('Archive ends inside entry content')
            length -= skipped


def _text(field):
    return field.split(b'\0', 1)[0].decode('utf-8', errors='replace')


def _field(block, field):
    offset, length = field
    return block[offset:offset + length]


def _number(block, field, label):
    try:
        return octal.decode_octal(_field(block, field))
    except ValueError:
        raise ArchiveFormatError('Corrupt %s field %r'
                                 % (label, _field(block, field)))


def decode_header(block, pax_records=None):
    """Decode a 512 byte header block.

    PAX path and size records, if given, override the fixed fields.

    Raises:
        ArchiveFormatError: If the block is not a valid USTAR header.
    """
    if len(block) != constants.BLOCK_SIZE:
        raise ArchiveFormatError('Header block is %d bytes' % len(block))

    magic = _field(block, constants.MAGIC_FIELD)
    if magic != constants.USTAR_MAGIC:
        raise ArchiveFormatError('Bad magic %r' % magic)

    stored = _number(block, constants.CHKSUM_FIELD, 'checksum')
    computed = header.checksum(block)
    if stored != computed:
        raise ArchiveFormatError('Checksum mismatch: stored %o computed %o'
                                 % (stored, computed))

    pax_records = dict(pax_records or {})
    name = _text(_field(block, constants.NAME_FIELD))
    prefix = _text(_field(block, constants.PREFIX_FIELD))
    path = prefix + '/' + name if prefix else name
    size = _number(block, constants.SIZE_FIELD, 'size')

    path = pax_records.get(constants.PAX_PATH, path)
    if constants.PAX_SIZE in pax_records:
        try:
            size = int(pax_records[constants.PAX_SIZE])
        except ValueError:
            raise ArchiveFormatError('Corrupt PAX size record %r'
                                     % pax_records[constants.PAX_SIZE])

    typeflag = _field(block, constants.TYPEFLAG_FIELD)
    try:
        typeflag = typeflag.decode('ascii')
    except UnicodeDecodeError:
        raise ArchiveFormatError('Bad typeflag %r' % typeflag)

    return DecodedHeader(
        path=path,
        name=name,
        prefix=prefix,
        mode=_number(block, constants.MODE_FIELD, 'mode'),
        uid=_number(block, constants.UID_FIELD, 'uid'),
        gid=_number(block, constants.GID_FIELD, 'gid'),
        size=size,
        mtime=_number(block, constants.MTIME_FIELD, 'mtime'),
        chksum=stored,
        typeflag=typeflag,
        linkname=_text(_field(block, constants.LINKNAME_FIELD)),
        magic=magic,
        version=_field(block, constants.VERSION_FIELD),
        uname=_text(_field(block, constants.UNAME_FIELD)),
        gname=_text(_field(block, constants.GNAME_FIELD)),
        devmajor=_text(_field(block, constants.DEVMAJOR_FIELD)),
        devminor=_text(_field(block, constants.DEVMINOR_FIELD)),
        pax_records=pax_records)


def iter_headers(chunks, with_content=False):
    """Decode every entry of an uncompressed archive.

    Args:
        chunks: An iterable of archive bytes, chunked any way.
        with_content: If True, yield (header, content bytes) pairs instead
            of skipping content. Only sensible for small archives.

    Yields:
        DecodedHeader for each entry, PAX extended header entries are
        folded into the entry which follows them.
    """
    reader = _BlockReader(chunks)
    pending = None
    zero_block = bytes(constants.BLOCK_SIZE)

    while True:
        block = reader.read(constants.BLOCK_SIZE)
        if not block:
            LOG.debug('Archive ended without a terminator')
            return
        if len(block) < constants.BLOCK_SIZE:
            raise ArchiveFormatError('Archive ends inside a header block')
        if block == zero_block:
            if reader.read(constants.BLOCK_SIZE) not in (zero_block, b''):
                raise ArchiveFormatError('Single zero block inside archive')
            return

        decoded = decode_header(block, pending)
        padded = decoded.size + len(streams.padding_for(decoded.size))

        if decoded.typeflag == constants.TYPE_EXTENDED_HEADER:
            data = reader.read(padded)
            if len(data) < padded:
                raise ArchiveFormatError('Archive ends inside a PAX header')
            try:
                pending = pax.parse_records(data[:decoded.size])
            except ValueError as e:
                raise ArchiveFormatError(str(e))
            continue

        pending = None
        if with_content:
            data = reader.read(padded)
            if len(data) < padded:
                raise ArchiveFormatError('Archive ends inside entry content')
            yield decoded, data[:decoded.size]
        else:
            reader.skip(padded)
            yield decoded


def read_archive(path, with_content=False):
    """Decode the headers of an archive file, which may be compressed."""
    with open(path, 'rb') as f:
        start = f.read(constants.BLOCK_SIZE)
        compression_type = compression.detect_compression(start)
        if compression_type == constants.COMPRESSION_UNKNOWN:
            compression_type = constants.COMPRESSION_NONE
        LOG.debug('Reading %s with compression %s'
                  % (path, compression_type))

        chunks = streams.concat_stream([start], streams.file_stream(f))
        chunks = compression.decompress_stream(chunks, compression_type)
        yield from iter_headers(chunks, with_content=with_content)
