"""Turn parsed entry specifications into entry descriptors.

Every source yields its content lazily: files are opened, and HTTP bodies
read, only once the archive stream reaches that entry.
"""

import logging
import os
import stat
import sys

from tarstream import constants
from tarstream import header
from tarstream import streams
from tarstream import util


LOG = logging.getLogger(__name__)


class SourceError(Exception):
    """Raised when an entry source cannot be used."""
    pass


def _read_file(path, read_size):
    with open(path, 'rb') as f:
        yield from streams.file_stream(f, read_size)


def _read_url(url, read_size):
    # The GET is only sent once the archive stream reaches this entry
    response = util.request_url('GET', url, stream=True)
    try:
        for chunk in response.iter_content(chunk_size=read_size):
            yield chunk
    finally:
        response.close()


def _file_metadata(spec):
    try:
        st = os.stat(spec.location)
    except OSError as e:
        raise SourceError('Cannot read %s: %s' % (spec.location, e))
    if stat.S_ISDIR(st.st_mode):
        raise SourceError('%s is a directory' % spec.location)
    return {
        'size': st.st_size,
        'mtime': int(st.st_mtime),
        'mode': stat.S_IMODE(st.st_mode),
    }


def _http_size(spec):
    if 'size' in spec.options:
        return spec.options['size']
    response = util.request_url('HEAD', spec.location)
    length = response.headers.get('Content-Length')
    response.close()
    if length is None or not length.isdigit():
        raise SourceError('%s did not report a Content-Length, pass ?size='
                          % spec.location)
    return int(length)


def make_descriptor(spec, defaults=None, read_size=streams.DEFAULT_READ_SIZE):
    """Build an EntryDescriptor for a SourceSpec.

    Args:
        spec: A SourceSpec from uri.parse_source().
        defaults: Optional dict of descriptor fields used where neither the
            source nor the spec options provide a value.
        read_size: Chunk size for reading files and HTTP bodies.

    Returns:
        An EntryDescriptor whose content is a lazy producer.
    """
    fields = dict(defaults or {})

    if spec.scheme == constants.SOURCE_FILE:
        fields.update(_file_metadata(spec))
        content = _read_file(spec.location, read_size)

    elif spec.scheme in (constants.SOURCE_HTTP, constants.SOURCE_HTTPS):
        fields['size'] = _http_size(spec)
        content = _read_url(spec.location, read_size)

    elif spec.scheme == constants.SOURCE_ZERO:
        content = streams.zero_stream(spec.options['size'], read_size)

    elif spec.scheme == constants.SOURCE_STDIN:
        if 'size' not in spec.options:
            raise SourceError('Standard input needs an explicit ?size=')
        content = streams.file_stream(sys.stdin.buffer, read_size)

    else:
        raise SourceError('Unsupported source scheme %s' % spec.scheme)

    fields.update(spec.options)
    fields['name'] = spec.arcname
    fields['content'] = content
    LOG.debug('Entry %s from %s://%s is %s bytes'
              % (spec.arcname, spec.scheme, spec.location,
                 fields.get('size')))
    return header.EntryDescriptor(**fields)
