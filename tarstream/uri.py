"""Parsing of entry specifications given on the command line.

An entry specification names where an entry's content comes from and what
it is called in the archive:

    ARCNAME=SOURCE

SOURCE formats:
    /path/to/file or file:///path/to/file
    http://host/path or https://host/path
    zero://SIZE        SIZE zero bytes, generated on demand
    stdin://           standard input ('-' is an alias)

Entry metadata can be overridden with query options on SOURCE, for example
etc/motd=file:///tmp/motd?mode=644&uid=0&uname=root. mode is octal. When
ARCNAME is omitted it is derived from SOURCE.
"""

from collections import namedtuple
from urllib.parse import urlencode, urlparse, parse_qsl, unquote

from tarstream import constants


# Named tuple for a parsed entry specification
SourceSpec = namedtuple(
    'SourceSpec', ['arcname', 'scheme', 'location', 'options'])


SCHEMES = {constants.SOURCE_FILE, constants.SOURCE_HTTP,
           constants.SOURCE_HTTPS, constants.SOURCE_ZERO,
           constants.SOURCE_STDIN}

# Query options which describe the entry rather than the source
ENTRY_OPTIONS = {'mode', 'uid', 'gid', 'size', 'mtime', 'typeflag',
                 'linkname', 'uname', 'gname', 'devmajor', 'devminor'}
INTEGER_OPTIONS = {'uid', 'gid', 'size', 'mtime'}


class URIParseError(Exception):
    """Raised when an entry specification cannot be parsed."""
    pass


def _convert_option(key, value):
    if key == 'mode':
        try:
            return int(value, 8)
        except ValueError:
            raise URIParseError('mode must be octal, not %s' % value)
    if key in INTEGER_OPTIONS:
        try:
            return int(value)
        except ValueError:
            raise URIParseError('%s must be an integer, not %s'
                                % (key, value))
    return value


def _split_options(query):
    """Separate entry options from any query the source itself needs."""
    options = {}
    remaining = []
    for key, value in parse_qsl(query, keep_blank_values=True):
        if key in ENTRY_OPTIONS:
            options[key] = _convert_option(key, value)
        else:
            remaining.append((key, value))
    return options, urlencode(remaining)


def parse_source(spec_string):
    """Parse an entry specification into components.

    Args:
        spec_string: A string like 'docs/a.txt=file:///tmp/a.txt?mode=600'

    Returns:
        SourceSpec(arcname, scheme, location, options). location is a
        filesystem path, a URL, or for zero:// the byte count as a str.

    Raises:
        URIParseError: If the specification is malformed.
    """
    arcname = None
    source = spec_string
    if '=' in spec_string:
        head, tail = spec_string.split('=', 1)
        # A bare path or URI can contain '=' in its query string
        if '://' not in head and '?' not in head:
            arcname, source = head, tail

    if not source:
        raise URIParseError('Missing source in entry spec: %s' % spec_string)

    if source == '-' or source.startswith('-?'):
        source = 'stdin://' + source[1:]
    if '://' not in source:
        source = 'file://' + source

    parsed = urlparse(source)
    scheme = parsed.scheme.lower()
    if scheme not in SCHEMES:
        raise URIParseError('Unknown source scheme in: %s' % spec_string)

    options, remaining_query = _split_options(parsed.query)

    if scheme in (constants.SOURCE_HTTP, constants.SOURCE_HTTPS):
        location = parsed._replace(query=remaining_query,
                                   fragment='').geturl()
        default_name = unquote(parsed.path)
    elif scheme == constants.SOURCE_ZERO:
        location = parsed.netloc or parsed.path
        if not location.isdigit():
            raise URIParseError('zero:// needs a byte count: %s'
                                % spec_string)
        options.setdefault('size', int(location))
        default_name = None
    elif scheme == constants.SOURCE_STDIN:
        location = '-'
        default_name = None
    else:
        # file://foo.txt -> netloc='foo.txt', keep relative paths working
        location = unquote(parsed.netloc + parsed.path)
        if parsed.netloc == 'localhost':
            location = unquote(parsed.path)
        default_name = location

    if arcname is None:
        if not default_name:
            raise URIParseError('An archive name is required for %s'
                                % spec_string)
        arcname = default_name.lstrip('/')
        if not arcname:
            raise URIParseError('Cannot derive an archive name from %s'
                                % spec_string)

    return SourceSpec(arcname=arcname, scheme=scheme, location=location,
                      options=options)
