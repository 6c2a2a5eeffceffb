# Mapping of archive paths onto the USTAR name and prefix fields.
#
# USTAR stores a path in two fields:
#   - name: 100 bytes for the final part of the path
#   - prefix: 155 bytes for the leading directories
#
# A reader joins them as prefix + '/' + name when prefix is not empty. We
# keep one byte of each field free for a NUL terminator, so the usable
# limits are 99 and 154 bytes. Paths which cannot be split at a '/' within
# those limits are stored in a PAX 'path' record instead.

import logging

from tarstream import constants


LOG = logging.getLogger(__name__)


def split_path(path):
    """Split a path into USTAR prefix and name fields.

    Args:
        path: The archive path as a str.

    Returns:
        A (prefix, name) tuple of UTF-8 bytes, or None if there is no split
        point which fits both fields. When several split points fit, the
        one with the shortest prefix is returned.
    """
    encoded = path.encode('utf-8')
    if len(encoded) <= constants.MAX_NAME_LENGTH:
        return b'', encoded

    segments = encoded.split(b'/')
    for i in range(1, len(segments)):
        prefix = b'/'.join(segments[:i])
        if len(prefix) > constants.MAX_PREFIX_LENGTH:
            # Prefixes only grow from here on
            break
        name = b'/'.join(segments[i:])
        if len(name) <= constants.MAX_NAME_LENGTH:
            return prefix, name

    LOG.debug('Path cannot be split into USTAR prefix and name: %s' % path)
    return None


def path_cut_name(path):
    """Build the bounded legacy name used when a path needs a PAX record.

    The result is a hint for readers which do not understand PAX headers,
    the real path is carried in the extended header.
    """
    budget = constants.MAX_NAME_LENGTH - len(constants.PATH_CUT_PREFIX)
    return constants.PATH_CUT_PREFIX + path.encode('utf-8')[:budget]
