# A tar archive is a sequence of 512 byte blocks. Each entry is a header
# block followed by zero or more content blocks, and the archive ends with
# two blocks of NUL bytes.
BLOCK_SIZE = 512
TERMINATOR_SIZE = 2 * BLOCK_SIZE

# USTAR header layout: (offset, length)
NAME_FIELD = (0, 100)
MODE_FIELD = (100, 8)
UID_FIELD = (108, 8)
GID_FIELD = (116, 8)
SIZE_FIELD = (124, 12)
MTIME_FIELD = (136, 12)
CHKSUM_FIELD = (148, 8)
TYPEFLAG_FIELD = (156, 1)
LINKNAME_FIELD = (157, 100)
MAGIC_FIELD = (257, 6)
VERSION_FIELD = (263, 2)
UNAME_FIELD = (265, 32)
GNAME_FIELD = (297, 32)
DEVMAJOR_FIELD = (329, 8)
DEVMINOR_FIELD = (337, 8)
PREFIX_FIELD = (345, 155)

USTAR_MAGIC = b'ustar\0'
USTAR_VERSION = b'00'

# Limits leave room for a trailing NUL in the name and prefix fields.
MAX_NAME_LENGTH = 100 - 1
MAX_PREFIX_LENGTH = 155 - 1

# Largest values the fixed octal fields can hold.
MAX_ID_VALUE = 0o7777777        # 7 digits, mode / uid / gid
MAX_OCTAL_VALUE = 0o77777777777  # 11 digits, size / mtime (8 GiB - 1)

# Type flags
TYPE_REGULAR = '0'
TYPE_HARDLINK = '1'
TYPE_SYMLINK = '2'
TYPE_CHARDEV = '3'
TYPE_BLOCKDEV = '4'
TYPE_DIRECTORY = '5'
TYPE_FIFO = '6'
TYPE_CONTIGUOUS = '7'
TYPE_EXTENDED_HEADER = 'x'
TYPE_GLOBAL_EXTENDED_HEADER = 'g'

TYPEFLAGS = {
    TYPE_REGULAR, TYPE_HARDLINK, TYPE_SYMLINK, TYPE_CHARDEV,
    TYPE_BLOCKDEV, TYPE_DIRECTORY, TYPE_FIFO, TYPE_CONTIGUOUS,
    TYPE_EXTENDED_HEADER, TYPE_GLOBAL_EXTENDED_HEADER
}

# PAX extended header keywords we emit
PAX_SIZE = 'size'
PAX_PATH = 'path'
PAX_KEYWORDS = {PAX_SIZE, PAX_PATH}

# Synthetic names used when a PAX sub-entry is needed
PAX_HEADER_NAME = 'PaxHeader/@PaxHeader'
PATH_CUT_PREFIX = b'@PathCut/_pc_root/'

DEFAULT_MODE = 0o777

# Content source schemes
SOURCE_FILE = 'file'
SOURCE_HTTP = 'http'
SOURCE_HTTPS = 'https'
SOURCE_ZERO = 'zero'
SOURCE_STDIN = 'stdin'

# Compression type constants
COMPRESSION_GZIP = 'gzip'
COMPRESSION_ZSTD = 'zstd'
COMPRESSION_NONE = 'none'
COMPRESSION_AUTO = 'auto'
COMPRESSION_UNKNOWN = 'unknown'
