"""Compression for archive streams.

This module provides detection and streaming compression/decompression for
the gzip and zstd formats tar archives are commonly wrapped in.
"""

import zlib

import zstandard as zstd

from tarstream import constants


# Magic bytes for compression format detection
GZIP_MAGIC = b'\x1f\x8b'
ZSTD_MAGIC = b'\x28\xb5\x2f\xfd'

# Output filename suffixes and the compression they imply
SUFFIXES = {
    '.gz': constants.COMPRESSION_GZIP,
    '.tgz': constants.COMPRESSION_GZIP,
    '.zst': constants.COMPRESSION_ZSTD,
    '.tzst': constants.COMPRESSION_ZSTD,
}


def detect_compression(data):
    """Detect compression format from magic bytes.

    Args:
        data: At least the first 512 bytes of an archive, or fewer if the
            archive is that short.

    Returns:
        One of COMPRESSION_GZIP, COMPRESSION_ZSTD, COMPRESSION_NONE,
        or COMPRESSION_UNKNOWN.
    """
    if len(data) < 2:
        return constants.COMPRESSION_UNKNOWN

    if data[:2] == GZIP_MAGIC:
        return constants.COMPRESSION_GZIP
    if data[:4] == ZSTD_MAGIC:
        return constants.COMPRESSION_ZSTD

    # Check for tar magic at offset 257 (ustar format)
    if data[257:262] == b'ustar':
        return constants.COMPRESSION_NONE

    return constants.COMPRESSION_UNKNOWN


def detect_compression_from_filename(filename):
    """Pick a compression format from an output filename suffix."""
    for suffix, compression_type in SUFFIXES.items():
        if filename.endswith(suffix):
            return compression_type
    return constants.COMPRESSION_NONE


class StreamingDecompressor:
    """Streaming decompressor for gzip and zstd formats.

    This class provides a unified interface for streaming decompression,
    allowing data to be decompressed chunk by chunk as it arrives.
    """

    def __init__(self, compression_type):
        """Initialize the decompressor.

        Args:
            compression_type: One of COMPRESSION_GZIP, COMPRESSION_ZSTD,
                or COMPRESSION_NONE.

        Raises:
            ValueError: If compression_type is not supported.
        """
        self.compression_type = compression_type

        if compression_type == constants.COMPRESSION_GZIP:
            # Use zlib with gzip header support (16 + MAX_WBITS)
            self._decompressor = zlib.decompressobj(16 + zlib.MAX_WBITS)
        elif compression_type == constants.COMPRESSION_ZSTD:
            self._decompressor = zstd.ZstdDecompressor().decompressobj()
        elif compression_type == constants.COMPRESSION_NONE:
            self._decompressor = None
        else:
            raise ValueError(
                'Unsupported compression type: %s' % compression_type)

    def decompress(self, chunk):
        if self._decompressor is None:
            return chunk
        return self._decompressor.decompress(chunk)

    def flush(self):
        if self._decompressor is None:
            return b''
        if self.compression_type == constants.COMPRESSION_GZIP:
            return self._decompressor.flush()
        # zstd doesn't have a flush method on decompressobj
        return b''


class StreamingCompressor:
    """Streaming compressor for gzip and zstd formats.

    Unlike buffering the whole archive, each chunk is handed to the
    underlying compressor straight away and whatever compressed output is
    ready is returned.
    """

    def __init__(self, compression_type, level=None):
        """Initialize the compressor.

        Args:
            compression_type: One of COMPRESSION_GZIP, COMPRESSION_ZSTD.
            level: Compression level (optional, uses default if not specified).
                For gzip: 0-9 (default 9)
                For zstd: 1-22 (default 3)

        Raises:
            ValueError: If compression_type is not supported.
        """
        self.compression_type = compression_type

        if compression_type == constants.COMPRESSION_GZIP:
            self._level = level if level is not None else 9
            self._compressor = zlib.compressobj(
                self._level, zlib.DEFLATED, 16 + zlib.MAX_WBITS)
        elif compression_type == constants.COMPRESSION_ZSTD:
            self._level = level if level is not None else 3
            self._compressor = zstd.ZstdCompressor(
                level=self._level).compressobj()
        else:
            raise ValueError(
                'Unsupported compression type: %s' % compression_type)

    def compress(self, chunk):
        """Compress a chunk of data.

        Returns:
            Compressed bytes (may be empty if the compressor is buffering).
        """
        return self._compressor.compress(chunk)

    def flush(self):
        """Flush and finalize compression.

        Returns:
            Final compressed bytes.
        """
        return self._compressor.flush()


def compress_stream(stream, compression_type, level=None):
    """Lazily compress a byte producer.

    COMPRESSION_NONE passes the stream through untouched.
    """
    if compression_type == constants.COMPRESSION_NONE:
        yield from stream
        return

    compressor = StreamingCompressor(compression_type, level=level)
    for chunk in stream:
        compressed = compressor.compress(chunk)
        if compressed:
            yield compressed
    tail = compressor.flush()
    if tail:
        yield tail


def decompress_stream(stream, compression_type):
    """Lazily decompress a byte producer."""
    decompressor = StreamingDecompressor(compression_type)
    for chunk in stream:
        data = decompressor.decompress(chunk)
        if data:
            yield data
    tail = decompressor.flush()
    if tail:
        yield tail
