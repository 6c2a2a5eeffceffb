"""Tests for the compression module."""

import gzip
import unittest

import zstandard as zstd

from tarstream import archive
from tarstream import compression
from tarstream import constants
from tarstream import header


class TestDetectCompression(unittest.TestCase):
    """Tests for compression detection from magic bytes."""

    def test_detect_gzip_from_bytes(self):
        data = gzip.compress(b'hello world')
        result = compression.detect_compression(data)
        self.assertEqual(result, constants.COMPRESSION_GZIP)

    def test_detect_zstd_from_bytes(self):
        cctx = zstd.ZstdCompressor()
        data = cctx.compress(b'hello world')
        result = compression.detect_compression(data)
        self.assertEqual(result, constants.COMPRESSION_ZSTD)

    def test_detect_uncompressed_tar(self):
        data = b''.join(archive.assemble(
            [header.EntryDescriptor(name='f', content=b'x')]))
        result = compression.detect_compression(data[:512])
        self.assertEqual(result, constants.COMPRESSION_NONE)

    def test_detect_unknown_from_random_bytes(self):
        result = compression.detect_compression(b'not compressed data here')
        self.assertEqual(result, constants.COMPRESSION_UNKNOWN)

    def test_detect_empty_data(self):
        result = compression.detect_compression(b'')
        self.assertEqual(result, constants.COMPRESSION_UNKNOWN)


class TestDetectCompressionFromFilename(unittest.TestCase):
    def test_suffixes(self):
        for name, expected in (
                ('out.tar.gz', constants.COMPRESSION_GZIP),
                ('out.tgz', constants.COMPRESSION_GZIP),
                ('out.tar.zst', constants.COMPRESSION_ZSTD),
                ('out.tar', constants.COMPRESSION_NONE),
                ('out', constants.COMPRESSION_NONE)):
            with self.subTest(name=name):
                self.assertEqual(
                    expected,
                    compression.detect_compression_from_filename(name))


class TestCompressStream(unittest.TestCase):
    def _chunks(self):
        return [b'hello ' * 100, b'world ' * 1000, b'!']

    def test_gzip(self):
        compressed = b''.join(compression.compress_stream(
            iter(self._chunks()), constants.COMPRESSION_GZIP))
        self.assertEqual(b''.join(self._chunks()), gzip.decompress(compressed))

    def test_zstd(self):
        compressed = b''.join(compression.compress_stream(
            iter(self._chunks()), constants.COMPRESSION_ZSTD, level=5))
        dobj = zstd.ZstdDecompressor().decompressobj()
        self.assertEqual(b''.join(self._chunks()), dobj.decompress(compressed))

    def test_none_passes_through(self):
        chunks = list(compression.compress_stream(
            iter(self._chunks()), constants.COMPRESSION_NONE))
        self.assertEqual(self._chunks(), chunks)

    def test_unsupported_type(self):
        self.assertRaises(ValueError, list, compression.compress_stream(
            iter([b'x']), 'lzma'))

    def test_round_trip_through_decompressor(self):
        for compression_type in (constants.COMPRESSION_GZIP,
                                 constants.COMPRESSION_ZSTD):
            with self.subTest(compression_type=compression_type):
                compressed = compression.compress_stream(
                    iter(self._chunks()), compression_type)
                self.assertEqual(
                    b''.join(self._chunks()),
                    b''.join(compression.decompress_stream(
                        compressed, compression_type)))


class TestStreamingDecompressor(unittest.TestCase):
    def test_none(self):
        decompressor = compression.StreamingDecompressor(
            constants.COMPRESSION_NONE)
        self.assertEqual(b'abc', decompressor.decompress(b'abc'))
        self.assertEqual(b'', decompressor.flush())

    def test_gzip_in_pieces(self):
        data = gzip.compress(b'x' * 10000)
        decompressor = compression.StreamingDecompressor(
            constants.COMPRESSION_GZIP)
        result = b''
        for i in range(0, len(data), 7):
            result += decompressor.decompress(data[i:i + 7])
        result += decompressor.flush()
        self.assertEqual(b'x' * 10000, result)

    def test_unsupported(self):
        self.assertRaises(ValueError, compression.StreamingDecompressor,
                          'unknown')
