"""Tests for the lazy stream composition primitives."""

import io
import unittest

from tarstream import streams


class TestBufferStream(unittest.TestCase):
    def test_empty(self):
        self.assertEqual([], list(streams.buffer_stream(b'')))

    def test_exact_block(self):
        self.assertEqual([b'a' * 512],
                         list(streams.buffer_stream(b'a' * 512)))

    def test_final_slice_padded(self):
        chunks = list(streams.buffer_stream(b'a' * 513))
        self.assertEqual([b'a' * 512, b'a' + bytes(511)], chunks)

    def test_larger_chunks(self):
        chunks = list(streams.buffer_stream(b'a' * 1500, chunk_size=1024))
        self.assertEqual([b'a' * 1024, b'a' * 476 + bytes(36)], chunks)

    def test_bad_chunk_size(self):
        self.assertRaises(ValueError, list,
                          streams.buffer_stream(b'a', chunk_size=100))
        self.assertRaises(ValueError, list,
                          streams.buffer_stream(b'a', chunk_size=0))


class TestConcatStream(unittest.TestCase):
    def test_order_and_chunking_preserved(self):
        chunks = list(streams.concat_stream(iter([b'a', b'bc']),
                                            iter([b'def'])))
        self.assertEqual([b'a', b'bc', b'def'], chunks)

    def test_second_not_started_early(self):
        pulled = []

        def second():
            pulled.append(True)
            yield b'2'

        stream = streams.concat_stream(iter([b'1']), second())
        self.assertEqual(b'1', next(stream))
        self.assertEqual([], pulled)
        self.assertEqual(b'2', next(stream))
        self.assertEqual([True], pulled)

    def test_abandoning_closes_producers(self):
        closed = []

        def first():
            try:
                yield b'1'
                yield b'2'
            finally:
                closed.append('first')

        def second():
            yield b'3'

        second_producer = second()
        stream = streams.concat_stream(first(), second_producer)
        self.assertEqual(b'1', next(stream))
        stream.close()
        self.assertEqual(['first'], closed)
        self.assertEqual([], list(second_producer))

    def test_concat_all(self):
        producers = [iter([bytes([i])]) for i in range(7)]
        self.assertEqual(bytes(range(7)),
                         b''.join(streams.concat_all(producers)))

    def test_concat_all_single(self):
        producer = iter([b'only'])
        self.assertIs(producer, streams.concat_all([producer]))

    def test_pair_up_is_balanced(self):
        def concat(first, second):
            return (first, second)

        self.assertEqual(((1, 2), (3, 4)),
                         streams.pair_up([1, 2, 3, 4], concat))
        self.assertEqual(((1, 2), 3), streams.pair_up([1, 2, 3], concat))

    def test_pair_up_empty(self):
        self.assertRaises(ValueError, streams.pair_up, [],
                          streams.concat_stream)


class TestContentStream(unittest.TestCase):
    def test_chunks_verbatim_with_trailing_padding(self):
        chunks = list(streams.content_stream(iter([b'a' * 511, b'b' * 3]),
                                             514))
        self.assertEqual([b'a' * 511, b'b' * 3, bytes(510)], chunks)

    def test_aligned_content_not_padded(self):
        chunks = list(streams.content_stream(
            iter([b'a' * 511, b'b' * 513]), 1024))
        self.assertEqual([b'a' * 511, b'b' * 513], chunks)

    def test_empty_chunks_skipped(self):
        chunks = list(streams.content_stream(iter([b'', b'abc', b'']), 3))
        self.assertEqual([b'abc', bytes(509)], chunks)

    def test_bytearray_chunks(self):
        chunks = list(streams.content_stream(iter([bytearray(b'ab')]), 2))
        self.assertIsInstance(chunks[0], bytes)

    def test_too_long(self):
        received = []
        stream = streams.content_stream(iter([b'abc', b'def']), 4)
        with self.assertRaises(streams.ContentSizeError):
            for chunk in stream:
                received.append(chunk)
        self.assertEqual([b'abc'], received)

    def test_too_short(self):
        self.assertRaises(streams.ContentSizeError, list,
                          streams.content_stream(iter([b'abc']), 4))

    def test_empty(self):
        self.assertEqual([], list(streams.content_stream(iter([]), 0)))


class TestProducers(unittest.TestCase):
    def test_file_stream(self):
        f = io.BytesIO(b'abcdefg')
        self.assertEqual([b'abc', b'def', b'g'],
                         list(streams.file_stream(f, read_size=3)))

    def test_zero_stream(self):
        chunks = list(streams.zero_stream(2500, read_size=1000))
        self.assertEqual([1000, 1000, 500], [len(c) for c in chunks])
        self.assertEqual(bytes(2500), b''.join(chunks))

    def test_zero_stream_empty(self):
        self.assertEqual([], list(streams.zero_stream(0)))

    def test_padding_for(self):
        self.assertEqual(b'', streams.padding_for(0))
        self.assertEqual(b'', streams.padding_for(1024))
        self.assertEqual(bytes(511), streams.padding_for(1))

    def test_drain(self):
        sink = io.BytesIO()
        self.assertEqual(5, streams.drain(iter([b'ab', b'cde']), sink))
        self.assertEqual(b'abcde', sink.getvalue())
