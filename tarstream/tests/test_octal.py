"""Tests for the octal field codec."""

import unittest

from tarstream import constants
from tarstream import octal


class TestEncodeOctal(unittest.TestCase):
    def test_zero_padded(self):
        self.assertEqual(b'00000000005', octal.encode_octal(5, 11))
        self.assertEqual(b'0000777', octal.encode_octal(0o777, 7))

    def test_full_width(self):
        self.assertEqual(b'77777777777',
                         octal.encode_octal(constants.MAX_OCTAL_VALUE, 11))

    def test_too_wide_raises(self):
        self.assertRaises(ValueError, octal.encode_octal,
                          constants.MAX_OCTAL_VALUE + 1, 11)

    def test_negative_raises(self):
        self.assertRaises(ValueError, octal.encode_octal, -1, 7)


class TestTruncate(unittest.TestCase):
    def test_in_range_untouched(self):
        self.assertEqual(1234, octal.truncate(1234))

    def test_nine_gib(self):
        # 9 GiB loses its 2**33 bit and keeps the low 33 bits
        self.assertEqual(1024 ** 3, octal.truncate(9 * 1024 ** 3))
        self.assertEqual(
            b'10000000000',
            octal.encode_truncated(9 * 1024 ** 3, 11,
                                   constants.MAX_OCTAL_VALUE))

    def test_id_mask(self):
        self.assertEqual(
            b'0000000',
            octal.encode_truncated(0o10000000, 7, constants.MAX_ID_VALUE))


class TestDecodeOctal(unittest.TestCase):
    def test_nul_terminated(self):
        self.assertEqual(5, octal.decode_octal(b'00000000005\0'))

    def test_space_terminated(self):
        self.assertEqual(0o644, octal.decode_octal(b'000644 \0'))

    def test_empty_is_zero(self):
        self.assertEqual(0, octal.decode_octal(b'\0\0\0\0\0\0\0\0'))
