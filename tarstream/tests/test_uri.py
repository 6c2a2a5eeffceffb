"""Tests for entry specification parsing."""

import unittest

from tarstream import constants
from tarstream import uri


class TestParseSource(unittest.TestCase):
    def test_bare_path(self):
        spec = uri.parse_source('docs/readme.txt')
        self.assertEqual(
            uri.SourceSpec('docs/readme.txt', constants.SOURCE_FILE,
                           'docs/readme.txt', {}),
            spec)

    def test_absolute_path_arcname(self):
        spec = uri.parse_source('/tmp/a.txt')
        self.assertEqual('tmp/a.txt', spec.arcname)
        self.assertEqual('/tmp/a.txt', spec.location)

    def test_arcname_and_file_uri(self):
        spec = uri.parse_source('etc/motd=file:///tmp/motd')
        self.assertEqual('etc/motd', spec.arcname)
        self.assertEqual(constants.SOURCE_FILE, spec.scheme)
        self.assertEqual('/tmp/motd', spec.location)

    def test_options(self):
        spec = uri.parse_source(
            'etc/motd=/tmp/motd?mode=644&uid=0&uname=root&mtime=5')
        self.assertEqual(
            {'mode': 0o644, 'uid': 0, 'uname': 'root', 'mtime': 5},
            spec.options)
        self.assertEqual('/tmp/motd', spec.location)

    def test_bad_mode(self):
        self.assertRaises(uri.URIParseError, uri.parse_source,
                          'f=/tmp/f?mode=rwx')

    def test_bad_integer(self):
        self.assertRaises(uri.URIParseError, uri.parse_source,
                          'f=/tmp/f?uid=root')

    def test_zero(self):
        spec = uri.parse_source('big.bin=zero://9663676416')
        self.assertEqual(constants.SOURCE_ZERO, spec.scheme)
        self.assertEqual({'size': 9663676416}, spec.options)

    def test_zero_needs_size(self):
        self.assertRaises(uri.URIParseError, uri.parse_source,
                          'big.bin=zero://lots')

    def test_zero_needs_arcname(self):
        self.assertRaises(uri.URIParseError, uri.parse_source,
                          'zero://10')

    def test_stdin(self):
        spec = uri.parse_source('in.txt=-?size=5')
        self.assertEqual(constants.SOURCE_STDIN, spec.scheme)
        self.assertEqual({'size': 5}, spec.options)

    def test_http_keeps_own_query(self):
        spec = uri.parse_source(
            'https://example.com/files/data.bin?token=abc&mode=600')
        self.assertEqual(constants.SOURCE_HTTPS, spec.scheme)
        self.assertEqual('files/data.bin', spec.arcname)
        self.assertEqual('https://example.com/files/data.bin?token=abc',
                         spec.location)
        self.assertEqual({'mode': 0o600}, spec.options)

    def test_unknown_scheme(self):
        self.assertRaises(uri.URIParseError, uri.parse_source,
                          'f=ftp://example.com/f')

    def test_missing_source(self):
        self.assertRaises(uri.URIParseError, uri.parse_source, 'name=')
