"""PAX extended header records.

A PAX extended header entry carries records of the form
"<length> <keyword>=<value>\\n" where length counts every byte of the
record, including the digits of the length itself.
"""

from collections import namedtuple

from tarstream import constants


def _digits(n):
    return len(str(n))


class PaxExtendedHeader(namedtuple('PaxExtendedHeader',
                                   ['keyword', 'value'])):
    __slots__ = ()

    def __new__(cls, keyword, value):
        if keyword not in constants.PAX_KEYWORDS:
            raise ValueError('Unsupported PAX keyword: %s' % keyword)
        return super().__new__(cls, keyword, str(value))

    def length(self):
        # space, '=' and newline
        base = len(self.keyword) + len(self.value.encode('utf-8')) + 3
        length_digits = _digits(base)
        if _digits(length_digits + base) != _digits(base):
            length_digits += 1
        return length_digits + base

    def encode(self):
        record = '%d %s=%s\n' % (self.length(), self.keyword, self.value)
        return record.encode('utf-8')


def encode_records(records):
    """Concatenate the encoded form of a sequence of records."""
    return b''.join(record.encode() for record in records)


def parse_records(data):
    """Parse the content of a PAX extended header entry.

    Returns:
        A dict of keyword to value for every record in data.

    Raises:
        ValueError: If a record length does not match its content.
    """
    records = {}
    pos = 0
    while pos < len(data):
        if data[pos:pos + 1] == b'\0':
            break
        space = data.index(b' ', pos)
        length = int(data[pos:space])
        record = data[pos:pos + length]
        if len(record) != length or not record.endswith(b'\n'):
            raise ValueError('Malformed PAX record at offset %d' % pos)
        keyword, _, value = record[space - pos + 1:-1].partition(b'=')
        records[keyword.decode('utf-8')] = value.decode('utf-8')
        pos += length
    return records
