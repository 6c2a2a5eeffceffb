"""Fixed width octal fields for tar headers.

Numeric header fields are ASCII base-8 digits, zero padded on the left and
followed by a terminator which is already present in the zero filled
header buffer.
"""

from tarstream import constants


def encode_octal(value, width):
    """Encode a non-negative integer as exactly width octal digits.

    Args:
        value: The integer to encode. Must fit in width digits.
        width: The number of digits to produce.

    Returns:
        ASCII bytes of length width.

    Raises:
        ValueError: If the value is negative or does not fit.
    """
    if value < 0:
        raise ValueError('Cannot encode negative value %d' % value)
    digits = '%0*o' % (width, value)
    if len(digits) > width:
        raise ValueError(
            'Value %d does not fit in %d octal digits' % (value, width))
    return digits.encode('ascii')


def truncate(value, mask=constants.MAX_OCTAL_VALUE):
    """Mask a value down to what a fixed octal field can represent.

    Values above the mask lose their high bits. This is not an error, the
    caller is expected to carry the true value elsewhere (a PAX record).
    """
    return value & mask


def encode_truncated(value, width, mask):
    return encode_octal(truncate(value, mask), width)


def decode_octal(field):
    """Decode a NUL or space terminated octal field, empty means zero."""
    digits = field.split(b'\0', 1)[0].strip(b' ')
    if not digits:
        return 0
    return int(digits, 8)
