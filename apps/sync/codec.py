"""
JSON codec for document bodies.

JSON has no timestamp type, so datetimes are stored as tagged objects
``{"__timestamp__": "<iso8601>"}`` and turned back into aware datetimes on
read. The ``SERVER_TIMESTAMP`` sentinel is replaced with the store clock at
encode time.
"""

from datetime import datetime

from django.utils import timezone
from django.utils.dateparse import parse_datetime

TIMESTAMP_TAG = '__timestamp__'


class _ServerTimestamp:
    """Placeholder asking the store to write its own clock value."""

    def __repr__(self):
        return 'SERVER_TIMESTAMP'


SERVER_TIMESTAMP = _ServerTimestamp()


def encode_value(value, now=None):
    """Convert a field value into its JSON-safe stored form."""
    if value is SERVER_TIMESTAMP:
        value = now or timezone.now()
    if isinstance(value, datetime):
        if timezone.is_naive(value):
            value = timezone.make_aware(value)
        return {TIMESTAMP_TAG: value.isoformat()}
    if isinstance(value, dict):
        return {str(key): encode_value(item, now) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [encode_value(item, now) for item in value]
    return value


def decode_value(value):
    """Reverse of :func:`encode_value`."""
    if isinstance(value, dict):
        if set(value) == {TIMESTAMP_TAG}:
            return parse_datetime(value[TIMESTAMP_TAG])
        return {key: decode_value(item) for key, item in value.items()}
    if isinstance(value, list):
        return [decode_value(item) for item in value]
    return value
