"""Request parsing helpers shared by the API blueprints."""
import re
from datetime import datetime, date

EMAIL_RE = re.compile(r'^[^@\s]+@[^@\s]+\.[^@\s]+$')


def require_fields(data, fields):
    """Return a list of messages for fields that are missing or blank."""
    errors = []
    for field in fields:
        value = data.get(field)
        if value is None or (isinstance(value, str) and not value.strip()):
            errors.append(f'"{field}" is required')
    return errors


def validate_email(value):
    return bool(value) and isinstance(value, str) and EMAIL_RE.match(value.strip()) is not None


def parse_bool(value, default=False):
    if value is None:
        return default
    if isinstance(value, bool):
        return value
    return str(value).lower() in ['true', 'on', '1', 'yes']


def parse_int(value, default=None, minimum=None):
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    if minimum is not None and number < minimum:
        return default
    return number


def parse_datetime(value):
    """Parse an ISO date or datetime string; None for blank or malformed input."""
    if not value:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    text = str(value).strip()
    if text.endswith('Z'):
        text = text[:-1]
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        return None
    # Stored timestamps are naive UTC
    if parsed.tzinfo is not None:
        parsed = parsed.replace(tzinfo=None) - parsed.utcoffset()
    return parsed
