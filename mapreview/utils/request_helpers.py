"""Helpers for reading query string arguments."""

from mapreview.errors import InvalidArgumentError


def parse_id_list(value):
    """
    Parse a comma-separated list of ids, e.g. ``"10,20,30"``.

    Blank entries are skipped. A non-numeric entry raises
    InvalidArgumentError.
    """
    if not value:
        return []
    ids = []
    for part in value.split(','):
        part = part.strip()
        if not part:
            continue
        try:
            ids.append(int(part))
        except ValueError:
            raise InvalidArgumentError(f'Invalid id: {part}')
    return ids


def parse_bool_arg(value):
    """Parse an optional boolean query argument; None when absent."""
    if value is None or value == '':
        return None
    lowered = value.lower()
    if lowered in ('true', '1', 'yes'):
        return True
    if lowered in ('false', '0', 'no'):
        return False
    raise InvalidArgumentError(f'Invalid boolean value: {value}')
