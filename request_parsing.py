"""
Request parsing helpers shared by the blueprints.

Anything malformed becomes a ValidationError (400) before it reaches a query.
"""
from flask import request

from errors import ValidationError

DEFAULT_PAGE_SIZE = 10


def json_body():
    """The request's JSON object; an absent body counts as empty"""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError('Request body must be a JSON object.')
    return data


def id_value(value, field):
    """Primary-key value from JSON: an int or a string of digits"""
    if isinstance(value, bool):
        raise ValidationError(f'{field} must be an integer.')
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    raise ValidationError(f'{field} must be an integer.')


def optional_id(data, field):
    value = data.get(field)
    if value is None:
        return None
    return id_value(value, field)


def paging_args(default_limit=DEFAULT_PAGE_SIZE):
    """limit/offset query parameters as non-negative ints"""
    try:
        limit = int(request.args.get('limit', default_limit))
        offset = int(request.args.get('offset', 0))
    except ValueError:
        raise ValidationError('limit and offset must be integers.')
    if limit < 0 or offset < 0:
        raise ValidationError('limit and offset must not be negative.')
    return limit, offset
