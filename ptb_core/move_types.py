"""
Move type validation for literal argument values entered in the builder.
"""

import json
import re
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class TypeCheckResult:
    """Outcome of checking a literal against a Move type."""
    is_valid: bool
    error: Optional[str] = None
    suggestion: Optional[str] = None


UNSIGNED_RANGES = {
    'u8': 2 ** 8 - 1,
    'u16': 2 ** 16 - 1,
    'u32': 2 ** 32 - 1,
    'u64': 2 ** 64 - 1,
    'u128': 2 ** 128 - 1,
    'u256': 2 ** 256 - 1,
}

STRING_TYPES = frozenset({
    'string', 'string::string', '0x1::string::string',
    'ascii::string', '0x1::ascii::string',
})

_HEX_ID = re.compile(r'^0x[a-fA-F0-9]{64}$')
_VECTOR = re.compile(r'^vector<(.+)>$')
_REFERENCE = re.compile(r'^&(mut)?')

VALID = TypeCheckResult(True)


def literal_text(value: Any) -> str:
    """Render a literal the way the builder form shows it, for type checking."""
    if value is None:
        return ''
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if isinstance(value, (list, tuple, dict)):
        return json.dumps(value)
    return str(value)


def validate_move_type(value: str, move_type: str) -> TypeCheckResult:
    """Check that ``value`` is an acceptable literal for ``move_type``."""
    normalized = re.sub(r'\s+', '', move_type.lower())

    if value is None or value == '':
        return TypeCheckResult(False, 'Value is required')

    if normalized.startswith('vector<'):
        return _validate_vector(value, normalized)

    if 'object<' in normalized or 'id<' in normalized:
        return _validate_object_id(value)

    base_type = _REFERENCE.sub('', normalized)
    if base_type in UNSIGNED_RANGES:
        return _validate_unsigned(value, UNSIGNED_RANGES[base_type])
    if base_type == 'bool':
        if value not in ('true', 'false'):
            return TypeCheckResult(False, 'Value must be "true" or "false"', 'Enter: true or false')
        return VALID
    if base_type == 'address':
        if not _HEX_ID.match(value):
            return TypeCheckResult(
                False, 'Invalid address format',
                'Address must be 66 characters starting with 0x followed by 64 hex characters')
        return VALID
    if base_type in STRING_TYPES:
        return VALID

    # Structs and generics are checked by the ledger.
    return VALID


def _validate_unsigned(value: str, maximum: int) -> TypeCheckResult:
    try:
        number = int(str(value).strip())
    except ValueError:
        return TypeCheckResult(False, 'Invalid number format', 'Enter a valid integer')

    suggestion = f"Use a value between 0 and {maximum}"
    if number < 0:
        return TypeCheckResult(False, 'Value must be at least 0', suggestion)
    if number > maximum:
        return TypeCheckResult(False, f'Value exceeds maximum of {maximum}', suggestion)
    return VALID


def _validate_object_id(value: str) -> TypeCheckResult:
    if not _HEX_ID.match(value):
        return TypeCheckResult(
            False, 'Invalid object ID format',
            'Object ID must be 66 characters starting with 0x followed by 64 hex characters')
    return VALID


def _validate_vector(value: str, vector_type: str) -> TypeCheckResult:
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        return TypeCheckResult(False, 'Invalid JSON array format',
                               'Example: [1, 2, 3] or ["item1", "item2"]')

    if not isinstance(parsed, list):
        return TypeCheckResult(False, 'Value must be a JSON array',
                               'Example: [1, 2, 3] or ["item1", "item2"]')

    match = _VECTOR.match(vector_type)
    if match:
        inner_type = match.group(1)
        for index, element in enumerate(parsed):
            result = validate_move_type(literal_text(element), inner_type)
            if not result.is_valid:
                return TypeCheckResult(False, f'Invalid element at index {index}: {result.error}',
                                       result.suggestion)
    return VALID
