"""Redaction applied to sensitive values before they reach an audit record."""
from typing import Optional

MASK_CHAR = "*"

SSN_VISIBLE = 4
ACCOUNT_NUMBER_VISIBLE = 4
ROUTING_NUMBER_VISIBLE = 2


def mask_trailing(value: Optional[str], visible_count: int) -> str:
    """
    Keep the last `visible_count` characters and mask the rest.
    The result has the same length as `value`; empty or missing input gives "".
    """
    if not value:
        return ""
    value = str(value)
    visible = max(visible_count, 0)
    if visible >= len(value):
        return value
    hidden = len(value) - visible
    return MASK_CHAR * hidden + value[hidden:]


def mask_ssn(ssn: Optional[str]) -> str:
    return mask_trailing(ssn, SSN_VISIBLE)


def mask_account_number(account_number: Optional[str]) -> str:
    return mask_trailing(account_number, ACCOUNT_NUMBER_VISIBLE)


def mask_routing_number(routing_number: Optional[str]) -> str:
    return mask_trailing(routing_number, ROUTING_NUMBER_VISIBLE)
