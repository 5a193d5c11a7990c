"""Placeholder token extraction and substitution for template bodies"""

import re
from typing import Mapping

from leasedocs.errors import ValidationError

# {{UPPER_SNAKE}} - braces, one or more A-Z/underscore, braces
VARIABLE_PATTERN = re.compile(r"\{\{([A-Z_]+)\}\}")


def extract_variables(body: str) -> list[str]:
    """Return the distinct placeholder names in body, in first-seen order.

    Example:
        'Hi {{NAME}}, rent is {{CURRENCY}}{{AMOUNT}}, {{NAME}} again'
        -> ['NAME', 'CURRENCY', 'AMOUNT']
    """
    if not body:
        return []
    # dict keeps insertion order
    return list(dict.fromkeys(VARIABLE_PATTERN.findall(body)))


def fill_variables(body: str, values: Mapping[str, object], strict: bool = False) -> str:
    """Replace each {{TOKEN}} with str(values[TOKEN]).

    Tokens without a value stay verbatim, unless strict is set, in which case
    a ValidationError lists every missing name.
    """
    if strict:
        missing = [name for name in extract_variables(body) if name not in values]
        if missing:
            raise ValidationError(
                f"Missing values for: {', '.join(missing)}", field="values"
            )

    def _replace(match: re.Match) -> str:
        name = match.group(1)
        if name in values:
            return str(values[name])
        return match.group(0)

    return VARIABLE_PATTERN.sub(_replace, body)
