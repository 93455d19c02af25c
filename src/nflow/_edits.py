"""Validation of user edits to input variables.

Edits are validated as a batch before anything is written: either every
entry is valid and the whole batch is applied, or none is.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ._models import VariableType

if TYPE_CHECKING:
    from collections.abc import Mapping

    from ._models import Variable


@dataclass(frozen=True)
class EditIssue:
    """A rejected entry of an edit batch."""

    variable_id: str
    message: str


class EditValidationError(ValueError):
    """One or more entries of an edit batch are invalid."""

    def __init__(self, issues: list[EditIssue]) -> None:
        self.issues = issues
        details = "; ".join(f"{issue.variable_id}: {issue.message}" for issue in issues)
        super().__init__(f"{len(issues)} invalid edit(s): {details}")


def _coerce(raw: object) -> float | None:
    if isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return float(raw)
    if isinstance(raw, str):
        try:
            return float(raw.strip())
        except ValueError:
            return None
    return None


def validate_edits(variables: Mapping[str, Variable], edits: Mapping[str, object]) -> dict[str, float]:
    """Check an edit batch against the known variables.

    Each entry must name an existing ``input`` variable and carry a finite,
    non-negative number. Numeric strings are accepted, booleans are not.

    Args:
        variables: Known variables keyed by id.
        edits: Requested new values keyed by variable id.

    Returns:
        The validated values as floats, in the order of ``edits``.

    Raises:
        EditValidationError: Listing every invalid entry, if there is any.

    """
    issues: list[EditIssue] = []
    validated: dict[str, float] = {}

    for variable_id, raw in edits.items():
        variable = variables.get(variable_id)
        if variable is None:
            issues.append(EditIssue(variable_id, "unknown variable"))
            continue
        if variable.type != VariableType.INPUT:
            issues.append(EditIssue(variable_id, f"only input variables can be edited, not {variable.type}"))
            continue

        value = _coerce(raw)
        if value is None:
            issues.append(EditIssue(variable_id, f"not a number: {raw!r}"))
        elif not math.isfinite(value):
            issues.append(EditIssue(variable_id, f"not a finite number: {raw!r}"))
        elif value < 0:
            issues.append(EditIssue(variable_id, f"must not be negative: {raw!r}"))
        else:
            validated[variable_id] = value

    if issues:
        raise EditValidationError(issues)
    return validated
