"""Variable data model."""

from __future__ import annotations

import json
from enum import StrEnum, auto
from typing import Any, Self

from pydantic import BaseModel, field_validator, model_validator

from ._department import Department  # noqa: TC001 - Used at runtime by pydantic


class VariableType(StrEnum):
    """Whether a variable is user-supplied or derived."""

    INPUT = auto()
    OUTPUT = auto()
    IO = auto()


class VariableRole(StrEnum):
    """Descriptive role of a variable. Not used for evaluation order."""

    VARIABLE = auto()
    PARAMETER = auto()
    IO = auto()


class Direction(StrEnum):
    """Direction tag carried by the source records."""

    OUTPUT = "Output"
    INPUT = "Input"


type FlowKey = tuple[Department, Department]


class Variable(BaseModel):
    """A named, typed quantity of the nitrogen network.

    Inputs are supplied externally; outputs and io variables are derived from
    ``expr`` during evaluation. ``value`` is ``None`` when the variable has not
    been computed or its computation failed, which is distinct from a computed
    zero.

    Attributes:
        n_id: Unique numeric identifier.
        id: Unique human-readable identifier, also the name used in expressions.
        type: Input, output or io.
        role: Descriptive role.
        dept: Department the variable is attributed to.
        year: Optional reference year.
        unit: Unit label.
        value: Current value, or None.
        cell: Opaque reference to the originating spreadsheet cell.
        origin_expr: Expression as written in the source workbook.
        expr: Expression evaluated by the engine, present iff derived.
        depends: Ids referenced by ``expr``. Informational only.
        sequence: Evaluation order among derived variables.
        need_show: Tri-state display hint.
        direction: Direction tag.
        caption: Human label of the flow.
        from_dept: Source department of a flow.
        to_dept: Destination department of a flow.
        counterpart: ``n_id`` of a mirrored variable. Opaque to the engine.

    """

    n_id: int
    id: str
    type: VariableType
    role: VariableRole = VariableRole.VARIABLE
    dept: Department
    year: str | None = None
    unit: str = ""
    value: float | None = None
    cell: str = ""
    origin_expr: str | None = None
    expr: str | None = None
    depends: list[str] = []
    sequence: int = 0
    need_show: bool | None = None
    direction: Direction | None = None
    caption: str | None = None
    from_dept: Department | None = None
    to_dept: Department | None = None
    counterpart: int | None = None

    @field_validator("depends", mode="before")
    @classmethod
    def _parse_depends(cls, value: Any) -> Any:
        # Source records store the list as a JSON-encoded string.
        if value is None or value == "":
            return []
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as e:
                msg = f"depends must be a JSON list of ids, got {value!r}"
                raise ValueError(msg) from e
        return value

    @field_validator("need_show", mode="before")
    @classmethod
    def _parse_need_show(cls, value: Any) -> Any:
        if isinstance(value, str):
            match value.strip().upper():
                case "YES":
                    return True
                case "NO":
                    return False
                case _:
                    return None
        return value

    @field_validator("unit", "cell", mode="before")
    @classmethod
    def _none_to_empty(cls, value: Any) -> Any:
        return "" if value is None else value

    @field_validator("expr", "origin_expr", "year", "caption", mode="before")
    @classmethod
    def _empty_to_none(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _check_invariants(self) -> Self:
        if self.type == VariableType.INPUT and self.expr is not None:
            msg = f"Input variable '{self.id}' must not have an expression"
            raise ValueError(msg)
        if (self.from_dept is None) != (self.to_dept is None):
            msg = f"Variable '{self.id}' must set both from_dept and to_dept, or neither"
            raise ValueError(msg)
        return self

    @property
    def is_input(self) -> bool:
        """Whether the value is supplied externally."""
        return self.type == VariableType.INPUT

    @property
    def is_derived(self) -> bool:
        """Whether the engine computes this variable from its expression."""
        return self.type in (VariableType.OUTPUT, VariableType.IO) and self.expr is not None

    @property
    def is_flow(self) -> bool:
        """Whether the variable carries a directed department-to-department flow."""
        return self.from_dept is not None and self.to_dept is not None

    @property
    def flow_key(self) -> FlowKey | None:
        """The ordered ``(from_dept, to_dept)`` pair, or None for non-flow variables."""
        if self.from_dept is None or self.to_dept is None:
            return None
        return (self.from_dept, self.to_dept)
