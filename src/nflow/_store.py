"""In-memory store of the variables of one network."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from ._edits import validate_edits
from ._eval_engine import EvaluationResult, SequenceIssue, check_sequence, evaluate_all
from ._flows import AggregatedEdge, FlowEdge, aggregate_flows, parallel_flows
from ._io import load_display_ids, load_variables
from ._models import FlowKey, Variable, VariableType

if TYPE_CHECKING:
    from collections.abc import Collection, Iterable, Iterator, Mapping
    from pathlib import Path

    from ._expression import Evaluator

logger = logging.getLogger(__name__)


class DuplicateVariableError(ValueError):
    """Two variables share an ``id`` or an ``n_id``."""


def select_displayable(variables: Iterable[Variable], display_ids: Collection[int]) -> list[Variable]:
    """Keep the variables whose ``n_id`` is in ``display_ids``, in input order."""
    return [v for v in variables if v.n_id in display_ids]


class VariableStore:
    """Authoritative collection of all variables and their current values.

    Variables are loaded once and never added or removed. Only ``value``
    changes: inputs through ``apply_edits``, derived variables through
    ``evaluate_all``. The store is not thread-safe; callers serialize edits
    and evaluations.

    Args:
        variables: The variables, in load order.
        display_ids: ``n_id`` values of the display subset. When None, the
            subset falls back to variables whose ``need_show`` is True.

    Raises:
        DuplicateVariableError: If an ``id`` or ``n_id`` appears twice.

    """

    def __init__(self, variables: Iterable[Variable], display_ids: Collection[int] | None = None) -> None:
        self._variables: tuple[Variable, ...] = tuple(variables)
        self._by_id: dict[str, Variable] = {}
        self._by_n_id: dict[int, Variable] = {}

        for variable in self._variables:
            if variable.id in self._by_id:
                msg = f"Duplicate variable id '{variable.id}'"
                raise DuplicateVariableError(msg)
            if variable.n_id in self._by_n_id:
                msg = f"Duplicate variable n_id {variable.n_id} ('{variable.id}')"
                raise DuplicateVariableError(msg)
            self._by_id[variable.id] = variable
            self._by_n_id[variable.n_id] = variable

        self.display_ids: frozenset[int] | None = frozenset(display_ids) if display_ids is not None else None
        self.last_result: EvaluationResult | None = None

    @classmethod
    def from_files(cls, variables_path: Path, display_path: Path | None = None) -> VariableStore:
        """Load a store from a variables JSON file and an optional display list."""
        display_ids = load_display_ids(display_path) if display_path is not None else None
        return cls(load_variables(variables_path), display_ids)

    @property
    def variables(self) -> tuple[Variable, ...]:
        """All variables, in load order."""
        return self._variables

    def get(self, variable_id: str) -> Variable:
        """Get a variable by id.

        Raises:
            KeyError: If no variable has this id.

        """
        return self._by_id[variable_id]

    def get_by_n_id(self, n_id: int) -> Variable:
        """Get a variable by numeric id.

        Raises:
            KeyError: If no variable has this ``n_id``.

        """
        return self._by_n_id[n_id]

    def inputs(self) -> list[Variable]:
        """Variables whose value is supplied externally."""
        return [v for v in self._variables if v.type == VariableType.INPUT]

    def derived(self) -> list[Variable]:
        """Output and io variables that carry an expression."""
        return [v for v in self._variables if v.is_derived]

    def flow_variables(self) -> list[Variable]:
        """Variables tagged with a source and a destination department."""
        return [v for v in self._variables if v.is_flow]

    def evaluate_all(self, evaluator: Evaluator | None = None) -> EvaluationResult:
        """Recompute every derived value from the current inputs.

        Failures never propagate; see ``EvaluationResult.failures``.
        """
        result = evaluate_all(self._variables, evaluator)
        if result.failures:
            logger.info("%d of %d derived variables failed to evaluate", len(result.failures), len(result.values))
        self.last_result = result
        return result

    def check_sequence(self, evaluator: Evaluator | None = None) -> list[SequenceIssue]:
        """Report references the forward pass cannot satisfy."""
        return check_sequence(self._variables, evaluator)

    def select_displayable(self, variables: Iterable[Variable] | None = None) -> list[Variable]:
        """Filter ``variables`` (default: all) down to the display subset."""
        candidates = self._variables if variables is None else variables
        if self.display_ids is None:
            return [v for v in candidates if v.need_show is True]
        return select_displayable(candidates, self.display_ids)

    def get_display_variables(self) -> list[Variable]:
        """The display-eligible variables with their current values."""
        return self.select_displayable()

    def apply_edits(self, edits: Mapping[str, object]) -> dict[str, float]:
        """Validate and write new values for input variables.

        Nothing is written unless every entry is valid. Call ``evaluate_all``
        afterwards to propagate the new inputs.

        Returns:
            The values that were written.

        Raises:
            EditValidationError: If any entry is invalid.

        """
        validated = validate_edits(self._by_id, edits)
        for variable_id, value in validated.items():
            self._by_id[variable_id].value = value
        logger.debug("Applied %d edit(s)", len(validated))
        return validated

    def aggregate_flows(self, *, display_only: bool = True) -> dict[FlowKey, AggregatedEdge]:
        """Aggregate the flows of the display subset (or of every variable)."""
        return aggregate_flows(self.get_display_variables() if display_only else self._variables)

    def flow_edges(self, *, display_only: bool = True) -> list[FlowEdge]:
        """List un-aggregated flow edges of the display subset (or of every variable)."""
        return parallel_flows(self.get_display_variables() if display_only else self._variables)

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[Variable]:
        return iter(self._variables)

    def __contains__(self, variable_id: object) -> bool:
        return variable_id in self._by_id
