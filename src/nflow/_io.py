from __future__ import annotations

import json
import logging
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import tomli_w
from pydantic import TypeAdapter

from ._models import Variable

if TYPE_CHECKING:
    from ._eval_engine import EvaluationResult
    from ._projection import FlowGraph
    from ._store import VariableStore

logger = logging.getLogger(__name__)

_VARIABLES_ADAPTER = TypeAdapter(list[Variable])
_DISPLAY_IDS_ADAPTER = TypeAdapter(list[int])


class InputFileError(ValueError):
    """An input file does not have the expected structure."""


def load_variables(path: Path) -> list[Variable]:
    """Load variable records from a JSON array.

    Args:
        path: Path to the JSON file.

    Returns:
        The variables, in file order.

    Raises:
        pydantic.ValidationError: If a record is malformed.

    """
    logger.debug("Loading variables from %s", path)
    variables = _VARIABLES_ADAPTER.validate_json(path.read_bytes())
    logger.debug("Loaded %d variables", len(variables))
    return variables


def load_display_ids(path: Path) -> frozenset[int]:
    """Load the ``n_id`` values of the display subset from a JSON array."""
    return frozenset(_DISPLAY_IDS_ADAPTER.validate_json(path.read_bytes()))


def load_edits(path: Path) -> dict[str, Any]:
    """Load input edits from the ``[inputs]`` table of a TOML file.

    Values are returned as written; validate them with ``validate_edits``
    (or ``VariableStore.apply_edits``) before use.

    Raises:
        InputFileError: If the file is not valid TOML or has no ``[inputs]`` table.

    """
    with path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {path}: {e}"
            raise InputFileError(msg) from e

    inputs = data.get("inputs")
    if not isinstance(inputs, dict):
        msg = f"{path} must contain an [inputs] table mapping variable ids to values"
        raise InputFileError(msg)
    return inputs


def results_to_dict(store: VariableStore, result: EvaluationResult) -> dict[str, Any]:
    """Build the TOML-ready document of one evaluation.

    TOML has no null, so variables without a value are left out of
    ``values``; failed variables are listed under ``failures`` instead.
    """
    values = {v.id: v.value for v in store if v.value is not None}
    failures = {failure.variable_id: failure.message for failure in result.failures}
    flows = {
        f"{edge.source.value}->{edge.target.value}": {
            "total": edge.total_value,
            "variables": [v.id for v in edge.variables],
        }
        for edge in store.aggregate_flows().values()
    }
    return {"values": values, "failures": failures, "flows": flows}


def export_to_toml(store: VariableStore, result: EvaluationResult, path: Path) -> None:
    """Write values, failures and aggregated flows to a TOML file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("wb") as f:
        tomli_w.dump(results_to_dict(store, result), f)
    logger.debug("Exported results to %s", path)


def export_graph_json(graph: FlowGraph, path: Path, indent: int = 2) -> None:
    """Write the graph elements as a JSON array."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", encoding="utf-8") as f:
        json.dump(graph.to_elements(), f, indent=indent, ensure_ascii=False)
