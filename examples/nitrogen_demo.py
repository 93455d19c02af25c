"""Nitrogen flow example for nflow.

Loads the sample network in ``examples/nitrogen``, evaluates it, lowers the
fertilizer input and prints how the agricultural runoff edge responds.

Run from the repository root:
    python examples/nitrogen_demo.py
"""

from pathlib import Path

import nflow as nf

DATA_DIR = Path(__file__).parent / "nitrogen"

store = nf.VariableStore.from_files(DATA_DIR / "variables.json", DATA_DIR / "show_vars.json")

# -----------------------------------------------------------------------------
# Baseline
# -----------------------------------------------------------------------------

result = store.evaluate_all()
print(f"Evaluated {len(result.values)} derived variables, {len(result.failures)} failed")
print(f"Skipped (no expression): {', '.join(result.skipped)}")

issues = store.check_sequence()
print(f"Sequence issues: {len(issues)}")

key = (nf.Department.AGRICULTURE, nf.Department.SURFACE_WATER)
baseline = store.aggregate_flows()[key]
print(f"{baseline.source.label} -> {baseline.target.label}: {baseline.total_value:.3f} ({baseline.variable_count} flows)")

# -----------------------------------------------------------------------------
# Scenario: 20% less fertilizer
# -----------------------------------------------------------------------------

fertilizer = store.get("fertilizer_use").value or 0.0
store.apply_edits({"fertilizer_use": fertilizer * 0.8})
store.evaluate_all()

scenario = store.aggregate_flows()[key]
print(f"After edit: {scenario.total_value:.3f} ({scenario.total_value - baseline.total_value:+.3f})")

for edge in store.aggregate_flows().values():
    marker = " (loop)" if edge.is_loop else ""
    print(f"  {edge.source.label:>8} -> {edge.target.label:<8} {edge.total_value:10.3f}{marker}")

graph = nf.build_flow_graph(store.get_display_variables())
print(f"Graph: {len(graph.nodes)} nodes, {len(graph.edges)} edges")
