"""Candidacy Summary - Edge list and counts of the current graph for reporting."""

from typing import Dict, Any

from dagster import asset, AssetExecutionContext, MetadataValue, Output

from candidacy_graph.graph import CandidacyGraphStore, counts, list_edges
from candidacy_graph.resources.arango import ArangoDBResource


@asset(
    name="candidacy_summary",
    description="Every candidacy edge with labels and priority, plus graph counts.",
    group_name="candidacy",
    compute_kind="graph_query",
    deps=["candidacy_graph"],
)
def candidacy_summary_asset(
    context: AssetExecutionContext,
    arango: ArangoDBResource,
) -> Output[Dict[str, Any]]:
    store = CandidacyGraphStore(arango)
    rows = list_edges(store)
    totals = counts(store)
    
    context.log.info(f"📊 persons: {totals.node_count:,}, edges: {totals.edge_count:,}")
    
    return Output(
        value={
            "relationships": [row.model_dump() for row in rows],
            **totals.model_dump(by_alias=True),
        },
        metadata={
            "node_count": totals.node_count,
            "edge_count": totals.edge_count,
            "preview": MetadataValue.md(_edges_markdown(rows[:20])),
        }
    )


def _edges_markdown(rows) -> str:
    lines = ["| from | to | priority |", "| --- | --- | --- |"]
    for row in rows:
        priority = "" if row.priority is None else row.priority
        lines.append(f"| {row.from_label} | {row.to_label} | {priority} |")
    return "\n".join(lines)
