"""Export job definitions for the candidacy graph."""

from candidacy_graph.jobs.asset_jobs import candidacy_graph_job

__all__ = [
    "candidacy_graph_job",
]
