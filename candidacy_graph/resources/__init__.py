"""Dagster resources for the candidacy graph."""
from candidacy_graph.resources.arango import arango_resource, ArangoDBResource

__all__ = [
    "arango_resource",
    "ArangoDBResource",
]
