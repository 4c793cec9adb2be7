"""Operations layer - the request surface of the candidacy graph.

Each operation returns an OperationResult instead of raising, so whatever
transport sits on top (HTTP handler, Dagster asset, CLI) only has to map
`error` onto its own response mechanism:

    ok=True   payload={...}
    ok=False  error in {"validation_error", "store_unavailable", "store_query_error"}

Concurrency:
    Rebuilds are serialized through one in-process lock (single writer) on
    top of the store's own transaction. Reads take no lock; they observe
    either the previous or the new graph, never a partial one.

Authorization is not checked here. Callers must only expose these
operations to administrators.
"""

import logging
import threading
import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Optional

from candidacy_graph.config import MAX_CHAIN_LENGTH, STORE_BACKOFF_SECONDS, STORE_RETRIES
from candidacy_graph.errors import StoreQueryError, StoreUnavailable, ValidationError
from candidacy_graph.graph import builder, chains, summary
from candidacy_graph.utils.preflight import call_with_retries, wait_for_store

logger = logging.getLogger(__name__)


VALIDATION_ERROR = "validation_error"
STORE_UNAVAILABLE = "store_unavailable"
STORE_QUERY_ERROR = "store_query_error"


@dataclass
class OperationResult:
    ok: bool
    payload: Dict[str, Any] = field(default_factory=dict)
    error: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, payload: Dict[str, Any]) -> "OperationResult":
        return cls(ok=True, payload=payload)

    @classmethod
    def failure(cls, error: str, message: str) -> "OperationResult":
        return cls(ok=False, error=error, message=message)


class GraphService:
    """Runs core operations against one store with retry and build locking.

    Args:
        store: CandidacyGraphStore, created once per process and shared
        retries: Attempts per operation while the store is unavailable
        backoff_factor: Base delay in seconds, doubled after every attempt
    """

    def __init__(
        self,
        store,
        retries: int = STORE_RETRIES,
        backoff_factor: float = STORE_BACKOFF_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.store = store
        self.retries = retries
        self.backoff_factor = backoff_factor
        self._sleep = sleep
        self._build_lock = threading.Lock()

    def _retrying(self, func: Callable[[], Any]) -> Any:
        return call_with_retries(func, retries=self.retries, backoff_factor=self.backoff_factor, sleep=self._sleep)

    def _run(self, operation: str, func: Callable[[], Dict[str, Any]]) -> OperationResult:
        try:
            return OperationResult.success(func())
        except ValidationError as e:
            logger.info(f"{operation}: rejected input: {e}")
            return OperationResult.failure(VALIDATION_ERROR, str(e))
        except StoreUnavailable as e:
            logger.warning(f"{operation}: store unavailable: {e}")
            return OperationResult.failure(STORE_UNAVAILABLE, "Graph store unavailable, try again shortly")
        except StoreQueryError as e:
            logger.error(f"{operation}: query {e.query_name} failed: {e}")
            return OperationResult.failure(STORE_QUERY_ERROR, "Graph store query failed")

    # ==========================================================================
    # Operations
    # ==========================================================================

    def rebuild_graph(self, applications: Any, names_by_id: Any = None) -> OperationResult:
        """Reset and repopulate the graph. Payload: applications_processed, nodeCount, edgeCount."""
        def run():
            records = builder.validate_applications(applications)
            names = builder.validate_names(names_by_id)
            with self._build_lock:
                counts = self._retrying(lambda: builder.rebuild(self.store, records, names))
            return {"applications_processed": len(records), **counts.model_dump(by_alias=True)}

        return self._run("rebuild_graph", run)

    def find_chains(self, max_length: int = MAX_CHAIN_LENGTH) -> OperationResult:
        def run():
            length = chains.validate_max_length(max_length)
            found = self._retrying(lambda: chains.find_chains(self.store, length))
            return {"chains": [chain.model_dump(by_alias=True) for chain in found]}

        return self._run("find_chains", run)

    def list_edges(self) -> OperationResult:
        def run():
            rows = self._retrying(lambda: summary.list_edges(self.store))
            return {"relationships": [row.model_dump() for row in rows]}

        return self._run("list_edges", run)

    def counts(self) -> OperationResult:
        def run():
            return self._retrying(lambda: summary.counts(self.store)).model_dump(by_alias=True)

        return self._run("counts", run)

    def check_health(self) -> OperationResult:
        """One ping, no retries. An unreachable store reports ready=False."""
        def run():
            try:
                return {"ready": bool(self.store.ping())}
            except StoreUnavailable:
                return {"ready": False}

        return self._run("check_health", run)

    def warm_up(self, max_attempts: int = STORE_RETRIES) -> OperationResult:
        """Ping with exponential backoff until ready or out of attempts."""
        def run():
            if isinstance(max_attempts, bool) or not isinstance(max_attempts, int) or max_attempts < 1:
                raise ValidationError("`max_attempts` must be a positive integer")
            ready = wait_for_store(
                self.store.ping,
                attempts=max_attempts,
                backoff_factor=self.backoff_factor,
                sleep=self._sleep,
            )
            return {"ready": ready}

        return self._run("warm_up", run)
