"""Run an analysis for many roots against one contact index.

Queries are independent, so a batch can be split into contiguous chunks of
roots and handed to worker processes. Each chunk fills its own result
buffers, which are concatenated in chunk order afterwards. The output of a
parallel run is identical to the serial one.
"""

from concurrent.futures import ProcessPoolExecutor
import logging
from typing import Callable, Sequence, TypeVar

from .index import ContactIndexPair
from .paths import resolve_shortest_paths
from .summary import contact_chain, degree
from .trace import trace_contacts
from .types import (
    ContactTraces,
    Direction,
    NetworkSummary,
    Query,
    RootTrace,
    ShortestPaths,
)

log = logging.getLogger(__name__)

_DIRECTIONS = (Direction.INGOING, Direction.OUTGOING)

R = TypeVar("R", ShortestPaths, ContactTraces, NetworkSummary)


def shortest_paths_chunk(
    indexes: ContactIndexPair, offset: int, queries: Sequence[Query]
) -> ShortestPaths:
    result = ShortestPaths()
    for position, query in enumerate(queries, offset):
        for direction in _DIRECTIONS:
            paths = resolve_shortest_paths(
                indexes.for_direction(direction), query.root, query.window(direction)
            )
            for node, (distance, record) in paths.items():
                result.add(direction, position, node, distance, record)
        log.debug(f"Shortest paths resolved for query {position} (root {query.root})")
    return result


def trace_chunk(
    indexes: ContactIndexPair, offset: int, queries: Sequence[Query]
) -> ContactTraces:
    result = ContactTraces()
    for position, query in enumerate(queries, offset):
        in_records, in_distances = trace_contacts(
            indexes.ingoing, query.root, query.in_window, query.max_distance
        )
        out_records, out_distances = trace_contacts(
            indexes.outgoing, query.root, query.out_window, query.max_distance
        )
        result.roots.append(
            RootTrace(
                index=position,
                in_records=tuple(in_records),
                in_distances=tuple(in_distances),
                out_records=tuple(out_records),
                out_distances=tuple(out_distances),
            )
        )
        log.debug(
            f"Traced query {position} (root {query.root}): "
            f"in={len(in_records)} out={len(out_records)}"
        )
    return result


def network_summary_chunk(
    indexes: ContactIndexPair, offset: int, queries: Sequence[Query]
) -> NetworkSummary:
    result = NetworkSummary()
    for query in queries:
        result.in_degree.append(degree(indexes.ingoing, query.root, query.in_window))
        result.out_degree.append(degree(indexes.outgoing, query.root, query.out_window))
        result.ingoing_contact_chain.append(
            contact_chain(indexes.ingoing, query.root, query.in_window)
        )
        result.outgoing_contact_chain.append(
            contact_chain(indexes.outgoing, query.root, query.out_window)
        )
    return result


def partition(
    queries: Sequence[Query], workers: int, chunk_size: int | None = None
) -> list[tuple[int, Sequence[Query]]]:
    """Split queries into contiguous ``(offset, chunk)`` pieces."""
    if not queries:
        return []
    if chunk_size is None or chunk_size < 1:
        chunk_size = -(-len(queries) // max(1, workers))
    return [
        (offset, queries[offset : offset + chunk_size])
        for offset in range(0, len(queries), chunk_size)
    ]


def _run(
    chunk_fn: Callable[[ContactIndexPair, int, Sequence[Query]], R],
    empty: Callable[[], R],
    indexes: ContactIndexPair,
    queries: Sequence[Query],
    workers: int,
    chunk_size: int | None,
) -> R:
    queries = list(queries)
    if workers <= 1 or len(queries) < 2:
        return chunk_fn(indexes, 0, queries)

    chunks = partition(queries, workers, chunk_size)
    log.info(
        f"Running {chunk_fn.__name__} for {len(queries)} queries "
        f"in {len(chunks)} chunks on {workers} workers"
    )

    result = empty()
    with ProcessPoolExecutor(max_workers=workers) as pool:
        futures = [pool.submit(chunk_fn, indexes, offset, chunk) for offset, chunk in chunks]
        for future in futures:
            result.extend(future.result())
    return result


def run_shortest_paths(
    indexes: ContactIndexPair,
    queries: Sequence[Query],
    *,
    workers: int = 1,
    chunk_size: int | None = None,
) -> ShortestPaths:
    """Shortest paths in both directions for every query."""
    return _run(shortest_paths_chunk, ShortestPaths, indexes, queries, workers, chunk_size)


def run_trace(
    indexes: ContactIndexPair,
    queries: Sequence[Query],
    *,
    workers: int = 1,
    chunk_size: int | None = None,
) -> ContactTraces:
    """Trace every qualifying contact in both directions for every query."""
    return _run(trace_chunk, ContactTraces, indexes, queries, workers, chunk_size)


def run_network_summary(
    indexes: ContactIndexPair,
    queries: Sequence[Query],
    *,
    workers: int = 1,
    chunk_size: int | None = None,
) -> NetworkSummary:
    """Degree and contact chain size in both directions for every query."""
    return _run(network_summary_chunk, NetworkSummary, indexes, queries, workers, chunk_size)
