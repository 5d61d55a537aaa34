"""Contact tracing orchestration over labelled movements.

Turns identifier labels and dates into engine queries, runs the requested
analysis and assembles caller-facing row tables.
"""

from dataclasses import asdict, dataclass
from datetime import date
import logging
from typing import Any, Iterator, Sequence

from .config import DEFAULT_TRACE_CONFIG, TraceConfig
from .engine.batch import run_network_summary, run_shortest_paths, run_trace
from .engine.types import Direction, Query
from .errors import InvalidArgument
from .parser.movements import Movements, parse_time

log = logging.getLogger(__name__)

TimeValue = date | int


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _broadcast(value: Any, n: int, name: str) -> list[Any]:
    values = _as_list(value)
    if len(values) == 1:
        return values * n
    if len(values) != n:
        raise InvalidArgument(
            f"{name} has {len(values)} values but there are {n} roots"
        )
    return values


@dataclass(frozen=True)
class ContactRow:
    """One traced contact."""

    query: int
    root: str
    direction: str
    distance: int
    record: int
    source: str
    destination: str
    t: TimeValue
    in_begin: TimeValue
    in_end: TimeValue
    out_begin: TimeValue
    out_end: TimeValue

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PathRow:
    """Shortest path to one node, described by the contact that reached it."""

    query: int
    root: str
    direction: str
    distance: int
    record: int
    source: str
    destination: str
    t: TimeValue

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SummaryRow:
    query: int
    root: str
    in_begin: TimeValue
    in_end: TimeValue
    out_begin: TimeValue
    out_end: TimeValue
    in_degree: int
    out_degree: int
    ingoing_contact_chain: int
    outgoing_contact_chain: int

    def as_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ContactTrace:
    """All contacts traced for a set of queries."""

    rows: tuple[ContactRow, ...]
    roots: tuple[str, ...]

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[ContactRow]:
        return iter(self.rows)

    def ingoing(self) -> list[ContactRow]:
        return [row for row in self.rows if row.direction == Direction.INGOING.value]

    def outgoing(self) -> list[ContactRow]:
        return [row for row in self.rows if row.direction == Direction.OUTGOING.value]

    def as_dicts(self) -> list[dict[str, Any]]:
        return [row.as_dict() for row in self.rows]


@dataclass(frozen=True)
class TracingBatch:
    """Movements extended with the query roots, plus the engine queries."""

    movements: Movements
    queries: tuple[Query, ...]
    dated: bool

    def format_time(self, value: int) -> TimeValue:
        if self.dated:
            return date.fromordinal(value)
        return value

    def root_label(self, position: int) -> str:
        return self.movements.label(self.queries[position].root)

    def windows(self, position: int) -> dict[str, TimeValue]:
        query = self.queries[position]
        return {
            "in_begin": self.format_time(query.in_window[0]),
            "in_end": self.format_time(query.in_window[1]),
            "out_begin": self.format_time(query.out_window[0]),
            "out_end": self.format_time(query.out_window[1]),
        }


def _parse_times(
    values: list[Any], name: str, config: TraceConfig
) -> tuple[list[int], bool | None]:
    parsed: list[int] = []
    kinds: set[bool] = set()
    for value in values:
        if value is None:
            raise InvalidArgument(f"{name} must not be missing")
        number, is_date = parse_time(value, config.date_format)
        parsed.append(number)
        kinds.add(is_date)
    if len(kinds) > 1:
        raise InvalidArgument(f"{name} mixes dates and integers")
    return parsed, (kinds.pop() if kinds else None)


def build_queries(
    movements: Movements,
    root: Any,
    *,
    t_end: Any = None,
    days: Any = None,
    in_begin: Any = None,
    in_end: Any = None,
    out_begin: Any = None,
    out_end: Any = None,
    max_distance: int | None = None,
    config: TraceConfig = DEFAULT_TRACE_CONFIG,
) -> TracingBatch:
    """Build one engine query per root.

    Windows come either from ``t_end`` and ``days``, giving
    ``[t_end - days, t_end]`` in both directions, or from the four explicit
    bounds. Scalars are broadcast over the roots, and a root may repeat with
    different windows. Roots missing from the movements get ids of their own
    and simply reach nothing.

    Args:
        movements: Validated movements
        root: Identifier label or sequence of labels
        t_end: End of both windows, scalar or one per root
        days: Window length in days (defaults to ``config.days``)
        in_begin: Explicit ingoing window begin
        in_end: Explicit ingoing window end
        out_begin: Explicit outgoing window begin
        out_end: Explicit outgoing window end
        max_distance: Hop cutoff for tracing (0 or None = unlimited)
        config: Run defaults

    Returns:
        TracingBatch holding the extended movements and the queries
    """
    roots = [str(label).strip() for label in _as_list(root)]
    if any(not label for label in roots):
        raise InvalidArgument("Root identifiers must not be empty")
    n = len(roots)

    bounds = {
        "in_begin": in_begin,
        "in_end": in_end,
        "out_begin": out_begin,
        "out_end": out_end,
    }
    given = [name for name, value in bounds.items() if value is not None]

    kinds: set[bool] = set()
    if given:
        if len(given) != len(bounds):
            missing = [name for name in bounds if name not in given]
            raise InvalidArgument(f"Missing window bounds: {', '.join(missing)}")
        if t_end is not None or days is not None:
            raise InvalidArgument("Give either t_end/days or explicit window bounds")
        columns: dict[str, list[int]] = {}
        for name, value in bounds.items():
            columns[name], kind = _parse_times(_broadcast(value, n, name), name, config)
            if kind is not None:
                kinds.add(kind)
    elif t_end is not None:
        ends, kind = _parse_times(_broadcast(t_end, n, "t_end"), "t_end", config)
        if kind is not None:
            kinds.add(kind)
        lengths = _broadcast(config.days if days is None else days, n, "days")
        for length in lengths:
            if isinstance(length, bool) or not isinstance(length, int) or length < 0:
                raise InvalidArgument(f"days must be a non-negative integer, got {length!r}")
        begins = [end - length for end, length in zip(ends, lengths)]
        columns = {"in_begin": begins, "in_end": ends, "out_begin": begins, "out_end": ends}
    else:
        raise InvalidArgument("Either t_end or explicit window bounds must be given")

    if len(kinds) > 1:
        raise InvalidArgument("Window bounds mix dates and integers")
    query_dated = kinds.pop() if kinds else movements.dated
    if len(movements) and query_dated != movements.dated:
        expected = "dates" if movements.dated else "integers"
        raise InvalidArgument(f"Window bounds must be {expected} like the movement times")

    if max_distance is not None and (
        isinstance(max_distance, bool)
        or not isinstance(max_distance, int)
        or max_distance < 0
    ):
        raise InvalidArgument(
            f"max_distance must be a non-negative integer, got {max_distance!r}"
        )
    cutoff = config.resolve_max_distance(max_distance)

    for i in range(n):
        if columns["in_begin"][i] > columns["in_end"][i]:
            raise InvalidArgument(f"in_begin is after in_end for root {roots[i]}")
        if columns["out_begin"][i] > columns["out_end"][i]:
            raise InvalidArgument(f"out_begin is after out_end for root {roots[i]}")

    extended = movements.with_identifiers(roots)
    queries = tuple(
        Query(
            root=extended.node_id(roots[i]),
            in_window=(columns["in_begin"][i], columns["in_end"][i]),
            out_window=(columns["out_begin"][i], columns["out_end"][i]),
            max_distance=cutoff,
        )
        for i in range(n)
    )
    return TracingBatch(movements=extended, queries=queries, dated=query_dated)


def _contact(batch: TracingBatch, record: int) -> dict[str, Any]:
    movements = batch.movements
    return {
        "record": record,
        "source": movements.label(movements.source[record]),
        "destination": movements.label(movements.destination[record]),
        "t": batch.format_time(movements.t[record]),
    }


def trace(
    movements: Movements,
    root: Any,
    *,
    workers: int | None = None,
    config: TraceConfig = DEFAULT_TRACE_CONFIG,
    **window: Any,
) -> ContactTrace:
    """Trace all ingoing and outgoing contacts of each root.

    Keyword arguments besides ``workers`` and ``config`` are passed to
    :func:`build_queries`.
    """
    batch = build_queries(movements, root, config=config, **window)
    log.info(f"Tracing {len(batch.queries)} roots over {len(movements)} movements")

    result = run_trace(
        batch.movements.build_index(),
        batch.queries,
        workers=config.resolve_workers(workers),
        chunk_size=config.chunk_size,
    )

    rows: list[ContactRow] = []
    for root_trace in result.roots:
        position = root_trace.index
        label = batch.root_label(position)
        windows = batch.windows(position)
        for direction, records, distances in (
            (Direction.INGOING, root_trace.in_records, root_trace.in_distances),
            (Direction.OUTGOING, root_trace.out_records, root_trace.out_distances),
        ):
            for record, distance in zip(records, distances):
                rows.append(
                    ContactRow(
                        query=position,
                        root=label,
                        direction=direction.value,
                        distance=distance,
                        **_contact(batch, record),
                        **windows,
                    )
                )

    roots = tuple(batch.root_label(i) for i in range(len(batch.queries)))
    return ContactTrace(rows=tuple(rows), roots=roots)


def shortest_paths(
    movements: Movements,
    root: Any,
    *,
    workers: int | None = None,
    config: TraceConfig = DEFAULT_TRACE_CONFIG,
    **window: Any,
) -> list[PathRow]:
    """Shortest temporal path from each root to every node it reaches."""
    batch = build_queries(movements, root, config=config, **window)
    log.info(f"Resolving shortest paths for {len(batch.queries)} roots")

    result = run_shortest_paths(
        batch.movements.build_index(),
        batch.queries,
        workers=config.resolve_workers(workers),
        chunk_size=config.chunk_size,
    )

    rows: list[PathRow] = []
    for direction, indexes, distances, records in (
        (Direction.INGOING, result.in_index, result.in_distance, result.in_record),
        (Direction.OUTGOING, result.out_index, result.out_distance, result.out_record),
    ):
        for position, distance, record in zip(indexes, distances, records):
            rows.append(
                PathRow(
                    query=position,
                    root=batch.root_label(position),
                    direction=direction.value,
                    distance=distance,
                    **_contact(batch, record),
                )
            )

    return sorted(rows, key=lambda row: row.query)


def network_summary(
    movements: Movements,
    root: Any,
    *,
    workers: int | None = None,
    config: TraceConfig = DEFAULT_TRACE_CONFIG,
    **window: Any,
) -> list[SummaryRow]:
    """Degree and contact chain size of each root."""
    batch = build_queries(movements, root, config=config, **window)
    log.info(f"Summarising network for {len(batch.queries)} roots")

    result = run_network_summary(
        batch.movements.build_index(),
        batch.queries,
        workers=config.resolve_workers(workers),
        chunk_size=config.chunk_size,
    )

    return [
        SummaryRow(
            query=position,
            root=batch.root_label(position),
            **batch.windows(position),
            in_degree=result.in_degree[position],
            out_degree=result.out_degree[position],
            ingoing_contact_chain=result.ingoing_contact_chain[position],
            outgoing_contact_chain=result.outgoing_contact_chain[position],
        )
        for position in range(len(batch.queries))
    ]


def summarise_rows(rows: Sequence[Any]) -> list[dict[str, Any]]:
    """Plain dicts for any row table."""
    return [row.as_dict() for row in rows]
