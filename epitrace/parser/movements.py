"""Movement records: loading, validation and identifier mapping."""

import csv
from dataclasses import dataclass
from datetime import date, datetime
from functools import cached_property
import logging
from pathlib import Path
from typing import Any, Iterable, Mapping

from ..engine.index import ContactIndexPair, build_contact_index
from ..errors import InvalidArgument

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("source", "destination", "t")


def parse_time(value: Any, date_format: str = "%Y-%m-%d") -> tuple[int, bool]:
    """Convert a movement time to an integer.

    Dates become day ordinals so that windows can be expressed in days.

    Returns:
        Tuple of (integer time, whether the value was a date)
    """
    if isinstance(value, bool):
        raise InvalidArgument(f"Invalid time value: {value!r}")
    if isinstance(value, datetime):
        return value.date().toordinal(), True
    if isinstance(value, date):
        return value.toordinal(), True
    if isinstance(value, int):
        return value, False

    if isinstance(value, str):
        text = value.strip()
        if not text:
            raise InvalidArgument("Empty time value")
        try:
            return int(text), False
        except ValueError:
            pass
        try:
            return datetime.strptime(text, date_format).date().toordinal(), True
        except ValueError as exc:
            raise InvalidArgument(f"Invalid time value: {value!r}") from exc

    raise InvalidArgument(f"Invalid time value: {value!r}")


def _label(value: Any, column: str, row: int) -> str:
    if value is None:
        raise InvalidArgument(f"Missing {column} in row {row}")
    text = str(value).strip()
    if not text:
        raise InvalidArgument(f"Missing {column} in row {row}")
    return text


@dataclass(frozen=True)
class Movements:
    """Contact events with identifiers mapped to dense 0-based ids.

    ``identifiers[i]`` is the label of node ``i``. Row positions are the
    record ids reported by every analysis.
    """

    source: tuple[int, ...]
    destination: tuple[int, ...]
    t: tuple[int, ...]
    identifiers: tuple[str, ...]
    dated: bool = False

    def __post_init__(self):
        if not len(self.source) == len(self.destination) == len(self.t):
            raise InvalidArgument(
                "source, destination and t must have the same length "
                f"({len(self.source)}, {len(self.destination)}, {len(self.t)})"
            )

    def __len__(self) -> int:
        return len(self.t)

    @property
    def node_count(self) -> int:
        return len(self.identifiers)

    @cached_property
    def _lookup(self) -> dict[str, int]:
        return {name: i for i, name in enumerate(self.identifiers)}

    def node_id(self, label: Any) -> int:
        """Dense id of an identifier label."""
        key = str(label).strip()
        if key not in self._lookup:
            raise InvalidArgument(f"Unknown identifier: {label}")
        return self._lookup[key]

    def label(self, node: int) -> str:
        return self.identifiers[node]

    def format_time(self, value: int) -> date | int:
        """Turn an integer time back into what the caller supplied."""
        if self.dated:
            return date.fromordinal(value)
        return value

    def with_identifiers(self, labels: Iterable[Any]) -> "Movements":
        """Return movements whose identifier table also covers ``labels``.

        New labels get ids after the existing ones, so existing ids and
        records are unchanged.
        """
        extra = sorted({str(label).strip() for label in labels} - set(self.identifiers))
        if not extra:
            return self
        if any(not label for label in extra):
            raise InvalidArgument("Empty identifier")
        return Movements(
            source=self.source,
            destination=self.destination,
            t=self.t,
            identifiers=self.identifiers + tuple(extra),
            dated=self.dated,
        )

    def build_index(self) -> ContactIndexPair:
        return build_contact_index(self.source, self.destination, self.t, self.node_count)

    @classmethod
    def from_rows(
        cls, rows: Iterable[Mapping[str, Any]], date_format: str = "%Y-%m-%d"
    ) -> "Movements":
        """Build movements from mappings with source, destination and t keys."""
        labels: list[tuple[str, str]] = []
        times: list[int] = []
        kinds: set[bool] = set()

        for row_number, row in enumerate(rows):
            missing = [column for column in REQUIRED_COLUMNS if column not in row]
            if missing:
                raise InvalidArgument(
                    f"Row {row_number} is missing columns: {', '.join(missing)}"
                )
            labels.append(
                (
                    _label(row["source"], "source", row_number),
                    _label(row["destination"], "destination", row_number),
                )
            )
            try:
                value, is_date = parse_time(row["t"], date_format)
            except InvalidArgument as exc:
                raise InvalidArgument(f"Row {row_number}: {exc}") from exc
            times.append(value)
            kinds.add(is_date)

        if len(kinds) > 1:
            raise InvalidArgument("Column t mixes dates and integers")

        identifiers = tuple(sorted({label for pair in labels for label in pair}))
        lookup = {name: i for i, name in enumerate(identifiers)}

        return cls(
            source=tuple(lookup[src] for src, _ in labels),
            destination=tuple(lookup[dst] for _, dst in labels),
            t=tuple(times),
            identifiers=identifiers,
            dated=kinds == {True},
        )


def load_movements_csv(path: str | Path, date_format: str = "%Y-%m-%d") -> Movements:
    """Load movements from a CSV file with a source, destination, t header.

    Extra columns are ignored.
    """
    csv_path = Path(path)
    if not csv_path.exists():
        raise InvalidArgument(f"Movements file not found: {csv_path}")

    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        header = [name.strip() for name in reader.fieldnames or []]
        missing = [column for column in REQUIRED_COLUMNS if column not in header]
        if missing:
            raise InvalidArgument(
                f"{csv_path} is missing columns: {', '.join(missing)}"
            )
        reader.fieldnames = header
        movements = Movements.from_rows(reader, date_format=date_format)

    log.info(
        f"Loaded {len(movements)} movements between "
        f"{movements.node_count} identifiers from {csv_path}"
    )
    return movements
