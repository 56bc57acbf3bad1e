"""Domain models for outline-tools."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from outline_tools.protocols import NodeProtocol


@dataclass(frozen=True)
class DateEntry:
    """A calendar date with the label shown for it inside a node."""

    year: int
    month: int
    day: int
    label: str

    def __post_init__(self) -> None:
        # Raises ValueError for e.g. Feb 30, so an invalid entry never exists.
        date(self.year, self.month, self.day)

    @classmethod
    def from_date(cls, value: date) -> "DateEntry":
        return cls(value.year, value.month, value.day, format_date_label(value))

    def to_date(self) -> date:
        return date(self.year, self.month, self.day)

    @property
    def iso(self) -> str:
        return self.to_date().isoformat()


def format_date_label(value: date) -> str:
    """Render a date the way markers show it, e.g. "Sat, Feb 29, 2020"."""
    return f"{value:%a}, {value:%b} {value.day}, {value.year}"


@dataclass(frozen=True)
class DateInterpretation:
    """A resolved date plus a description of how it was derived."""

    entry: DateEntry
    when: datetime
    description: str


class DateErrorKind(Enum):
    NOT_RECOGNIZED = "not-recognized"
    AMBIGUOUS = "ambiguous"
    PAST_DATE_WITHOUT_YEAR = "past-date-without-year"
    INVALID_DATE = "invalid-date"
    BAD_RANGE = "bad-range"


@dataclass(frozen=True)
class DateError:
    """Reason an expression could not be turned into a single date."""

    kind: DateErrorKind
    message: str


@dataclass(frozen=True)
class DateRange:
    """A closed or half-open range of interpreted dates."""

    start: DateInterpretation | None
    end: DateInterpretation | None

    @property
    def clause(self) -> str:
        """Search clause for the range; both bounds are inclusive."""
        if self.start is not None and self.end is not None:
            return f"between:{self.start.entry.iso},{self.end.entry.iso}"
        if self.start is not None:
            return f"after:{self.start.entry.iso}"
        if self.end is not None:
            return f"before:{self.end.entry.iso}"
        msg = "DateRange needs at least one bound"
        raise ValueError(msg)


@dataclass(frozen=True)
class ItemMove:
    """Move ``node`` to be the first child of ``target``."""

    node: NodeProtocol | None
    target: NodeProtocol | None


@dataclass(frozen=True)
class NameTreeAnalysisResult:
    """Snapshot of how nodes relate to their declared name chains."""

    roots: tuple[NodeProtocol, ...] = ()
    single_parent: tuple[NodeProtocol, ...] = ()
    no_parent: tuple[NodeProtocol, ...] = ()
    many_parent: tuple[NodeProtocol, ...] = ()
    duplicates: dict[str, tuple[NodeProtocol, ...]] = field(default_factory=dict)
    moves: tuple[ItemMove, ...] = ()
    impossible_moves: tuple[str, ...] = ()


@dataclass(frozen=True)
class MoveResult:
    """Outcome of applying a batch of moves."""

    success: bool
    moves_applied: int
    error: str | None = None


@dataclass(frozen=True)
class ReconcileReport:
    """Analysis of a name tree plus the outcome of applying its moves.

    ``result`` is None when the batch was never started (dry run, nothing to
    do, or declined at the confirmation step).
    """

    analysis: NameTreeAnalysisResult
    result: MoveResult | None = None
