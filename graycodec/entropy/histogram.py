"""Symbol histograms and zeroth-order Shannon entropy."""

import csv
import math
from collections import Counter
from typing import Any, Callable, Dict, Iterable, List, Mapping, Protocol, Tuple

from ..constants import CSV_HEADER
from ..errors import EmptyInputError


class Symbol(Protocol):
    """Anything usable as a coding symbol: hashable and totally ordered."""

    def __hash__(self) -> int: ...

    def __eq__(self, other: Any) -> bool: ...

    def __lt__(self, other: Any) -> bool: ...


def _increment(symbol):
    return symbol + 1


class Histogram:
    """
    Occurrence counts over a discrete symbol domain.

    The running total is kept alongside the counts so that
    total() == sum(counts().values()) at all times.
    """

    def __init__(self, symbols: Iterable[Symbol] = ()):
        self._counts: Dict[Symbol, int] = {}
        self._total = 0
        self.update(symbols)

    @classmethod
    def from_iterable(cls, symbols: Iterable[Symbol]) -> 'Histogram':
        return cls(symbols)

    @classmethod
    def from_counts(cls, counts: Mapping[Symbol, int]) -> 'Histogram':
        """Build from an existing symbol -> count mapping."""
        hist = cls()
        for symbol, count in counts.items():
            if count < 0:
                raise ValueError(f"Negative count {count} for symbol {symbol!r}")
            if count:
                hist._counts[symbol] = hist._counts.get(symbol, 0) + count
                hist._total += count
        return hist

    def add(self, symbol: Symbol) -> None:
        """Count one occurrence of symbol."""
        self._counts[symbol] = self._counts.get(symbol, 0) + 1
        self._total += 1

    def update(self, symbols: Iterable[Symbol]) -> None:
        counted = Counter(symbols)
        for symbol, count in counted.items():
            self._counts[symbol] = self._counts.get(symbol, 0) + count
            self._total += count

    def counts(self) -> Dict[Symbol, int]:
        """Snapshot of symbol -> count."""
        return dict(self._counts)

    def total(self) -> int:
        return self._total

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, symbol) -> bool:
        return symbol in self._counts

    def __getitem__(self, symbol) -> int:
        return self._counts.get(symbol, 0)

    def symbols(self) -> List[Symbol]:
        """Distinct symbols in ascending order."""
        return sorted(self._counts)

    def relative_frequencies(self) -> Dict[Symbol, float]:
        if self._total == 0:
            raise EmptyInputError("Relative frequencies of an empty histogram are undefined")
        return {s: c / self._total for s, c in self._counts.items()}

    def entropy(self) -> float:
        """
        Shannon entropy in bits/symbol: -sum(p * log2(p)).

        Raises:
            EmptyInputError: If no symbol has been counted
        """
        if self._total == 0:
            raise EmptyInputError("Entropy of an empty histogram is undefined")
        return _entropy(self._counts.values(), self._total)

    def mean(self) -> float:
        """Arithmetic mean of numeric symbols, weighted by count."""
        if self._total == 0:
            raise EmptyInputError("Mean of an empty histogram is undefined")
        return sum(s * c for s, c in self._counts.items()) / self._total

    def absolute_report(self) -> List[Tuple[Symbol, int]]:
        return [(s, self._counts[s]) for s in self.symbols()]

    def relative_report(self) -> List[Tuple[Symbol, float]]:
        freqs = self.relative_frequencies()
        return [(s, freqs[s]) for s in self.symbols()]

    def full_range(self, min_symbol, max_symbol,
                   successor: Callable = _increment) -> List[Tuple[Any, int]]:
        """
        Counts for every symbol in the closed interval [min_symbol, max_symbol].

        Absent symbols are reported with count 0. successor steps from one
        symbol to the next (defaults to +1).
        """
        rows = []
        current = min_symbol
        while current <= max_symbol:
            rows.append((current, self._counts.get(current, 0)))
            if current == max_symbol:
                break
            current = successor(current)
        return rows

    def csv_rows(self, min_symbol, max_symbol,
                 successor: Callable = _increment) -> List[Tuple[Any, float]]:
        """(element, frequency) rows over the full range; frequency is count/total."""
        if self._total == 0:
            raise EmptyInputError("Cannot report frequencies of an empty histogram")
        return [(s, c / self._total)
                for s, c in self.full_range(min_symbol, max_symbol, successor)]

    def to_csv(self, path: str, min_symbol, max_symbol,
               successor: Callable = _increment) -> None:
        """
        Write the full-range relative frequency table.

        Format: header "element,frequency", then one row per symbol in
        ascending order, zero frequency for absent symbols.
        """
        rows = self.csv_rows(min_symbol, max_symbol, successor)
        with open(path, 'w', newline='') as f:
            writer = csv.writer(f)
            writer.writerow(CSV_HEADER)
            for element, frequency in rows:
                writer.writerow([element, float(frequency)])

    def __str__(self) -> str:
        return '\n'.join(f"{s}: {c}" for s, c in self.absolute_report())

    def __repr__(self) -> str:
        return f"Histogram(symbols={len(self._counts)}, total={self._total})"


def _entropy(counts: Iterable[int], total: int) -> float:
    result = 0.0
    for count in counts:
        if count > 0:
            p = count / total
            result -= p * math.log2(p)
    return result


def data_entropy(symbols: Iterable[Symbol]) -> float:
    """Entropy of a symbol sequence, counted on the fly."""
    return Histogram(symbols).entropy()


def entropy_from_frequencies(frequencies: Mapping[Any, float]) -> float:
    """
    Entropy of a relative frequency table.

    Zero-probability entries contribute nothing.
    """
    if not frequencies:
        raise EmptyInputError("Entropy of an empty frequency table is undefined")
    result = 0.0
    for p in frequencies.values():
        if p > 0:
            result -= p * math.log2(p)
    return result


def normalize_histogram(counts: Mapping[Any, int]) -> Dict[Any, float]:
    """Convert symbol -> count into symbol -> relative frequency."""
    total = sum(counts.values())
    if total == 0:
        raise EmptyInputError("Cannot normalize an empty histogram")
    return {s: c / total for s, c in counts.items()}
