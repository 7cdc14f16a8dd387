from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True, eq=False)
class Candidate:
    """Test double available for injection, with the name used for matching."""

    instance: object
    name: str | None

    @property
    def runtime_type(self) -> type[Any]:
        # Spec'd mocks report their spec class here.
        return self.instance.__class__

    def __repr__(self) -> str:
        return f"Candidate({self.name!r}: {self.runtime_type.__qualname__})"


class CandidatePool:
    """Shrinking, insertion-ordered set of candidates keyed by instance identity.

    Test doubles may stub ``__eq__`` and ``__hash__``, so membership never
    relies on them. One pool is owned by a single injection call.
    """

    def __init__(self, candidates: Iterable[Candidate] = ()) -> None:
        self._candidates: dict[int, Candidate] = {}
        self.add_all(candidates)

    def add(self, candidate: Candidate) -> None:
        self._candidates.setdefault(id(candidate.instance), candidate)

    def add_all(self, candidates: Iterable[Candidate]) -> None:
        for candidate in candidates:
            self.add(candidate)

    def remove(self, candidate: Candidate) -> None:
        self._candidates.pop(id(candidate.instance), None)

    def snapshot(self) -> tuple[Candidate, ...]:
        return tuple(self._candidates.values())

    def __iter__(self) -> Iterator[Candidate]:
        return iter(self.snapshot())

    def __len__(self) -> int:
        return len(self._candidates)

    def __bool__(self) -> bool:
        return bool(self._candidates)

    def __repr__(self) -> str:
        return f"CandidatePool({list(self._candidates.values())!r})"


__all__ = ["Candidate", "CandidatePool"]
