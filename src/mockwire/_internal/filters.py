from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Protocol

from mockwire._internal.candidates import Candidate
from mockwire._internal.fields import FieldRef
from mockwire._internal.type_checks import is_instance_of
from mockwire.exceptions import MockwireAmbiguousInjectionError


@dataclass(frozen=True, slots=True)
class ResolutionContext:
    """Field being resolved together with the state of its pass.

    ``remaining_fields`` holds the fields of the same class level that are still
    unmatched, the current field included. ``name_matching`` is enabled on the
    second pass only.
    """

    field: FieldRef
    remaining_fields: Sequence[FieldRef]
    name_matching: bool


class CandidateFilter(Protocol):
    """One step of the candidate resolution chain."""

    def filter(
        self,
        candidates: tuple[Candidate, ...],
        context: ResolutionContext,
    ) -> tuple[Candidate, ...]: ...


class TypeBasedCandidateFilter:
    """Keep candidates assignable to the field's declared type."""

    def filter(
        self,
        candidates: tuple[Candidate, ...],
        context: ResolutionContext,
    ) -> tuple[Candidate, ...]:
        declared_type = context.field.declared_type
        return tuple(
            candidate
            for candidate in candidates
            if is_instance_of(candidate.instance, declared_type)
        )


class NameGuardCandidateFilter:
    """Leave a lone candidate to the sibling field that carries its name.

    With a single candidate left, another unmatched field of the same declared
    type named exactly like the candidate wins over the current field.
    """

    def filter(
        self,
        candidates: tuple[Candidate, ...],
        context: ResolutionContext,
    ) -> tuple[Candidate, ...]:
        if len(candidates) != 1:
            return candidates
        candidate_name = candidates[0].name
        if candidate_name is None or candidate_name == context.field.name:
            return candidates
        for other_field in context.remaining_fields:
            if (
                other_field is not context.field
                and other_field.declared_type == context.field.declared_type
                and other_field.name == candidate_name
            ):
                return ()
        return candidates


class NameBasedCandidateFilter:
    """Prefer candidates named like the field when several remain."""

    def filter(
        self,
        candidates: tuple[Candidate, ...],
        context: ResolutionContext,
    ) -> tuple[Candidate, ...]:
        if not context.name_matching or len(candidates) <= 1:
            return candidates
        name_matches = tuple(
            candidate for candidate in candidates if candidate.name == context.field.name
        )
        return name_matches or candidates


DEFAULT_CANDIDATE_FILTERS: tuple[CandidateFilter, ...] = (
    TypeBasedCandidateFilter(),
    NameGuardCandidateFilter(),
    NameBasedCandidateFilter(),
)


class CandidateResolver:
    """Run the filter chain and select at most one candidate for a field.

    Zero remaining candidates means no match. More than one is deferred on the
    type-only pass and raises ``MockwireAmbiguousInjectionError`` on the
    name-matching pass.
    """

    def __init__(self, filters: Iterable[CandidateFilter] = DEFAULT_CANDIDATE_FILTERS) -> None:
        self._filters = tuple(filters)

    def resolve(
        self,
        candidates: Iterable[Candidate],
        context: ResolutionContext,
    ) -> Candidate | None:
        remaining = tuple(candidates)
        for candidate_filter in self._filters:
            if not remaining:
                return None
            remaining = candidate_filter.filter(remaining, context)

        if not remaining:
            return None
        if len(remaining) == 1:
            return remaining[0]
        if not context.name_matching:
            return None

        field = context.field
        candidate_types = tuple(candidate.runtime_type for candidate in remaining)
        competing = ", ".join(
            f"{candidate.name or '<unnamed>'}: {candidate.runtime_type.__qualname__}"
            for candidate in remaining
        )
        msg = (
            f"Ambiguous injection into field '{field.name}' declared on "
            f"'{field.owner.__qualname__}': {len(remaining)} candidates fit "
            f"({competing}). Name one of the test doubles '{field.name}' or narrow "
            "their types."
        )
        raise MockwireAmbiguousInjectionError(
            msg,
            field_name=field.name,
            owner=field.owner,
            candidate_types=candidate_types,
        )


__all__ = [
    "DEFAULT_CANDIDATE_FILTERS",
    "CandidateFilter",
    "CandidateResolver",
    "NameBasedCandidateFilter",
    "NameGuardCandidateFilter",
    "ResolutionContext",
    "TypeBasedCandidateFilter",
]
