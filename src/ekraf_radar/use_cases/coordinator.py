"""Filter/Query Coordinator: single owner of the current FilterState.

Every update replaces the immutable state first and then notifies all
observers synchronously, so tables, metric cards and the map always
recompute from the same snapshot.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from typing import Any

from ekraf_radar.domain.filters import FILTER_FIELDS
from ekraf_radar.domain.models import FilterState

logger = logging.getLogger(__name__)

FilterObserver = Callable[[FilterState], None]


class FilterCoordinator:
    """Holds the authoritative FilterState and broadcasts changes."""

    def __init__(self, available_years: Iterable[int] = ()) -> None:
        self._years: list[int] = sorted(set(available_years), reverse=True)
        self._observers: list[FilterObserver] = []
        self._state = FilterState(year=self.default_year)

    @property
    def state(self) -> FilterState:
        return self._state

    @property
    def available_years(self) -> list[int]:
        """Known years, most recent first."""
        return list(self._years)

    @property
    def default_year(self) -> int | None:
        return self._years[0] if self._years else None

    def subscribe(self, observer: FilterObserver) -> Callable[[], None]:
        """Register an observer; returns a callable that unregisters it."""
        self._observers.append(observer)

        def _unsubscribe() -> None:
            if observer in self._observers:
                self._observers.remove(observer)

        return _unsubscribe

    def update(self, **changes: Any) -> FilterState:
        """Replace only the given fields, keep the others, notify observers.

        An unknown year falls back to the default year (logged, not raised).
        Unknown field names are a programming error and raise ValueError.
        """
        unknown = set(changes) - FILTER_FIELDS
        if unknown:
            raise ValueError(f"Unknown filter fields: {', '.join(sorted(unknown))}")

        if isinstance(changes.get("search"), str) and not changes["search"].strip():
            changes["search"] = None

        state = FilterState.model_validate({**self._state.model_dump(), **changes})
        # Checked after validation so "2023" and 2023 are the same year
        if "year" in changes:
            state = state.model_copy(update={"year": self._validated_year(state.year)})
        return self._publish(state)

    def reset(self) -> FilterState:
        """Back to defaults: most recent year, no other filters."""
        return self._publish(FilterState(year=self.default_year))

    def set_available_years(self, years: Iterable[int]) -> FilterState:
        """Cross-validate the selection against a new set of years.

        If the selected year disappeared, fall back to the first available
        year and notify. A coordinator created before any year was known
        starts on the default year as soon as years arrive. Otherwise the
        state is left untouched.
        """
        had_years = bool(self._years)
        self._years = sorted(set(years), reverse=True)
        year = self._state.year
        if year is None and not had_years and self.default_year is not None:
            return self._publish(self._state.model_copy(update={"year": self.default_year}))
        if year is not None and year not in self._years:
            logger.warning(
                "Selected year %s no longer available, falling back to %s",
                year, self.default_year,
            )
            return self._publish(self._state.model_copy(update={"year": self.default_year}))
        return self._state

    def _validated_year(self, year: int | None) -> int | None:
        if year is None or not self._years or year in self._years:
            return year
        logger.warning(
            "Invalid filter year %s (available: %s), using %s",
            year, self._years, self.default_year,
        )
        return self.default_year

    def _publish(self, state: FilterState) -> FilterState:
        self._state = state
        errors: list[Exception] = []
        for observer in list(self._observers):
            try:
                observer(state)
            except Exception as e:
                logger.exception("Filter observer %r failed", observer)
                errors.append(e)
        # All observers saw the new state; surface the first failure afterwards
        if errors:
            raise errors[0]
        return state
