"""Error taxonomy of the engine.

Only transport-level failures are exceptions. Empty scopes, unknown
regions and invalid filter years are representable result states.
"""

from __future__ import annotations


class DataUnavailableError(Exception):
    """The record store could not be reached or did not answer in time."""

    def __init__(self, message: str, *, source: str = "record store") -> None:
        super().__init__(message)
        self.source = source
