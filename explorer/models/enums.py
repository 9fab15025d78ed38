"""Enum types shared by the dashboard state and the relay responses."""

from enum import Enum


class FetchStatus(str, Enum):
    """Load state of a lazily fetched sub-resource."""
    not_fetched = "not_fetched"
    loading = "loading"
    loaded = "loaded"
    failed = "failed"


class UpsertOperation(str, Enum):
    """Whether a persisted post document was inserted or replaced."""
    created = "created"
    updated = "updated"
