"""Configuration constants (see ``settings``)."""

from .settings import (  # noqa: F401
    ACTIONS_COLUMN_KEY,
    DEFAULT_PAGE_SIZE,
    DIAGNOSTICS_CAPACITY,
    KEY_VARIANT_SUFFIXES,
)
