"""Global configuration and constants for the table engine."""

from __future__ import annotations

import os
from typing import Final

# Reserved column key; never sortable nor filterable
ACTIONS_COLUMN_KEY: Final = "actions"

DEFAULT_PAGE_SIZE: Final = int(os.environ.get("TABLEKIT_PAGE_SIZE", "10"))
DIAGNOSTICS_CAPACITY: Final = int(os.environ.get("TABLEKIT_DIAGNOSTICS_CAPACITY", "200"))

# Property name suffixes tried after snake_case / underscore-stripped variants
KEY_VARIANT_SUFFIXES: Final = ("Name", "Value", "Text")
