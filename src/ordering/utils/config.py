"""Runtime settings for the ordering domain.

Values resolve in this order: ``ORDERING_<NAME>`` environment variable, the
``[custom]`` section of ``domain.toml``, then the caller's default.
"""

import os
from typing import Any

from protean.utils.globals import current_domain


def setting(name: str, default: Any) -> Any:
    """Return the configured value for ``name``, coerced to the default's type."""
    raw = os.getenv(f"ORDERING_{name}")
    if raw is None:
        custom = current_domain.config.get("custom") or {}
        raw = custom.get(name, default)

    if raw is None or default is None:
        return raw
    return type(default)(raw)
