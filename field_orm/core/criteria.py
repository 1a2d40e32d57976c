"""WHERE-clause fragments produced by field comparison methods."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class Criteria:
    """One SQL condition with its bind values.

    Attributes:
        cond: Condition template with named placeholders (`title = :title`).
        binds: Placeholder name to value. Sequence values expand into one
            placeholder per element when the statement is compiled.
        is_and: Combine with the preceding condition using `AND` (`True`)
            or `OR` (`False`). Ignored for the first condition of a query.
        column: Column the condition starts with, if any. Statements quote it
            for their dialect when compiling.
    """

    cond: str
    binds: Dict[str, Any] = field(default_factory=dict)
    is_and: bool = True
    column: Optional[str] = None
