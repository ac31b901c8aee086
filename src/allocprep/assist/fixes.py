"""
Fix suggestions for validation findings.

A fix suggester (typically an external assistant) proposes a corrected row
for a finding. Its output is never trusted: the proposed row goes through
the regular transform before it may replace the original, and any failure
of the suggester degrades to "no suggestion".
"""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Protocol

from allocprep.models import ROW_IDENTITY_KEY, EntityKind, Record, ValidationFinding
from allocprep.transform.core import transform_rows
from allocprep.utils.logging import get_logger

log = get_logger(__name__)

NO_SUGGESTION = "No suggestion available"


class FixSuggester(Protocol):
    """Proposes a corrected row for a finding."""

    def __call__(
        self, finding: ValidationFinding, row: Record, kind: EntityKind
    ) -> Mapping[str, Any]: ...


@dataclass
class FixOutcome:
    """
    Result of asking for a fix.

    Attributes:
        suggested_row: Row as proposed by the suggester, if any.
        accepted_row: Canonical record built from the proposal when it
            passed the transform.
        error: Why no accepted row is available.
    """

    suggested_row: Record | None = None
    accepted_row: Record | None = None
    error: str | None = None

    @property
    def available(self) -> bool:
        """True when a corrected record can be applied."""
        return self.accepted_row is not None


def request_fix(
    finding: ValidationFinding,
    row: Mapping[str, Any],
    kind: EntityKind | str,
    suggester: FixSuggester,
) -> FixOutcome:
    """
    Ask a suggester for a corrected row and check it.

    Args:
        finding: Finding the fix is requested for.
        row: Current record the finding points at.
        kind: Entity kind of the record.
        suggester: Fix suggester to consult.

    Returns:
        FixOutcome; never raises on suggester failures.
    """
    kind = EntityKind.parse(kind)

    try:
        suggestion = suggester(finding, dict(row), kind)
    except Exception as e:
        log.warning(
            "Fix suggester failed",
            entity=kind.value,
            row=finding.row_index,
            field=finding.field,
            error=f"{type(e).__name__}: {e!s}",
        )
        return FixOutcome(error=NO_SUGGESTION)

    if not isinstance(suggestion, Mapping):
        log.warning(
            "Fix suggester returned no row",
            entity=kind.value,
            row=finding.row_index,
            returned=type(suggestion).__name__,
        )
        return FixOutcome(error=NO_SUGGESTION)

    suggested = dict(suggestion)
    result = transform_rows([suggested], kind)
    if result.rejected:
        error = result.rejected[0].error
        log.info("Suggested fix rejected", entity=kind.value, row=finding.row_index, error=error)
        return FixOutcome(suggested_row=suggested, error=error)

    accepted = result.accepted[0]
    if row.get(ROW_IDENTITY_KEY):
        accepted[ROW_IDENTITY_KEY] = row[ROW_IDENTITY_KEY]
    return FixOutcome(suggested_row=suggested, accepted_row=accepted)
