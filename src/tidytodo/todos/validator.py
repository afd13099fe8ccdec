"""Rule-based validation of TODO annotations."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterable

from tidytodo.todos.models import AnnotationRecord, ValidationViolation

MISSING_ASSIGNEE = "missing-assignee"
MISSING_DUE = "missing-due"
MISSING_ISSUE = "missing-issue"
DISALLOWED_ASSIGNEE = "disallowed-assignee"


@dataclass(frozen=True)
class RuleSet:
    """Which validation rules are enabled.

    Attributes
    ----------
    require_assignee : bool
        Every TODO must name an assignee.
    require_due : bool
        Every TODO must carry a due date.
    require_issue : bool
        Every TODO must reference an issue.
    allowed_assignees : frozenset[str] | None
        When set, assignees outside this set are rejected.
    """

    require_assignee: bool = False
    require_due: bool = False
    require_issue: bool = False
    allowed_assignees: frozenset[str] | None = field(default=None)

    @classmethod
    def strict(cls) -> RuleSet:
        """All presence rules enabled."""
        return cls(require_assignee=True, require_due=True, require_issue=True)

    @property
    def is_empty(self) -> bool:
        return not (
            self.require_assignee
            or self.require_due
            or self.require_issue
            or self.allowed_assignees is not None
        )


@dataclass(frozen=True)
class Rule:
    """A named check: ``enabled`` looks at the RuleSet, ``passes`` at the record."""

    rule_id: str
    enabled: Callable[[RuleSet], bool]
    passes: Callable[[AnnotationRecord, RuleSet], bool]


# Evaluated in this order, so violations for one record come out stable.
RULES: tuple[Rule, ...] = (
    Rule(
        MISSING_ASSIGNEE,
        lambda rs: rs.require_assignee,
        lambda r, rs: r.assignee is not None,
    ),
    Rule(
        MISSING_DUE,
        lambda rs: rs.require_due,
        lambda r, rs: r.due is not None,
    ),
    Rule(
        MISSING_ISSUE,
        lambda rs: rs.require_issue,
        lambda r, rs: r.issue is not None,
    ),
    Rule(
        DISALLOWED_ASSIGNEE,
        lambda rs: rs.allowed_assignees is not None,
        lambda r, rs: r.assignee is None or r.assignee in rs.allowed_assignees,
    ),
)


def validate(record: AnnotationRecord, ruleset: RuleSet) -> list[ValidationViolation]:
    """Check one record against the enabled rules.

    Parameters
    ----------
    record : AnnotationRecord
        The record to check.
    ruleset : RuleSet
        The enabled rules.

    Returns
    -------
    list[ValidationViolation]
        One violation per failed rule, empty when the record complies.
    """
    return [
        ValidationViolation(record, rule.rule_id)
        for rule in RULES
        if rule.enabled(ruleset) and not rule.passes(record, ruleset)
    ]


def validate_all(
    records: Iterable[AnnotationRecord], ruleset: RuleSet
) -> list[ValidationViolation]:
    """Validate every record, collecting all violations."""
    violations: list[ValidationViolation] = []
    for record in records:
        violations.extend(validate(record, ruleset))
    return violations
