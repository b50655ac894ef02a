"""Narrow an assessment plan to an assessment scope."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterator, List, Optional

from complyscope.models.oscal import (
    SKIPPED_PROP,
    TRESTLE_NAMESPACE,
    AssessedControls,
    AssessmentPlan,
    Property,
    ReviewedControls,
    SelectControlById,
    get_trestle_prop,
)
from complyscope.models.scope import AssessmentScope

from .control_set import ControlSetIndex

log = logging.getLogger(__name__)


@dataclass
class SelectionContainer:
    """A plan node owning a list of control selections under `attribute`.

    Annotated containers are cleared and their owner tagged as skipped once
    none of their selections includes any control.
    """

    owner: Any
    attribute: str
    annotate: bool

    @property
    def controls(self) -> Optional[ReviewedControls]:
        return getattr(self.owner, self.attribute)

    def clear(self) -> None:
        setattr(self.owner, self.attribute, None)


def _containers(plan: AssessmentPlan) -> Iterator[SelectionContainer]:
    """Yield every control-selection container in the plan."""
    yield SelectionContainer(plan, "reviewed_controls", annotate=False)

    if plan.local_definitions is None:
        return
    for activity in plan.local_definitions.activities or []:
        yield SelectionContainer(activity, "related_controls", annotate=True)
        for step in activity.steps or []:
            yield SelectionContainer(step, "reviewed_controls", annotate=True)


def filter_selection(selection: AssessedControls, in_scope: ControlSetIndex) -> None:
    """Intersect a control selection with the controls in scope.

    An include-all marker is replaced by the full in-scope set. A selection
    left with nothing gets no include list at all.
    """
    included_all = selection.include_all is not None
    selection.include_all = None

    original = ControlSetIndex(
        select.control_id for select in selection.include_controls or []
    )

    new_controls = [
        SelectControlById(control_id=control_id)
        for control_id in in_scope
        if included_all or control_id in original
    ]
    selection.include_controls = new_controls or None


def _mark_skipped(owner: Any) -> None:
    if owner.props is None:
        owner.props = []
    owner.props.append(Property(name=SKIPPED_PROP, value="true", ns=TRESTLE_NAMESPACE))


def _describe(node: Any) -> str:
    return node.title or node.uuid or "<unnamed>"


def apply_scope(
    scope: AssessmentScope,
    assessment_plan: AssessmentPlan,
    logger: Optional[logging.Logger] = None,
) -> None:
    """
    Narrow every control selection of an assessment plan to the scope.

    The plan is modified in place; the scope is not. Activities and steps left
    without controls keep their place in the plan, lose their control
    selections and get a `skipped` property.

    Args:
        scope: Controls the plan is restricted to
        assessment_plan: Plan to narrow
        logger: Logger for diagnostics
    """
    if logger is None:
        logger = log

    in_scope = ControlSetIndex(entry.control_id for entry in scope.include_controls)
    logger.debug("Found included controls: count=%d", len(in_scope))

    for container in _containers(assessment_plan):
        controls = container.controls
        if controls is None or not controls.control_selections:
            continue

        for selection in controls.control_selections:
            filter_selection(selection, in_scope)

        if not container.annotate:
            continue
        if any(selection.include_controls for selection in controls.control_selections):
            continue

        container.clear()
        _mark_skipped(container.owner)
        logger.debug("Skipping %s: no controls in scope", _describe(container.owner))


def list_skipped(assessment_plan: AssessmentPlan) -> List[Dict[str, Optional[str]]]:
    """List the activities and steps annotated as skipped."""
    skipped = []
    if assessment_plan.local_definitions is None:
        return skipped

    for activity in assessment_plan.local_definitions.activities or []:
        if _is_skipped(activity):
            skipped.append({"activity": _describe(activity), "step": None})
        for step in activity.steps or []:
            if _is_skipped(step):
                skipped.append({"activity": _describe(activity), "step": _describe(step)})
    return skipped


def _is_skipped(node: Any) -> bool:
    prop = get_trestle_prop(SKIPPED_PROP, node.props)
    return prop is not None and prop.value == "true"
