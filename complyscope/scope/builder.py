"""Build an assessment scope from component definitions."""

import logging
from typing import Dict, Iterable, Iterator, Optional

from complyscope.models.oscal import (
    FRAMEWORK_PROP,
    ComponentDefinition,
    ControlImplementationSet,
    get_trestle_prop,
)
from complyscope.models.scope import ALL_RULES, AssessmentScope, ControlEntry
from complyscope.utils.documents import DocumentValidator

from .control_set import ControlSetIndex
from .errors import EmptyInputError
from .titles import ResolutionContext, TitleResolver

log = logging.getLogger(__name__)


def _framework_implementations(
    framework_id: str, component_definitions: Iterable[ComponentDefinition]
) -> Iterator[ControlImplementationSet]:
    """Yield control implementations tagged for `framework_id`."""
    for component_definition in component_definitions:
        for component in component_definition.components or []:
            for implementation in component.control_implementations or []:
                framework = get_trestle_prop(FRAMEWORK_PROP, implementation.props)
                if framework is None or framework.value != framework_id:
                    continue
                yield implementation


def build_scope(
    framework_id: str,
    *component_definitions: ComponentDefinition,
    title_resolver: Optional[TitleResolver] = None,
    context: Optional[ResolutionContext] = None,
    validator: Optional[DocumentValidator] = None,
    logger: Optional[logging.Logger] = None,
) -> AssessmentScope:
    """
    Build the assessment scope for a framework.

    Args:
        framework_id: Framework whose control implementations are collected
        component_definitions: Component definitions to read
        title_resolver: Optional collaborator looking up control titles
        context: Passed to the resolver; carries the app directory and deadline
        validator: Passed to the resolver for the documents it loads
        logger: Logger for diagnostics

    Returns:
        Scope with one entry per distinct control, sorted by control ID

    Raises:
        EmptyInputError: If no component definitions were given
    """
    if not component_definitions:
        raise EmptyInputError()

    if context is None:
        context = ResolutionContext()
    if logger is None:
        logger = log

    control_ids = ControlSetIndex()
    titles: Dict[str, str] = {}

    for implementation in _framework_implementations(framework_id, component_definitions):
        for requirement in implementation.implemented_requirements or []:
            control_id = requirement.control_id
            if not control_id:
                continue
            control_ids.add(control_id)
            if control_id in titles:
                continue
            titles[control_id] = _resolve_title(
                control_id, implementation, title_resolver, context, validator, logger
            )

    logger.debug("Found %d controls for framework %s", len(control_ids), framework_id)

    return AssessmentScope(
        framework_id=framework_id,
        include_controls=[
            ControlEntry(control_id=control_id, control_title=titles[control_id], rules=[ALL_RULES])
            for control_id in control_ids.sorted()
        ],
    )


def _resolve_title(
    control_id: str,
    implementation: ControlImplementationSet,
    title_resolver: Optional[TitleResolver],
    context: ResolutionContext,
    validator: Optional[DocumentValidator],
    logger: logging.Logger,
) -> str:
    """Resolve a title, falling back to the control ID."""
    if title_resolver is None:
        return control_id
    try:
        title = title_resolver(control_id, implementation, context, validator)
    except Exception as e:
        logger.debug("Using control ID as title for %s: %s", control_id, e)
        return control_id
    return title or control_id
