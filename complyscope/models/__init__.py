"""Data models for complyscope."""

from .oscal import (
    Activity,
    AssessedControls,
    AssessmentPlan,
    Catalog,
    ComponentDefinition,
    ControlImplementationSet,
    DefinedComponent,
    ImplementedRequirement,
    IncludeAll,
    LocalDefinitions,
    Profile,
    Property,
    ReviewedControls,
    SelectControlById,
    Step,
)
from .scope import (
    AssessmentScope,
    ControlEntry
)

__all__ = [
    "Activity",
    "AssessedControls",
    "AssessmentPlan",
    "Catalog",
    "ComponentDefinition",
    "ControlImplementationSet",
    "DefinedComponent",
    "ImplementedRequirement",
    "IncludeAll",
    "LocalDefinitions",
    "Profile",
    "Property",
    "ReviewedControls",
    "SelectControlById",
    "Step",
    "AssessmentScope",
    "ControlEntry",
]
