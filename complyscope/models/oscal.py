"""OSCAL document models used by the scope engine.

Only the parts of the OSCAL schemas that the engine reads or mutates are
modelled explicitly. Everything else is kept as extra fields so a document
survives a load/apply/dump cycle unchanged.
"""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


TRESTLE_NAMESPACE = "https://oscal-compass.github.io/compliance-trestle/schemas/oscal"
FRAMEWORK_PROP = "framework"
SKIPPED_PROP = "skipped"


class OscalModel(BaseModel):
    """Base for OSCAL models: hyphenated aliases, unknown fields preserved."""

    model_config = ConfigDict(populate_by_name=True, extra="allow")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with OSCAL field names, omitting absent fields."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Property(OscalModel):
    """Namespaced name/value property."""

    name: str = Field(..., description="Property name")
    value: str = Field(..., description="Property value")
    ns: Optional[str] = Field(None, description="Namespace the name belongs to")
    remarks: Optional[str] = None


class Metadata(OscalModel):
    """Document metadata."""

    title: str = ""
    props: Optional[List[Property]] = None


def get_trestle_prop(name: str, props: Optional[List[Property]]) -> Optional[Property]:
    """Return the first property called `name` in the trestle namespace."""
    for prop in props or []:
        if prop.name == name and prop.ns == TRESTLE_NAMESPACE:
            return prop
    return None


# Component definitions


class ImplementedRequirement(OscalModel):
    """A control claimed by a control implementation."""

    uuid: Optional[str] = None
    control_id: str = Field("", alias="control-id")
    description: Optional[str] = None
    props: Optional[List[Property]] = None


class ControlImplementationSet(OscalModel):
    """Control implementations of a component for one source profile."""

    uuid: Optional[str] = None
    source: str = Field("", description="Href of the profile being implemented")
    description: Optional[str] = None
    props: Optional[List[Property]] = None
    implemented_requirements: Optional[List[ImplementedRequirement]] = Field(
        None, alias="implemented-requirements"
    )


class DefinedComponent(OscalModel):
    """A component and the controls it implements."""

    uuid: Optional[str] = None
    type: Optional[str] = None
    title: str = ""
    description: Optional[str] = None
    props: Optional[List[Property]] = None
    control_implementations: Optional[List[ControlImplementationSet]] = Field(
        None, alias="control-implementations"
    )


class ComponentDefinition(OscalModel):
    """OSCAL component definition."""

    uuid: Optional[str] = None
    metadata: Optional[Metadata] = None
    components: Optional[List[DefinedComponent]] = None


# Assessment plans


class IncludeAll(OscalModel):
    """Marker selecting every control."""


class SelectControlById(OscalModel):
    """Reference to a single control in a selection."""

    control_id: str = Field(..., alias="control-id")
    statement_ids: Optional[List[str]] = Field(None, alias="statement-ids")


class AssessedControls(OscalModel):
    """A control selection node."""

    description: Optional[str] = None
    props: Optional[List[Property]] = None
    include_all: Optional[IncludeAll] = Field(None, alias="include-all")
    include_controls: Optional[List[SelectControlById]] = Field(None, alias="include-controls")
    exclude_controls: Optional[List[SelectControlById]] = Field(None, alias="exclude-controls")
    remarks: Optional[str] = None


class ReviewedControls(OscalModel):
    """Container owning a list of control selections."""

    description: Optional[str] = None
    props: Optional[List[Property]] = None
    control_selections: List[AssessedControls] = Field(
        default_factory=list, alias="control-selections"
    )
    remarks: Optional[str] = None


class Step(OscalModel):
    """A step of an activity."""

    uuid: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    props: Optional[List[Property]] = None
    reviewed_controls: Optional[ReviewedControls] = Field(None, alias="reviewed-controls")


class Activity(OscalModel):
    """An assessment activity."""

    uuid: Optional[str] = None
    title: Optional[str] = None
    description: Optional[str] = None
    props: Optional[List[Property]] = None
    steps: Optional[List[Step]] = None
    related_controls: Optional[ReviewedControls] = Field(None, alias="related-controls")


class LocalDefinitions(OscalModel):
    """Plan-local definitions."""

    activities: Optional[List[Activity]] = None
    remarks: Optional[str] = None


class AssessmentPlan(OscalModel):
    """OSCAL assessment plan."""

    uuid: Optional[str] = None
    metadata: Optional[Metadata] = None
    local_definitions: Optional[LocalDefinitions] = Field(None, alias="local-definitions")
    reviewed_controls: ReviewedControls = Field(
        default_factory=ReviewedControls, alias="reviewed-controls"
    )


# Profiles and catalogs


class Import(OscalModel):
    """Profile import of a catalog or profile."""

    href: str


class Profile(OscalModel):
    """OSCAL profile."""

    uuid: Optional[str] = None
    metadata: Optional[Metadata] = None
    imports: Optional[List[Import]] = None


class Control(OscalModel):
    """Catalog control, possibly with enhancements."""

    id: str
    title: str = ""
    controls: Optional[List["Control"]] = None


class Group(OscalModel):
    """Catalog group of controls."""

    id: Optional[str] = None
    title: str = ""
    groups: Optional[List["Group"]] = None
    controls: Optional[List[Control]] = None


class Catalog(OscalModel):
    """OSCAL catalog."""

    uuid: Optional[str] = None
    metadata: Optional[Metadata] = None
    groups: Optional[List[Group]] = None
    controls: Optional[List[Control]] = None


Control.model_rebuild()
Group.model_rebuild()
