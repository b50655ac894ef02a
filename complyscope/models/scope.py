"""Data models for the assessment scope descriptor."""

from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field, field_validator


ALL_RULES = "*"


class ControlEntry(BaseModel):
    """A control included in the assessment scope."""

    model_config = ConfigDict(populate_by_name=True)

    control_id: str = Field(..., alias="controlId", description="Control ID (e.g., ac-2)")
    control_title: str = Field("", alias="controlTitle", description="Control title")
    rules: List[str] = Field(
        default_factory=lambda: [ALL_RULES],
        alias="includeRules",
        description="Rule IDs in scope, '*' for all rules",
    )
    exclude_rules: Optional[List[str]] = Field(
        None, alias="excludeRules", description="Rule IDs excluded (carried, not applied)"
    )


class AssessmentScope(BaseModel):
    """Controls an assessment run is restricted to."""

    model_config = ConfigDict(populate_by_name=True)

    framework_id: str = Field(..., alias="frameworkId", description="Framework identifier")
    include_controls: List[ControlEntry] = Field(
        default_factory=list, alias="includeControls", description="Controls in scope"
    )
    global_exclude_rules: Optional[List[str]] = Field(
        None, alias="globalExcludeRules", description="Rule IDs excluded everywhere (carried, not applied)"
    )

    @field_validator("include_controls", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    @field_validator("include_controls")
    @classmethod
    def _unique_control_ids(cls, value: List[ControlEntry]) -> List[ControlEntry]:
        seen = set()
        for entry in value:
            if entry.control_id in seen:
                raise ValueError(f"duplicate control '{entry.control_id}' in includeControls")
            seen.add(entry.control_id)
        return value

    def control_ids(self) -> List[str]:
        """Control IDs in scope, in descriptor order."""
        return [entry.control_id for entry in self.include_controls]

    def to_descriptor(self) -> Dict[str, Any]:
        """Serialize to the persisted (camelCase) descriptor layout."""
        return self.model_dump(by_alias=True, exclude_none=True)
