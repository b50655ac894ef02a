"""Shared fixtures for complyscope tests."""

import pytest

from complyscope.models.oscal import (
    FRAMEWORK_PROP,
    TRESTLE_NAMESPACE,
    ComponentDefinition,
    ControlImplementationSet,
    DefinedComponent,
    ImplementedRequirement,
    Property,
)


def framework_implementation(framework_id, *control_ids, source="profile.json"):
    """Control implementation tagged for a framework."""
    return ControlImplementationSet(
        source=source,
        props=[Property(name=FRAMEWORK_PROP, value=framework_id, ns=TRESTLE_NAMESPACE)],
        implemented_requirements=[
            ImplementedRequirement(control_id=control_id) for control_id in control_ids
        ],
    )


def component_definition(*implementations, title="Component"):
    """Component definition with one component holding the implementations."""
    return ComponentDefinition(
        components=[
            DefinedComponent(title=title, control_implementations=list(implementations))
        ]
    )


@pytest.fixture
def example_definition():
    """Component definition implementing control-1 and control-2 for 'example'."""
    return component_definition(framework_implementation("example", "control-1", "control-2"))


@pytest.fixture
def sample_plan_data():
    """Assessment plan with root selections, an activity and two steps."""
    return {
        "assessment-plan": {
            "uuid": "plan-1",
            "metadata": {"title": "Plan"},
            "reviewed-controls": {
                "control-selections": [
                    {
                        "include-controls": [
                            {"control-id": "ac-1"},
                            {"control-id": "ac-2"},
                            {"control-id": "cm-6"},
                        ]
                    }
                ]
            },
            "local-definitions": {
                "activities": [
                    {
                        "uuid": "activity-ac",
                        "title": "Access control checks",
                        "related-controls": {
                            "control-selections": [
                                {"include-controls": [{"control-id": "ac-2"}]}
                            ]
                        },
                        "steps": [
                            {
                                "uuid": "step-ac-2",
                                "title": "Check account management",
                                "reviewed-controls": {
                                    "control-selections": [
                                        {"include-controls": [{"control-id": "ac-2"}]}
                                    ]
                                },
                            },
                            {
                                "uuid": "step-cm-6",
                                "title": "Check configuration settings",
                                "reviewed-controls": {
                                    "control-selections": [
                                        {"include-controls": [{"control-id": "cm-6"}]}
                                    ]
                                },
                            },
                        ],
                    },
                    {
                        "uuid": "activity-cm",
                        "title": "Configuration checks",
                        "related-controls": {
                            "control-selections": [
                                {"include-controls": [{"control-id": "cm-6"}]}
                            ]
                        },
                    },
                ]
            },
        }
    }
