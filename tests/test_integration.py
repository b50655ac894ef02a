"""Integration tests for complyscope."""

import asyncio
import json
import time

import pytest
import yaml

from complyscope.models.oscal import AssessmentPlan
from complyscope.models.scope import AssessmentScope, ControlEntry


CATALOG = {
    "catalog": {
        "uuid": "catalog-1",
        "groups": [
            {
                "id": "ac",
                "title": "Access Control",
                "controls": [
                    {"id": "ac-1", "title": "Policy and Procedures"},
                    {"id": "ac-2", "title": "Account Management"},
                ],
            }
        ],
    }
}

PROFILE = {"profile": {"uuid": "profile-1", "imports": [{"href": "catalog.json"}]}}


def component_definition_data(framework_id, *control_ids):
    return {
        "component-definition": {
            "uuid": "cd-1",
            "components": [
                {
                    "uuid": "c-1",
                    "type": "software",
                    "title": "Component",
                    "control-implementations": [
                        {
                            "uuid": "ci-1",
                            "source": "profile.json",
                            "props": [
                                {
                                    "name": "framework",
                                    "value": framework_id,
                                    "ns": "https://oscal-compass.github.io/compliance-trestle/schemas/oscal",
                                }
                            ],
                            "implemented-requirements": [
                                {"uuid": f"ir-{control_id}", "control-id": control_id}
                                for control_id in control_ids
                            ],
                        }
                    ],
                }
            ],
        }
    }


@pytest.fixture
def config(tmp_path):
    """Configuration pointing at temporary directories."""
    from complyscope.coordinator.config import ComplyScopeConfig

    return ComplyScopeConfig(
        app_root=str(tmp_path / "share"),
        workspace_dir=str(tmp_path / "workspace"),
    )


@pytest.fixture
def coordinator(config):
    """Coordinator with a populated bundle directory."""
    from complyscope.coordinator import ScopeCoordinator

    coordinator = ScopeCoordinator(config)
    bundle_dir = coordinator.app_dir.bundle_dir
    (bundle_dir / "catalog.json").write_text(json.dumps(CATALOG))
    (bundle_dir / "profile.json").write_text(json.dumps(PROFILE))
    (bundle_dir / "component-definition.json").write_text(
        json.dumps(component_definition_data("example", "ac-2", "ac-1", "ac-3"))
    )
    return coordinator


class TestApplicationDirectory:
    """Tests for ApplicationDirectory."""

    def test_layout(self, tmp_path):
        """Test directory locations."""
        from complyscope.utils.app_dir import ApplicationDirectory

        app_dir = ApplicationDirectory(tmp_path)

        assert app_dir.app_dir == tmp_path / "complyscope"
        assert app_dir.plugin_dir == tmp_path / "complyscope" / "plugins"
        assert app_dir.bundle_dir == tmp_path / "complyscope" / "bundles"
        assert app_dir.dirs() == [app_dir.app_dir, app_dir.plugin_dir, app_dir.bundle_dir]
        assert not app_dir.app_dir.exists()

    def test_create(self, tmp_path):
        """Test creating the directories."""
        from complyscope.utils.app_dir import ApplicationDirectory

        app_dir = ApplicationDirectory(tmp_path, create=True)

        assert all(directory.is_dir() for directory in app_dir.dirs())


class TestDocumentLoader:
    """Tests for document loading."""

    def test_find_component_definitions(self, tmp_path):
        """Test discovering component definitions among other documents."""
        from complyscope.utils.documents import find_component_definitions

        (tmp_path / "nested").mkdir()
        (tmp_path / "nested" / "cd.yaml").write_text(
            yaml.safe_dump(component_definition_data("example", "ac-1"))
        )
        (tmp_path / "catalog.json").write_text(json.dumps(CATALOG))
        (tmp_path / "notes.txt").write_text("not a document")

        definitions = find_component_definitions(tmp_path)

        assert len(definitions) == 1
        assert definitions[0].components[0].title == "Component"

    def test_no_component_definitions(self, tmp_path):
        """Test a bundle directory without component definitions."""
        from complyscope.utils.documents import NoComponentDefinitionsFound, find_component_definitions

        (tmp_path / "catalog.json").write_text(json.dumps(CATALOG))

        with pytest.raises(NoComponentDefinitionsFound):
            find_component_definitions(tmp_path)

    def test_invalid_component_definition_skipped(self, tmp_path):
        """Test that invalid definitions are skipped like unreadable files."""
        from complyscope.utils.documents import NoComponentDefinitionsFound, find_component_definitions

        (tmp_path / "broken.json").write_text(
            json.dumps({"component-definition": {"components": "not-a-list"}})
        )
        (tmp_path / "garbled.json").write_text("{not json")

        with pytest.raises(NoComponentDefinitionsFound):
            find_component_definitions(tmp_path)

        (tmp_path / "valid.json").write_text(
            json.dumps(component_definition_data("example", "ac-1"))
        )

        definitions = find_component_definitions(tmp_path)

        assert len(definitions) == 1
        assert definitions[0].components[0].title == "Component"

    def test_resolve_href(self, tmp_path):
        """Test href resolution."""
        from complyscope.utils.app_dir import ApplicationDirectory
        from complyscope.utils.documents import DocumentLoader

        loader = DocumentLoader()
        app_dir = ApplicationDirectory(tmp_path)

        assert loader.resolve_href(app_dir, "profile.json") == app_dir.bundle_dir / "profile.json"
        assert loader.resolve_href(app_dir, "file:///data/profile.json").as_posix() == "/data/profile.json"
        assert loader.resolve_href(None, "/data/profile.json").as_posix() == "/data/profile.json"

    def test_remote_href_rejected(self):
        """Test that remote documents are not fetched."""
        from complyscope.utils.documents import DocumentLoadError, DocumentLoader

        with pytest.raises(DocumentLoadError, match="not supported"):
            DocumentLoader().load_profile(None, "https://example.com/profile.json")

    def test_invalid_document(self, tmp_path):
        """Test loading a file that is not a valid document."""
        from complyscope.utils.documents import DocumentLoadError, DocumentLoader

        path = tmp_path / "plan.json"
        path.write_text("[1, 2, 3]")

        with pytest.raises(DocumentLoadError):
            DocumentLoader().load_assessment_plan(path)

    def test_custom_validator(self, tmp_path):
        """Test that the configured validator sees loaded documents."""
        from complyscope.utils.documents import DocumentLoader, DocumentValidator

        class Recording(DocumentValidator):
            def __init__(self):
                self.seen = []

            def validate(self, document):
                self.seen.append(type(document).__name__)

        validator = Recording()
        path = tmp_path / "catalog.json"
        path.write_text(json.dumps(CATALOG))

        DocumentLoader(validator).load_catalog_source(None, str(path))

        assert validator.seen == ["Catalog"]


class TestWorkspaceStorage:
    """Tests for WorkspaceStorage."""

    @pytest.fixture
    def storage(self, tmp_path):
        """Create storage in a temp directory."""
        from complyscope.utils.storage import WorkspaceStorage

        return WorkspaceStorage(workspace_dir=str(tmp_path / "workspace"))

    @pytest.mark.asyncio
    async def test_scope_file_is_editable_yaml(self, storage):
        """Test the written scope file layout."""
        scope = AssessmentScope(
            framework_id="example",
            include_controls=[ControlEntry(control_id="ac-1", control_title="Policy")],
        )

        path = await storage.save_scope(scope)

        assert yaml.safe_load(path.read_text()) == {
            "frameworkId": "example",
            "includeControls": [
                {"controlId": "ac-1", "controlTitle": "Policy", "includeRules": ["*"]}
            ],
        }
        assert await storage.load_scope() == scope

    @pytest.mark.asyncio
    async def test_missing_files(self, storage):
        """Test reading files that were never written."""
        assert await storage.load_scope() is None
        assert await storage.load_plan_template() is None

    @pytest.mark.asyncio
    async def test_invalid_scope_file(self, storage):
        """Test a scope file that is not a mapping."""
        from complyscope.utils.documents import DocumentLoadError

        storage.scope_path.write_text("- just\n- a list\n")

        with pytest.raises(DocumentLoadError):
            await storage.load_scope()


class TestScopeCoordinator:
    """Tests for the plan and generate workflows."""

    @pytest.mark.asyncio
    async def test_plan(self, coordinator):
        """Test building and persisting the workspace scope."""
        scope = await coordinator.plan("example")

        assert [(e.control_id, e.control_title) for e in scope.include_controls] == [
            ("ac-1", "Policy and Procedures"),
            ("ac-2", "Account Management"),
            ("ac-3", "ac-3"),
        ]
        assert await coordinator.storage.load_scope() == scope

    @pytest.mark.asyncio
    async def test_plan_keeps_event_loop_responsive(self, coordinator):
        """Test that slow document loads do not stall other tasks."""
        from complyscope.utils.documents import DocumentLoader

        class SlowLoader(DocumentLoader):
            def load_profile(self, app_dir, source, validator=None):
                time.sleep(0.5)
                return super().load_profile(app_dir, source, validator)

        coordinator.loader = SlowLoader()
        gaps = []

        async def ticker():
            last = time.monotonic()
            while True:
                await asyncio.sleep(0.05)
                now = time.monotonic()
                gaps.append(now - last)
                last = now

        task = asyncio.create_task(ticker())
        try:
            scope = await coordinator.plan("example")
        finally:
            task.cancel()

        assert scope.include_controls[0].control_title == "Policy and Procedures"
        assert gaps
        assert max(gaps) < 0.2

    @pytest.mark.asyncio
    async def test_generate(self, coordinator, sample_plan_data):
        """Test narrowing the plan template with an edited scope."""
        await coordinator.plan("example")
        scope = await coordinator.storage.load_scope()
        scope.include_controls = [e for e in scope.include_controls if e.control_id != "ac-1"]
        await coordinator.storage.save_scope(scope)
        coordinator.storage.plan_template_path.write_text(json.dumps(sample_plan_data))

        summary = await coordinator.generate()

        assert summary["framework_id"] == "example"
        assert summary["controls_in_scope"] == 2
        assert summary["skipped"] == [
            {"activity": "Access control checks", "step": "Check configuration settings"},
            {"activity": "Configuration checks", "step": None},
        ]

        written = json.loads(coordinator.storage.scoped_plan_path.read_text())
        plan = AssessmentPlan.model_validate(written["assessment-plan"])
        root = plan.reviewed_controls.control_selections[0]
        assert [select.control_id for select in root.include_controls] == ["ac-2"]

        # The template is left untouched for the next run
        assert json.loads(coordinator.storage.plan_template_path.read_text()) == sample_plan_data

    @pytest.mark.asyncio
    async def test_generate_without_scope(self, coordinator):
        """Test generate before plan."""
        from complyscope.coordinator import WorkspaceFileMissing

        with pytest.raises(WorkspaceFileMissing):
            await coordinator.generate()


class TestFastAPIApp:
    """Tests for FastAPI application endpoints."""

    @pytest.fixture
    def client(self, coordinator):
        """Create test client bound to the test coordinator."""
        from fastapi.testclient import TestClient
        from complyscope.main import app, get_coordinator

        app.dependency_overrides[get_coordinator] = lambda: coordinator
        yield TestClient(app)
        app.dependency_overrides.clear()

    def test_root_endpoint(self, client):
        """Test root endpoint returns service info."""
        response = client.get("/")

        assert response.status_code == 200
        data = response.json()
        assert data["service"] == "complyscope"
        assert "version" in data

    def test_health_endpoint(self, client):
        """Test health check endpoint."""
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_build_scope(self, client):
        """Test building a scope from posted component definitions."""
        response = client.post(
            "/api/v1/scope/build",
            json={
                "framework_id": "example",
                "component_definitions": [
                    component_definition_data("example", "ac-2", "ac-1"),
                    component_definition_data("example", "ac-1"),
                ],
            },
        )

        assert response.status_code == 200
        data = response.json()
        assert data["frameworkId"] == "example"
        assert [c["controlId"] for c in data["includeControls"]] == ["ac-1", "ac-2"]

    def test_build_scope_empty_input(self, client):
        """Test building without component definitions."""
        response = client.post("/api/v1/scope/build", json={"framework_id": "example"})

        assert response.status_code == 400
        assert response.json()["detail"] == "no component definitions found"

    def test_apply_scope(self, client, sample_plan_data):
        """Test narrowing a posted plan."""
        response = client.post(
            "/api/v1/scope/apply",
            json={
                "scope": {
                    "frameworkId": "example",
                    "includeControls": [{"controlId": "ac-1"}, {"controlId": "ac-2"}],
                },
                "assessment_plan": sample_plan_data,
            },
        )

        assert response.status_code == 200
        data = response.json()
        plan = data["assessment_plan"]["assessment-plan"]
        assert plan["reviewed-controls"]["control-selections"] == [
            {"include-controls": [{"control-id": "ac-1"}, {"control-id": "ac-2"}]}
        ]
        assert len(data["skipped"]) == 2

    def test_plan_and_generate(self, client, coordinator, sample_plan_data):
        """Test the workspace workflow through the API."""
        assert client.get("/api/v1/scope").status_code == 404

        response = client.post("/api/v1/plan", json={"framework_id": "example"})
        assert response.status_code == 200
        assert len(response.json()["includeControls"]) == 3

        response = client.put(
            "/api/v1/scope",
            json={"frameworkId": "example", "includeControls": [{"controlId": "ac-2"}]},
        )
        assert response.status_code == 200
        assert client.get("/api/v1/scope").json()["includeControls"] == [
            {"controlId": "ac-2", "controlTitle": "", "includeRules": ["*"]}
        ]

        assert client.post("/api/v1/generate").status_code == 404
        coordinator.storage.plan_template_path.write_text(json.dumps(sample_plan_data))

        response = client.post("/api/v1/generate")
        assert response.status_code == 200
        assert response.json()["controls_in_scope"] == 1

    def test_plan_without_bundles(self, client, coordinator):
        """Test plan when no component definitions are installed."""
        (coordinator.app_dir.bundle_dir / "component-definition.json").unlink()

        response = client.post("/api/v1/plan", json={"framework_id": "example"})

        assert response.status_code == 404
