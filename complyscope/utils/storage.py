"""Storage of scope descriptors and assessment plans in a user workspace."""

import json
from pathlib import Path
from typing import Optional

import aiofiles
import yaml

from complyscope.models.oscal import AssessmentPlan
from complyscope.models.scope import AssessmentScope

from .documents import DocumentLoadError, dump_assessment_plan, parse_document


class WorkspaceStorage:
    """Reads and writes workspace files."""

    def __init__(
        self,
        workspace_dir: str = "./complyscope-workspace",
        scope_file: str = "complyscope-scope.yaml",
        plan_template_file: str = "assessment-plan.json",
        scoped_plan_file: str = "assessment-plan.scoped.json",
    ):
        """Initialize workspace storage."""
        self.workspace_dir = Path(workspace_dir)
        self.scope_path = self.workspace_dir / scope_file
        self.plan_template_path = self.workspace_dir / plan_template_file
        self.scoped_plan_path = self.workspace_dir / scoped_plan_file

        self.workspace_dir.mkdir(parents=True, exist_ok=True)

    async def save_scope(self, scope: AssessmentScope) -> Path:
        """Write the scope descriptor as YAML."""
        content = yaml.safe_dump(scope.to_descriptor(), sort_keys=False)
        async with aiofiles.open(self.scope_path, "w") as f:
            await f.write(content)
        return self.scope_path

    async def load_scope(self) -> Optional[AssessmentScope]:
        """Read the scope descriptor, or None when none was written yet."""
        if not self.scope_path.exists():
            return None

        async with aiofiles.open(self.scope_path, "r") as f:
            content = await f.read()

        try:
            data = yaml.safe_load(content)
        except yaml.YAMLError as e:
            raise DocumentLoadError(f"cannot parse {self.scope_path}: {e}") from e
        if not isinstance(data, dict):
            raise DocumentLoadError(f"{self.scope_path} does not contain a scope descriptor")
        return AssessmentScope.model_validate(data)

    async def save_plan_template(self, plan: AssessmentPlan) -> Path:
        """Write the assessment plan template."""
        return await self._save_plan(self.plan_template_path, plan)

    async def load_plan_template(self) -> Optional[AssessmentPlan]:
        """Read a fresh copy of the assessment plan template."""
        if not self.plan_template_path.exists():
            return None

        async with aiofiles.open(self.plan_template_path, "r") as f:
            content = await f.read()

        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise DocumentLoadError(f"cannot parse {self.plan_template_path}: {e}") from e
        return parse_document(data, AssessmentPlan)

    async def save_scoped_plan(self, plan: AssessmentPlan) -> Path:
        """Write the assessment plan narrowed to the scope."""
        return await self._save_plan(self.scoped_plan_path, plan)

    async def _save_plan(self, path: Path, plan: AssessmentPlan) -> Path:
        async with aiofiles.open(path, "w") as f:
            await f.write(json.dumps(dump_assessment_plan(plan), indent=2))
        return path
