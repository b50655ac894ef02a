"""Coordinator running the plan and generate workflows."""

import asyncio
import logging
from typing import Any, Dict, Optional

from complyscope.models.scope import AssessmentScope
from complyscope.scope import CatalogTitleResolver, ResolutionContext, apply_scope, build_scope, list_skipped
from complyscope.utils.app_dir import ApplicationDirectory
from complyscope.utils.documents import DocumentLoader, find_component_definitions
from complyscope.utils.storage import WorkspaceStorage

from .config import ComplyScopeConfig, get_config

logger = logging.getLogger(__name__)


class WorkspaceFileMissing(Exception):
    """A workspace file needed by a workflow does not exist."""


class ScopeCoordinator:
    """Coordinates scope building and plan narrowing for a workspace."""

    def __init__(
        self,
        config: Optional[ComplyScopeConfig] = None,
        app_dir: Optional[ApplicationDirectory] = None,
        loader: Optional[DocumentLoader] = None,
        storage: Optional[WorkspaceStorage] = None,
    ):
        """Initialize coordinator."""
        self.config = config or get_config()
        self.app_dir = app_dir or ApplicationDirectory(self.config.app_root, create=True)
        self.loader = loader or DocumentLoader()
        self.storage = storage or WorkspaceStorage(
            workspace_dir=self.config.workspace_dir,
            scope_file=self.config.scope_file,
            plan_template_file=self.config.plan_template_file,
            scoped_plan_file=self.config.scoped_plan_file,
        )

    async def plan(self, framework_id: str) -> AssessmentScope:
        """
        Build the scope for a framework from the bundled component definitions.

        Args:
            framework_id: Framework to scope the assessment to

        Returns:
            The scope, also written to the workspace for editing
        """
        component_definitions = await asyncio.to_thread(
            find_component_definitions, self.app_dir.bundle_dir, self.loader
        )
        logger.info(
            "Building scope for %s from %d component definitions",
            framework_id,
            len(component_definitions),
        )

        # Title resolution loads documents; keep it off the event loop.
        scope = await asyncio.to_thread(
            build_scope,
            framework_id,
            *component_definitions,
            title_resolver=CatalogTitleResolver(self.loader),
            context=ResolutionContext.with_timeout(self.app_dir, self.config.title_timeout),
            validator=self.loader.validator,
            logger=logger,
        )

        path = await self.storage.save_scope(scope)
        logger.info("Wrote %d controls to %s", len(scope.include_controls), path)
        return scope

    async def generate(self) -> Dict[str, Any]:
        """
        Narrow the workspace plan template to the workspace scope.

        Returns:
            Summary of the scoped plan
        """
        scope = await self.storage.load_scope()
        if scope is None:
            raise WorkspaceFileMissing(f"scope file {self.storage.scope_path} not found")

        plan = await self.storage.load_plan_template()
        if plan is None:
            raise WorkspaceFileMissing(
                f"plan template {self.storage.plan_template_path} not found"
            )

        apply_scope(scope, plan, logger=logger)
        path = await self.storage.save_scoped_plan(plan)
        skipped = list_skipped(plan)
        logger.info("Wrote scoped plan to %s (%d skipped)", path, len(skipped))

        return {
            "framework_id": scope.framework_id,
            "controls_in_scope": len(scope.include_controls),
            "skipped": skipped,
            "scoped_plan": str(path),
        }
