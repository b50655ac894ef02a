"""Configuration for the scope coordinator."""

import logging
from pydantic_settings import BaseSettings


class ComplyScopeConfig(BaseSettings):
    """Coordinator configuration settings."""

    # Application directory parent (holds complyscope/bundles, complyscope/plugins)
    app_root: str = "~/.local/share"

    # Workspace settings
    workspace_dir: str = "./complyscope-workspace"
    scope_file: str = "complyscope-scope.yaml"
    plan_template_file: str = "assessment-plan.json"
    scoped_plan_file: str = "assessment-plan.scoped.json"

    # Title resolution
    title_timeout: float = 10.0

    debug: bool = False

    class Config:
        env_prefix = "COMPLYSCOPE_"
        env_file = ".env"
        env_file_encoding = "utf-8"


def get_config() -> ComplyScopeConfig:
    """Get coordinator configuration."""
    return ComplyScopeConfig()


def configure_logging(debug: bool = False) -> None:
    """Configure process logging for the service and CLI."""
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
