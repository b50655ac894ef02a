"""Loading and validation of OSCAL documents."""

import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Type, TypeVar, Union
from urllib.parse import urlparse

import yaml
from pydantic import BaseModel, ValidationError

from complyscope.models.oscal import AssessmentPlan, Catalog, ComponentDefinition, Profile

from .app_dir import ApplicationDirectory

logger = logging.getLogger(__name__)

DocumentT = TypeVar("DocumentT", bound=BaseModel)

ROOT_KEYS: Dict[Type[BaseModel], str] = {
    ComponentDefinition: "component-definition",
    AssessmentPlan: "assessment-plan",
    Profile: "profile",
    Catalog: "catalog",
}

DOCUMENT_EXTENSIONS = (".json", ".yaml", ".yml")


class DocumentLoadError(Exception):
    """A document could not be read, parsed or validated."""


class NoComponentDefinitionsFound(DocumentLoadError):
    """A bundle directory holds no component definitions."""


class DocumentValidator(ABC):
    """Validates a loaded document."""

    @abstractmethod
    def validate(self, document: BaseModel) -> None:
        """
        Validate a document.

        Args:
            document: Loaded document

        Raises:
            DocumentLoadError: If the document is invalid
        """
        pass


class ModelValidator(DocumentValidator):
    """Re-validates a document against its own model."""

    def validate(self, document: BaseModel) -> None:
        try:
            type(document).model_validate(
                document.model_dump(by_alias=True, exclude_none=True)
            )
        except ValidationError as e:
            raise DocumentLoadError(f"invalid {type(document).__name__}: {e}") from e


def read_document(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a JSON or YAML file into a dict."""
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        raise DocumentLoadError(f"cannot read {path}: {e}") from e

    try:
        if path.suffix == ".json":
            data = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise DocumentLoadError(f"cannot parse {path}: {e}") from e

    if not isinstance(data, dict):
        raise DocumentLoadError(f"{path} does not contain a document object")
    return data


def parse_document(data: Dict[str, Any], model: Type[DocumentT]) -> DocumentT:
    """Build a model from a document, wrapped in its OSCAL root key or bare."""
    root_key = ROOT_KEYS.get(model)
    if root_key and root_key in data:
        data = data[root_key]
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise DocumentLoadError(f"invalid {model.__name__}: {e}") from e


class DocumentLoader:
    """Loads OSCAL documents from local files."""

    def __init__(self, validator: Optional[DocumentValidator] = None):
        self.validator = validator or ModelValidator()

    def resolve_href(self, app_dir: Optional[ApplicationDirectory], href: str) -> Path:
        """
        Turn a document href into a local path.

        Relative paths are taken from the bundle directory. Remote hrefs are
        rejected.
        """
        parsed = urlparse(href)
        if parsed.scheme in ("http", "https"):
            raise DocumentLoadError(f"remote document '{href}' is not supported")
        if parsed.scheme == "file":
            return Path(parsed.path)

        path = Path(href)
        if not path.is_absolute() and app_dir is not None:
            path = app_dir.bundle_dir / path
        return path

    def load(
        self,
        path: Union[str, Path],
        model: Type[DocumentT],
        validator: Optional[DocumentValidator] = None,
    ) -> DocumentT:
        """Load and validate a document file."""
        document = parse_document(read_document(path), model)
        (validator or self.validator).validate(document)
        logger.debug("Loaded %s from %s", model.__name__, path)
        return document

    def load_profile(
        self,
        app_dir: Optional[ApplicationDirectory],
        source: str,
        validator: Optional[DocumentValidator] = None,
    ) -> Profile:
        return self.load(self.resolve_href(app_dir, source), Profile, validator)

    def load_catalog_source(
        self,
        app_dir: Optional[ApplicationDirectory],
        href: str,
        validator: Optional[DocumentValidator] = None,
    ) -> Catalog:
        return self.load(self.resolve_href(app_dir, href), Catalog, validator)

    def load_component_definition(self, path: Union[str, Path]) -> ComponentDefinition:
        return self.load(path, ComponentDefinition)

    def load_assessment_plan(self, path: Union[str, Path]) -> AssessmentPlan:
        return self.load(path, AssessmentPlan)


def dump_assessment_plan(plan: AssessmentPlan) -> Dict[str, Any]:
    """Serialize a plan wrapped in its OSCAL root key."""
    return {ROOT_KEYS[AssessmentPlan]: plan.to_dict()}


def find_component_definitions(
    bundle_dir: Union[str, Path], loader: Optional[DocumentLoader] = None
) -> List[ComponentDefinition]:
    """
    Find component definitions under a bundle directory.

    Files that cannot be read, parsed or validated are skipped.

    Args:
        bundle_dir: Directory searched recursively
        loader: Loader used to read the definitions

    Returns:
        Component definitions, in file name order

    Raises:
        NoComponentDefinitionsFound: If the directory holds none
    """
    loader = loader or DocumentLoader()
    bundle_dir = Path(bundle_dir)
    root_key = ROOT_KEYS[ComponentDefinition]

    definitions = []
    if bundle_dir.is_dir():
        for path in sorted(bundle_dir.rglob("*")):
            if not path.is_file() or path.suffix not in DOCUMENT_EXTENSIONS:
                continue
            try:
                data = read_document(path)
            except DocumentLoadError as e:
                logger.debug("Skipping %s: %s", path, e)
                continue
            if root_key not in data:
                continue
            try:
                definition = parse_document(data, ComponentDefinition)
                loader.validator.validate(definition)
            except DocumentLoadError as e:
                logger.debug("Skipping %s: %s", path, e)
                continue
            definitions.append(definition)

    if not definitions:
        raise NoComponentDefinitionsFound(f"no component definitions found in {bundle_dir}")
    return definitions
