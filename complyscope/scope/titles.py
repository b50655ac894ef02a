"""Control title resolution from profiles and catalogs."""

import time
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Protocol

from complyscope.models.oscal import Catalog, Control, ControlImplementationSet, Profile
from complyscope.utils.app_dir import ApplicationDirectory
from complyscope.utils.documents import DocumentValidator

from .errors import ResolutionTimeout, TitleResolutionError


@dataclass(frozen=True)
class ResolutionContext:
    """Where documents are loaded from, and until when resolution may run."""

    app_dir: Optional[ApplicationDirectory] = None
    deadline: Optional[float] = None

    @classmethod
    def with_timeout(
        cls, app_dir: Optional[ApplicationDirectory], seconds: Optional[float]
    ) -> "ResolutionContext":
        """Create a context that expires `seconds` from now."""
        deadline = time.monotonic() + seconds if seconds is not None else None
        return cls(app_dir=app_dir, deadline=deadline)

    def expired(self) -> bool:
        return self.deadline is not None and time.monotonic() >= self.deadline

    def check(self) -> None:
        """Raise ResolutionTimeout once the deadline has passed."""
        if self.expired():
            raise ResolutionTimeout("title resolution deadline exceeded")


class TitleResolver(Protocol):
    """Looks up the title of a control; raises TitleResolutionError on failure."""

    def __call__(
        self,
        control_id: str,
        implementation: ControlImplementationSet,
        context: ResolutionContext,
        validator: Optional[DocumentValidator],
    ) -> str:
        ...


class ProfileLoader(Protocol):
    """Loads profiles and the catalogs they import."""

    def load_profile(self, app_dir, source: str, validator) -> Profile:
        ...

    def load_catalog_source(self, app_dir, href: str, validator) -> Catalog:
        ...


def _find_control(controls: Optional[Iterable[Control]], control_id: str) -> Optional[Control]:
    for control in controls or []:
        if control.id == control_id and control.title:
            return control
        found = _find_control(control.controls, control_id)
        if found is not None:
            return found
    return None


def find_control_title(catalog: Catalog, control_id: str) -> Optional[str]:
    """Search a catalog's controls and (nested) groups for a titled control."""
    control = _find_control(catalog.controls, control_id)
    if control is not None:
        return control.title

    pending = list(catalog.groups or [])
    while pending:
        group = pending.pop(0)
        control = _find_control(group.controls, control_id)
        if control is not None:
            return control.title
        pending.extend(group.groups or [])
    return None


class CatalogTitleResolver:
    """Resolves titles through the implementation's source profile and its catalogs."""

    def __init__(self, loader: ProfileLoader):
        self.loader = loader
        self._profiles: Dict[str, Profile] = {}
        self._profile_errors: Dict[str, TitleResolutionError] = {}
        self._catalogs: Dict[str, Optional[Catalog]] = {}

    def __call__(
        self,
        control_id: str,
        implementation: ControlImplementationSet,
        context: ResolutionContext,
        validator: Optional[DocumentValidator],
    ) -> str:
        source = implementation.source
        context.check()
        profile = self._profile(source, context, validator)

        if not profile.imports:
            raise TitleResolutionError(f"profile '{source}' has no imports")

        for imp in profile.imports:
            context.check()
            catalog = self._catalog(imp.href, context, validator)
            if catalog is None:
                continue
            title = find_control_title(catalog, control_id)
            if title:
                return title

        raise TitleResolutionError(f"title for control '{control_id}' not found in catalog")

    def _profile(self, source: str, context: ResolutionContext, validator) -> Profile:
        # Failed loads are remembered and re-raised for later controls.
        if source in self._profile_errors:
            raise self._profile_errors[source]
        if source not in self._profiles:
            try:
                self._profiles[source] = self.loader.load_profile(
                    context.app_dir, source, validator
                )
            except Exception as e:
                error = TitleResolutionError(
                    f"failed to load profile from source '{source}': {e}"
                )
                self._profile_errors[source] = error
                raise error from e
        return self._profiles[source]

    def _catalog(self, href: str, context: ResolutionContext, validator) -> Optional[Catalog]:
        # Catalogs that fail to load are skipped, and remembered as such.
        if href not in self._catalogs:
            try:
                self._catalogs[href] = self.loader.load_catalog_source(
                    context.app_dir, href, validator
                )
            except Exception:
                self._catalogs[href] = None
        return self._catalogs[href]
