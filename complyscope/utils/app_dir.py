"""Application directory layout."""

from pathlib import Path
from typing import List, Union


APP_NAME = "complyscope"


class ApplicationDirectory:
    """Locations of the application root, plugins and content bundles."""

    def __init__(self, root: Union[str, Path], create: bool = False):
        """
        Initialize the application directory.

        Args:
            root: Parent directory holding the application directory
            create: Create the directories if they do not exist
        """
        self._app_dir = Path(root).expanduser() / APP_NAME
        self._plugin_dir = self._app_dir / "plugins"
        self._bundle_dir = self._app_dir / "bundles"

        if create:
            for directory in self.dirs():
                directory.mkdir(parents=True, exist_ok=True)

    @property
    def app_dir(self) -> Path:
        return self._app_dir

    @property
    def plugin_dir(self) -> Path:
        return self._plugin_dir

    @property
    def bundle_dir(self) -> Path:
        return self._bundle_dir

    def dirs(self) -> List[Path]:
        """All directories managed by the application."""
        return [self._app_dir, self._plugin_dir, self._bundle_dir]
