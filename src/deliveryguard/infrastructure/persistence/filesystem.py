"""
Filesystem specification store.

Reads module specifications laid out as:

    <root>/docs/requirements/<module>/SPECIFICATION.md
"""

from pathlib import Path

from deliveryguard.domain.interfaces import SpecificationStoreInterface
from deliveryguard.domain.models import ModuleInfo

REQUIREMENTS_DIR = "docs/requirements"
SPECIFICATION_FILE = "SPECIFICATION.md"


class FilesystemSpecificationStore(SpecificationStoreInterface):
    """Read-only view over per-module specification files."""

    def __init__(
        self,
        root: str | Path,
        requirements_dir: str = REQUIREMENTS_DIR,
        file_name: str = SPECIFICATION_FILE,
    ):
        """
        Args:
            root: Project root directory
            requirements_dir: Directory of module folders, relative to root
            file_name: Specification file name inside each module folder
        """
        self._modules_dir = Path(root) / requirements_dir
        self._file_name = file_name

    def _module_dirs(self) -> list[Path]:
        if not self._modules_dir.is_dir():
            return []
        return sorted(p for p in self._modules_dir.iterdir() if p.is_dir())

    def _find(self, module_name: str) -> Path | None:
        wanted = module_name.casefold()
        for directory in self._module_dirs():
            if directory.name.casefold() == wanted:
                return directory
        return None

    def list_modules(self) -> list[ModuleInfo]:
        modules = []
        for directory in self._module_dirs():
            path = directory / self._file_name
            modules.append(ModuleInfo(directory.name, str(path), path.is_file()))
        return modules

    def read_specification(self, module_name: str) -> str | None:
        directory = self._find(module_name)
        if directory is None:
            return None
        path = directory / self._file_name
        if not path.is_file():
            return None
        return path.read_text(encoding="utf-8")
