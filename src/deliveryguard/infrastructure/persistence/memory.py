"""
In-memory specification store.

Useful for testing and for hosts that hold specifications themselves.
"""

from deliveryguard.domain.interfaces import SpecificationStoreInterface
from deliveryguard.domain.models import ModuleInfo


class InMemorySpecificationStore(SpecificationStoreInterface):
    """Simple in-memory store for testing."""

    def __init__(self, specifications: dict[str, str | None] | None = None):
        """
        Args:
            specifications: Module name to content (None: module without a spec)
        """
        self._specs: dict[str, str | None] = dict(specifications or {})
        self._errors: dict[str, OSError] = {}

    def _key(self, module_name: str) -> str | None:
        wanted = module_name.casefold()
        for name in self._specs:
            if name.casefold() == wanted:
                return name
        return None

    def set_specification(self, module_name: str, content: str | None) -> None:
        key = self._key(module_name) or module_name
        self._specs[key] = content

    def set_read_error(self, module_name: str, error: OSError | None) -> None:
        """Make read_specification raise error for a module (None clears it)."""
        if error is None:
            self._errors.pop(module_name.casefold(), None)
        else:
            self._errors[module_name.casefold()] = error

    def list_modules(self) -> list[ModuleInfo]:
        return [
            ModuleInfo(name, f"memory://{name}", content is not None)
            for name, content in sorted(self._specs.items())
        ]

    def read_specification(self, module_name: str) -> str | None:
        error = self._errors.get(module_name.casefold())
        if error is not None:
            raise error
        key = self._key(module_name)
        return self._specs[key] if key is not None else None
