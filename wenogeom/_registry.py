"""
Registry for pluggable, deterministic selection policies.

Usage
-----
    frame_candidates = MethodRegistry("frame candidate")

    @frame_candidates.register("tet-decomposition")
    def _tet_decomposition(mesh, cell):
        return mesh.cell_tetrahedra(cell)

    policy = frame_candidates["tet-decomposition"]
    frame_candidates.available()  # ["tet-decomposition"]
"""

from typing import Callable, Optional


class MethodRegistry:
    """Name -> callable mapping with readable lookup errors.

    Parameters
    ----------
    name : str
        Human-readable name for error messages (e.g., "frame candidate").
    """

    def __init__(self, name: str):
        self.name = name
        self._methods: dict[str, Callable] = {}

    def register(self, key: str, fn: Optional[Callable] = None):
        """Register ``fn`` under ``key``; usable as a decorator when ``fn`` is omitted."""
        if fn is None:
            def decorator(func: Callable) -> Callable:
                self._methods[key] = func
                return func
            return decorator
        self._methods[key] = fn
        return fn

    def __getitem__(self, key: str) -> Callable:
        if key not in self._methods:
            raise KeyError(
                f"Unknown {self.name} method: {key!r}. "
                f"Available: {list(self._methods.keys())}"
            )
        return self._methods[key]

    def __contains__(self, key: str) -> bool:
        return key in self._methods

    def available(self) -> list[str]:
        """Return list of registered method names."""
        return list(self._methods.keys())
