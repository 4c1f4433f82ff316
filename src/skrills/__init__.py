"""
Skrills - skill catalog and autoload renderer.

Discovers SKILL.md documents across host-tool skill directories and decides,
under a byte budget, which of them to surface to a coding agent.
"""

import importlib.metadata as _metadata

# Version is defined in pyproject.toml - read it and parse into tuple (primary representation)
_raw_version = _metadata.version("skrills")
__version_info__: tuple[int, int, int] = tuple(int(x) for x in _raw_version.split(".")[:3])  # type: ignore[assignment]
__version__: str = ".".join(str(x) for x in __version_info__)
__author__ = "Skrills Contributors"

from skrills.config import Settings  # noqa: E402
from skrills.errors import SkrillsError  # noqa: E402

__all__ = ["__version__", "__version_info__", "Settings", "SkrillsError"]
