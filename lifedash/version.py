"""Single source of truth for the application version.

Installed distributions report their metadata version; a source checkout
reads pyproject.toml with tomllib (stdlib, Python 3.11+).
"""

import tomllib
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

_PROJECT_ROOT = Path(__file__).resolve().parent.parent


def get_version() -> str:
    """Return the version string of the lifedash distribution."""
    try:
        return version("lifedash")
    except PackageNotFoundError:
        pyproject_path = _PROJECT_ROOT / "pyproject.toml"
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
        return data["project"]["version"]


__version__: str = get_version()
