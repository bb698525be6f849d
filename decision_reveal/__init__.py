"""Decision Reveal.

Decision-tree model, decoders and time-driven reveal engine for showing how a
tree is built and which path a classification takes through it.
"""

from importlib.metadata import PackageNotFoundError, version as _pkg_version
from pathlib import Path


def _detect_version() -> str:
    """Return the installed distribution version, with a dev fallback.

    First tries importlib.metadata for the installed wheel/sdist. If that fails
    (e.g., running directly from a source checkout without installation), it
    reads the static ``[project].version`` from ``pyproject.toml`` at the
    repository root. As a last resort, returns a sentinel version string.
    """
    distribution_name = "decision-reveal"

    try:
        return _pkg_version(distribution_name)
    except PackageNotFoundError:
        pass

    pyproject_path = Path(__file__).resolve().parent.parent / "pyproject.toml"
    if pyproject_path.is_file():
        import tomllib

        try:
            data = tomllib.loads(pyproject_path.read_text(encoding="utf-8"))
        except (OSError, tomllib.TOMLDecodeError):
            data = {}
        project_version = data.get("project", {}).get("version")
        if isinstance(project_version, str) and project_version:
            return project_version

    return "0.0.0+unknown"


__version__: str = _detect_version()

__all__ = ["__version__"]
