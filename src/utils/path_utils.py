from pathlib import Path


def find_repo_root(start: Path | None = None, marker: str = "pyproject.toml") -> Path:
    """Return the nearest folder above ``start`` that holds ``marker``.

    The settings document and dashboard assets live relative to this folder,
    so the service resolves them the same way from any working directory.
    Falls back to the folder of ``start`` (default: this file) when nothing
    matches, e.g. in a non-editable install.
    """
    here = (start or Path(__file__)).resolve()
    return next((d for d in here.parents if (d / marker).is_file()), here.parent)
