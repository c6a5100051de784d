"""Note templates: user-provided Markdown files with bundled fallbacks."""

from __future__ import annotations

from importlib import resources
from pathlib import Path
from typing import Optional

from .errors import TemplateNotFoundError

TEMPLATE_SUFFIX = ".md"


def _bundled():
    return resources.files("jot").joinpath("templates")


def bundled_template_names() -> list[str]:
    return sorted(
        item.name[: -len(TEMPLATE_SUFFIX)]
        for item in _bundled().iterdir()
        if item.name.endswith(TEMPLATE_SUFFIX)
    )


def user_template_names(templates_dir: Optional[Path]) -> list[str]:
    if templates_dir is None or not templates_dir.is_dir():
        return []
    return sorted(p.stem for p in templates_dir.glob(f"*{TEMPLATE_SUFFIX}") if p.is_file())


def list_templates(templates_dir: Optional[Path] = None) -> list[str]:
    """Template names available from the user directory and the package."""
    return sorted(set(user_template_names(templates_dir)) | set(bundled_template_names()))


def load_template(name: str, templates_dir: Optional[Path] = None) -> str:
    """Return a template's contents verbatim.

    The user's templates directory shadows bundled templates of the same name.

    Raises:
        TemplateNotFoundError: If no template has that name
    """
    if not name or "/" in name or "\\" in name or name.startswith("."):
        raise TemplateNotFoundError(f'unknown template "{name}"')

    filename = name + TEMPLATE_SUFFIX
    if templates_dir is not None:
        candidate = templates_dir / filename
        if candidate.is_file():
            return candidate.read_text(encoding="utf-8")

    bundled = _bundled().joinpath(filename)
    if bundled.is_file():
        return bundled.read_text(encoding="utf-8")

    raise TemplateNotFoundError(f'unknown template "{name}"')
