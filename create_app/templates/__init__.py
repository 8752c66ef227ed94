"""Local template catalog: confinement-checked resolution and manifest scanning.

Quick usage::

    from create_app.config import Config
    from create_app.templates import TemplateResolver

    resolver = TemplateResolver(Config())
    resolved = resolver.resolve("redux")
    coordinate = resolver.remote_coordinate(resolved.name)
"""

from create_app.templates.lifecycle import (
    RECOGNIZED_HOOKS,
    LifecycleWarning,
    TemplateManifest,
    load_manifest,
    scan_lifecycle_scripts,
)
from create_app.templates.paths import is_confined
from create_app.templates.resolver import ResolvedTemplate, TemplateResolver

__all__ = [
    "RECOGNIZED_HOOKS",
    "LifecycleWarning",
    "ResolvedTemplate",
    "TemplateManifest",
    "TemplateResolver",
    "is_confined",
    "load_manifest",
    "scan_lifecycle_scripts",
]
