"""
Publish engine.

Resolves configured blob targets, selects artifacts, builds keys and
uploads through the storage backends.
"""

from .filters import ID_EXEMPT_TYPES, PUBLISHABLE_TYPES, filter_artifacts, is_publishable
from .keys import build_key, join_key
from .orchestrator import Publisher, plan_uploads
from .targets import resolve_target
from .templates import build_template_context, render_template

__all__ = [
    "ID_EXEMPT_TYPES",
    "PUBLISHABLE_TYPES",
    "Publisher",
    "build_key",
    "build_template_context",
    "filter_artifacts",
    "is_publishable",
    "join_key",
    "plan_uploads",
    "render_template",
    "resolve_target",
]
