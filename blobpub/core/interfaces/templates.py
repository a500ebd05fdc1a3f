"""
Template renderer interface.

The publish core treats template evaluation as an injected pure function
of (template string, context); any callable with this shape can be used.
"""

from collections.abc import Mapping
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ITemplateRenderer(Protocol):
    """Protocol for template renderers."""

    def __call__(self, template: str, context: Mapping[str, Any]) -> str:
        """
        Render a template against a context.

        Args:
            template: Template string
            context: Named values visible to the template

        Returns:
            Fully rendered string

        Raises:
            TemplateError: If any reference cannot be resolved; no
                partial result is returned
        """
        ...
