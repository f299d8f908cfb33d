"""Transform resolution for variables.

A variable's effective transform comes from exactly one place:

1. ``transformTemplate`` - looked up in ``config.transform_templates``; a
   missing name is an error and never falls back to the inline transform
2. ``transform`` - the inline transform
3. neither - no transform (plain raw/default value path)
"""

import logging

from .exceptions import TransformTemplateNotFoundError
from .schema import SnippetConfig, Transform, Variable

logger = logging.getLogger(__name__)


def resolve_transform(variable: Variable, config: SnippetConfig | None) -> Transform | None:
    """
    Resolve the concrete transform for a variable.

    Args:
        variable: Variable declaration
        config: Shared config holding named transform templates

    Returns:
        Transform to apply, or None when the variable has none

    Raises:
        TransformTemplateNotFoundError: Named template does not exist
    """
    if variable.transform_template:
        templates = config.transform_templates if config is not None else {}
        template = templates.get(variable.transform_template)
        if template is None:
            raise TransformTemplateNotFoundError(variable.transform_template, variable.name)
        logger.debug(
            f"Variable '{variable.name}' uses transform template '{variable.transform_template}'"
        )
        # A template declared without rules behaves like an empty transform
        return template.transform if template.transform is not None else Transform()

    return variable.transform


__all__ = ["resolve_transform"]
