"""Template domain specific exceptions."""


class TemplateError(Exception):
    """Base class for template domain errors."""


class TemplateNotFoundError(TemplateError):
    """Raised when a template id is unknown or not a valid identifier."""

    def __init__(self, template_id: str) -> None:
        super().__init__(f"template not found: {template_id}")
        self.template_id = template_id


class TemplateValidationError(TemplateError):
    """Raised when listing data violates a template invariant."""


class TemplatePermissionError(TemplateError):
    """Raised when the caller may not modify the template."""
