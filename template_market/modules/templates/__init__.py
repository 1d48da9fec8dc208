"""Public exports for marketplace template domain services."""

from .exceptions import (
    TemplateError,
    TemplateNotFoundError,
    TemplatePermissionError,
    TemplateValidationError,
)
from .models import UNSET, Template, TemplateCreateInput, TemplatePage, TemplatePatch, TemplateStatus
from .service import TemplateService, ensure_can_manage, normalize_price, normalize_tags

__all__ = [
    "Template",
    "TemplateCreateInput",
    "TemplateError",
    "TemplateNotFoundError",
    "TemplatePage",
    "TemplatePatch",
    "TemplatePermissionError",
    "TemplateService",
    "TemplateStatus",
    "TemplateValidationError",
    "UNSET",
    "ensure_can_manage",
    "normalize_price",
    "normalize_tags",
]
