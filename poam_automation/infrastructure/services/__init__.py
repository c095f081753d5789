"""Infrastructure implementations of application service interfaces."""

from poam_automation.infrastructure.services.email_template_renderer import (
    EmailTemplateRenderer,
)
from poam_automation.infrastructure.services.recipient_resolver import (
    WorkflowRecipientResolver,
)

__all__ = [
    "EmailTemplateRenderer",
    "WorkflowRecipientResolver",
]
