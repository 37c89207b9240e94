"""Message templates for account notifications, rendered with Jinja2.

Each operation kind maps to a fixed pair of templates (subject and plain text
body) shipped in the ``email_templates`` package directory.
"""

import logging
from typing import Dict, Mapping, Optional, Tuple

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from notification_system.domain.models import OperationKind

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)

TEMPLATES: Mapping[OperationKind, Tuple[str, str]] = {
    OperationKind.CREATE: ("account_created_subject.j2", "account_created_body.txt.j2"),
    OperationKind.DELETE: ("account_deleted_subject.j2", "account_deleted_body.txt.j2"),
}


class TemplateRenderer:
    """Renders the subject and body for an operation kind.

    Jinja2 caches compiled templates, so repeated renders are cheap.
    """

    def __init__(
        self,
        template_dir: str = "email_templates",
        templates: Optional[Mapping[OperationKind, Tuple[str, str]]] = None,
    ):
        """Initialize template renderer with a Jinja2 environment.

        Args:
            template_dir: Directory name within the notifications package
            templates: Override of the operation -> (subject, body) file lookup
        """
        self.templates = dict(templates or TEMPLATES)

        # Plain text mail; nothing to escape
        self.env = Environment(
            loader=PackageLoader("notification_system.notifications", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render(self, operation: OperationKind, context: Optional[Dict] = None) -> Dict[str, str]:
        """Render the message for ``operation``.

        Args:
            operation: Operation kind selecting the template pair
            context: Optional template variables

        Returns:
            Dictionary with ``subject`` (single line) and ``text_body``

        Raises:
            NotificationTemplateError: If no template is registered or rendering fails
        """
        try:
            subject_name, body_name = self.templates[operation]
        except KeyError:
            raise NotificationTemplateError(f"No template registered for operation {operation!r}")

        context = context or {}
        try:
            subject = self.env.get_template(subject_name).render(context)
            text_body = self.env.get_template(body_name).render(context)
        except TemplateError as e:
            error_msg = f"Template rendering failed for {operation.value}: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e

        return {
            "subject": subject.strip().replace("\n", " "),
            "text_body": text_body.strip(),
        }
