"""Subject line rendering using Jinja2.

Subjects are plain text, so autoescaping is off; StrictUndefined turns a
missing variable into an error instead of an empty string.
"""

import logging
from typing import Dict, Optional

from jinja2 import Environment, PackageLoader, StrictUndefined, TemplateError

from comment_notifier.domain.events import EventKind

from .models import NotificationTemplateError

logger = logging.getLogger(__name__)

DEFAULT_SUBJECT_TEMPLATES = {
    EventKind.ADDED: "comment_added_subject.j2",
    EventKind.UPDATED: "comment_updated_subject.j2",
}


class TemplateRenderer:
    """Render notification subjects from templates in the package."""

    def __init__(
        self,
        template_dir: str = "email_templates",
        subject_templates: Optional[Dict[EventKind, str]] = None,
        environment: Optional[Environment] = None,
    ):
        self.subject_templates = dict(subject_templates or DEFAULT_SUBJECT_TEMPLATES)
        self.env = environment or Environment(
            loader=PackageLoader("comment_notifier.notifications", template_dir),
            autoescape=False,
            undefined=StrictUndefined,
        )

        logger.debug(f"Initialized TemplateRenderer with templates from {template_dir}")

    def render_subject(self, kind: EventKind, context: Dict) -> str:
        """Render the subject for an event kind as a single line.

        Raises:
            NotificationTemplateError: If the template is missing or fails to render
        """
        try:
            template = self.env.get_template(self.subject_templates[EventKind(kind)])
            return template.render(context).strip().replace("\r", " ").replace("\n", " ")
        except (KeyError, ValueError) as e:
            raise NotificationTemplateError(f"No subject template for event kind {kind}") from e
        except TemplateError as e:
            error_msg = f"Template rendering failed: {e}"
            logger.error(error_msg, exc_info=True)
            raise NotificationTemplateError(error_msg) from e
