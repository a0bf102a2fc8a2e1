"""Notification Composer: job context in, download email subject and body out.

Composition is pure. The composer holds only its template environment, which
is read-only after construction, so one instance can serve concurrent
request handlers.
"""

from typing import Any, Dict, Mapping, Optional, Union

from jinja2 import TemplateError

from sell_my_images.domain.models import NotificationContext
from sell_my_images.i18n import Translator, build_environment, default_translator
from sell_my_images.logging import get_logger

from .models import ComposedNotification, NotificationTemplateError
from .payloads import load_notification_context

logger = get_logger(__name__, component="composer")

ContextInput = Union[NotificationContext, Mapping[str, Any]]


class NotificationComposer:
    """Renders the download email from Jinja2 templates.

    The subject and plain-text body form the notification contract; an HTML
    alternative is rendered from the same context with auto-escaping for mail
    clients that prefer it.

    Args:
        translator: Translation/escaping collaborator (defaults to untranslated strings)
        template_dir: Directory name within sell_my_images.notifications
        subject_template: Filename of subject line template
        text_template: Filename of plain-text body template
        html_template: Filename of HTML body template
    """

    def __init__(
        self,
        translator: Optional[Translator] = None,
        template_dir: str = "email_templates",
        subject_template: str = "download_ready_subject.j2",
        text_template: str = "download_ready_body.txt.j2",
        html_template: str = "download_ready_body.html.j2",
    ):
        self.translator = translator or default_translator()
        self.subject_template_name = subject_template
        self.text_template_name = text_template
        self.html_template_name = html_template
        self.env = build_environment("sell_my_images.notifications", template_dir, self.translator)

    @staticmethod
    def _template_vars(context: NotificationContext) -> Dict[str, Any]:
        return {
            "resolution": context.job.resolution.value,
            "image_url": context.job.image_url,
            "download_url": context.download_url,
            "expiry_date": context.expiry_date,
            "terms_conditions_url": context.terms_conditions_url,
            "site_name": context.site_name,
        }

    def _render(self, template_name: str, variables: Dict[str, Any]) -> str:
        try:
            return self.env.get_template(template_name).render(variables)
        except TemplateError as e:
            error_msg = f"Template rendering failed for {template_name}: {e}"
            logger.error(error_msg, exc_info=True, extra={"event": "composer.render.failed"})
            raise NotificationTemplateError(error_msg) from e

    def compose(self, context: ContextInput) -> ComposedNotification:
        """Compose the subject and plain-text body.

        Args:
            context: NotificationContext, or a mapping validated into one

        Returns:
            ComposedNotification with ``subject`` and ``message``

        Raises:
            MissingFieldError: If a required field is absent or empty
            NotificationTemplateError: If a template fails to render
        """
        validated = load_notification_context(context)
        variables = self._template_vars(validated)

        subject = self._render(self.subject_template_name, variables)
        message = self._render(self.text_template_name, variables)

        return ComposedNotification(
            subject=" ".join(subject.split()),
            message=message,
        )

    def compose_html(self, context: ContextInput) -> str:
        """Render the HTML alternative body. Interpolated values are HTML-escaped."""
        validated = load_notification_context(context)
        return self._render(self.html_template_name, self._template_vars(validated))


_default_composer: Optional[NotificationComposer] = None


def compose_notification(
    context: ContextInput,
    translator: Optional[Translator] = None,
) -> Dict[str, str]:
    """Compose the download email as ``{"subject": ..., "message": ...}``.

    Uses a shared composer unless a translator is supplied.

    Raises:
        MissingFieldError: If resolution, image_url, download_url, expiry_date
            or site_name is absent or empty
    """
    global _default_composer
    if translator is not None:
        composer = NotificationComposer(translator=translator)
    else:
        if _default_composer is None:
            _default_composer = NotificationComposer()
        composer = _default_composer

    return composer.compose(context).as_dict()
