"""Server-side rendering of the uploader block and the purchase modal."""

from typing import Any, Mapping, Optional

from jinja2 import TemplateError
from pydantic import ValidationError

from sell_my_images.config.models import UploaderConfig
from sell_my_images.config.options import DictOptionsStore, OptionsStore, TERMS_CONDITIONS_URL
from sell_my_images.domain.models import Resolution
from sell_my_images.i18n import Translator, build_environment, default_translator
from sell_my_images.logging import get_logger

from . import markup
from .attributes import DEFAULT_TITLE, BlockAttributes

logger = get_logger(__name__, component="ui")


class UIRenderError(Exception):
    """Raised when an uploader or modal template fails to render."""

    pass


class UploaderRenderer:
    """Renders the uploader block and purchase modal HTML.

    Args:
        translator: Translation/escaping collaborator
        options: Options store (terms URL)
        uploader_config: Accepted MIME types and default size limit
    """

    def __init__(
        self,
        translator: Optional[Translator] = None,
        options: Optional[OptionsStore] = None,
        uploader_config: Optional[UploaderConfig] = None,
        template_dir: str = "templates",
    ):
        self.translator = translator or default_translator()
        self.options = options or DictOptionsStore()
        self.uploader_config = uploader_config or UploaderConfig()
        self.env = build_environment("sell_my_images.ui", template_dir, self.translator)

    def _terms_url(self) -> str:
        value = self.options.get_option(TERMS_CONDITIONS_URL, "")
        return str(value).strip() if value else ""

    def _render(self, template_name: str, **variables: Any) -> str:
        try:
            return self.env.get_template(template_name).render(
                ids=markup,
                resolutions=[r.value for r in Resolution],
                default_resolution=Resolution.default().value,
                **variables,
            )
        except TemplateError as e:
            logger.error(f"Failed to render {template_name}: {e}", exc_info=True)
            raise UIRenderError(f"Failed to render {template_name}: {e}") from e

    def render_uploader_block(self, attributes: Optional[Mapping[str, Any]] = None) -> str:
        """Render one uploader block instance.

        The terms notice appears only when the block enables it and a terms
        URL is configured.

        Raises:
            UIRenderError: If the attributes cannot be parsed or a template fails
        """
        if isinstance(attributes, BlockAttributes):
            attrs = attributes
        else:
            try:
                attrs = BlockAttributes.from_block(attributes)
            except ValidationError as e:
                logger.warning(
                    f"Invalid uploader block attributes: {e}",
                    extra={"event": "ui.attributes.invalid"},
                )
                raise UIRenderError(f"Invalid uploader block attributes: {e}") from e

        title = attrs.title if attrs.title is not None else self.translator.translate(DEFAULT_TITLE)
        terms_url = self._terms_url()

        return self._render(
            "uploader_block.html.j2",
            title=title,
            description=attrs.description,
            max_file_size=attrs.max_file_size,
            accept=",".join(self.uploader_config.accepted_types),
            show_terms=bool(attrs.show_terms_link and terms_url),
            terms_url=terms_url,
        )

    def render_purchase_modal(self) -> str:
        """Render the purchase modal shown for images embedded in posts."""
        terms_url = self._terms_url()
        return self._render(
            "purchase_modal.html.j2",
            show_terms=bool(terms_url),
            terms_url=terms_url,
        )
