"""Jinja2 environment wired to a Translator.

Templates call ``_("...")`` (new-style gettext, so ``%(name)s`` placeholders
are filled from keyword arguments) and the ``esc_html``/``esc_attr``/``esc_url``
filters. HTML templates (``*.html.j2``) are auto-escaped; text templates are not.
"""

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape
from markupsafe import Markup

from .translation import TEXT_DOMAIN, Translator


def build_environment(package: str, template_dir: str, translator: Translator) -> Environment:
    """Create a template environment for ``package``/``template_dir``.

    Args:
        package: Dotted package that ships the templates
        template_dir: Directory inside the package
        translator: Translator used for ``_()`` and the escaping filters

    Returns:
        Configured jinja2 Environment
    """
    env = Environment(
        loader=PackageLoader(package, template_dir),
        autoescape=select_autoescape(enabled_extensions=("html", "html.j2"), default=False),
        undefined=StrictUndefined,
        extensions=["jinja2.ext.i18n"],
    )

    def _gettext(message: str) -> str:
        return translator.translate(message, TEXT_DOMAIN)

    def _ngettext(singular: str, plural: str, n: int) -> str:
        return translator.translate(singular if n == 1 else plural, TEXT_DOMAIN)

    env.install_gettext_callables(gettext=_gettext, ngettext=_ngettext, newstyle=True)

    env.filters["esc_html"] = lambda value: Markup(translator.escape_html(value))
    env.filters["esc_attr"] = lambda value: Markup(translator.escape_attr(value))
    env.filters["esc_url"] = lambda value: Markup(
        translator.escape_attr(translator.escape_url(value))
    )

    return env
