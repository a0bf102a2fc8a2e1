"""Unit tests for the uploader block and purchase modal markup."""

import pytest
from pydantic import ValidationError

from sell_my_images.config.models import UploaderConfig
from sell_my_images.config.options import DictOptionsStore
from sell_my_images.i18n import TEXT_DOMAIN, GettextTranslator
from sell_my_images.ui import BlockAttributes, UIRenderError, UploaderRenderer, markup

TERMS = {"smi_terms_conditions_url": "https://acme.test/terms"}


@pytest.fixture
def renderer():
    return UploaderRenderer(options=DictOptionsStore(TERMS))


@pytest.fixture
def renderer_without_terms():
    return UploaderRenderer(options=DictOptionsStore())


class TestBlockAttributes:
    def test_defaults(self):
        attrs = BlockAttributes.from_block(None)

        assert attrs.title is None
        assert attrs.description == ""
        assert attrs.max_file_size == 10
        assert attrs.show_terms_link is True

    def test_camel_case_keys(self):
        attrs = BlockAttributes.from_block({"maxFileSize": 5, "showTermsLink": False})

        assert attrs.max_file_size == 5
        assert attrs.show_terms_link is False

    def test_snake_case_keys(self):
        attrs = BlockAttributes.from_block({"max_file_size": 3, "show_terms_link": False})

        assert attrs.max_file_size == 3
        assert not attrs.show_terms_link

    @pytest.mark.parametrize("value,expected", [("7", 7), (12.9, 12), (" 4 ", 4)])
    def test_file_size_coercion(self, value, expected):
        assert BlockAttributes.from_block({"maxFileSize": value}).max_file_size == expected

    @pytest.mark.parametrize("value", [0, -3, "0", "large", "", None, True])
    def test_unusable_file_size_falls_back_to_default(self, value):
        assert BlockAttributes.from_block({"maxFileSize": value}).max_file_size == 10

    def test_none_description(self):
        assert BlockAttributes.from_block({"description": None}).description == ""


class TestUploaderBlock:
    def test_element_ids_present(self, renderer):
        html = renderer.render_uploader_block()

        for element_id in (
            markup.UPLOAD_ZONE,
            markup.DROPZONE,
            markup.BROWSE_BUTTON,
            markup.FILE_INPUT,
            markup.PREVIEW_ZONE,
            markup.PREVIEW_IMAGE,
            markup.REMOVE_IMAGE,
            markup.IMAGE_DIMENSIONS,
            markup.RESOLUTION_PICKER,
            markup.EMAIL_SECTION,
            markup.EMAIL_INPUT,
            markup.CHECKOUT_SECTION,
            markup.CHECKOUT_BUTTON,
            markup.LOADING,
            markup.LOADING_TEXT,
            markup.ERROR,
            markup.ERROR_TEXT,
            markup.output_id("4x"),
            markup.price_id("8x"),
        ):
            assert f'id="{element_id}"' in html

    def test_wrapper_class_and_size(self, renderer):
        html = renderer.render_uploader_block()

        assert 'class="smi-image-uploader" data-max-file-size="10"' in html
        assert "Supports: JPEG, PNG, WebP (max 10MB)" in html

    def test_accept_list(self, renderer):
        html = renderer.render_uploader_block()

        assert 'accept="image/jpeg,image/png,image/webp"' in html

    def test_accept_list_follows_config(self):
        renderer = UploaderRenderer(uploader_config=UploaderConfig(accepted_types=["image/png"]))

        assert 'accept="image/png"' in renderer.render_uploader_block()

    def test_resolution_radios_default_to_4x(self, renderer):
        html = renderer.render_uploader_block()

        assert 'name="smi-resolution" value="4x" checked' in html
        assert 'name="smi-resolution" value="8x" />' in html

    def test_default_title(self, renderer):
        html = renderer.render_uploader_block()

        assert '<h3 class="smi-uploader-title">Upscale Your Image</h3>' in html
        assert "smi-uploader-description" not in html

    def test_custom_title_and_description_are_escaped(self, renderer):
        html = renderer.render_uploader_block(
            {"title": "<script>x</script>", "description": "Prints & posters"}
        )

        assert "<script>x</script>" not in html
        assert "&lt;script&gt;x&lt;/script&gt;" in html
        assert '<p class="smi-uploader-description">Prints &amp; posters</p>' in html

    def test_custom_max_file_size(self, renderer):
        html = renderer.render_uploader_block({"maxFileSize": "5"})

        assert 'data-max-file-size="5"' in html
        assert "(max 5MB)" in html

    def test_zero_max_file_size_renders_default(self, renderer):
        html = renderer.render_uploader_block({"maxFileSize": 0})

        assert 'data-max-file-size="10"' in html
        assert "(max 10MB)" in html

    def test_unparseable_attributes_raise_render_error(self, renderer):
        with pytest.raises(UIRenderError, match="Invalid uploader block attributes") as exc_info:
            renderer.render_uploader_block({"showTermsLink": "sometimes"})

        assert isinstance(exc_info.value.__cause__, ValidationError)

    def test_accepts_block_attributes_instance(self, renderer):
        html = renderer.render_uploader_block(BlockAttributes(title="Framed prints"))

        assert "Framed prints" in html

    def test_terms_notice_when_configured(self, renderer):
        html = renderer.render_uploader_block()

        assert "smi-terms-notice" in html
        assert "By proceeding, you agree to our" in html
        assert 'href="https://acme.test/terms" target="_blank" rel="noopener"' in html

    def test_terms_notice_hidden_by_attribute(self, renderer):
        html = renderer.render_uploader_block({"showTermsLink": False})

        assert "smi-terms-notice" not in html

    def test_terms_notice_omitted_without_url(self, renderer_without_terms):
        html = renderer_without_terms.render_uploader_block({"showTermsLink": True})

        assert "smi-terms-notice" not in html
        assert "Terms" not in html

    def test_terms_url_is_sanitised(self):
        renderer = UploaderRenderer(
            options=DictOptionsStore({"smi_terms_conditions_url": "javascript:alert(1)"})
        )

        html = renderer.render_uploader_block()

        assert "javascript:" not in html

    def test_strings_are_translated(self):
        class Catalog(GettextTranslator):
            def translate(self, text, domain=TEXT_DOMAIN):
                return {"Browse Files": "Dateien durchsuchen"}.get(text, text)

        html = UploaderRenderer(translator=Catalog()).render_uploader_block()

        assert "Dateien durchsuchen" in html


class TestPurchaseModal:
    def test_structure(self, renderer):
        html = renderer.render_purchase_modal()

        assert f'id="{markup.MODAL}"' in html
        assert f'id="{markup.MODAL_EMAIL_INPUT}"' in html
        assert 'name="resolution" value="4x"' in html
        assert 'name="resolution" value="8x"' in html
        assert "Pay & Process" in html
        assert "smi-cancel-btn" in html

    def test_terms_link_when_configured(self, renderer):
        html = renderer.render_purchase_modal()

        assert 'href="https://acme.test/terms"' in html

    def test_terms_link_hidden_without_url(self, renderer_without_terms):
        html = renderer_without_terms.render_purchase_modal()

        assert "smi-terms-link" not in html
