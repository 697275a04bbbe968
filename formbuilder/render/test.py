"""Tests for HTML rendering."""

import pytest

from formbuilder.render import (
    RenderState,
    render_error_html,
    render_form_html,
    render_loading_html,
)
from formbuilder.view import build_tree


@pytest.fixture
def choices_html(choices_schema, choices_hints) -> str:
    view = build_tree(
        choices_schema,
        choices_hints,
        answers={"size": "M", "channels": ["sms"], "topics": ["news"], "color": "red"},
    )
    return render_form_html(view)


class TestPlaceholders:
    """Tests for loading and error views."""

    @pytest.mark.unit
    def test_loading(self):
        """Loading view has the loading text."""
        assert "Loading form..." in render_loading_html()

    @pytest.mark.unit
    def test_error_escaped(self):
        """Error text is shown and escaped."""
        html = render_error_html("<b>boom</b>")
        assert "Error:" in html
        assert "&lt;b&gt;boom&lt;/b&gt;" in html
        assert "<b>boom" not in html


class TestRenderForm:
    """Tests for full form rendering."""

    @pytest.mark.unit
    def test_fields_and_buttons(self, contact_schema):
        """Every control has its name; buttons are present."""
        html = render_form_html(build_tree(contact_schema))
        assert "<h2>Contact</h2>" in html
        for name in ["name", "age", "contact.email", "contact.phone", "subscribe"]:
            assert f'name="{name}"' in html
        assert 'type="email"' in html
        assert 'step="1"' in html
        assert 'class="nested-object-title"' in html
        assert ">Submit<" in html
        assert ">Reset<" in html

    @pytest.mark.unit
    def test_required_label_class(self, contact_schema):
        """Required fields get the required label class."""
        html = render_form_html(build_tree(contact_schema))
        assert html.count('class="required"') == 2
        assert '<label for="age">' in html

    @pytest.mark.unit
    def test_single_value_enum_has_no_input(self, choices_html):
        """Informational fields show their title without a control."""
        assert "Campus: Fresno" in choices_html
        assert 'name="notice"' not in choices_html

    @pytest.mark.unit
    def test_radio_group(self, choices_html):
        """Radio groups render one input per value inside a fieldset."""
        assert choices_html.count('type="radio"') == 3
        assert 'class="radio-group inline"' in choices_html
        assert "<legend>Size</legend>" in choices_html
        assert 'id="size-M"' in choices_html

    @pytest.mark.unit
    def test_checkbox_group(self, choices_html):
        """Checkbox groups render one checkbox per value."""
        assert choices_html.count('name="channels"') == 3
        assert 'class="checkbox-group"' in choices_html

    @pytest.mark.unit
    def test_grouped_choice_descriptions(self):
        """Radio and checkbox groups show their description inside the fieldset."""
        schema = {
            "type": "object",
            "properties": {
                "size": {"enum": ["S", "M"], "title": "Size", "description": "Pick a size"},
                "channels": {
                    "type": "array",
                    "items": {"enum": ["email", "sms"]},
                    "title": "Channels",
                    "description": "How to reach you",
                },
            },
        }
        hints = {"size": {"ui:widget": "radio"}, "channels": {"ui:widget": "checkboxes"}}
        html = render_form_html(build_tree(schema, hints))
        assert (
            '<legend>Size</legend><span class="description">Pick a size</span>' in html
        )
        assert (
            '<legend>Channels</legend><span class="description">How to reach you</span>'
            in html
        )
        assert html.count('class="description"') == 2

    @pytest.mark.unit
    def test_single_checkbox_has_one_label(self):
        """A boolean field is labelled once, beside its checkbox."""
        schema = {
            "type": "object",
            "required": ["agree"],
            "properties": {
                "agree": {"type": "boolean", "title": "I agree", "description": "Terms"}
            },
        }
        html = render_form_html(build_tree(schema))
        assert html.count('<label for="agree"') == 1
        assert 'class="required">I agree</label>' in html
        assert '<span class="description">Terms</span>' in html

    @pytest.mark.unit
    def test_select_and_multiselect(self, choices_html):
        """Selects get a placeholder; multi-selects do not."""
        assert choices_html.count("-- Select --") == 1
        assert "multiple" in choices_html
        assert "<textarea" in choices_html

    @pytest.mark.unit
    def test_values_escaped(self, contact_schema):
        """Answer values are attribute-escaped."""
        view = build_tree(contact_schema, answers={"name": '"><script>'})
        html = render_form_html(view)
        assert "<script>" not in html

    @pytest.mark.unit
    def test_field_error_shown(self, contact_schema):
        """Field errors render beneath the control."""
        view = build_tree(contact_schema, field_errors={"name": "This field is required"})
        html = render_form_html(view, RenderState(validation_failed=True))
        assert '<span class="error-message">This field is required</span>' in html
        assert html.index("Please correct the errors below.") < html.index('name="name"')

    @pytest.mark.unit
    def test_submitting_disables_buttons(self, contact_schema):
        """Buttons are disabled while submitting."""
        html = render_form_html(build_tree(contact_schema), RenderState(submitting=True))
        assert "Submitting..." in html
        assert html.count("disabled") == 2

    @pytest.mark.unit
    def test_success_hides_controls(self, contact_schema):
        """A finished submission shows the notice and server messages only."""
        state = RenderState(
            success=True,
            show_controls=False,
            message_header="Thanks",
            messages=["We got it"],
        )
        html = render_form_html(build_tree(contact_schema), state)
        assert "Thanks" in html
        assert "<li>We got it</li>" in html
        assert "<input" not in html
        assert ">Submit<" not in html

    @pytest.mark.unit
    def test_submission_error(self, contact_schema):
        """A submission error is shown above the fields."""
        html = render_form_html(build_tree(contact_schema), RenderState(error="Nope"))
        assert 'role="alert"' in html
        assert "Nope" in html

    @pytest.mark.unit
    def test_informational_form(self):
        """A form without properties has no form controls or buttons."""
        view = build_tree({"title": "Closed", "description": "Come back later"})
        html = render_form_html(view)
        assert "Come back later" in html
        assert "<form" not in html
        assert "<button" not in html

    @pytest.mark.unit
    def test_custom_styles(self, contact_schema):
        """Custom CSS is emitted unescaped in a style element."""
        css = "form > .form-group { margin: 0; }"
        html = render_form_html(build_tree(contact_schema), RenderState(custom_styles=css))
        assert f"<style>{css}</style>" in html
