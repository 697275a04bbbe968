"""HTML rendering of form view trees with htpy."""

from dataclasses import dataclass, field
from typing import Any

import htpy
import markupsafe

from formbuilder.view import FieldView, FormView, GroupView, Node
from formbuilder.widgets import Widget

SUCCESS_MESSAGE = "Form submitted successfully!"
VALIDATION_SUMMARY = "Please correct the errors below."
SELECT_PLACEHOLDER = "-- Select --"
MULTISELECT_SIZE = "5"


@dataclass
class RenderState:
    """Session status as seen by the renderer.

    Attributes:
        submitting: A submission is in flight; buttons are disabled.
        show_controls: Render fields and buttons.
        success: Show the success notice.
        message_header: Server-provided heading for the notice.
        messages: Server-provided messages listed under the notice.
        error: Submission error text.
        validation_failed: Show the summary notice before the first field.
        custom_styles: CSS emitted in a ``<style>`` element.
    """

    submitting: bool = False
    show_controls: bool = True
    success: bool = False
    message_header: str | None = None
    messages: list[str] = field(default_factory=list)
    error: str | None = None
    validation_failed: bool = False
    custom_styles: str | None = None


def render_loading_html() -> str:
    """Placeholder shown while schema and answers load."""
    return str(htpy.div(class_="container")[htpy.div(class_="loading")["Loading form..."]])


def render_error_html(message: str) -> str:
    """Blocking error view for a form that failed to load."""
    return str(
        htpy.div(class_="container")[
            htpy.div(class_="error")[htpy.strong["Error:"], " ", message]
        ]
    )


def render_form_html(view: FormView, state: RenderState | None = None) -> str:
    """Render a form view and session state to an HTML string.

    Args:
        view: Render tree from ``build_tree``.
        state: Session status; defaults to an idle form.

    Returns:
        str: HTML markup.
    """
    state = state or RenderState()

    header = [
        htpy.h2[view.title] if view.title else None,
        htpy.p(class_="form-description")[view.description] if view.description else None,
    ]

    body: list[Any] = [_notice(state)]
    if view.informational or not state.show_controls:
        form = htpy.div(class_="form")[header, body]
    else:
        first = view.first_field()
        body.extend(
            _render_node(node, state, first.path if first else None)
            for node in view.children
        )
        body.append(_buttons(state))
        form = htpy.form(method="post", novalidate="")[header, body]

    style = (
        htpy.style[markupsafe.Markup(state.custom_styles)]
        if state.custom_styles
        else None
    )
    return str(htpy.div(class_="form-builder")[style, htpy.div(class_="container")[form]])


def _notice(state: RenderState) -> Any:
    if state.success:
        items = [htpy.li[message] for message in state.messages]
        return htpy.div(class_="success-message", role="status")[
            htpy.p[state.message_header or SUCCESS_MESSAGE],
            htpy.ul[items] if items else None,
        ]
    if state.error:
        return htpy.div(class_="error-message form-error", role="alert")[state.error]
    return None


def _buttons(state: RenderState) -> Any:
    disabled = "" if state.submitting else None
    return htpy.div(class_="buttons")[
        htpy.button(type="submit", disabled=disabled)[
            htpy.span(class_="button-content")[
                htpy.span(class_="spinner") if state.submitting else None,
                "Submitting..." if state.submitting else "Submit",
            ]
        ],
        htpy.button(type="reset", disabled=disabled)["Reset"],
    ]


def _render_node(node: Node, state: RenderState, first_path: str | None) -> Any:
    if isinstance(node, GroupView):
        return htpy.div(class_="nested-object")[
            htpy.div(class_="nested-object-title")[node.title] if node.title else None,
            (
                htpy.div(class_="nested-object-description")[node.description]
                if node.description
                else None
            ),
            (
                htpy.div(class_="error")["Schema too deeply nested"]
                if node.truncated
                else [_render_node(child, state, first_path) for child in node.children]
            ),
        ]

    summary = None
    if state.validation_failed and node.path == first_path:
        summary = htpy.div(class_="error-summary", role="alert")[VALIDATION_SUMMARY]
    return [summary, _render_field(node)]


def _render_field(f: FieldView) -> Any:
    if not f.is_control:
        return htpy.div(class_="form-group info")[
            htpy.label[f.title],
            _render_description(f),
        ]

    label = None
    if f.show_label:
        label = htpy.label(for_=f.element_id, class_=_label_class(f))[f.title]
    # grouped choices carry the description inside their fieldset
    description = None if f.widget.is_grouped else _render_description(f)

    error = htpy.span(class_="error-message")[f.error] if f.error else None
    return htpy.div(class_="form-group")[label, description, _render_widget(f), error]


def _label_class(f: FieldView) -> str | None:
    return "required" if f.required else None


def _render_description(f: FieldView) -> Any:
    return htpy.span(class_="description")[f.description] if f.description else None


def _text(value: Any) -> str:
    return "" if value is None else str(value)


def _selected_values(value: Any) -> list[Any]:
    return list(value) if isinstance(value, (list, tuple)) else []


def _render_widget(f: FieldView) -> Any:  # noqa: C901
    spec = f.widget
    base_attrs: dict[str, Any] = {"id": f.element_id, "name": f.path}

    match spec.widget:
        case Widget.CHECKBOXES:
            selected = _selected_values(f.value)
            group_class = "checkbox-group inline" if spec.inline else "checkbox-group"
            items = []
            for option in spec.options:
                option_id = f.option_id(option)
                items.append(
                    htpy.div(class_="checkbox-item")[
                        htpy.input(
                            type="checkbox",
                            id=option_id,
                            name=f.path,
                            value=_text(option),
                            checked="" if option in selected else None,
                        ),
                        htpy.label(for_=option_id)[_text(option)],
                    ]
                )
            return htpy.fieldset(class_=group_class)[
                htpy.legend[f.title], _render_description(f), items
            ]

        case Widget.MULTISELECT:
            selected = _selected_values(f.value)
            options = [
                htpy.option(value=_text(option), selected="" if option in selected else None)[
                    _text(option)
                ]
                for option in spec.options
            ]
            return htpy.select(multiple="", size=MULTISELECT_SIZE, **base_attrs)[options]

        case Widget.RADIO:
            group_class = "radio-group inline" if spec.inline else "radio-group"
            items = []
            for option in spec.options:
                option_id = f.option_id(option)
                items.append(
                    htpy.div(class_="radio-item")[
                        htpy.input(
                            type="radio",
                            id=option_id,
                            name=f.path,
                            value=_text(option),
                            checked="" if f.value == option else None,
                        ),
                        htpy.label(for_=option_id)[_text(option)],
                    ]
                )
            return htpy.fieldset(class_=group_class)[
                htpy.legend[f.title], _render_description(f), items
            ]

        case Widget.SELECT:
            options = [htpy.option(value="")[SELECT_PLACEHOLDER]] if spec.placeholder else []
            options.extend(
                htpy.option(value=_text(option), selected="" if f.value == option else None)[
                    _text(option)
                ]
                for option in spec.options
            )
            return htpy.select(**base_attrs)[options]

        case Widget.CHECKBOX:
            return htpy.div(class_="checkbox-item")[
                htpy.input(
                    type="checkbox",
                    checked="" if f.value else None,
                    **base_attrs,
                ),
                htpy.label(for_=f.element_id, class_=_label_class(f))[f.title],
            ]

        case Widget.TEXTAREA:
            return htpy.textarea(**base_attrs)[_text(f.value)]

        case Widget.NUMBER:
            return htpy.input(type="number", step=spec.step, value=_text(f.value), **base_attrs)

        case Widget.EMAIL | Widget.DATE | Widget.TEXT:
            return htpy.input(type=spec.widget.value, value=_text(f.value), **base_attrs)

    raise ValueError(f"Unsupported widget: {spec.widget}")


__all__ = [
    "RenderState",
    "render_error_html",
    "render_form_html",
    "render_loading_html",
]
