"""Render tree construction.

Turns a schema, UI hints, answers and field errors into a plain tree of
groups and fields. The tree carries everything a renderer needs (labels,
widgets, values, errors, element ids) so HTML generation stays a flat
mapping from view objects to markup.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping, Union

from formbuilder.paths import get_nested_value, join_path, split_path
from formbuilder.schema import SchemaNode
from formbuilder.validation import DEFAULT_MAX_DEPTH
from formbuilder.widgets import (
    Widget,
    WidgetSpec,
    resolve_ui_hint,
    sanitize_id,
    select_widget,
)

logger = logging.getLogger(__name__)


@dataclass
class FieldView:
    """One leaf field.

    Attributes:
        path: Dotted answers path, also the control's ``name``.
        title: Schema title, or the last path segment.
        description: Help text.
        widget: Selected widget.
        required: Named in the immediate parent's ``required`` list.
        value: Current answer at ``path``.
        error: Field error message, if any.
    """

    path: str
    title: str
    description: str | None
    widget: WidgetSpec
    required: bool = False
    value: Any = None
    error: str | None = None

    @property
    def element_id(self) -> str:
        return sanitize_id(self.path)

    @property
    def show_label(self) -> bool:
        """Grouped choices use the fieldset legend and a single checkbox
        carries its own label, so neither gets a field label."""
        return not self.widget.is_grouped and self.widget.widget is not Widget.CHECKBOX

    @property
    def is_control(self) -> bool:
        return self.widget.is_control

    def option_id(self, option: Any) -> str:
        """Element id for one choice of a grouped widget."""
        return sanitize_id(f"{self.path}-{option}")


@dataclass
class GroupView:
    """A nested object rendered as a titled section."""

    path: str
    title: str | None
    description: str | None
    children: list["Node"] = field(default_factory=list)
    truncated: bool = False


Node = Union[FieldView, GroupView]


@dataclass
class FormView:
    """Root of the render tree.

    Attributes:
        title: Form title.
        description: Form description.
        children: Top-level groups and fields.
        informational: The schema has no properties; only the title and
            description are shown, without controls or buttons.
    """

    title: str | None
    description: str | None
    children: list[Node] = field(default_factory=list)
    informational: bool = False

    def iter_fields(self) -> Iterator[FieldView]:
        """Yield leaf fields depth-first in schema order."""
        stack: list[Node] = list(reversed(self.children))
        while stack:
            node = stack.pop()
            if isinstance(node, GroupView):
                stack.extend(reversed(node.children))
            else:
                yield node

    def control_paths(self) -> list[str]:
        """Paths of fields that render an input control."""
        return [f.path for f in self.iter_fields() if f.is_control]

    def first_field(self) -> FieldView | None:
        return next(self.iter_fields(), None)


def build_tree(
    schema: SchemaNode | Mapping[str, Any],
    ui_hints: Mapping[str, Any] | None = None,
    answers: Mapping[str, Any] | None = None,
    field_errors: Mapping[str, str] | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> FormView:
    """Build the render tree for a form.

    Args:
        schema: Root schema node (or its raw mapping).
        ui_hints: UI hint tree mirroring the schema's shape.
        answers: Current answers.
        field_errors: Message per dotted path.
        max_depth: Nesting ceiling; deeper groups are skipped with a warning.

    Returns:
        FormView: The tree.

    Example:
        >>> view = build_tree(schema, answers={"name": "Jo"})
        >>> view.control_paths()
        ['name', 'contact.email']
    """
    if not isinstance(schema, SchemaNode):
        schema = SchemaNode.model_validate(schema)

    view = FormView(title=schema.title, description=schema.description)
    if not schema.properties:
        view.informational = True
        return view

    view.children = _build_children(
        schema,
        base_path="",
        ui_hints=ui_hints,
        answers=answers or {},
        field_errors=field_errors or {},
        depth=0,
        max_depth=max_depth,
    )
    return view


def _build_children(
    node: SchemaNode,
    base_path: str,
    ui_hints: Mapping[str, Any] | None,
    answers: Mapping[str, Any],
    field_errors: Mapping[str, str],
    depth: int,
    max_depth: int,
) -> list[Node]:
    if depth > max_depth:
        logger.warning(
            "Maximum nesting depth %d exceeded at '%s'; not rendering branch",
            max_depth,
            base_path,
        )
        return []

    children: list[Node] = []
    for name, child in (node.properties or {}).items():
        path = join_path(base_path, name)

        if child.is_group:
            children.append(
                GroupView(
                    path=path,
                    title=child.title,
                    description=child.description,
                    children=_build_children(
                        child,
                        path,
                        ui_hints,
                        answers,
                        field_errors,
                        depth + 1,
                        max_depth,
                    ),
                    truncated=depth + 1 > max_depth,
                )
            )
            continue

        children.append(
            FieldView(
                path=path,
                title=child.label(split_path(path)[-1]),
                description=child.description,
                widget=select_widget(child, resolve_ui_hint(ui_hints, path)),
                required=name in node.required,
                value=get_nested_value(answers, path),
                error=field_errors.get(path),
            )
        )
    return children


__all__ = ["FieldView", "FormView", "GroupView", "Node", "build_tree"]
