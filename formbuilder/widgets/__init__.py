"""Widget selection for leaf fields."""

from formbuilder.widgets.lib import (
    GROUPED_WIDGETS,
    Widget,
    WidgetSpec,
    resolve_ui_hint,
    sanitize_id,
    select_widget,
)

__all__ = [
    "Widget",
    "WidgetSpec",
    "GROUPED_WIDGETS",
    "select_widget",
    "resolve_ui_hint",
    "sanitize_id",
]
