"""HTML rendering for forms."""

from formbuilder.render.lib import (
    RenderState,
    render_error_html,
    render_form_html,
    render_loading_html,
)

__all__ = [
    "RenderState",
    "render_form_html",
    "render_loading_html",
    "render_error_html",
]
