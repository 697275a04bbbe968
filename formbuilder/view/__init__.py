"""Render tree for forms."""

from formbuilder.view.lib import FieldView, FormView, GroupView, Node, build_tree

__all__ = ["FormView", "GroupView", "FieldView", "Node", "build_tree"]
