from .layout import RenderConfig, draw_layout, render_layout

__all__ = ["RenderConfig", "draw_layout", "render_layout"]
