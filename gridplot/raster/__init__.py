from .canvas import blend_mask, fill_rect, new_canvas
from .draw_lines import draw_polyline
from .draw_shapes import fill_circle, fill_polygon
from .draw_text import draw_text, text_size

__all__ = [
    "blend_mask",
    "draw_polyline",
    "draw_text",
    "fill_circle",
    "fill_polygon",
    "fill_rect",
    "new_canvas",
    "text_size",
]
