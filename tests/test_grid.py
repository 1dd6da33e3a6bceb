from __future__ import annotations

from pathlib import Path
import tempfile
import unittest
import xml.etree.ElementTree as ET

import numpy as np

from gridplot import GridIndexError, Plot, PlotConfig, PlotConfigError, SubplotGrid, compute_grid_layout
from gridplot.raster import text_size
from gridplot.surfaces import SVG_NS


class GridLayoutTests(unittest.TestCase):
    def test_two_by_two_default_canvas(self) -> None:
        layout = compute_grid_layout(2, 2, 1200, 900, 0.05)
        self.assertAlmostEqual(layout.cell_width, (1200 - 0.05 * 1200 * 3) / 2)
        self.assertAlmostEqual(layout.cell_height, (900 - 0.05 * 900 * 3) / 2)
        self.assertEqual(len(layout.cells), 4)
        for cell in layout.cells:
            self.assertAlmostEqual(cell.scale, 0.6375)
            # 800x600 scaled by 0.6375 fills the 510x382.5 cell exactly.
            self.assertAlmostEqual(cell.offset_x, cell.x)
            self.assertAlmostEqual(cell.offset_y, cell.y)
        self.assertAlmostEqual(layout.cell(0, 0).x, 60.0)
        self.assertAlmostEqual(layout.cell(0, 0).y, 45.0)
        self.assertAlmostEqual(layout.cell(1, 1).x, 630.0)
        self.assertAlmostEqual(layout.cell(1, 1).y, 472.5)

    def test_cells_never_overflow_and_stay_on_canvas(self) -> None:
        for rows, cols, w, h, s in [
            (1, 1, 800, 600, 0.0),
            (2, 3, 1500, 800, 0.04),
            (3, 1, 1000, 2000, 0.05),
            (4, 4, 640, 480, 0.02),
            (1, 5, 3000, 400, 0.1),
        ]:
            layout = compute_grid_layout(rows, cols, w, h, s)
            for cell in layout.cells:
                with self.subTest(rows=rows, cols=cols, w=w, h=h, s=s, cell=(cell.row, cell.col)):
                    self.assertLessEqual(cell.scale * 800, layout.cell_width + 1e-9)
                    self.assertLessEqual(cell.scale * 600, layout.cell_height + 1e-9)
                    self.assertGreaterEqual(cell.offset_x, cell.x - 1e-9)
                    self.assertGreaterEqual(cell.offset_y, cell.y - 1e-9)
                    self.assertGreaterEqual(cell.offset_x, 0.0)
                    self.assertGreaterEqual(cell.offset_y, 0.0)
                    self.assertLessEqual(cell.offset_x + cell.scale * 800, w + 1e-9)
                    self.assertLessEqual(cell.offset_y + cell.scale * 600, h + 1e-9)

    def test_plot_is_centered_in_cell_on_the_loose_axis(self) -> None:
        layout = compute_grid_layout(3, 1, 1000, 2000, 0.05)
        cell = layout.cell(1, 0)
        scaled_w = cell.scale * 800
        scaled_h = cell.scale * 600
        self.assertAlmostEqual(cell.scale, cell.height / 600)
        self.assertAlmostEqual(cell.offset_x - cell.x, cell.x + cell.width - (cell.offset_x + scaled_w))
        self.assertAlmostEqual(cell.offset_y + scaled_h, cell.y + cell.height)
        self.assertGreater(cell.offset_x, cell.x)

    def test_title_block_is_centered_with_grid(self) -> None:
        layout = compute_grid_layout(2, 2, 1200, 900, 0.05, title_height=30.0, title_pad=10.0)
        self.assertAlmostEqual(layout.cell_height, (900 - 135 - 30) / 2)
        self.assertAlmostEqual(layout.origin_y, 75.0)
        self.assertAlmostEqual(layout.title_baseline, 70.0)
        bottom = layout.cell(1, 0).y + layout.cell_height
        self.assertAlmostEqual(900 - bottom, 45.0)

    def test_resizing_keeps_uniform_scale(self) -> None:
        for w, h in [(1200, 900), (1600, 900), (900, 1600)]:
            layout = compute_grid_layout(2, 2, w, h, 0.05)
            cell = layout.cell(0, 0)
            expected = min(layout.cell_width / 800, layout.cell_height / 600)
            self.assertAlmostEqual(cell.scale, expected)

    def test_native_size_override_changes_scale(self) -> None:
        layout = compute_grid_layout(2, 2, 1200, 900, 0.05, native_sizes={(0, 1): (400.0, 400.0)})
        cell = layout.cell(0, 1)
        self.assertAlmostEqual(cell.scale, 382.5 / 400.0)
        self.assertAlmostEqual(cell.offset_x, cell.x + (510.0 - 382.5) / 2.0)
        self.assertAlmostEqual(layout.cell(0, 0).scale, 0.6375)

    def test_impossible_layout_is_rejected(self) -> None:
        with self.assertRaises(PlotConfigError):
            compute_grid_layout(2, 2, 1200, 900, 0.4)
        with self.assertRaises(PlotConfigError):
            compute_grid_layout(0, 2, 1200, 900, 0.05)
        with self.assertRaises(PlotConfigError):
            compute_grid_layout(1, 1, 1200, 900, -0.1)


class SubplotGridTests(unittest.TestCase):
    def test_subplot_is_created_once(self) -> None:
        grid = SubplotGrid(2, 2)
        self.assertFalse(grid.has_subplot(0, 1))
        first = grid.subplot(0, 1, "line")
        self.assertIs(grid.subplot(0, 1, "line"), first)
        self.assertTrue(grid.has_subplot(0, 1))
        self.assertEqual(first.kind, "line")

    def test_subplot_kind_mismatch_is_rejected(self) -> None:
        grid = SubplotGrid(1, 2)
        grid.subplot(0, 0, "histogram")
        with self.assertRaises(PlotConfigError):
            grid.subplot(0, 0, "scatter")

    def test_out_of_range_cell_raises(self) -> None:
        grid = SubplotGrid(2, 3)
        for row, col in [(2, 0), (0, 3), (-1, 0)]:
            with self.assertRaises(GridIndexError):
                grid.subplot(row, col)
        with self.assertRaises(IndexError):
            grid.has_subplot(5, 5)

    def test_cells_share_grid_palette_and_config(self) -> None:
        grid = SubplotGrid(1, 2)
        plot = grid.subplot(0, 0)
        self.assertIs(plot.palette, grid.config.palette)
        self.assertIs(plot.config, grid.config.plot)

    def test_constructor_overrides_grid_config(self) -> None:
        grid = SubplotGrid(2, 3, width=1500, height=800, spacing=0.04)
        self.assertEqual((grid.width, grid.height, grid.spacing), (1500, 800, 0.04))
        with self.assertRaises(PlotConfigError):
            SubplotGrid(0, 1)

    def test_adopted_plot_keeps_its_native_size(self) -> None:
        grid = SubplotGrid(2, 2)
        small = Plot("scatter", config=PlotConfig(width=400, height=400))
        self.assertIs(grid.set_subplot(1, 0, small), small)
        self.assertAlmostEqual(grid.layout().cell(1, 0).scale, 382.5 / 400.0)

    def test_main_title_shrinks_cells(self) -> None:
        grid = SubplotGrid(2, 2)
        plain = grid.layout().cell_height
        grid.set_main_title("Overview")
        titled = grid.layout()
        self.assertLess(titled.cell_height, plain)
        self.assertGreater(titled.title_height, 10.0)

    def test_main_title_is_centered_with_bold_metrics(self) -> None:
        grid = SubplotGrid(1, 1).set_main_title("Overview")
        fonts = grid.config.plot.fonts
        family = grid.config.plot.theme.font_family
        bold_w, _ = text_size("Overview", font_family=family, font_size_px=fonts.grid_title, bold=True)
        plain_w, _ = text_size("Overview", font_family=family, font_size_px=fonts.grid_title)
        self.assertGreater(bold_w, plain_w)

        surface = grid.new_surface("svg")
        grid.render(surface)
        root = ET.fromstring(surface.to_markup())
        title = next(el for el in root.iter(f"{{{SVG_NS}}}text") if el.text == "Overview")
        self.assertAlmostEqual(float(title.get("x")), (grid.width - bold_w) / 2.0, places=2)

    def test_render_draws_every_cell(self) -> None:
        grid = SubplotGrid(2, 2, width=600, height=450)
        grid.set_main_title("All kinds")
        grid.subplot(0, 0, "scatter").add_xy("s", [0, 1, 2], [2, 1, 3])
        grid.subplot(0, 1, "line").add_xy("l", [0, 1, 2], [0, 1, 0])
        grid.subplot(1, 0, "histogram").add_histogram([1, 2, 2, 3, 3, 3])
        grid.subplot(1, 1, "histogram").add_discrete_histogram([4, 2, 7])
        frame = grid.to_rgba()
        self.assertEqual(frame.shape, (450, 600, 4))
        self.assertGreater(float(frame[:, :, :3].std()), 0.0)
        for cell in grid.layout().cells:
            x0, y0 = int(cell.offset_x), int(cell.offset_y)
            x1, y1 = int(cell.offset_x + cell.scale * 800), int(cell.offset_y + cell.scale * 600)
            self.assertGreater(float(frame[y0:y1, x0:x1, :3].std()), 0.0)

    def test_clear_drops_cells_and_title(self) -> None:
        grid = SubplotGrid(1, 1)
        grid.set_main_title("t")
        grid.subplot(0, 0)
        grid.clear()
        self.assertFalse(grid.has_subplot(0, 0))
        self.assertEqual(grid.main_title, "")

    def test_save_svg_and_png(self) -> None:
        grid = SubplotGrid(1, 2, width=600, height=300)
        grid.subplot(0, 0).add_xy("a", [0, 1], [0, 1])
        grid.subplot(0, 1, "line").add_xy("b", [0, 1], [1, 0])
        with tempfile.TemporaryDirectory() as td:
            svg = Path(td) / "grid.svg"
            png = Path(td) / "grid.png"
            self.assertTrue(grid.save_svg(svg))
            self.assertTrue(grid.save_png(png))
            root = ET.parse(svg).getroot()
            self.assertEqual(root.tag, f"{{{SVG_NS}}}svg")
            self.assertEqual(root.get("width"), "600")
            self.assertEqual(png.read_bytes()[:8], b"\x89PNG\r\n\x1a\n")

    def test_save_failure_returns_false_and_logs(self) -> None:
        grid = SubplotGrid(1, 1)
        grid.subplot(0, 0)
        with tempfile.TemporaryDirectory() as td:
            missing = Path(td) / "no" / "such" / "dir" / "grid.png"
            with self.assertLogs("gridplot.grid", level="ERROR"):
                self.assertFalse(grid.save_png(missing))
            self.assertFalse(missing.exists())

    def test_empty_cells_render_background_only(self) -> None:
        frame = SubplotGrid(2, 2, width=400, height=300).to_rgba()
        self.assertTrue(np.all(frame == 255))


if __name__ == "__main__":
    unittest.main()
