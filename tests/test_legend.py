from __future__ import annotations

import unittest
import xml.etree.ElementTree as ET

from gridplot import Plot, PlotConfig, SvgSurface
from gridplot.legend import LegendItem, layout_legend
from gridplot.surfaces import SVG_NS


def _names(plot: Plot) -> list[str]:
    return [item.name for item in plot.legend_items()]


def _svg_texts(plot: Plot) -> list[str]:
    surface = plot.new_surface("svg")
    assert isinstance(surface, SvgSurface)
    plot.render(surface)
    root = ET.fromstring(surface.to_markup())
    return [el.text or "" for el in root.iter(f"{{{SVG_NS}}}text")]


class LegendComposerTests(unittest.TestCase):
    def test_lone_default_series_has_no_entry(self) -> None:
        plot = Plot("scatter")
        plot.add_points([(0, 0), (1, 1)])
        self.assertEqual(plot.legend_items(), [])

    def test_fixed_order_series_clusters_histograms_reference_lines(self) -> None:
        plot = Plot("scatter")
        plot.add_xy("alpha", [0, 1], [0, 1])
        plot.add_xy("beta", [0, 1], [1, 0])
        plot.add_clusters("km", [0, 1, 2, 3], [0, 1, 2, 3], [2, 0, -1, 1])
        plot.add_horizontal_line(0.5)
        self.assertEqual(
            _names(plot),
            ["alpha", "beta", "Outliers", "Cluster 1", "Cluster 2", "Cluster 3", "Y = 0.5"],
        )

    def test_cluster_rows_ordered_across_series(self) -> None:
        plot = Plot("scatter")
        plot.add_clusters("a", [0, 1], [0, 1], [0, 1], colors={0: "blue", 1: "green"})
        plot.add_clusters("b", [2, 3, 4], [2, 3, 4], [-1, 2, 0])
        self.assertEqual(_names(plot), ["Outliers", "Cluster 1", "Cluster 2", "Cluster 3"])
        # A label shared by both series keeps the first series' color.
        rows = {item.name: item.color[:3] for item in plot.legend_items()}
        self.assertEqual(rows["Cluster 1"], (0, 0, 255))

    def test_glyph_kinds_follow_drawing_kind(self) -> None:
        plot = Plot("scatter")
        plot.add_xy("s", [0, 1], [0, 1])
        plot.add_clusters("km", [0, 1], [0, 1], [-1, 0])
        plot.add_vertical_line(0.5)
        glyphs = {item.name: (item.glyph, item.marker) for item in plot.legend_items()}
        self.assertEqual(glyphs["Outliers"], ("marker", "cross"))
        self.assertEqual(glyphs["Cluster 1"], ("marker", "circle"))
        self.assertEqual(glyphs["X = 0.5"][0], "dash")

        line = Plot("line")
        line.add_xy("s", [0, 1], [0, 1])
        self.assertEqual(line.legend_items()[0].glyph, "line")

    def test_histogram_entries_use_bar_glyph(self) -> None:
        cont = Plot("histogram")
        cont.add_histogram([1, 2, 3], name="latency")
        self.assertEqual([(i.name, i.glyph) for i in cont.legend_items()], [("latency", "bar")])

        disc = Plot("histogram")
        disc.add_discrete_histogram([3, 1], names=["cats", "dogs"])
        self.assertEqual(_names(disc), ["cats", "dogs"])

    def test_hiding_removes_exactly_one_entry(self) -> None:
        plot = Plot("scatter")
        plot.add_xy("alpha", [0, 1], [0, 1])
        plot.add_xy("beta", [0, 1], [1, 0])
        plot.add_clusters("km", [0, 1], [0, 1], [0, 1])
        before = _names(plot)
        plot.hide_legend_item("Cluster 1")
        after = _names(plot)
        self.assertEqual(after, [n for n in before if n != "Cluster 1"])
        plot.show_legend_item("Cluster 1")
        self.assertEqual(_names(plot), before)

    def test_hiding_everything_yields_empty_panel(self) -> None:
        plot = Plot("scatter")
        plot.add_xy("alpha", [0, 1], [0, 1])
        plot.add_horizontal_line(1.0, label="limit")
        for name in _names(plot):
            plot.hide_legend_item(name)
        layout = layout_legend(plot.legend_items(), plot.config)
        self.assertTrue(layout.is_empty)
        self.assertEqual(layout.height, 0.0)
        plot.show_all_legend_items()
        self.assertEqual(_names(plot), ["alpha", "limit"])

    def test_override_names_drive_hiding(self) -> None:
        plot = Plot("scatter")
        plot.add_clusters("c", [0, 1], [0, 1], [-1, 0], names={-1: "noise", 0: "core"})
        plot.hide_legend_item("noise")
        self.assertEqual(_names(plot), ["core"])

    def test_panel_geometry(self) -> None:
        items = [LegendItem(name=n, glyph="marker", color=(0, 0, 0, 255)) for n in ("a", "b", "c")]
        layout = layout_legend(items, PlotConfig())
        self.assertEqual((layout.anchor_x, layout.anchor_y), (660.0, 80.0))
        self.assertEqual((layout.x, layout.y), (655.0, 65.0))
        self.assertEqual((layout.width, layout.height), (120.0, 70.0))
        self.assertEqual(layout.row_y(2), 120.0)

    def test_global_toggle_suppresses_panel(self) -> None:
        plot = Plot("scatter")
        plot.add_xy("alpha", [0, 1], [0, 1])
        self.assertIn("alpha", _svg_texts(plot))
        plot.set_legend_enabled(False)
        self.assertNotIn("alpha", _svg_texts(plot))


if __name__ == "__main__":
    unittest.main()
