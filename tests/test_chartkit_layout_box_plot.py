from __future__ import annotations

import unittest

from chartkit_encode.colors import reset_categorical_namespaces
from chartkit_layout.box_plot import DEFAULT_BOX_FILL, BoxPlot, XYChartSpec
from chartkit_layout.margin import Margin
from chartkit_layout.marks import BoxPlotSeries, summarize_box_plot


def _box_rows() -> list[dict]:
    return [
        {"x": "a", "min": 1, "firstQuartile": 2, "median": 3, "thirdQuartile": 4, "max": 5, "outliers": [9]},
        {"x": "b", "min": 2, "firstQuartile": 3, "median": 4, "thirdQuartile": 5, "max": 6, "outliers": []},
    ]


class SummarizeBoxPlotTests(unittest.TestCase):
    def test_quartiles_whiskers_and_outliers(self) -> None:
        rows = [{"team": "a", "score": v} for v in (1, 2, 3, 4, 5, 100)]
        rows.append({"team": "a", "score": None})
        [summary] = summarize_box_plot(rows, "team", "score")
        self.assertEqual(summary["label"], "a")
        self.assertAlmostEqual(summary["firstQuartile"], 2.25)
        self.assertAlmostEqual(summary["median"], 3.5)
        self.assertAlmostEqual(summary["thirdQuartile"], 4.75)
        self.assertEqual(summary["min"], 1.0)
        self.assertEqual(summary["max"], 5.0)
        self.assertEqual(summary["outliers"], [100.0])

    def test_groups_keep_first_seen_order(self) -> None:
        rows = [{"g": "b", "v": 1}, {"g": "a", "v": 2}, {"g": "b", "v": 3}]
        self.assertEqual([s["label"] for s in summarize_box_plot(rows, "g", "v")], ["b", "a"])


class BoxPlotTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_categorical_namespaces()

    def test_render_produces_chart_spec(self) -> None:
        chart = BoxPlot(width=400, height=300, data=_box_rows(), margin=Margin(10, 10, 30, 40), class_name="mine")
        rendered = chart.render()

        self.assertEqual(rendered.class_name, "chartkit-box-plot mine")
        self.assertIsNone(rendered.legend)
        spec = rendered.frame.render().render()
        self.assertIsInstance(spec, XYChartSpec)
        [series] = spec.children
        self.assertIsInstance(series, BoxPlotSeries)
        self.assertFalse(series.horizontal)
        self.assertEqual(series.fill(series.data[0]), "#222")
        self.assertEqual(chart.encoder.channels["x"].scale.domain, ("a", "b"))
        self.assertEqual(chart.encoder.channels["y"].scale.domain, (0.0, 9.0))
        assert spec.x_axis is not None and spec.y_axis is not None
        self.assertEqual(spec.x_axis.label, "x")
        self.assertEqual(spec.y_axis.orientation, "left")
        self.assertGreaterEqual(spec.margin.left, 40)

    def test_nominal_y_makes_horizontal_boxes(self) -> None:
        rows = [{("y" if key == "x" else key): value for key, value in row.items()} for row in _box_rows()]
        chart = BoxPlot(
            width=400,
            height=300,
            data=rows,
            encoding={
                "x": {"field": "x", "type": "quantitative"},
                "y": {"field": "y", "type": "nominal"},
            },
        )
        spec = chart.render().frame.render().render()
        [series] = spec.children
        self.assertTrue(series.horizontal)
        self.assertEqual(chart.encoder.channels["y"].scale.domain, ("a", "b"))
        self.assertEqual(chart.encoder.channels["x"].scale.domain, (0.0, 9.0))

    def test_color_field_adds_legend_and_fill(self) -> None:
        rows = _box_rows()
        chart = BoxPlot(
            width=400,
            height=300,
            data=rows,
            encoding={"color": {"field": "x", "type": "nominal"}},
        )
        rendered = chart.render()
        assert rendered.legend is not None
        self.assertEqual([entry.value for entry in rendered.legend], ["a", "b"])
        [series] = rendered.frame.render().render().children
        self.assertEqual(series.fill(series.data[0]), rendered.legend[0].output)
        self.assertEqual(series.fill({}), DEFAULT_BOX_FILL)

    def test_quantitative_color_spans_sequential_scheme(self) -> None:
        rows = [{**row, "c": c} for row, c in zip(_box_rows(), (1, 9))]
        chart = BoxPlot(
            width=400,
            height=300,
            data=rows,
            encoding={"color": {"field": "c", "type": "quantitative"}},
        )
        rendered = chart.render()
        [series] = rendered.frame.render().render().children

        self.assertEqual([series.fill(row) for row in series.data], ["#deebf7", "#08519c"])
        assert rendered.legend is not None
        self.assertEqual([entry.output for entry in rendered.legend], ["#deebf7", "#08519c"])

    def test_repeated_render_reuses_layout(self) -> None:
        chart = BoxPlot(width=400, height=300, data=_box_rows())
        encoder = chart.encoder
        first = chart.render().frame.render().render()
        second = chart.render().frame.render().render()

        self.assertIs(chart.encoder, encoder)
        self.assertIs(first.children, second.children)
        self.assertEqual(chart._create_layout.recompute_count, 1)
        self.assertEqual(chart._create_children.recompute_count, 1)

    def test_new_encoding_object_rebuilds(self) -> None:
        encoding = {"y": {"field": "y", "type": "quantitative"}}
        chart = BoxPlot(width=400, height=300, data=_box_rows(), encoding=encoding)
        encoder = chart.encoder
        chart.render().frame.render()

        chart.update(encoding=dict(encoding))
        chart.render().frame.render()

        self.assertIsNot(chart.encoder, encoder)
        self.assertEqual(chart._create_encoder.recompute_count, 2)
        self.assertEqual(chart._create_layout.recompute_count, 2)

    def test_new_data_object_rebuilds_children_only_once(self) -> None:
        chart = BoxPlot(width=400, height=300, data=_box_rows())
        chart.render().frame.render()
        chart.update(data=_box_rows())
        chart.render().frame.render()
        chart.render().frame.render()

        self.assertEqual(chart._create_children.recompute_count, 2)
        self.assertEqual(chart._create_layout.recompute_count, 2)

    def test_update_rejects_unknown_props(self) -> None:
        chart = BoxPlot(width=400, height=300, data=[])
        with self.assertRaisesRegex(ValueError, "unknown BoxPlot props"):
            chart.update(colour="red")


if __name__ == "__main__":
    unittest.main()
