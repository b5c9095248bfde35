from __future__ import annotations

import itertools
from pathlib import Path
import tempfile
import unittest

from chartkit_encode.errors import EncodingSpecError
from chartkit_layout.adapters import pd, to_rows
from chartkit_layout.margin import DEFAULT_MARGIN, Margin, coerce_margin, merge_margin
from chartkit_layout.memo import create_selector
from chartkit_layout.selectors import create_margin_selector
from chartkit_layout.theme import (
    DEFAULT_LAYOUT_SETTINGS,
    load_chart_config,
    validate_layout_settings,
    validate_tick_styles,
)


class MarginTests(unittest.TestCase):
    SAMPLES = (
        Margin(0, 0, 0, 0),
        Margin(10, 20, 30, 40),
        Margin(40, 5, 12.5, 0),
        Margin(3, 3, 3, 3),
    )

    def test_merge_is_monotone_and_commutative(self) -> None:
        for a, b in itertools.product(self.SAMPLES, repeat=2):
            merged = merge_margin(a, b)
            self.assertEqual(merged, merge_margin(b, a))
            for side in ("top", "right", "bottom", "left"):
                self.assertGreaterEqual(getattr(merged, side), getattr(a, side))
                self.assertGreaterEqual(getattr(merged, side), getattr(b, side))

    def test_merge_accepts_partial_mapping(self) -> None:
        merged = merge_margin(Margin(10, 10, 30, 40), {"left": 84})
        self.assertEqual(merged, Margin(10, 10, 30, 84))

    def test_negative_side_is_rejected(self) -> None:
        with self.assertRaisesRegex(ValueError, "margin left"):
            Margin(left=-1)

    def test_coerce_fills_from_fallback(self) -> None:
        self.assertIs(coerce_margin(None), DEFAULT_MARGIN)
        self.assertEqual(coerce_margin({"top": 5}), Margin(5, 20, 20, 20))
        with self.assertRaisesRegex(ValueError, "unknown margin sides"):
            coerce_margin({"middle": 5})


class MemoTests(unittest.TestCase):
    def test_identical_inputs_return_cached_result(self) -> None:
        selector = create_selector("a", "b", compute=lambda a, b: {"a": a, "b": b})
        a, b = object(), object()
        first = selector(a=a, b=b)
        self.assertIs(selector(a=a, b=b), first)
        self.assertEqual(selector.recompute_count, 1)

    def test_any_changed_input_recomputes(self) -> None:
        selector = create_selector("a", "b", compute=lambda a, b: [a, b])
        a, b = [1], [2]
        first = selector(a=a, b=b)
        second = selector(a=[1], b=b)
        self.assertIsNot(second, first)
        self.assertEqual(second, first)
        third = selector(a=[1], b=[2])
        self.assertIsNot(third, second)
        self.assertEqual(selector.recompute_count, 3)

    def test_scalars_compare_by_value(self) -> None:
        selector = create_selector("width", compute=lambda width: object())
        first = selector(width=400)
        self.assertIs(selector(width=400), first)
        self.assertIsNot(selector(width=401), first)

    def test_reads_inputs_from_props_object_or_dict(self) -> None:
        class Props:
            margin = {"top": 1}

        props = Props()
        selector = create_margin_selector()
        from_object = selector(props)
        self.assertEqual(from_object, Margin(1, 20, 20, 20))
        self.assertIs(selector({"margin": props.margin}), from_object)
        selector.clear()
        self.assertIsNot(selector(props), from_object)

    def test_requires_input_names(self) -> None:
        with self.assertRaises(ValueError):
            create_selector(compute=lambda: None)


class ThemeConfigTests(unittest.TestCase):
    def test_tick_style_overrides(self) -> None:
        styles = validate_tick_styles({"length": 6, "font_size_px": 13})
        self.assertEqual(styles.length, 6.0)
        self.assertEqual(styles.label.bottom.font_size_px, 13.0)
        self.assertEqual(styles.label.right.font_size_px, 13.0)

    def test_tick_style_validation(self) -> None:
        with self.assertRaisesRegex(ValueError, "Unknown tick style keys"):
            validate_tick_styles({"colour": "red"})
        with self.assertRaisesRegex(ValueError, "non-negative"):
            validate_tick_styles({"length": -1})
        with self.assertRaisesRegex(ValueError, "positive"):
            validate_tick_styles({"font_size_px": 0})

    def test_layout_settings_validation(self) -> None:
        self.assertIs(validate_layout_settings(None), DEFAULT_LAYOUT_SETTINGS)
        self.assertEqual(validate_layout_settings({"overflow_margin": 12}).overflow_margin, 12.0)
        with self.assertRaisesRegex(ValueError, "Unknown layout settings"):
            validate_layout_settings({"gutter": 1})
        with self.assertRaisesRegex(ValueError, r"\[-90, 90\]"):
            validate_layout_settings({"default_label_angle": 120})

    def test_load_chart_config_from_toml(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "chart.toml"
            path.write_text(
                "\n".join(
                    [
                        "[theme.x_tick]",
                        "length = 6",
                        'stroke = "#333333"',
                        "",
                        "[layout]",
                        "overflow_margin = 10",
                        "default_label_angle = 45",
                    ]
                ),
                encoding="utf-8",
            )
            config = load_chart_config(path)
        self.assertEqual(config.theme.x_tick_styles.length, 6.0)
        self.assertEqual(config.theme.x_tick_styles.stroke, "#333333")
        self.assertEqual(config.theme.y_tick_styles.length, 4.0)
        self.assertEqual(config.layout.overflow_margin, 10.0)
        self.assertEqual(config.layout.default_label_angle, 45.0)

    def test_load_chart_config_rejects_unknown_sections(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "chart.toml"
            path.write_text("[legend]\nshow = true\n", encoding="utf-8")
            with self.assertRaisesRegex(ValueError, "Unknown chart config sections"):
                load_chart_config(path)

    def test_missing_config_file(self) -> None:
        with self.assertRaises(FileNotFoundError):
            load_chart_config("/nonexistent/chart.toml")


class AdapterTests(unittest.TestCase):
    def test_rows_from_iterables(self) -> None:
        self.assertEqual(to_rows([{"a": 1}]), ({"a": 1},))
        self.assertEqual(to_rows(({"a": i} for i in range(2))), ({"a": 0}, {"a": 1}))
        self.assertEqual(to_rows(None), ())

    def test_rejects_non_row_data(self) -> None:
        with self.assertRaises(EncodingSpecError):
            to_rows({"a": 1})
        with self.assertRaises(EncodingSpecError):
            to_rows("abc")
        with self.assertRaises(EncodingSpecError):
            to_rows(3)

    @unittest.skipIf(pd is None, "pandas not installed")
    def test_rows_from_dataframe(self) -> None:
        frame = pd.DataFrame({"x": ["a", "b"], "y": [1, 2]})
        self.assertEqual(to_rows(frame), ({"x": "a", "y": 1}, {"x": "b", "y": 2}))


if __name__ == "__main__":
    unittest.main()
