from __future__ import annotations

import gc
import math
import unittest
from unittest import mock

from chartkit_encode import ChannelEncoder, ChannelType, Encoder
from chartkit_encode.colors import reset_categorical_namespaces
from chartkit_encode.errors import EncodingSpecError
from chartkit_encode.text import TextStyle


def fake_measure(text: str, style: TextStyle | None = None) -> tuple[int, int]:
    return (len(text) * 6, 12)


class ChannelEncoderTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_categorical_namespaces()

    def test_get_reads_field_and_falls_back(self) -> None:
        enc = ChannelEncoder(name="y", channel_type="Y", definition={"field": "stats.max", "type": "quantitative"})
        self.assertEqual(enc.get({"stats": {"max": 4}}), 4)
        self.assertEqual(enc.get({"stats": {}}, otherwise=0), 0)
        self.assertIsNone(enc.get({}))

    def test_encode_without_scale_is_identity(self) -> None:
        enc = ChannelEncoder(name="text", channel_type=ChannelType.TEXT, definition={"field": "name", "type": "nominal"})
        self.assertIsNone(enc.scale)
        self.assertEqual(enc.encode({"name": "abc"}), "abc")
        self.assertEqual(enc.encode({}, otherwise="?"), "?")

    def test_encode_with_scale(self) -> None:
        enc = ChannelEncoder(
            name="size",
            channel_type="Size",
            definition={"field": "v", "type": "quantitative", "scale": {"range": [0, 10]}},
        )
        assert enc.scale is not None
        enc.scale.set_domain([0, 100])
        self.assertAlmostEqual(enc.encode({"v": 25}), 2.5)

    def test_size_channel_fits_domain_from_rows(self) -> None:
        enc = ChannelEncoder(name="size", channel_type="Size", definition={"field": "v", "type": "quantitative"})
        self.assertIsNotNone(enc.encode({"v": 0.5}))
        enc.set_domain_from_dataset([{"v": 5}, {"v": 10}])
        self.assertEqual(enc.scale.domain, (0.0, 10.0))
        self.assertAlmostEqual(enc.encode({"v": 5}), 5.5)

    def test_dataset_domain_leaves_positional_and_explicit_scales(self) -> None:
        x = ChannelEncoder(name="x", channel_type="X", definition={"field": "v", "type": "quantitative"})
        size = ChannelEncoder(
            name="size",
            channel_type="Size",
            definition={"field": "v", "type": "quantitative", "scale": {"domain": [0, 100]}},
        )
        x.set_domain_from_dataset([{"v": 5}])
        size.set_domain_from_dataset([{"v": 5}])
        self.assertEqual(x.scale.domain, (0.0, 1.0))
        self.assertEqual(size.scale.domain, (0.0, 100.0))

    def test_radix_format_on_quantitative_field(self) -> None:
        enc = ChannelEncoder(name="y", channel_type="Y", definition={"field": "v", "type": "quantitative", "format": "x"})
        self.assertEqual(enc.format({"v": 255}), "ff")

    def test_format_uses_channel_format(self) -> None:
        enc = ChannelEncoder(name="y", channel_type="Y", definition={"field": "v", "type": "quantitative", "format": ".1f"})
        self.assertEqual(enc.format({"v": 3}), "3.0")
        self.assertEqual(enc.format({}), "")

    def test_constant_channels_have_no_legend_and_no_axis(self) -> None:
        for channel_type in ChannelType:
            with self.subTest(channel_type=channel_type):
                enc = ChannelEncoder(name="c", channel_type=channel_type, definition={"value": 1})
                self.assertFalse(enc.has_legend())
                self.assertIsNone(enc.axis)
                self.assertIsNone(enc.scale)
                self.assertEqual(enc.get({"anything": 2}), 1)
                self.assertEqual(enc.encode({"anything": 2}), 1)

    def test_has_legend(self) -> None:
        nominal = {"field": "k", "type": "nominal"}
        self.assertTrue(ChannelEncoder(name="color", channel_type="Color", definition=nominal).has_legend())
        self.assertFalse(
            ChannelEncoder(name="color", channel_type="Color", definition={**nominal, "legend": False}).has_legend()
        )
        self.assertFalse(
            ChannelEncoder(name="color", channel_type="Color", definition=nominal, options={"legend": False}).has_legend()
        )
        self.assertFalse(ChannelEncoder(name="x", channel_type="X", definition=nominal).has_legend())

    def test_is_group_by_requires_discrete_type(self) -> None:
        cases = [
            ("Color", "nominal", True),
            ("Color", "quantitative", False),
            ("Category", "ordinal", True),
            ("Category", "quantitative", False),
            ("X", "nominal", True),
            ("YBand", "ordinal", True),
            ("Y", "temporal", False),
            ("Size", "nominal", False),
        ]
        for channel_type, data_type, expected in cases:
            with self.subTest(channel_type=channel_type, data_type=data_type):
                enc = ChannelEncoder(name="c", channel_type=channel_type, definition={"field": "f", "type": data_type})
                self.assertIs(enc.is_group_by(), expected)

    def test_axis_exists_only_for_enabled_positional_fields(self) -> None:
        field = {"field": "v", "type": "quantitative"}
        self.assertIsNotNone(ChannelEncoder(name="x", channel_type="X", definition=field).axis)
        self.assertIsNone(ChannelEncoder(name="x", channel_type="X", definition={**field, "axis": False}).axis)
        self.assertIsNone(ChannelEncoder(name="x", channel_type="X", definition=field, options={"axis": False}).axis)
        self.assertIsNone(ChannelEncoder(name="size", channel_type="Size", definition=field).axis)

    def test_axis_orient_defaults_per_channel(self) -> None:
        field = {"field": "v", "type": "quantitative"}
        x = ChannelEncoder(name="x", channel_type="X", definition=field)
        y = ChannelEncoder(name="y", channel_type="Y", definition=field)
        y_right = ChannelEncoder(name="y", channel_type="Y", definition={**field, "axis": {"orient": "right"}})
        assert x.axis is not None and y.axis is not None and y_right.axis is not None
        self.assertEqual(x.axis.orient, "bottom")
        self.assertEqual(y.axis.orient, "left")
        self.assertEqual(y_right.axis.orient, "right")

    def test_axis_does_not_keep_encoder_alive(self) -> None:
        enc = ChannelEncoder(name="x", channel_type="X", definition={"field": "v", "type": "quantitative"})
        axis = enc.axis
        assert axis is not None
        self.assertIs(axis.channel_encoder, enc)
        del enc
        gc.collect()
        with self.assertRaises(ReferenceError):
            axis.channel_encoder

    def test_predicates_follow_channel_type(self) -> None:
        enc = ChannelEncoder(name="x", channel_type="XBand", definition={"field": "k", "type": "nominal"})
        self.assertTrue(enc.is_x())
        self.assertFalse(enc.is_y())
        self.assertTrue(enc.is_xy())


class AxisAgentLayoutTests(unittest.TestCase):
    def _axis(self, channel_type: str, labels: list[str], axis: dict | None = None):
        definition = {"field": "k", "type": "nominal"}
        if axis is not None:
            definition["axis"] = axis
        enc = ChannelEncoder(name="c", channel_type=channel_type, definition=definition)
        assert enc.scale is not None and enc.axis is not None
        enc.scale.set_domain(labels)
        return enc, enc.axis

    def test_vertical_axis_reserves_widest_label(self) -> None:
        enc, axis = self._axis("Y", ["a", "bb", "ccc"])
        with mock.patch("chartkit_encode.axis_agent.measure_text", side_effect=fake_measure):
            layout = axis.compute_layout(axis_width=200, tick_length=4, tick_text_style=TextStyle())
        self.assertEqual(layout.label_overlap, "flat")
        self.assertEqual(layout.label_angle, 0.0)
        self.assertEqual(layout.label_offset, 22.0)
        # tick + padding + widest label + title line
        self.assertEqual(layout.min_margin, {"left": 42})
        self.assertEqual(layout.tick_labels, ("a", "bb", "ccc"))

    def test_horizontal_axis_stays_flat_when_labels_fit(self) -> None:
        enc, axis = self._axis("X", ["long-label-a", "long-label-b", "long-label-c"])
        with mock.patch("chartkit_encode.axis_agent.measure_text", side_effect=fake_measure):
            layout = axis.compute_layout(axis_width=1000, tick_length=4, tick_text_style=TextStyle())
        self.assertEqual(layout.label_overlap, "flat")
        self.assertEqual(layout.tick_text_anchor, "middle")
        self.assertEqual(layout.label_offset, 16.0)
        self.assertEqual(layout.min_margin, {"bottom": 40})

    def test_horizontal_axis_rotates_when_crowded(self) -> None:
        enc, axis = self._axis("X", ["long-label-a", "long-label-b", "long-label-c"])
        with mock.patch("chartkit_encode.axis_agent.measure_text", side_effect=fake_measure):
            layout = axis.compute_layout(axis_width=90, tick_length=4, tick_text_style=TextStyle(), label_angle=-40)
        self.assertEqual(layout.label_overlap, "rotate")
        self.assertEqual(layout.label_angle, -40.0)
        self.assertEqual(layout.tick_text_anchor, "end")
        self.assertEqual(layout.min_margin["left"], math.ceil(72 * math.cos(math.radians(40))))
        self.assertGreater(layout.label_offset, 16.0)

    def test_forced_flat_overlap_never_rotates(self) -> None:
        enc, axis = self._axis("X", ["long-label-a", "long-label-b"], axis={"labelOverlap": "flat"})
        with mock.patch("chartkit_encode.axis_agent.measure_text", side_effect=fake_measure):
            layout = axis.compute_layout(axis_width=10, tick_length=4, tick_text_style=TextStyle())
        self.assertEqual(layout.label_overlap, "flat")

    def test_axis_format_overrides_channel_format(self) -> None:
        enc = ChannelEncoder(
            name="y",
            channel_type="Y",
            definition={"field": "v", "type": "quantitative", "format": ".1f", "axis": {"format": ".0%"}},
        )
        assert enc.axis is not None and enc.scale is not None
        enc.scale.set_domain([0, 1])
        self.assertEqual(enc.axis.get_format()(0.5), "50%")
        self.assertEqual(enc.format({"v": 0.5}), "0.5")

    def test_continuous_tick_labels_use_step_decimals(self) -> None:
        plain = ChannelEncoder(name="y", channel_type="Y", definition={"field": "v", "type": "quantitative"})
        fixed = ChannelEncoder(
            name="y", channel_type="Y", definition={"field": "v", "type": "quantitative", "format": ".2f"}
        )
        assert plain.axis is not None and fixed.axis is not None
        self.assertEqual(plain.axis.get_tick_labels(), ["0", "0.2", "0.4", "0.6", "0.8", "1"])
        self.assertEqual(fixed.axis.get_tick_labels()[:2], ["0.00", "0.20"])

    def test_real_font_measurement_is_positive(self) -> None:
        enc, axis = self._axis("Y", ["alpha", "beta"])
        layout = axis.compute_layout(axis_width=200, tick_length=4, tick_text_style=TextStyle())
        self.assertGreater(layout.max_label_width, 0)
        self.assertGreater(layout.max_label_height, 0)


class DemoEncoder(Encoder):
    channel_types = {
        "x": ChannelType.X,
        "y": ChannelType.Y,
        "color": ChannelType.COLOR,
    }
    default_encoding = {
        "x": {"field": "x", "type": "nominal"},
        "y": {"field": "y", "type": "quantitative"},
        "color": {"value": "#222222"},
    }


class SizedEncoder(Encoder):
    channel_types = {
        "x": ChannelType.X,
        "size": ChannelType.SIZE,
    }
    default_encoding = {
        "x": {"field": "x", "type": "nominal"},
        "size": {"field": "v", "type": "quantitative"},
    }


class EncoderTests(unittest.TestCase):
    def setUp(self) -> None:
        reset_categorical_namespaces()

    def test_legend_entries_encode_continuous_channel(self) -> None:
        encoder = SizedEncoder()
        entries = encoder.legend_entries([{"x": "a", "v": 5}, {"x": "b", "v": 10}])
        self.assertEqual([entry.value for entry in entries], [5, 10])
        self.assertAlmostEqual(entries[0].output, 5.5)
        self.assertAlmostEqual(entries[1].output, 10.0)
        self.assertEqual(entries[1].label, "10")

    def test_defaults_fill_missing_channels(self) -> None:
        encoder = DemoEncoder(encoding={"y": {"field": "value", "type": "quantitative"}})
        self.assertEqual(encoder.channels["x"].get({"x": "a"}), "a")
        self.assertEqual(encoder.channels["y"].get({"value": 3}), 3)
        self.assertFalse(encoder.has_legend())

    def test_unknown_channel_is_rejected(self) -> None:
        with self.assertRaisesRegex(EncodingSpecError, "unknown channels"):
            DemoEncoder(encoding={"shape": {"value": "circle"}})

    def test_group_bys_include_common_group_fields(self) -> None:
        encoder = DemoEncoder(
            encoding={"color": {"field": "team", "type": "nominal"}},
            common_encoding={"group": [{"field": "region", "type": "nominal"}, {"field": "x", "type": "nominal"}]},
        )
        self.assertEqual(encoder.get_group_bys(), ["x", "team", "region"])
        self.assertEqual(len(encoder.all_channel_encoders()), 5)

    def test_legend_entries_list_distinct_values(self) -> None:
        encoder = DemoEncoder(encoding={"color": {"field": "team", "type": "nominal"}})
        rows = [{"team": "red"}, {"team": "blue"}, {"team": "red"}, {}]
        entries = encoder.legend_entries(rows)
        self.assertEqual([entry.value for entry in entries], ["red", "blue"])
        self.assertEqual(entries[0].channel, "color")
        self.assertEqual(entries[0].label, "red")
        self.assertNotEqual(entries[0].output, entries[1].output)


if __name__ == "__main__":
    unittest.main()
