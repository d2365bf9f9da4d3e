"""Tests for option merging and typed options."""

import logging
from dataclasses import dataclass

from arctimer import ArcState, Options, build_options, merge


@dataclass
class Marker:
    """Callable dataclass used as an option leaf."""

    tag: str

    def __call__(self, *args) -> str:
        return self.tag


# --- merge ---


class TestMerge:
    def test_later_scalars_override(self) -> None:
        assert merge({"height": 100}, {"height": 200}) == {"height": 200}

    def test_nested_mappings_merge(self) -> None:
        result = merge(
            {"start": {"angle": 0, "value": 0}},
            {"start": {"value": 5}},
        )
        assert result == {"start": {"angle": 0, "value": 5}}

    def test_lists_replace(self) -> None:
        result = merge({"tags": [1, 2, 3]}, {"tags": [4]})
        assert result == {"tags": [4]}

    def test_missing_keys_inherit(self) -> None:
        result = merge({"a": 1, "b": {"c": 2}}, {"d": 3})
        assert result == {"a": 1, "b": {"c": 2}, "d": 3}

    def test_none_layers_skipped(self) -> None:
        assert merge(None, {"a": 1}, None) == {"a": 1}

    def test_inputs_not_mutated(self) -> None:
        base = {"start": {"angle": 0}}
        merge(base, {"start": {"angle": 1}})
        assert base == {"start": {"angle": 0}}

    def test_result_does_not_share_nested_dicts(self) -> None:
        base = {"custom": {"k": 1}}
        result = merge(base)
        result["custom"]["k"] = 2
        assert base["custom"]["k"] == 1

    def test_scalar_replaced_by_mapping(self) -> None:
        assert merge({"a": 1}, {"a": {"b": 2}}) == {"a": {"b": 2}}

    def test_dataclass_layers_merge_as_mappings(self) -> None:
        result = merge({"start": ArcState(value=3)}, {"start": {"angle": 0.5}})
        assert result["start"]["value"] == 3
        assert result["start"]["angle"] == 0.5
        assert result["start"]["inner_ratio"] == 0.8

    def test_callables_replace(self) -> None:
        fn = lambda v: v  # noqa: E731
        result = merge({"values": {"decorate": round}}, {"values": {"decorate": fn}})
        assert result["values"]["decorate"] is fn

    def test_dataclass_leaves_kept_as_is(self) -> None:
        marker = Marker("x")
        result = merge({"callback": round}, {"callback": marker, "custom": {"m": marker}})
        assert result["callback"] is marker
        assert result["custom"]["m"] is marker


# --- build_options ---


class TestBuildOptions:
    def test_defaults(self) -> None:
        opts = build_options()
        assert opts.height == 100
        assert opts.width == 100
        assert opts.ease == "linear"
        assert opts.duration == 5000
        assert opts.start.angle == 0
        assert opts.start.fill == "#2196F3"
        assert opts.finish.angle == 1
        assert opts.finish.value == 100
        assert opts.finish.fill == "#FFC107"
        assert opts.immediate.angle is False
        assert opts.values.show is False
        assert opts.values.styles == "text-anchor:middle;"
        assert opts.values.decorate(2.6) == 3
        assert opts.custom == {}

    def test_generated_names_are_unique(self) -> None:
        assert build_options().name != build_options().name

    def test_nested_override_keeps_siblings(self) -> None:
        opts = build_options({"finish": {"value": 60}})
        assert opts.finish.value == 60
        assert opts.finish.angle == 1
        assert opts.finish.fill == "#FFC107"

    def test_layers_apply_in_order(self) -> None:
        opts = build_options({"duration": 10}, {"duration": 20})
        assert opts.duration == 20

    def test_options_instance_as_layer(self) -> None:
        base = build_options({"height": 300, "name": "base"})
        opts = build_options(base, {"start": {"value": 7}})
        assert isinstance(opts, Options)
        assert opts.height == 300
        assert opts.name == "base"
        assert opts.start.value == 7

    def test_custom_is_passed_through(self) -> None:
        opts = build_options({"custom": {"anything": [1, 2]}})
        assert opts.custom == {"anything": [1, 2]}

    def test_non_mapping_custom_kept(self) -> None:
        assert build_options({"custom": "tag"}).custom == "tag"
        assert build_options({"custom": [1, 2]}).custom == [1, 2]

    def test_dataclass_callback_survives_build(self) -> None:
        marker = Marker("x")
        opts = build_options({"callback": marker, "values": {"decorate": marker}})
        assert opts.callback is marker
        assert opts.values.decorate is marker

    def test_unknown_keys_dropped_with_warning(self, caplog) -> None:
        with caplog.at_level(logging.WARNING, logger="arctimer.config"):
            opts = build_options({"colour": "red", "start": {"bogus": 1}})
        assert not hasattr(opts, "colour")
        assert "colour" in caplog.text
        assert "start.bogus" in caplog.text
