import pytest

from app.services.map_layers import InvalidGeometryError
from app.services.overlay import NoActiveOverlayError, OverlayManager, describe, severity_levels
from tests._helpers import polygon_fc


def _manager(m):
    return OverlayManager(map_capability=m)


def test_recolor_before_load_raises_and_touches_nothing(recording_map):
    mgr = _manager(recording_map)
    with pytest.raises(NoActiveOverlayError, match="Load a region first"):
        mgr.recolor("rojo")
    assert recording_map.calls == []
    assert mgr.current is None


def test_first_load_adds_one_layer(recording_map):
    mgr = _manager(recording_map)
    ov = mgr.load(polygon_fc("a"), "amarillo", region="R01")

    assert [c[0] for c in recording_map.calls] == ["add"]
    assert recording_map.layers == [ov.layer]
    assert ov.region == "R01"
    assert ov.style.fill_color == "#ffff00"


def test_second_load_replaces_first(recording_map):
    mgr = _manager(recording_map)
    first = mgr.load(polygon_fc("a"), "amarillo", region="R01")
    second_geom = polygon_fc("b", "c")
    second = mgr.load(second_geom, "naranja", region="R02")

    assert len(recording_map.layers) == 1
    assert recording_map.layers[0] is second.layer
    assert second.layer.geometry is second_geom
    assert recording_map.calls.count(("remove", first.layer.layer_id)) == 1
    assert mgr.current is second


def test_repeated_identical_loads_never_accumulate(recording_map):
    mgr = _manager(recording_map)
    geom = polygon_fc("a")
    for _ in range(4):
        mgr.load(geom, "rojo", region="R05")
        assert len(recording_map.layers) == 1
    removed = [c for c in recording_map.calls if c[0] == "remove"]
    assert len(removed) == 3


def test_recolor_changes_style_only(recording_map):
    mgr = _manager(recording_map)
    geom = polygon_fc("a", "b", "c")
    ov = mgr.load(geom, "amarillo", region="R07")
    layer_id = ov.layer.layer_id
    features_before = list(ov.layer.features)
    key_before = ov.geometry_key
    recording_map.calls.clear()

    after = mgr.recolor("rojo")

    assert recording_map.calls == [("restyle", layer_id)]
    assert after is ov
    assert after.layer.layer_id == layer_id
    assert after.geometry is geom
    assert after.layer.features == features_before
    assert all(a is b for a, b in zip(after.layer.features, features_before))
    assert after.geometry_key == key_before
    assert after.level == "rojo"
    assert after.layer.style.fill_color == "#ff0000"
    assert len(recording_map.layers) == 1


def test_style_is_derived_from_one_color(recording_map):
    mgr = _manager(recording_map)
    style = mgr.style_for("naranja")
    assert style.fill_color == style.stroke_color == "#ffa500"
    assert style.fill_opacity == 0.3
    assert style.stroke_width == 2


def test_style_settings_are_applied(recording_map):
    mgr = OverlayManager(map_capability=recording_map, layer_name="Capa", fill_opacity=0.5, stroke_width=4)
    ov = mgr.load(polygon_fc("a"), "rojo")
    assert ov.layer.name == "Capa"
    assert ov.style.fill_opacity == 0.5
    assert ov.style.stroke_width == 4


def test_unknown_level_leaves_state_alone(recording_map):
    mgr = _manager(recording_map)
    ov = mgr.load(polygon_fc("a"), "amarillo")
    recording_map.calls.clear()

    with pytest.raises(ValueError):
        mgr.recolor("verde")  # type: ignore[arg-type]
    with pytest.raises(ValueError):
        mgr.load(polygon_fc("b"), "verde")  # type: ignore[arg-type]

    assert recording_map.calls == []
    assert mgr.current is ov
    assert ov.level == "amarillo"


def test_rejected_geometry_keeps_previous_overlay(recording_map):
    mgr = _manager(recording_map)
    ov = mgr.load(polygon_fc("a"), "amarillo", region="R01")
    recording_map.calls.clear()

    with pytest.raises(InvalidGeometryError):
        mgr.load({"foo": "bar"}, "rojo", region="R02")

    assert mgr.current is ov
    assert recording_map.layers == [ov.layer]
    assert recording_map.calls == []

    # still usable afterwards
    mgr.recolor("rojo")
    assert recording_map.calls == [("restyle", ov.layer.layer_id)]


def test_new_layer_is_added_before_old_one_is_removed(recording_map):
    mgr = _manager(recording_map)
    first = mgr.load(polygon_fc("a"), "amarillo")
    recording_map.calls.clear()

    second = mgr.load(polygon_fc("b"), "naranja")

    assert recording_map.calls == [("add", second.layer.layer_id), ("remove", first.layer.layer_id)]


def test_clear(recording_map):
    mgr = _manager(recording_map)
    assert mgr.clear() is False
    mgr.load(polygon_fc("a"), "amarillo")
    assert mgr.clear() is True
    assert mgr.current is None
    assert recording_map.layers == []
    with pytest.raises(NoActiveOverlayError):
        mgr.recolor("rojo")


def test_describe_reports_feature_count(recording_map):
    mgr = _manager(recording_map)
    ov = mgr.load(polygon_fc("a", "b"), "naranja", region="R10")
    state = describe(ov)
    assert state.feature_count == 2
    assert state.region == "R10"
    assert state.level == "naranja"
    assert state.layer_id == ov.layer.layer_id
    assert state.style.stroke_color == "#ffa500"


def test_severity_levels_table():
    levels = severity_levels()
    assert [(lv.level, lv.label, lv.color) for lv in levels] == [
        ("amarillo", "Amarillo", "#ffff00"),
        ("naranja", "Naranja", "#ffa500"),
        ("rojo", "Rojo", "#ff0000"),
    ]
