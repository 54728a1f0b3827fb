from salesdash.scales import (
    FALLBACK_COLOR,
    MODEL_COLORS,
    LinearScale,
    cycle_colors,
    region_color,
    tick_step,
)


def test_tick_step_uses_one_two_five_ladder():
    assert tick_step(0, 100) == 10
    assert tick_step(0, 150) == 20
    assert tick_step(0, 55000) == 5000
    assert tick_step(5, 5) == 0


def test_rescale_nices_upper_bound():
    scale = LinearScale.from_max([12, 937, 40], (300, 0))
    assert scale.domain == (0.0, 1000.0)
    assert scale.range == (300.0, 0.0)


def test_rescale_falls_back_to_unit_domain():
    assert LinearScale.from_max([], (0, 100)).domain == (0.0, 1.0)
    assert LinearScale.from_max([0, 0], (0, 100)).domain == (0.0, 1.0)


def test_rescale_keeps_scale_identity():
    scale = LinearScale.from_max([10], (0, 100))
    assert scale.rescale([250]) is scale
    assert scale.domain == (0.0, 260.0)


def test_to_altair_uses_fixed_domain():
    scale = LinearScale((2010, 2024), (0, 500))
    assert scale.to_altair().to_dict() == {"domain": [2010.0, 2024.0], "nice": False, "zero": False}


def test_colors():
    assert region_color("Asia") == "#4ecdc4"
    assert region_color("Antarctica") == FALLBACK_COLOR
    keys = [f"m{i}" for i in range(14)]
    colors = cycle_colors(keys, MODEL_COLORS)
    assert len(colors) == 14
    assert colors[12] == MODEL_COLORS[0]
