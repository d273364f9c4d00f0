# tests/test_cellular.py
import numpy as np
import pytest

from gridgen import CAConfig, CellularAutomaton
from gridgen.cellular import run_model


def make(**kwargs):
    params = dict(width=24, height=18, seed="caves", use_custom_seed=True)
    params.update(kwargs)
    return CellularAutomaton(CAConfig(**params))


def test_full_grid_survives():
    res = run_model(
        dict(width=5, height=5, start_alive_chance=1.0, generations=1,
             seed="full", use_custom_seed=True)
    )
    assert len(res.history) == 2
    assert res.history[0].all()
    assert res.history[1].all()
    assert res.grid.all()


def test_walled_centre_is_born():
    res = run_model(dict(width=3, height=3, start_alive_chance=0.0, generations=1))
    g0, g1 = res.history
    assert not g0[1, 1]
    assert g0.sum() == 8
    assert g1.all()


def test_border_is_forced_alive():
    ca = make(start_alive_chance=0.0, generations=0)
    grid = ca.generate().grid
    assert grid[0, :].all() and grid[-1, :].all()
    assert grid[:, 0].all() and grid[:, -1].all()
    assert not grid[1:-1, 1:-1].any()


def test_same_seed_same_history():
    a = make(generations=4).generate()
    b = make(generations=4).generate()
    assert len(a.history) == len(b.history) == 5
    for ga, gb in zip(a.history, b.history):
        np.testing.assert_array_equal(ga, gb)


def test_batch_matches_incremental():
    batch = make(generations=3, neighbourhood="von_neumann", neighbourhood_radius=2,
                 lower_birth=4, upper_birth=12, starvation=3, over_population=12).generate()

    ca = make(generations=3, neighbourhood="von_neumann", neighbourhood_radius=2,
              lower_birth=4, upper_birth=12, starvation=3, over_population=12)
    ca.prepare()
    calls = 0
    while ca.step():
        calls += 1
    assert calls == 2
    assert ca.is_done()
    assert ca.step() is False
    np.testing.assert_array_equal(ca.result().grid, batch.grid)


def test_incremental_mode_uses_on_step():
    seen = []
    ca = make(generations=3, incremental=True)
    res = ca.generate(on_step=lambda gen: seen.append(gen.generations_run))
    assert seen == [1, 2, 3]
    assert res.meta["generations"] == 3


def test_show_step_replays_history():
    ca = make(generations=2)
    res = ca.generate()
    np.testing.assert_array_equal(ca.show_step(0), res.history[0])
    assert ca.current_generation == 0
    with pytest.raises(IndexError):
        ca.show_step(3)
    with pytest.raises(IndexError):
        ca.show_step(-1)


def test_zero_generations():
    res = make(generations=0).generate()
    assert len(res.history) == 1
    assert res.meta["generations"] == 0


def test_step_before_prepare():
    with pytest.raises(RuntimeError):
        make().step()


def test_clear_drops_state():
    ca = make(generations=1)
    ca.generate()
    ca.clear()
    assert ca.tile_data is None
    assert ca.generation_steps == []
    assert not ca.is_prepared


@pytest.mark.parametrize(
    "bad",
    [
        dict(width=0),
        dict(height=-3),
        dict(neighbourhood_radius=0),
        dict(generations=-1),
        dict(start_alive_chance=1.5),
        dict(starvation=-1),
        dict(step_interval=-0.5),
        dict(neighbourhood="triangle"),
    ],
)
def test_invalid_config(bad):
    with pytest.raises(ValueError):
        make(**bad)


def test_meta_and_verbose(capsys):
    res = make(generations=1, verbose=True).generate()
    out = capsys.readouterr().out
    assert "[cellular] generation 1/1" in out
    assert "Generation completed" in out
    assert res.meta["seed"] == "caves"
    assert res.meta["neighbourhood"] == "moore"
    assert res.meta["rule"] == (5, 8, 4, 8)
    assert "time_elapsed" in res.meta
