# tests/test_drunkards_walk.py
import numpy as np
import pytest

from gridgen import DrunkardsWalk, Walker, WalkConfig
from gridgen.drunkards_walk import CORRIDOR, LEVY_FLIGHT, NEW_WALKER, ROOM, WALL, run_model


def busy_config(**kwargs):
    params = dict(
        width=40,
        height=30,
        seed="dungeon",
        use_custom_seed=True,
        step_scheme="eight_ways",
        target_carve_rate=0.35,
        bias_enabled=True,
        bias_chance=0.7,
        bias_decay_rate=0.2,
        walker_spawn_chance=0.05,
        max_walker_count=4,
        roomie_chance=0.5,
        levy_flight_enabled=True,
        levy_flight_chance=0.1,
        max_levy_step_length=6,
        room_spawn_chance=0.05,
        rooms=[(3, 3, 0.6), (5, 4, 0.3)],
    )
    params.update(kwargs)
    return WalkConfig(**params)


def test_tiny_walk_stops_after_one_step():
    res = run_model(dict(width=3, height=3, target_carve_rate=2 / 9))
    assert res.meta["ticks"] == 1
    assert res.meta["tiles_carved"] == 2
    assert res.grid.sum() == 2
    assert res.grid[1, 1]


def test_single_walker_carves_at_most_one_tile_per_tick():
    res = run_model(dict(width=3, height=3, target_carve_rate=5 / 9))
    assert res.meta["tiles_carved"] == 5
    assert res.meta["ticks"] >= 4
    assert res.grid.sum() == 5


@pytest.mark.parametrize("scheme", ["traditional", "eight_ways", "hexagonal"])
def test_reaches_target(scheme):
    res = DrunkardsWalk(busy_config(step_scheme=scheme)).generate()
    assert res.meta["carve_rate"] >= 0.35
    assert res.grid.sum() == res.meta["tiles_carved"]
    for x, y, *_ in res.walkers:
        assert 0 <= x < 40 and 0 <= y < 30


def test_same_seed_same_map():
    a = DrunkardsWalk(busy_config()).generate()
    b = DrunkardsWalk(busy_config()).generate()
    np.testing.assert_array_equal(a.grid, b.grid)
    np.testing.assert_array_equal(a.meta["carve_kinds"], b.meta["carve_kinds"])
    assert a.walkers == b.walkers


def test_batch_matches_incremental():
    batch = DrunkardsWalk(busy_config()).generate()

    ticks = []
    walk = DrunkardsWalk(busy_config(incremental=True))
    res = walk.generate(on_step=lambda gen: ticks.append(gen.ticks))

    np.testing.assert_array_equal(res.grid, batch.grid)
    assert ticks == list(range(1, batch.meta["ticks"] + 1))


def test_incremental_sleeps_between_ticks():
    naps = []
    walk = DrunkardsWalk(busy_config(step_interval=0.5))
    walk.prepare()
    walk.run_incremental(sleep=naps.append)
    assert walk.is_done()
    assert naps == [0.5] * walk.ticks


def test_walker_count_is_capped():
    cfg = busy_config(walker_spawn_chance=1.0, max_walker_count=3, target_carve_rate=0.5)
    walk = DrunkardsWalk(cfg)
    walk.prepare()
    while walk.step():
        assert len(walk.walkers) <= 3
    assert len(walk.walkers) == 3


def test_bred_walkers_wait_a_tick():
    cfg = busy_config(walker_spawn_chance=1.0, max_walker_count=2, roomie_chance=0.0,
                      levy_flight_enabled=False, target_carve_rate=0.9)
    walk = DrunkardsWalk(cfg)
    walk.prepare()
    walk.step()
    states = walk.walker_states()
    assert len(states) == 2
    assert states[0][4] is False
    assert states[1][4] is True
    # the newcomer sits where its parent ended the tick
    assert states[1][:2] == states[0][:2]


def test_carve_kinds_track_events():
    res = DrunkardsWalk(busy_config(roomie_chance=1.0, room_spawn_chance=0.5)).generate()
    kinds = res.meta["carve_kinds"]
    assert ((kinds != WALL) == res.grid).all()
    found = set(np.unique(kinds).tolist())
    assert ROOM in found
    assert found & {CORRIDOR, LEVY_FLIGHT}


def test_rooms_need_roomies():
    res = DrunkardsWalk(busy_config(roomie_chance=0.0, room_spawn_chance=1.0)).generate()
    assert ROOM not in np.unique(res.meta["carve_kinds"])


def test_random_start():
    res = run_model(dict(width=20, height=20, start_in_center=False,
                         seed="anywhere", use_custom_seed=True, target_carve_rate=0.1))
    assert res.meta["carve_rate"] >= 0.1


def test_step_before_prepare():
    with pytest.raises(RuntimeError):
        DrunkardsWalk(busy_config()).step()


@pytest.mark.parametrize(
    "bad",
    [
        dict(width=1, height=1),
        dict(width=0),
        dict(target_carve_rate=1.2),
        dict(bias_decay_rate=-0.1),
        dict(max_walker_count=0),
        dict(max_levy_step_length=0),
        dict(step_scheme="spiral"),
        dict(rooms=[(0, 2, 0.5)]),
    ],
)
def test_invalid_config(bad):
    with pytest.raises(ValueError):
        DrunkardsWalk(busy_config(**bad))


def test_verbose_progress(capsys):
    DrunkardsWalk(busy_config(verbose=True, target_carve_rate=0.8)).generate()
    out = capsys.readouterr().out
    assert "[walk] 100 ticks" in out
    assert "Generation completed: walk 40x30" in out


def test_prepare_spawns_first_walker_in_centre():
    walk = DrunkardsWalk(busy_config(width=9, height=7))
    walk.prepare()
    assert len(walk.walkers) == 1
    assert walk.walkers[0].position == (4, 3)
    assert walk.tiles_carved == 1
    assert walk.carve_kinds[4, 3] == NEW_WALKER
    assert walk.ticks == 0


def test_levy_flight_repeats_drawn_step_count(monkeypatch):
    calls = []
    repeat_walk = Walker.repeat_walk

    def counting_repeat_walk(self):
        calls.append(1)
        return repeat_walk(self)

    monkeypatch.setattr(Walker, "repeat_walk", counting_repeat_walk)

    cfg = WalkConfig(
        width=200,
        height=200,
        seed="levy",
        use_custom_seed=True,
        target_carve_rate=0.9,
        levy_flight_enabled=True,
        levy_flight_chance=1.0,
        max_levy_step_length=5,
    )
    walk = DrunkardsWalk(cfg)
    walk.prepare()
    per_tick = []
    for _ in range(300):
        calls.clear()
        walk.step()
        per_tick.append(len(calls))

    assert set(per_tick) == {1, 2, 3, 4, 5}
