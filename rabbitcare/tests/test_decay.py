import random

from rabbitcare.config import EngineConfig
from rabbitcare.models import DecayMode, Poop


def test_tick_decays_hunger_and_clean(engine):
    assert engine.tick() is True
    s = engine.state
    assert (s.hunger_level, s.clean_level, s.happy_level) == (1, 1, 2)


def test_happiness_drops_only_after_a_stat_was_already_empty(engine):
    engine.tick()
    engine.tick()
    s = engine.state
    # Hunger and cleanliness just reached 0 on this tick; happiness holds
    assert (s.hunger_level, s.clean_level, s.happy_level) == (0, 0, 2)
    engine.tick()
    assert engine.state.happy_level == 1
    engine.tick()
    assert engine.state.happy_level == 0


def test_one_empty_stat_is_enough_to_drop_happiness(engine):
    engine.state.hunger_level = 0
    engine.tick()
    assert (engine.state.hunger_level, engine.state.clean_level, engine.state.happy_level) == (0, 1, 1)


def test_tick_does_not_count_as_interaction(engine, clock):
    started = engine.state.last_interaction
    clock.advance(60_000)
    engine.tick()
    assert engine.state.last_interaction == started


def test_tick_spawns_poop_until_cap(engine):
    engine.tick()
    assert len(engine.state.poops) == 1
    poop = engine.state.poops[0]
    assert 10.0 <= poop.x <= 90.0
    assert 5.0 <= poop.y <= 25.0
    for _ in range(20):
        engine.tick()
    assert len(engine.state.poops) == 10
    assert len({p.id for p in engine.state.poops}) == 10


def test_no_poop_past_cap(engine):
    engine.state.clean_level = 2
    engine.state.hunger_level = 2
    engine.state.poops = [Poop(i, 50.0, 10.0) for i in range(10)]
    engine.tick()
    assert len(engine.state.poops) == 10


def test_idle_only_mode_waits_for_inactivity(make_engine, clock):
    eng = make_engine(config=EngineConfig(namespace="idle", decay_mode=DecayMode.IDLE_ONLY), rng=random.Random(1))
    clock.advance(60_000)
    assert eng.tick() is False
    assert eng.state.hunger_level == 2

    clock.advance(61_000)
    assert eng.tick() is True
    assert eng.state.hunger_level == 1
    # The idle window restarts after a decay
    assert eng.state.last_interaction == clock.now
    clock.advance(60_000)
    assert eng.tick() is False


def test_idle_only_mode_is_stalled_by_actions(make_engine, clock):
    eng = make_engine(config=EngineConfig(namespace="idle", decay_mode="idle_only"))
    clock.advance(100_000)
    eng.pet()
    clock.advance(100_000)
    assert eng.tick() is False


def test_decay_timer_runs_from_step(make_engine, clock):
    eng = make_engine(config=EngineConfig(namespace="timer", decay_interval_ms=45_000))
    eng.start()
    clock.advance(44_000)
    eng.step()
    assert eng.state.hunger_level == 2
    clock.advance(1_000)
    eng.step()
    assert eng.state.hunger_level == 1
    clock.advance(45_000)
    eng.step()
    assert eng.state.hunger_level == 0


def test_close_cancels_timers(engine, clock):
    engine.start()
    assert len(engine.scheduler.active) == 1
    engine.close()
    assert engine.scheduler.active == []
    clock.advance(10 * 60_000)
    engine.step()
    assert engine.state.hunger_level == 2
