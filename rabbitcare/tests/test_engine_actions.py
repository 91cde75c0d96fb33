import pytest

from rabbitcare.models import PlacedItem, Poop, Mood


def test_fresh_engine_has_defaults(engine, clock):
    s = engine.state
    assert (s.hunger_level, s.clean_level, s.happy_level) == (2, 2, 2)
    assert s.hearts == 0
    assert s.level == 1
    assert s.current_background == "room"
    assert s.unlocked_backgrounds == {"room"}
    assert s.equipment == {}
    assert s.last_interaction == clock.now


def test_feed_restores_hunger_and_pays(engine, clock):
    engine.state.hunger_level = 0
    engine.state.happy_level = 0
    clock.advance(5000)
    assert engine.feed() is True
    assert engine.state.hunger_level == 2
    assert engine.state.happy_level == 1
    assert engine.state.hearts == 5
    assert engine.state.last_interaction == clock.now


def test_clean_clears_poops(engine):
    engine.state.clean_level = 0
    engine.state.poops = [Poop(1, 20.0, 10.0), Poop(2, 30.0, 12.0)]
    engine.clean()
    assert engine.state.clean_level == 2
    assert engine.state.poops == []
    assert engine.state.hearts == 5


def test_pet_maxes_happiness(engine):
    engine.state.happy_level = 0
    engine.pet()
    assert engine.state.happy_level == 2
    assert engine.state.hearts == 3


def test_levels_stay_in_range_under_spam(engine):
    for _ in range(20):
        engine.feed()
        engine.clean()
        engine.pet()
        for value in (engine.state.hunger_level, engine.state.clean_level, engine.state.happy_level):
            assert 0 <= value <= 2
        engine.tick()
        for value in (engine.state.hunger_level, engine.state.clean_level, engine.state.happy_level):
            assert 0 <= value <= 2


def test_scoop_poop_removes_one_and_pays_two(engine):
    engine.state.poops = [Poop(1, 40.0, 10.0)]
    assert engine.scoop_poop(1) is True
    assert engine.state.poops == []
    assert engine.state.hearts == 2


def test_scoop_missing_poop_is_noop(engine, clock):
    engine.state.poops = [Poop(1, 40.0, 10.0)]
    before = engine.state.copy()
    clock.advance(1000)
    assert engine.scoop_poop(99) is False
    assert engine.state == before


def test_earn_hearts_levels_up(engine):
    engine.earn_hearts(100)
    assert engine.state.level == 2
    engine.earn_hearts(200)
    assert engine.state.total_hearts_earned == 300
    assert engine.state.level == 3


def test_spending_never_lowers_level(engine):
    engine.earn_hearts(350)
    assert engine.state.level == 3
    engine.earn_hearts(-300)
    assert engine.state.hearts == 50
    assert engine.state.level == 3
    assert engine.state.total_hearts_earned == 350


def test_spending_is_floored_at_zero(engine):
    engine.earn_hearts(10)
    engine.earn_hearts(-25)
    assert engine.state.hearts == 0
    assert engine.state.total_hearts_earned == 10


def test_earn_hearts_rejects_non_int(engine):
    with pytest.raises(TypeError):
        engine.earn_hearts(2.5)
    with pytest.raises(TypeError):
        engine.earn_hearts(True)


def test_daily_gift_once_per_day(engine, clock):
    first = engine.claim_daily_gift()
    assert 50 <= first <= 100
    assert engine.state.hearts == first
    snapshot = engine.state.copy()

    clock.advance(60 * 60 * 1000)
    assert engine.can_claim_daily_gift() is False
    assert engine.claim_daily_gift() == 0
    assert engine.state == snapshot

    clock.advance(24 * 60 * 60 * 1000)
    second = engine.claim_daily_gift()
    assert 50 <= second <= 100
    assert engine.state.hearts == first + second


def test_unlock_item_requires_hearts(engine):
    before = engine.state.copy()
    assert engine.unlock_item("blue-hat") is False
    assert engine.state == before


def test_unlock_item_deducts_once(engine):
    engine.earn_hearts(120)
    assert engine.unlock_item("blue-hat") is True
    assert engine.state.hearts == 70
    assert "blue-hat" in engine.state.unlocked_items
    assert engine.unlock_item("blue-hat") is False
    assert engine.state.hearts == 70


def test_unlock_unknown_item_is_noop(engine):
    engine.earn_hearts(500)
    assert engine.unlock_item("jetpack") is False
    assert engine.state.hearts == 500


def test_unlock_and_set_background(engine):
    assert engine.set_background("beach") is False
    engine.earn_hearts(150)
    assert engine.unlock_background("beach") is True
    assert engine.state.hearts == 50
    assert engine.set_background("beach") is True
    assert engine.state.current_background == "beach"
    assert engine.unlock_background("beach") is False


def test_equip_and_unequip(engine):
    engine.earn_hearts(50)
    engine.unlock_item("blue-hat")
    assert engine.equip_item("blue-hat", "head") is True
    assert engine.state.equipment["head"] == "blue-hat"
    assert engine.equip_item(None, "head") is True
    assert "head" not in engine.state.equipment


def test_equip_refuses_locked_or_wrong_slot(engine):
    assert engine.equip_item("blue-hat", "head") is False
    engine.earn_hearts(50)
    engine.unlock_item("blue-hat")
    assert engine.equip_item("blue-hat", "hand") is False
    assert engine.state.equipment == {}


def test_equip_bad_slot_raises(engine):
    with pytest.raises(ValueError):
        engine.equip_item(None, "tail")


def test_save_outfit_replaces_placements(engine):
    engine.save_outfit([
        {"uiId": "a", "itemId": "balloon", "x": 10, "y": 20, "scale": 9, "rotation": 45, "zIndex": 1},
        PlacedItem("b", "teddy", z_index=2),
        {"uiId": "a", "itemId": "teddy"},
        {"uiId": "c", "itemId": "not-in-catalog"},
    ])
    assert [p.ui_id for p in engine.state.placed_items] == ["a", "b"]
    assert engine.state.placed_items[0].scale == 6.0

    engine.save_outfit([])
    assert engine.state.placed_items == []


def test_listeners_see_each_change(engine):
    seen = []
    engine.subscribe(lambda s: seen.append(s.hearts))
    engine.feed()
    engine.pet()
    assert seen == [5, 8]


def test_failing_listener_does_not_break_actions(engine):
    def boom(state):
        raise RuntimeError("render failed")

    engine.subscribe(boom)
    assert engine.feed() is True
    assert engine.state.hearts == 5


def test_reset_restores_defaults(engine):
    engine.earn_hearts(400)
    engine.reset()
    assert engine.state.hearts == 0
    assert engine.state.level == 1


def test_mood(engine):
    assert engine.state.mood() == Mood.HAPPY
    engine.state.happy_level = 1
    assert engine.state.mood() == Mood.NORMAL
    engine.state.hunger_level = 0
    assert engine.state.mood() == Mood.SAD
