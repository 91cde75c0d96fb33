import os
import random

import pytest

os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from rabbitcare.config import EngineConfig
from rabbitcare.database import LocalStore
from rabbitcare.engine import GameEngine
from rabbitcare.tests.helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(tmp_path):
    s = LocalStore(tmp_path / "save.db")
    yield s
    s.close()


@pytest.fixture
def config():
    return EngineConfig(namespace="test-rabbit")


@pytest.fixture
def make_engine(store, config, clock):
    engines = []

    def _make(**kwargs):
        kwargs.setdefault("config", config)
        kwargs.setdefault("clock", clock)
        kwargs.setdefault("rng", random.Random(7))
        eng = GameEngine(store, **kwargs)
        engines.append(eng)
        return eng

    yield _make
    for eng in engines:
        eng.close()


@pytest.fixture
def engine(make_engine):
    return make_engine()
