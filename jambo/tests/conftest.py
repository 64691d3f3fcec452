"""
Pytest fixtures for Jambo tests.
"""

import random

import pytest

from ..engine_core.cards import WareType
from ..engine_core.setup import create_initial_state
from ..engine_core.state import GameState
from .builders import play_state, with_market


def pytest_addoption(parser):
    parser.addoption("--runslow", action="store_true", default=False, help="Run full bot-versus-bot matchups")


def pytest_collection_modifyitems(config, items):
    if config.getoption("--runslow"):
        return
    skip_slow = pytest.mark.skip(reason="needs --runslow")
    for item in items:
        if "slow" in item.keywords:
            item.add_marker(skip_slow)


@pytest.fixture
def initial_state() -> GameState:
    """A freshly dealt game: player 0 to draw."""
    return create_initial_state(seed=42)


@pytest.fixture
def trinket_state() -> GameState:
    """
    Player 0 in the play phase holding two Trinket Stalls with three
    trinkets in the market. Player 1 holds nothing that can react.
    """
    state = play_state(hand0=("ware_3k_1", "ware_3k_2"), hand1=("ware_3h_1",))
    return with_market(state, 0, [WareType.TRINKETS] * 3)


@pytest.fixture
def rng() -> random.Random:
    return random.Random(1234)
