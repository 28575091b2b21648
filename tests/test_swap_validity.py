import pytest

from match3.components.game_state import TurnPhase
from match3.events.bus import EVENT_TILE_SWAP_REJECTED, EVENT_TILE_SWAP_REQUEST
from match3.systems.board_ops import find_matches

from tests.helpers import SWAP_FIXTURE, make_harness


def test_non_adjacent_pairs_are_ignored():
    harness = make_harness(SWAP_FIXTURE)
    positions = list(harness.board.positions())
    for src in positions:
        for dst in positions:
            if abs(src[0] - dst[0]) + abs(src[1] - dst[1]) == 1:
                continue
            assert harness.swap(src, dst) is None
    assert harness.events == []
    assert harness.board.snapshot() == SWAP_FIXTURE
    assert harness.state.phase is TurnPhase.IDLE


@pytest.mark.parametrize(
    "src,dst",
    [
        ((4, 4), (4, 5)),
        ((-1, 0), (0, 0)),
        ((0, 0), None),
        (None, (0, 1)),
        ((0,), (0, 1)),
        (("0", 0), (0, 1)),
        ((True, 0), (0, 0)),
    ],
)
def test_out_of_bounds_or_malformed_positions_are_ignored(src, dst):
    harness = make_harness(SWAP_FIXTURE)
    assert harness.swap(src, dst) is None
    assert harness.events == []
    assert harness.board.snapshot() == SWAP_FIXTURE


@pytest.mark.parametrize("phase", [TurnPhase.SWAPPING, TurnPhase.CASCADING, TurnPhase.GAME_OVER])
def test_requests_outside_idle_are_ignored(phase):
    harness = make_harness(SWAP_FIXTURE)
    harness.state.phase = phase
    assert harness.swap((4, 2), (4, 3)) is None
    assert harness.events == []
    assert harness.board.snapshot() == SWAP_FIXTURE
    assert harness.state.phase is phase


def test_swap_without_match_is_rejected_and_reverted():
    harness = make_harness(SWAP_FIXTURE)
    script = harness.swap((0, 0), (0, 1))
    assert script is not None
    assert harness.names() == [EVENT_TILE_SWAP_REJECTED]
    assert harness.events[0][1] == {"src": (0, 0), "dst": (0, 1)}
    assert harness.board.snapshot() == SWAP_FIXTURE
    assert not find_matches(harness.board)
    assert harness.score.current == 0
    assert harness.state.phase is TurnPhase.IDLE


def test_swapping_equal_tiles_is_always_rejected():
    harness = make_harness(SWAP_FIXTURE)
    assert SWAP_FIXTURE[4][0] == SWAP_FIXTURE[4][1]
    harness.swap((4, 0), (4, 1))
    assert harness.names() == [EVENT_TILE_SWAP_REJECTED]
    assert harness.board.snapshot() == SWAP_FIXTURE


def test_swap_request_event_reaches_the_engine():
    harness = make_harness(SWAP_FIXTURE)
    harness.bus.emit(EVENT_TILE_SWAP_REQUEST, src=[0, 0], dst=[0, 1])
    assert harness.names() == [EVENT_TILE_SWAP_REJECTED]
    assert harness.events[0][1]["src"] == (0, 0)


def test_engine_accepts_swaps_again_after_rejection():
    harness = make_harness(SWAP_FIXTURE)
    harness.swap((0, 0), (0, 1))
    harness.swap((0, 0), (0, 1))
    assert harness.names() == [EVENT_TILE_SWAP_REJECTED, EVENT_TILE_SWAP_REJECTED]
