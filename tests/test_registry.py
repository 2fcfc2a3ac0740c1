import pytest

from realityrift.acl.ledger import AccessControlLedger
from realityrift.compute.base import EncryptedType
from realityrift.compute.mock import PlaintextRuntime
from realityrift.game.errors import AlreadyRegistered
from realityrift.game.models import GameConfig, PlayerState, ZERO_HANDLE, checksum
from realityrift.players.registry import PlayerRegistry

SYSTEM = checksum("0x" + "5e" * 20)
PLAYER = checksum("0x" + "a1" * 20)


@pytest.fixture
def registry():
    return PlayerRegistry(GameConfig(starting_score=42), PlaintextRuntime(), AccessControlLedger(), SYSTEM)


def test_register_creates_state_and_grants(registry):
    event = registry.register(PLAYER)

    state = registry.get_state(PLAYER)
    assert state.registered is True
    assert state.games_played == 0
    assert state.encrypted_score == event.encrypted_score
    assert registry.runtime.decrypt(state.encrypted_score) == 42
    assert registry.ledger.principals(state.encrypted_score) == {PLAYER, SYSTEM}


def test_register_is_one_way(registry):
    registry.register(PLAYER)
    with pytest.raises(AlreadyRegistered):
        registry.register(PLAYER.lower())
    assert registry.players() == [PLAYER]


def test_unknown_player_reads_default_state(registry):
    assert registry.get_state(PLAYER) == PlayerState()
    assert registry.get_last_outcome(PLAYER) == ZERO_HANDLE
    assert not registry.is_registered(PLAYER)


def test_record_guess_advances_counter_and_handles(registry):
    registry.register(PLAYER)
    score = registry.runtime.trivial_encrypt(52, EncryptedType.EUINT32)
    outcome = registry.runtime.trivial_encrypt(1, EncryptedType.EBOOL)

    updated = registry.record_guess(PLAYER, score, outcome)

    assert updated.games_played == 1
    assert updated.encrypted_score == score
    assert registry.get_last_outcome(PLAYER) == outcome
    assert registry.get_state(PLAYER) == updated
