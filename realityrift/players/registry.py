import logging
from typing import Dict, List

from realityrift.acl.ledger import AccessControlLedger
from realityrift.compute.base import ConfidentialRuntime
from realityrift.game.errors import AlreadyRegistered
from realityrift.game.models import (
    GameConfig,
    Handle,
    PlayerRegistered,
    PlayerState,
    ZERO_HANDLE,
    checksum
)
from realityrift.game.rules import SCORE_TYPE

logger = logging.getLogger(__name__)


class PlayerRegistry:
    """
    Owns per-player state: the current score handle, the games counter,
    the registration flag and the last outcome handle.
    """

    def __init__(
        self,
        config: GameConfig,
        runtime: ConfidentialRuntime,
        ledger: AccessControlLedger,
        system_address: str
    ):
        self.config = config
        self.runtime = runtime
        self.ledger = ledger
        self.system_address = checksum(system_address)
        # player -> PlayerState
        self._states: Dict[str, PlayerState] = {}
        # player -> last outcome handle
        self._outcomes: Dict[str, Handle] = {}

    def register(self, player: str) -> PlayerRegistered:
        player = checksum(player)
        if self.is_registered(player):
            raise AlreadyRegistered(player)

        score = self.runtime.trivial_encrypt(self.config.starting_score, SCORE_TYPE)

        self._states[player] = PlayerState(encrypted_score=score, games_played=0, registered=True)
        self.ledger.grant_many([score], [player, self.system_address])

        logger.info(f"Registered {player} with score handle {score}")
        return PlayerRegistered(player=player, encrypted_score=score)

    def is_registered(self, player: str) -> bool:
        return self.get_state(player).registered

    def get_state(self, player: str) -> PlayerState:
        return self._states.get(checksum(player), PlayerState())

    def get_last_outcome(self, player: str) -> Handle:
        return self._outcomes.get(checksum(player), ZERO_HANDLE)

    def record_guess(self, player: str, new_score: Handle, outcome: Handle) -> PlayerState:
        """
        Write path used by the guess processor once a guess is fully computed.
        """
        player = checksum(player)
        current = self._states[player]
        updated = current.model_copy(update={
            "encrypted_score": new_score,
            "games_played": current.games_played + 1,
        })
        self._states[player] = updated
        self._outcomes[player] = outcome
        return updated

    def players(self) -> List[str]:
        return list(self._states)
