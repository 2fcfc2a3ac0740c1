import hashlib
import logging
from typing import List, Optional

from realityrift.acl.ledger import AccessControlLedger
from realityrift.compute.base import ConfidentialRuntime
from realityrift.game import rules
from realityrift.game.errors import InvalidProof, PlayerNotRegistered, RiftError
from realityrift.game.models import (
    GameConfig,
    GameEvent,
    Handle,
    MonsterGuessed,
    PlayerRegistered,
    PlayerState,
    checksum
)
from realityrift.players.registry import PlayerRegistry

logger = logging.getLogger(__name__)

CONTRACT_NAME = "EncryptedRealityRift"
DEFAULT_SECRET_CHOICE = 2


def default_address(name: str = CONTRACT_NAME) -> str:
    return checksum("0x" + hashlib.sha256(name.encode("utf-8")).hexdigest()[:40])


class GuessProcessor:
    """
    The confidential guess transition.

    Everything that can fail (registration check, proof verification) runs
    before the first write, and the writes themselves cannot fail, so a
    guess either commits completely or leaves no trace.
    """

    def __init__(
        self,
        registry: PlayerRegistry,
        ledger: AccessControlLedger,
        runtime: ConfidentialRuntime,
        config: GameConfig,
        secret_choice: Handle,
        system_address: str
    ):
        self.registry = registry
        self.ledger = ledger
        self.runtime = runtime
        self.config = config
        self.secret_choice = secret_choice
        self.system_address = checksum(system_address)

    def guess(self, player: str, encrypted_choice: Handle, proof: bytes) -> MonsterGuessed:
        player = checksum(player)

        # 1. Preconditions
        state = self.registry.get_state(player)
        if not state.registered:
            raise PlayerNotRegistered(player)

        choice = self.runtime.verify_input(
            encrypted_choice, proof, self.system_address, player, rules.CHOICE_TYPE
        )

        # 2. Encrypted comparison and branchless update
        is_correct = rules.is_correct_choice(self.runtime, choice, self.secret_choice)
        new_score = rules.next_score(self.runtime, state.encrypted_score, is_correct, self.config)

        # 3. Commit
        updated = self.registry.record_guess(player, new_score, is_correct)
        self.ledger.grant_many([new_score, is_correct], [player, self.system_address])

        logger.info(f"{player} guessed (game #{updated.games_played}), new score handle {new_score}")
        return MonsterGuessed(player=player, new_encrypted_score=new_score)


class RiftGame:
    """
    The Encrypted Reality Rift game: player registry, guess processor and
    access ledger wired to one confidential runtime.
    """

    def __init__(
        self,
        runtime: ConfidentialRuntime,
        config: Optional[GameConfig] = None,
        secret_choice: int = DEFAULT_SECRET_CHOICE,
        address: Optional[str] = None
    ):
        self.runtime = runtime
        self.config = config or GameConfig()
        self.address = checksum(address) if address else default_address()

        if not 1 <= secret_choice <= self.config.total_options:
            raise ValueError(f"Secret choice must be in 1..{self.config.total_options}")

        self.acl = AccessControlLedger()
        self.registry = PlayerRegistry(self.config, runtime, self.acl, self.address)

        # The hidden monster is only ever granted to the game itself
        self._secret_choice = runtime.trivial_encrypt(secret_choice, rules.CHOICE_TYPE)
        self.acl.grant(self._secret_choice, self.address)

        self.processor = GuessProcessor(
            self.registry, self.acl, runtime, self.config, self._secret_choice, self.address
        )
        self.events: List[GameEvent] = []

        logger.info(f"{CONTRACT_NAME} at {self.address} on {runtime.name} (protocol {runtime.protocol_id})")

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def register(self, player: str) -> PlayerRegistered:
        try:
            event = self.registry.register(player)
        except RiftError as e:
            logger.warning(f"register rejected: {e}")
            raise
        self.events.append(event)
        return event

    def guess(self, player: str, encrypted_choice: Handle, proof: bytes) -> MonsterGuessed:
        try:
            event = self.processor.guess(player, encrypted_choice, proof)
        except (PlayerNotRegistered, InvalidProof) as e:
            logger.warning(f"guess rejected: {e}")
            raise
        self.events.append(event)
        return event

    # ------------------------------------------------------------------
    # Views
    # ------------------------------------------------------------------

    def get_state(self, player: str) -> PlayerState:
        return self.registry.get_state(player)

    def get_score(self, player: str) -> Handle:
        return self.registry.get_state(player).encrypted_score

    def get_last_outcome(self, player: str) -> Handle:
        return self.registry.get_last_outcome(player)

    def get_secret_choice_handle(self) -> Handle:
        return self._secret_choice

    def get_config(self) -> GameConfig:
        return self.config

    def get_protocol_id(self) -> int:
        return self.runtime.protocol_id
