"""
Encryption Client - Builds encrypted, proof-carrying inputs for the game
"""
from typing import List, Tuple

from realityrift.compute.base import ConfidentialRuntime, EncryptedType
from realityrift.game.errors import ProtocolUnsupported
from realityrift.game.models import EncryptedInput, checksum


class EncryptedInputBuilder:
    """Collects plaintext values bound to one (contract, user) pair"""

    def __init__(self, runtime: ConfidentialRuntime, contract: str, user: str):
        self.runtime = runtime
        self.contract = checksum(contract)
        self.user = checksum(user)
        self._values: List[Tuple[int, EncryptedType]] = []

    def _add(self, value: int, ctype: EncryptedType) -> "EncryptedInputBuilder":
        if not 0 <= value <= ctype.max_value:
            raise ValueError(f"{value} does not fit in {ctype.name}")
        self._values.append((value, ctype))
        return self

    def add_bool(self, value: bool) -> "EncryptedInputBuilder":
        return self._add(int(bool(value)), EncryptedType.EBOOL)

    def add8(self, value: int) -> "EncryptedInputBuilder":
        return self._add(value, EncryptedType.EUINT8)

    def add32(self, value: int) -> "EncryptedInputBuilder":
        return self._add(value, EncryptedType.EUINT32)

    def encrypt(self) -> EncryptedInput:
        """
        Encrypt every added value.

        Returns:
            EncryptedInput with one handle per value (in order) and a single
            proof covering all of them
        """
        return self.runtime.encrypt_inputs(self._values, self.contract, self.user)


class EncryptionClient:
    """
    Caller-side encryption tooling.

    Refuses to build inputs for a game running a different protocol, so a
    mismatched client never produces a transaction.
    """

    def __init__(self, runtime: ConfidentialRuntime, protocol_id: int = None):
        self.runtime = runtime
        self.protocol_id = runtime.protocol_id if protocol_id is None else protocol_id

    def check_protocol(self, game) -> None:
        actual = game.get_protocol_id()
        if actual != self.protocol_id:
            raise ProtocolUnsupported(expected=self.protocol_id, actual=actual)

    def create_encrypted_input(self, game, user: str) -> EncryptedInputBuilder:
        self.check_protocol(game)
        return EncryptedInputBuilder(self.runtime, game.address, user)

    def encrypt_choice(self, game, user: str, choice: int) -> EncryptedInput:
        """Shortcut for a single 8-bit monster choice."""
        return self.create_encrypted_input(game, user).add8(choice).encrypt()
