import pytest
from eth_account import Account

from realityrift.client.decryption import DecryptionService
from realityrift.client.encryption import EncryptionClient
from realityrift.compute.mock import PlaintextRuntime
from realityrift.game.engine import RiftGame
from realityrift.game.models import ZERO_HANDLE

ALICE_KEY = "0x" + "11" * 32
BOB_KEY = "0x" + "22" * 32
CAROL_KEY = "0x" + "33" * 32


class Harness:
    """Plays the role of the off-chain tooling around a game."""

    def __init__(self, game: RiftGame):
        self.game = game
        self.encryption = EncryptionClient(game.runtime)
        self.decryption = DecryptionService(game.runtime, game.acl)

    def guess(self, account, choice: int):
        encrypted = self.encryption.encrypt_choice(self.game, account.address, choice)
        return self.game.guess(account.address, encrypted.handles[0], encrypted.input_proof)

    def decrypt_score(self, account) -> int:
        handle = self.game.get_score(account.address)
        if handle == ZERO_HANDLE:
            return 0
        return self.decryption.decrypt_one(account, self.game.address, handle)

    def decrypt_outcome(self, account) -> bool:
        handle = self.game.get_last_outcome(account.address)
        return self.decryption.decrypt_one(account, self.game.address, handle)


@pytest.fixture
def runtime():
    return PlaintextRuntime()


@pytest.fixture
def game(runtime):
    return RiftGame(runtime)


@pytest.fixture
def harness(game):
    return Harness(game)


@pytest.fixture
def alice():
    return Account.from_key(ALICE_KEY)


@pytest.fixture
def bob():
    return Account.from_key(BOB_KEY)


@pytest.fixture
def carol():
    return Account.from_key(CAROL_KEY)


@pytest.fixture
def harness_for():
    return Harness
