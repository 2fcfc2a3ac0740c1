import pytest

from realityrift.client.decryption import sign_user_decrypt
from realityrift.client.encryption import EncryptionClient
from realityrift.compute.mock import PlaintextRuntime
from realityrift.game.engine import RiftGame
from realityrift.game.errors import DecryptionNotAuthorized, ProtocolUnsupported
from realityrift.game.models import ZERO_HANDLE


def test_encryption_refuses_mismatched_protocol(game, alice):
    client = EncryptionClient(game.runtime, protocol_id=game.get_protocol_id() + 1)

    with pytest.raises(ProtocolUnsupported) as exc:
        client.encrypt_choice(game, alice.address, 2)
    assert exc.value.actual == game.get_protocol_id()


def test_encryption_refuses_game_on_other_runtime(alice):
    game = RiftGame(PlaintextRuntime(protocol_id=10001))
    client = EncryptionClient(PlaintextRuntime())

    with pytest.raises(ProtocolUnsupported):
        client.create_encrypted_input(game, alice.address)


def test_builder_checks_ranges(harness, alice):
    builder = harness.encryption.create_encrypted_input(harness.game, alice.address)
    with pytest.raises(ValueError):
        builder.add8(256)
    with pytest.raises(ValueError):
        builder.add32(-1)

    encrypted = builder.add8(4).add_bool(True).add32(7).encrypt()
    assert len(encrypted.handles) == 3


def test_player_decrypts_own_score_and_outcome(game, harness, alice):
    game.register(alice.address)
    harness.guess(alice, 2)

    score, outcome = game.get_score(alice.address), game.get_last_outcome(alice.address)
    clear = harness.decryption.user_decrypt(sign_user_decrypt(alice, game.address, [score, outcome]))

    assert clear == {score: 110, outcome: True}


def test_other_player_cannot_decrypt_score(game, harness, alice, bob):
    game.register(alice.address)

    with pytest.raises(DecryptionNotAuthorized):
        harness.decryption.decrypt_one(bob, game.address, game.get_score(alice.address))


def test_secret_choice_is_not_decryptable_by_players(game, harness, alice):
    game.register(alice.address)

    with pytest.raises(DecryptionNotAuthorized):
        harness.decryption.decrypt_one(alice, game.address, game.get_secret_choice_handle())


def test_request_signed_by_someone_else_is_rejected(game, harness, alice, bob):
    game.register(alice.address)
    request = sign_user_decrypt(bob, game.address, [game.get_score(alice.address)])
    forged = request.model_copy(update={"player": alice.address})

    with pytest.raises(DecryptionNotAuthorized):
        harness.decryption.user_decrypt(forged)


def test_request_for_other_contract_is_rejected(game, harness, alice):
    game.register(alice.address)
    request = sign_user_decrypt(alice, "0x" + "ab" * 20, [game.get_score(alice.address)])

    with pytest.raises(DecryptionNotAuthorized):
        harness.decryption.user_decrypt(request)


def test_empty_handle_is_not_decryptable(game, harness, alice):
    game.register(alice.address)
    with pytest.raises(ValueError):
        harness.decryption.user_decrypt(sign_user_decrypt(alice, game.address, [ZERO_HANDLE]))
