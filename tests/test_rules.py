from realityrift.compute.base import EncryptedType
from realityrift.compute.mock import PlaintextRuntime
from realityrift.game import rules
from realityrift.game.models import GameConfig

CONFIG = GameConfig()


def _score(runtime, value):
    return runtime.trivial_encrypt(value, rules.SCORE_TYPE)


def _bool(runtime, value):
    return runtime.trivial_encrypt(int(value), EncryptedType.EBOOL)


def test_next_score_rewards_and_penalizes():
    runtime = PlaintextRuntime()
    score = _score(runtime, 100)

    assert runtime.decrypt(rules.next_score(runtime, score, _bool(runtime, True), CONFIG)) == 110
    assert runtime.decrypt(rules.next_score(runtime, score, _bool(runtime, False), CONFIG)) == 90


def test_penalized_score_floors_at_zero():
    runtime = PlaintextRuntime()
    for start, expected in [(0, 0), (5, 0), (10, 0), (11, 1), (250, 240)]:
        assert runtime.decrypt(rules.penalized_score(runtime, _score(runtime, start), CONFIG)) == expected


def test_rewarded_score_saturates_at_uint32_max():
    runtime = PlaintextRuntime()
    for start, expected in [
        (rules.MAX_SCORE - 20, rules.MAX_SCORE - 10),
        (rules.MAX_SCORE - 10, rules.MAX_SCORE),
        (rules.MAX_SCORE - 3, rules.MAX_SCORE),
        (rules.MAX_SCORE, rules.MAX_SCORE),
    ]:
        assert runtime.decrypt(rules.rewarded_score(runtime, _score(runtime, start), CONFIG)) == expected


def test_is_correct_choice_compares_encrypted_values():
    runtime = PlaintextRuntime()
    secret = runtime.trivial_encrypt(2, rules.CHOICE_TYPE)

    for choice in range(1, 5):
        handle = rules.is_correct_choice(runtime, runtime.trivial_encrypt(choice, rules.CHOICE_TYPE), secret)
        assert runtime.type_of(handle) == EncryptedType.EBOOL
        assert runtime.decrypt(handle) == int(choice == 2)


def test_update_runs_the_same_operations_whatever_the_outcome():
    runtime = PlaintextRuntime()
    score = _score(runtime, 5)

    runtime.trace.clear()
    rules.next_score(runtime, score, _bool(runtime, True), CONFIG)
    correct_trace = list(runtime.trace)

    runtime.trace.clear()
    rules.next_score(runtime, score, _bool(runtime, False), CONFIG)

    assert runtime.trace == correct_trace
    assert correct_trace.count("select.EUINT32") == 3
    assert "add.EUINT32" in correct_trace
    assert "sub.EUINT32" in correct_trace


def test_custom_config_values():
    runtime = PlaintextRuntime()
    config = GameConfig(starting_score=50, reward=25, penalty=7, total_options=4)
    score = _score(runtime, 50)

    assert runtime.decrypt(rules.next_score(runtime, score, _bool(runtime, True), config)) == 75
    assert runtime.decrypt(rules.next_score(runtime, score, _bool(runtime, False), config)) == 43
