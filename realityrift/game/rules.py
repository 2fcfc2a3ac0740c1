from realityrift.compute.base import ConfidentialRuntime, EncryptedType
from realityrift.game.models import GameConfig, Handle

SCORE_TYPE = EncryptedType.EUINT32
CHOICE_TYPE = EncryptedType.EUINT8
MAX_SCORE = SCORE_TYPE.max_value


def is_correct_choice(runtime: ConfidentialRuntime, choice: Handle, secret_choice: Handle) -> Handle:
    """
    Encrypted comparison of the player's choice with the hidden monster.
    """
    return runtime.eq(choice, secret_choice)


def rewarded_score(runtime: ConfidentialRuntime, score: Handle, config: GameConfig) -> Handle:
    """
    score + reward, saturating at MAX_SCORE instead of wrapping.
    """
    reward = runtime.constant(config.reward, SCORE_TYPE)
    ceiling = runtime.constant(MAX_SCORE, SCORE_TYPE)
    headroom = runtime.constant(MAX_SCORE - config.reward, SCORE_TYPE)

    would_overflow = runtime.gt(score, headroom)
    return runtime.select(would_overflow, ceiling, runtime.add(score, reward))


def penalized_score(runtime: ConfidentialRuntime, score: Handle, config: GameConfig) -> Handle:
    """
    max(score - penalty, 0). The wrapped difference is always computed and
    discarded by the select when the score cannot cover the penalty.
    """
    penalty = runtime.constant(config.penalty, SCORE_TYPE)
    zero = runtime.constant(0, SCORE_TYPE)

    can_pay = runtime.ge(score, penalty)
    return runtime.select(can_pay, runtime.sub(score, penalty), zero)


def next_score(
    runtime: ConfidentialRuntime,
    score: Handle,
    is_correct: Handle,
    config: GameConfig
) -> Handle:
    """
    Branchless score transition: both candidates are evaluated, the
    encrypted outcome only drives the final select.
    """
    candidate_win = rewarded_score(runtime, score, config)
    candidate_loss = penalized_score(runtime, score, config)
    return runtime.select(is_correct, candidate_win, candidate_loss)
