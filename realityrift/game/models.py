from datetime import datetime
from typing import Annotated, Literal, Union

from eth_utils import to_checksum_address
from pydantic import BaseModel, ConfigDict, Field, field_validator

Handle = str

ZERO_HANDLE: Handle = "0x" + "00" * 32

UINT32_MAX = (1 << 32) - 1


def checksum(address: str) -> str:
    """
    Normalizes an address to its checksum form, raising ValueError if invalid.
    """
    try:
        return to_checksum_address(address)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid address: {address!r}") from e


class GameConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    starting_score: int = Field(100, ge=0, le=UINT32_MAX)  # Hidden score seeded at registration
    reward: int = Field(10, ge=0, le=UINT32_MAX)           # Added on a correct guess
    penalty: int = Field(10, ge=0, le=UINT32_MAX)          # Removed on a wrong guess, floored at 0
    total_options: int = Field(4, ge=1, le=255)            # Monsters to choose from (1..total_options)


class PlayerState(BaseModel):
    model_config = ConfigDict(frozen=True)

    encrypted_score: Handle = ZERO_HANDLE
    games_played: int = 0
    registered: bool = False


class EncryptedInput(BaseModel):
    handles: list[Handle]
    input_proof: bytes


class PlayerRegistered(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["PlayerRegistered"] = "PlayerRegistered"
    player: str
    encrypted_score: Handle

    @field_validator("player")
    @classmethod
    def _checksum_player(cls, v: str) -> str:
        return checksum(v)


class MonsterGuessed(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: Literal["MonsterGuessed"] = "MonsterGuessed"
    player: str
    new_encrypted_score: Handle

    @field_validator("player")
    @classmethod
    def _checksum_player(cls, v: str) -> str:
        return checksum(v)


GameEvent = Annotated[Union[PlayerRegistered, MonsterGuessed], Field(discriminator="kind")]


class UserDecryptRequest(BaseModel):
    player: str                  # Signer, must be authorized on every handle
    contract: str                # Game whose handles are requested
    handles: list[Handle]
    signature: bytes             # EIP-191 signature over the request message


class RoundRecord(BaseModel):
    round_number: int
    choice: int                  # Plaintext choice, known only to the player
    correct: bool                # Decrypted last outcome
    score: int                   # Decrypted score after the round
    encrypted_score: Handle


class SessionRecord(BaseModel):
    config: GameConfig
    protocol_id: int
    contract: str
    player: str
    backend: str
    events: list[GameEvent] = Field(default_factory=list)
    rounds: list[RoundRecord] = Field(default_factory=list)
    final_state: PlayerState
    timestamp: datetime = Field(default_factory=datetime.now)
