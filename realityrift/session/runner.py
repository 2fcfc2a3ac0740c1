import logging
from typing import List, Optional

from rich.progress import BarColumn, Progress, SpinnerColumn, TaskProgressColumn, TextColumn

from realityrift.client.decryption import DecryptionService, sign_user_decrypt
from realityrift.client.encryption import EncryptionClient
from realityrift.game.engine import RiftGame
from realityrift.game.models import RoundRecord, SessionRecord
from realityrift.storage.json_store import JsonStorage

logger = logging.getLogger(__name__)


class SessionRunner:
    """
    Plays a sequence of guesses for one local account and records the
    decrypted results.
    """

    def __init__(
        self,
        game: RiftGame,
        encryption: EncryptionClient,
        decryption: DecryptionService,
        storage: Optional[JsonStorage] = None
    ):
        self.game = game
        self.encryption = encryption
        self.decryption = decryption
        self.storage = storage

    def play(self, account, choices: List[int], show_progress: bool = False) -> SessionRecord:
        total = self.game.get_config().total_options
        for choice in choices:
            if not 1 <= choice <= total:
                raise ValueError(f"choice must be between 1 and {total}, got {choice}")

        player = account.address
        if not self.game.get_state(player).registered:
            self.game.register(player)

        rounds = []
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            BarColumn(),
            TaskProgressColumn(),
            disable=not show_progress,
        ) as progress:
            task = progress.add_task("[cyan]Guessing...", total=len(choices))

            for choice in choices:
                progress.update(task, description=f"[cyan]Monster #{choice}")

                encrypted = self.encryption.encrypt_choice(self.game, player, choice)
                self.game.guess(player, encrypted.handles[0], encrypted.input_proof)
                rounds.append(self._decrypt_round(account, len(rounds) + 1, choice))

                progress.advance(task)

        record = SessionRecord(
            config=self.game.get_config(),
            protocol_id=self.game.get_protocol_id(),
            contract=self.game.address,
            player=player,
            backend=self.game.runtime.name,
            events=[e for e in self.game.events if e.player == player],
            rounds=rounds,
            final_state=self.game.get_state(player),
        )
        if self.storage:
            path = self.storage.save_session(record)
            logger.info(f"Saved session to {path}")
        return record

    def _decrypt_round(self, account, round_number: int, choice: int) -> RoundRecord:
        score_handle = self.game.get_score(account.address)
        outcome_handle = self.game.get_last_outcome(account.address)

        request = sign_user_decrypt(account, self.game.address, [score_handle, outcome_handle])
        clear = self.decryption.user_decrypt(request)

        return RoundRecord(
            round_number=round_number,
            choice=choice,
            correct=clear[outcome_handle],
            score=clear[score_handle],
            encrypted_score=score_handle,
        )
