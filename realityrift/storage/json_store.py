import json
from pathlib import Path
from typing import List

from realityrift.game.models import SessionRecord


class JsonStorage:
    """
    Persists played sessions (events, decrypted rounds, final state) as JSON files.
    """

    def __init__(self, base_path: str = "results"):
        self.base_path = Path(base_path)
        self.sessions_path = self.base_path / "sessions"

        # Ensure directories exist
        self.sessions_path.mkdir(parents=True, exist_ok=True)

    def save_session(self, record: SessionRecord) -> Path:
        filename = (
            f"session_{record.timestamp.strftime('%Y%m%d_%H%M%S_%f')}_{record.player[2:10].lower()}.json"
        )
        file_path = self.sessions_path / filename
        with open(file_path, 'w') as f:
            f.write(record.model_dump_json(indent=2))
        return file_path

    def load_all_sessions(self) -> List[SessionRecord]:
        sessions = []
        for file in sorted(self.sessions_path.glob("*.json")):
            with open(file, 'r') as f:
                data = json.load(f)
                sessions.append(SessionRecord.model_validate(data))
        return sessions
