from typer.testing import CliRunner

from realityrift.cli import app
from realityrift.storage.json_store import JsonStorage

runner = CliRunner()

PLAYER_KEY = "0x" + "44" * 32


def test_config_command():
    result = runner.invoke(app, ["config"])
    assert result.exit_code == 0
    assert "Starting score" in result.output
    assert "31337" in result.output


def test_play_command_saves_session(tmp_path):
    result = runner.invoke(app, [
        "play", "--choices", "2,4", "--player-key", PLAYER_KEY, "--results-dir", str(tmp_path)
    ])
    assert result.exit_code == 0, result.output
    assert "Games played: 2" in result.output

    sessions = JsonStorage(str(tmp_path)).load_all_sessions()
    assert [r.score for r in sessions[0].rounds] == [110, 100]


def test_play_command_rejects_bad_choice(tmp_path):
    result = runner.invoke(app, ["play", "--choices", "7", "--results-dir", str(tmp_path)])
    assert result.exit_code == 1
    assert "between 1 and 4" in result.output
