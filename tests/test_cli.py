import bz2
import json
from pathlib import Path

import requests
import responses

from lichess_indexer.cli import main, open_pgn, run, upload_batches
from lichess_indexer.importer import Batch, Game, Player

ENDPOINT = "http://localhost:9002"
URL = f"{ENDPOINT}/import/lichess"


def pgn_text(site):
    return (
        f'[Site "https://lichess.org/{site}"]\n'
        '[Result "0-1"]\n'
        '[UTCDate "2021.01.02"]\n'
        '[WhiteElo "2000"]\n'
        '[BlackElo "2000"]\n'
        '[TimeControl "1800+0"]\n'
        "\n"
        "1. e4 e5 0-1\n\n"
    )


def test_open_pgn_plain_and_compressed(tmp_path):
    data = pgn_text("DXZdUVdv").encode()
    plain = tmp_path / "games.pgn"
    plain.write_bytes(data)
    packed = tmp_path / "games.pgn.bz2"
    with bz2.open(packed, "wb") as handle:
        handle.write(data)
    with open_pgn(plain) as stream:
        assert stream.read() == data
    with open_pgn(packed) as stream:
        assert stream.read() == data


def test_upload_batches_puts_json(capsys):
    game = Game(id="DXZdUVdv", date="2021.01.02", white=Player("alice", 2000), moves=["e4"])
    with responses.RequestsMock() as mock:
        mock.add(responses.PUT, URL, body="imported")
        with requests.Session() as session:
            count = upload_batches([Batch(Path("a.pgn"), [game])], ENDPOINT, session)
        assert count == 1
        assert json.loads(mock.calls[0].request.body) == [game.to_json()]
    out = capsys.readouterr().out
    assert "imported" in out
    assert "2021.01.02" in out


def test_run_uploads_games(tmp_path):
    path = tmp_path / "games.pgn"
    path.write_text(pgn_text("DXZdUVdv") + pgn_text("rvSvQdIe"))
    with responses.RequestsMock() as mock:
        mock.add(responses.PUT, URL, body="ok")
        count = run([path], ENDPOINT, 200)
        assert count == len(mock.calls)
        games = json.loads(mock.calls[0].request.body)
    assert [game["id"] for game in games] == ["DXZdUVdv", "rvSvQdIe"]
    assert all(game["winner"] == "black" for game in games)


def test_main_batches_by_size(tmp_path):
    path = tmp_path / "games.pgn"
    path.write_text(pgn_text("DXZdUVdv") + pgn_text("rvSvQdIe"))
    with responses.RequestsMock() as mock:
        mock.add(responses.PUT, URL, body="ok")
        status = main(["--endpoint", ENDPOINT, "--batch-size", "1", str(path)])
        sizes = [len(json.loads(call.request.body)) for call in mock.calls]
    assert status == 0
    assert sizes == [1, 1, 0]


def test_main_missing_file_fails(tmp_path):
    assert main([str(tmp_path / "missing.pgn")]) == 1
    assert not (tmp_path / "missing.pgn").exists()