"""Command line entry point: read PGN files and upload sampled games."""

from __future__ import annotations

import argparse
import bz2
import queue
import sys
import threading
from pathlib import Path
from typing import Iterable, Iterator

import requests

from .importer import Batch, Importer
from .pgn import read_pgn

DEFAULT_ENDPOINT = "http://localhost:9002"
DEFAULT_BATCH_SIZE = 200
QUEUE_SIZE = 50
TIMEOUT = 60
SPINNER = "⣾⣽⣻⢿⡿⣟⣯⣷"

_DONE = object()


def open_pgn(path):
    """Open a PGN file for binary reading, decompressing ``.bz2`` files."""
    path = Path(path)
    if path.suffix == ".bz2":
        print(f'Reading compressed "{path}" ...')
        return bz2.open(path, "rb")
    print(f'Reading "{path}" ...')
    return open(path, "rb")


def upload_batches(batches: Iterable[Batch], endpoint, session):
    """PUT every batch to the import endpoint; return how many were sent."""
    url = f"{endpoint}/import/lichess"
    count = 0
    for count, batch in enumerate(batches, 1):
        response = session.put(
            url, json=[game.to_json() for game in batch.games], timeout=TIMEOUT
        )
        date = batch.games[-1].date if batch.games and batch.games[-1].date else ""
        print(
            f'{SPINNER[count % len(SPINNER)]} "{batch.filename}": {date}: '
            f"{response.status_code} {response.reason} - {response.text}"
        )
    return count


def _drain(source: queue.Queue) -> Iterator[Batch]:
    while (item := source.get()) is not _DONE:
        yield item


def run(pgns, endpoint=DEFAULT_ENDPOINT, batch_size=DEFAULT_BATCH_SIZE):
    """Import every PGN file, uploading batches in the background."""
    pending: queue.Queue = queue.Queue(maxsize=QUEUE_SIZE)
    errors: list[BaseException] = []
    uploaded: list[int] = []

    def consume():
        batches = _drain(pending)
        try:
            with requests.Session() as session:
                uploaded.append(upload_batches(batches, endpoint, session))
        except BaseException as exc:  # re-raised in the calling thread
            errors.append(exc)
            for _ in batches:
                pass

    worker = threading.Thread(target=consume, daemon=True)
    worker.start()
    try:
        for path in map(Path, pgns):
            with open_pgn(path) as stream:
                importer = Importer(pending.put, path, batch_size)
                read_pgn(stream, importer)
                importer.send()
    finally:
        pending.put(_DONE)
        worker.join()
    if errors:
        raise errors[0]
    return uploaded[0] if uploaded else 0


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="index-lichess",
        description="Sample games from PGN files and upload them for indexing.",
    )
    parser.add_argument("--endpoint", default=DEFAULT_ENDPOINT)
    parser.add_argument("--batch-size", type=int, default=DEFAULT_BATCH_SIZE)
    parser.add_argument("pgns", nargs="*", type=Path)
    args = parser.parse_args(argv)
    try:
        run(args.pgns, args.endpoint, args.batch_size)
    except (OSError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())