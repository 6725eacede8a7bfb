"""Turns PGN games into sampled batches ready for the explorer import."""

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from .pgn import PgnError, Visitor, parse_winner

STANDARD_START_FEN = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"

_UNSIGNED = re.compile(r"\d+", re.ASCII)
_SIGNED = re.compile(r"[+-]?\d+", re.ASCII)


def _parse_int(text: str, pattern, limit: int, what: str, whole: str) -> int:
    if not pattern.fullmatch(text) or not 0 <= int(text) < limit:
        raise ValueError(f"invalid {what}: {whole!r}")
    return int(text)


class Speed(Enum):
    ULTRA_BULLET = "ultraBullet"
    BULLET = "bullet"
    BLITZ = "blitz"
    RAPID = "rapid"
    CLASSICAL = "classical"
    CORRESPONDENCE = "correspondence"

    @classmethod
    def from_seconds_and_increment(cls, seconds, increment):
        total = seconds + 40 * increment
        for limit, speed in (
            (30, cls.ULTRA_BULLET),
            (180, cls.BULLET),
            (480, cls.BLITZ),
            (1500, cls.RAPID),
            (21_600, cls.CLASSICAL),
        ):
            if total < limit:
                return speed
        return cls.CORRESPONDENCE

    @classmethod
    def from_time_control(cls, text):
        """Parse a TimeControl header such as ``300+3`` or ``-``."""
        if text == "-":
            return cls.CORRESPONDENCE
        parts = text.split("+", 1)
        if len(parts) != 2:
            raise ValueError(f"invalid time control: {text!r}")
        seconds, increment = (
            _parse_int(part, _UNSIGNED, 2**64, "time control", text) for part in parts
        )
        return cls.from_seconds_and_increment(seconds, increment)


_LADDERS = {
    Speed.RAPID: ((2200, 100), (2000, 83), (1800, 46), (1600, 39)),
    Speed.BLITZ: ((2200, 38), (2000, 18), (1600, 13)),
    Speed.BULLET: ((2200, 48), (2000, 27), (1800, 19), (1600, 18)),
}


@dataclass
class Player:
    name: Optional[str] = None
    rating: Optional[int] = None

    def to_json(self):
        return {"name": self.name, "rating": self.rating}


@dataclass
class Game:
    variant: Optional[str] = None
    speed: Optional[Speed] = None
    fen: Optional[str] = None
    id: Optional[str] = None
    date: Optional[str] = None
    white: Player = field(default_factory=Player)
    black: Player = field(default_factory=Player)
    winner: Optional[str] = None
    moves: list[str] = field(default_factory=list)

    def to_json(self):
        return {
            "variant": self.variant,
            "speed": self.speed.value if self.speed else None,
            "fen": self.fen,
            "id": self.id,
            "date": self.date,
            "white": self.white.to_json(),
            "black": self.black.to_json(),
            "winner": self.winner,
            "moves": " ".join(self.moves),
        }


@dataclass
class Batch:
    filename: Path
    games: list[Game]


def java_hash_code(text):
    """The 32-bit string hash used to sample games deterministically."""
    value = 0
    for ch in text:
        value = (value * 31 + ord(ch)) & 0xFFFFFFFF
    return value - 0x1_0000_0000 if value & 0x8000_0000 else value


def sampling_probability(game):
    """Percentage chance that a game is kept, from its speed and ratings."""
    rating = ((game.white.rating or 0) + (game.black.rating or 0)) // 2
    if game.variant not in (None, "Standard"):
        return 100 if rating >= 1600 else 50
    speed = game.speed or Speed.CORRESPONDENCE
    if speed in (Speed.CORRESPONDENCE, Speed.CLASSICAL) or rating >= 2500:
        return 100
    for threshold, probability in _LADDERS.get(speed, ()):
        if rating >= threshold:
            return probability
    return 100 if speed is Speed.ULTRA_BULLET else 2


class Importer(Visitor):
    """Collects accepted games and hands them to a sink in batches."""

    def __init__(self, sink: Callable[[Batch], object], filename, batch_size: int):
        self.sink = sink
        self.filename = Path(filename)
        self.batch_size = batch_size
        self.current = Game()
        self.skip = False
        self.batch: list[Game] = []

    def send(self):
        self.sink(Batch(self.filename, self.batch))
        self.batch = []

    def begin_game(self):
        self.skip = False
        self.current = Game()

    def header(self, key, value):
        game = self.current
        match key:
            case "White":
                game.white.name = value
            case "Black":
                game.black.name = value
            case "WhiteElo" | "BlackElo" if value != "?":
                player = game.white if key == "WhiteElo" else game.black
                player.rating = _parse_int(value, _SIGNED, 0x10000, "rating", value)
            case "TimeControl":
                game.speed = Speed.from_time_control(value)
            case "Variant":
                game.variant = value
            case "Date" | "UTCDate":
                game.date = value
            case "WhiteTitle" | "BlackTitle" if value == "BOT":
                self.skip = True
            case "Site":
                game.id = value.rsplit("/", 1)[-1]
            case "Result":
                try:
                    game.winner = parse_winner(value)
                except PgnError:
                    self.skip = True
            case "FEN":
                game.fen = None if value == STANDARD_START_FEN else value

    def end_headers(self):
        game = self.current
        self.skip = not (
            min(game.white.rating or 0, game.black.rating or 0) >= 1501
            and game.id is not None
            and sampling_probability(game) > int(math.fmod(java_hash_code(game.id), 100))
            and not self.skip
        )
        return self.skip

    def san(self, san):
        self.current.moves.append(san)

    def begin_variation(self):
        return True

    def end_game(self):
        if self.skip:
            return
        self.batch.append(self.current)
        self.current = Game()
        if len(self.batch) >= self.batch_size:
            self.send()