"""Streaming reader for PGN game collections with a visitor interface."""

from __future__ import annotations

import re
from typing import Iterable

RESULTS = frozenset({"1-0", "0-1", "1/2-1/2", "*"})

_HEADER = re.compile(r'\[\s*([A-Za-z0-9_+#=:\-]+)\s*"((?:[^"\\]|\\.)*)"\s*\]\s*$')
_LEXEME = re.compile(r"\s+|[{};()]|[^\s{};()]+")
_MOVE_NUMBER = re.compile(r"^\d+\.+")
_SAN = re.compile(
    r"(?:[NBRQK]?[a-h]?[1-8]?x?[a-h][1-8](?:=?[NBRQK])?"
    r"|[PNBRQK]?@[a-h][1-8]|O-O(?:-O)?|--)[+#]?"
)
_ESCAPE = re.compile(r"\\(.)")


class PgnError(ValueError):
    """Raised when the input is not readable as PGN."""


class Visitor:
    """Receives the parts of each game as the reader meets them."""

    def begin_game(self):
        pass

    def header(self, key, value):
        pass

    def end_headers(self):
        """Return True to skip the moves of the current game."""
        return False

    def san(self, san):
        pass

    def begin_variation(self):
        """Return True to skip the variation that starts here."""
        return False

    def end_game(self):
        pass


def parse_winner(text):
    """Map a game result to the winning colour, or None for a draw."""
    winners = {"1-0": "white", "0-1": "black", "1/2-1/2": None}
    if text not in winners:
        raise PgnError(f"invalid game result: {text!r}")
    return winners[text]


class _GameReader:
    def __init__(self, visitor: Visitor):
        self.visitor = visitor
        self.games = 0
        self.in_game = False
        self._reset()

    def _reset(self):
        self.in_movetext = self.skip_moves = self.in_comment = False
        self.depth = self.skip_depth = 0

    def _start_movetext(self):
        if not self.in_game:
            self.in_game = True
            self.visitor.begin_game()
        if not self.in_movetext:
            self.in_movetext = True
            self.skip_moves = bool(self.visitor.end_headers())

    def _finish(self):
        self._start_movetext()
        self.visitor.end_game()
        self.in_game = False
        self._reset()
        self.games += 1

    def feed(self, line: str, lineno: int):
        if not self.in_comment:
            stripped = line.strip()
            if not stripped or stripped.startswith("%"):
                return
            if stripped.startswith("["):
                if self.in_movetext:
                    self._finish()
                if not self.in_game:
                    self.in_game = True
                    self.visitor.begin_game()
                match = _HEADER.match(stripped)
                if match is None:
                    raise PgnError(f"line {lineno}: malformed header {stripped!r}")
                self.visitor.header(match.group(1), _ESCAPE.sub(r"\1", match.group(2)))
                return
        self._start_movetext()
        self._movetext(line, lineno)

    def _movetext(self, line: str, lineno: int):
        pos = 0
        while pos < len(line):
            if self.in_comment:
                end = line.find("}", pos)
                if end < 0:
                    return
                self.in_comment = False
                pos = end + 1
                continue
            match = _LEXEME.match(line, pos)
            pos = match.end()
            word = match.group()
            if word == "{":
                self.in_comment = True
            elif word == ";":
                return
            elif word == "(":
                if self.skip_depth:
                    self.skip_depth += 1
                elif self.skip_moves or self.visitor.begin_variation():
                    self.skip_depth = 1
                else:
                    self.depth += 1
            elif word == ")":
                if self.skip_depth:
                    self.skip_depth -= 1
                elif self.depth:
                    self.depth -= 1
            elif word.isspace() or word == "}" or self.skip_depth:
                continue
            elif word in RESULTS:
                if self.depth == 0:
                    self._finish()
                    self.feed(line[pos:], lineno)
                    return
            elif not self.skip_moves:
                self._move(word)

    def _move(self, word: str):
        word = _MOVE_NUMBER.sub("", word)
        if word.startswith("$"):
            return
        san = word.rstrip("!?")
        if san.startswith("0-0"):
            san = san.replace("0", "O")
        if _SAN.fullmatch(san):
            self.visitor.san(san)


def read_pgn(stream: Iterable, visitor: Visitor) -> int:
    """Feed every game of a PGN stream to the visitor; return the game count.

    The stream yields lines, either as bytes (decoded as UTF-8) or as str.
    """
    reader = _GameReader(visitor)
    for lineno, raw in enumerate(stream, 1):
        line = raw
        if isinstance(raw, (bytes, bytearray)):
            try:
                line = bytes(raw).decode("utf-8")
            except UnicodeDecodeError as exc:
                raise PgnError(f"line {lineno}: invalid UTF-8") from exc
        if lineno == 1:
            line = line.removeprefix("\ufeff")
        reader.feed(line, lineno)
    if reader.in_game:
        reader._finish()
    return reader.games