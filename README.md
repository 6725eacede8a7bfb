# lichess_indexer

Reads Lichess PGN dumps, either plain or bzip2-compressed. It picks a rating- and
speed-weighted sample of the games and uploads them in batches to an opening
explorer's `/import/lichess` endpoint.

## Installation

```
pip install .
```

## Usage

```
index-lichess [--endpoint URL] [--batch-size N] [PGN ...]
```

- `--endpoint`: base URL of the explorer. The default is `http://localhost:9002`.
- `--batch-size`: number of games sent in each request. The default is `200`.

Files whose names end in `.bz2` are decompressed as they are read. While files
are being read, a background thread sends each batch as a JSON `PUT` request to
`<endpoint>/import/lichess`. After each request the tool prints a progress line
with:

- a spinner character,
- the file name,
- the date of the last game in the batch,
- the response status code and reason, and the response body.

The command exits with status 1 and prints an error if a file cannot be read
or does not parse.

## Which games are kept

A game is kept only when all of these hold:

- both players are rated 1501 or higher (a missing or `?` rating counts as 0),
- neither `WhiteTitle` nor `BlackTitle` is `BOT`,
- the `Result` header, if present, is `1-0`, `0-1` or `1/2-1/2`,
- the game has a `Site` header, and it passes the sampling check.

The sampling probability (`sampling_probability`) depends on the game's speed
and on the average rating of the two players. The speed comes from the
`TimeControl` header (`Speed.from_time_control`); a game without one counts as
correspondence. Variant games are kept with probability 100 from an average
rating of 1600 up, and 50 below that.

A game is accepted when that probability is greater than the Java-style string
hash (`java_hash_code`) of its game id, the last path segment of `Site`, taken
modulo 100 with the sign of the hash. The same dump therefore always gives the
same sample. Only mainline moves are recorded, and variations are skipped.

Each uploaded game is a JSON object holding `variant`, `speed`, `fen`, `id`,
`date`, `white` and `black` (each with `name` and `rating`), `winner`
(`"white"`, `"black"` or `null`) and `moves` (SAN moves separated by spaces).
A `FEN` header that holds the standard starting position is sent as `null`.

## Library use

```python
from lichess_indexer.importer import Importer, Speed, java_hash_code
from lichess_indexer.pgn import read_pgn

Speed.from_time_control("300+3")   # Speed.BLITZ
java_hash_code("DXZdUVdv")         # 1714524881

batches = []
with open("games.pgn", "rb") as stream:
    importer = Importer(batches.append, "games.pgn", batch_size=200)
    read_pgn(stream, importer)
    importer.send()                # flush the last, partial batch
```

`read_pgn` takes any iterable of lines, as bytes decoded as UTF-8 or as str.
It calls the methods of a `pgn.Visitor` for each game and returns the number of
games read. Malformed input raises `PgnError`.

`Importer` is such a visitor. It collects accepted games into `Batch` objects
and passes each full batch to the callable it was given. `cli.upload_batches`
and `cli.run` are the pieces the command is built from.

## What it does not do

The package only reads PGN files and uploads the sample. It does not serve or
store an opening explorer itself, and it does not check that moves are legal.
It keeps move tokens that have the shape of SAN as they stand.