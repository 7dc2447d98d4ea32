# -*- coding: utf-8 -*-
"""
playtree.cli
============

Command line entry point.

    playtree US OPPONENT [-u SIMILAR_US ...] [-o SIMILAR_OPPONENT ...]

Loads the matching plays, builds and prunes the tree and writes it, under a
one line header naming the teams, to ``result.txt``.
"""

from __future__ import annotations

import argparse
import logging
import sys

from .config import LoaderConfig
from .errors import ConsistencyError
from .loader import PlayLoader
from .tree import build_tree, export_text, prune_tree

logger = logging.getLogger(__name__)


def _parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="playtree",
        description="Classify game situations by the plays historically called in them")
    parser.add_argument("us", help="Team to advise (as spelled in the data files)")
    parser.add_argument("opponent", help="Opposing team")
    parser.add_argument("-u", "--similar-us", nargs="+", default=[], metavar="TEAM",
                        help="Teams whose offence resembles ours")
    parser.add_argument("-o", "--similar-opponent", nargs="+", default=[], metavar="TEAM",
                        help="Teams whose defence resembles the opponent's")
    parser.add_argument("--data-dir", default=LoaderConfig.data_dir,
                        help="Directory holding the <year>_nfl_pbp_data.csv files")
    parser.add_argument("--years", type=int, default=LoaderConfig.year_range,
                        help="Number of seasons to load, most recent first")
    parser.add_argument("--output", default="result.txt", help="File to write the tree to")
    parser.add_argument("-v", "--verbose", action="store_true", help="Log split decisions")
    return parser


def header(us: str, opponent: str, similar_us, similar_opponent) -> str:
    line = f"Us:{us} Opponent: {opponent} "
    if similar_us:
        line += "Similiar to Us:" + "".join(f"{team} " for team in similar_us)
    if similar_opponent:
        line += "Similiar to Other:" + "".join(f"{team} " for team in similar_opponent)
    return line + "\n"


def main(argv=None) -> int:
    args = _parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    config = LoaderConfig(data_dir=args.data_dir, year_range=args.years)
    try:
        store = PlayLoader(config).load_plays(args.us, args.opponent,
                                              args.similar_us, args.similar_opponent)
        if not store.finalized:
            raise ConsistencyError("No plays found for the requested teams")
        tree = prune_tree(build_tree(store.index_set(), store.baseline))
    except (ConsistencyError, OSError, ValueError) as exc:
        logger.error("%s", exc)
        return 1
    with open(args.output, "w", encoding="utf-8") as fh:
        fh.write(header(args.us, args.opponent, args.similar_us, args.similar_opponent))
        fh.write(export_text(tree))
        fh.write("\n")
    logger.info("wrote tree with %d leaves to %s", sum(1 for _ in tree.iter_leaves()), args.output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
