# apps/cli/analyze.py
"""
Interactive Wordle analyzer.

This script:
  1) Loads and validates a word list (prints counts + SHA, warns about dropped tokens).
  2) Precomputes every word's result partition with a live progress bar.
  3) Reads commands from stdin to narrow the candidate set and rank guesses.

Results are written as N=Nowhere, E=Elsewhere, H=Here, e.g.
  "clue start EHNNN" : there is an 's' but not at the front, a 't' second,
                       no 'a's or 'r's, and no additional 't's.
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Dict, List, TextIO

from tqdm import tqdm

from wordsieve.datasets import load_wordlist, pretty_summary, read_tokens, infer_length
from wordsieve.engine import Engine, WordsieveError, to_string
from wordsieve.engine.candidates import ClueOp
from wordsieve.engine.clues import DEFAULT_MAX_LETTER_REPEAT
from wordsieve.engine.ranking import get_order_ids

HELP = """\
Commands:
   clue    : provide a new clue and its result.
             format: clue [word] [result]
   filter  : keep words matching a positional pattern ('.' any, [abc] one of, [^abc] none of).
             format: filter [pattern]          e.g. filter s..[ae].
   letters : require (+) or forbid (-) letters; repeat a letter to require several copies.
             format: letters +[include] -[exclude]   e.g. letters +ee -rst
   pop     : remove (pop off) the most recent clue or filter.
   reset   : erase all current clues.
   status  : show the current clue stack.
   words   : list top legal words.
             format: words [sort=entropy] [count=10] [all]
             sorts: {sorts} (prefix 'r-' to reverse)
   info    : show the full result breakdown for a word.
             format: info [word]
   help    : show this message.
   quit    : exit the program.
All commands can be shortened to just their first letter."""

ANSI_RESET = "\033[0m"
_MARK_STYLE = {
    "H": "\033[32m\033[40m",   # green on black
    "E": "\033[33m\033[40m",   # yellow on black
    "N": "\033[30m\033[47m",   # black on white
}


def _colour_clue(word: str, pattern: str) -> str:
    return "".join(_MARK_STYLE[m] + ch for ch, m in zip(word, pattern)) + ANSI_RESET


def format_rows(rows, max_count: int, total: int, extra_data: bool = True) -> List[str]:
    """One line per word (with expected, max, entropy, solve), plus a truncation line."""
    lines = []
    for word, st in rows[:max_count]:
        if extra_data:
            lines.append(f"{word}, {st.expected_bucket:.3f}, {st.max_bucket}, "
                         f"{st.entropy_bits:.3f}, {st.solve_probability:.3f}")
        else:
            lines.append(word)
    if max_count < total:
        lines.append(f"...plus {total - max_count} more.")
    return lines


class Analyzer:
    """Command loop over one Engine. handle() returns False when it is time to quit."""

    def __init__(self, engine: Engine, out: TextIO = sys.stdout, colour: bool = False):
        self.engine = engine
        self.out = out
        self.colour = colour
        self.commands: Dict[str, Callable[[List[str]], bool]] = {
            "clue": self.cmd_clue,
            "filter": self.cmd_filter,
            "pattern": self.cmd_filter,
            "letters": self.cmd_letters,
            "pop": self.cmd_pop,
            "reset": self.cmd_reset,
            "status": self.cmd_status,
            "words": self.cmd_words,
            "info": self.cmd_info,
            "help": self.cmd_help,
            "quit": self.cmd_quit,
            "exit": self.cmd_quit,
        }
        self.short = {name[0]: name for name in
                      ("clue", "filter", "letters", "pop", "reset", "status", "words", "info", "help", "quit")}

    def say(self, msg: str = "") -> None:
        print(msg, file=self.out)

    def error(self, msg: str) -> None:
        self.say(f"Error: {msg}")

    def handle(self, line: str) -> bool:
        args = line.split()
        if not args:
            return True
        name = args[0].lower()
        name = self.short.get(name, name)
        fn = self.commands.get(name)
        if fn is None:
            self.error(f"Unknown command '{args[0]}'.")
            return True
        try:
            return fn(args[1:])
        except WordsieveError as e:
            self.error(str(e))
        except ValueError as e:
            # unknown sort order, bad count, etc.
            self.error(str(e))
        return True

    # ---- commands ----

    def cmd_clue(self, args: List[str]) -> bool:
        if len(args) != 2:
            self.error("'clue' command requires exactly two arguments.")
            return True
        word, result = args
        self.engine.apply_clue(word, result)
        return self.cmd_status([])

    def cmd_filter(self, args: List[str]) -> bool:
        if len(args) != 1:
            self.error("'filter' command requires exactly one pattern.")
            return True
        self.engine.apply_pattern(args[0])
        self.say(f"{self.engine.candidates.count} words remain.")
        return True

    def cmd_letters(self, args: List[str]) -> bool:
        include, exclude = "", ""
        for a in args:
            if a.startswith("+"):
                include += a[1:]
            elif a.startswith("-"):
                exclude += a[1:]
            else:
                include += a
        if not include and not exclude:
            self.error("'letters' needs +include and/or -exclude letters.")
            return True
        self.engine.apply_include_exclude(include, exclude)
        self.say(f"{self.engine.candidates.count} words remain.")
        return True

    def cmd_pop(self, args: List[str]) -> bool:
        op = self.engine.pop()
        if op is None:
            self.say("No clues to remove.")
        else:
            self.say(f"Removed: {op.describe()}")
        return self.cmd_status([])

    def cmd_reset(self, args: List[str]) -> bool:
        self.say("Clearing all current clues.")
        self.engine.reset()
        return True

    def cmd_status(self, args: List[str]) -> bool:
        history = self.engine.history
        if not history:
            self.say("No clues currently enforced.")
        for k, op in enumerate(history):
            if isinstance(op, ClueOp):
                patt = to_string(op.code, len(op.guess))
                shown = _colour_clue(op.guess, patt) if self.colour else f"{op.guess} {patt}"
            else:
                shown = op.describe()
            self.say(f"  [{k}] : {shown}")
        self.say(f"{self.engine.candidates.count} of {self.engine.size} words remain.")
        return True

    def cmd_words(self, args: List[str]) -> bool:
        order, count, scope = "entropy", 10, "candidates"
        for a in args:
            if a.isdigit():
                count = int(a)
            elif a.lower() == "all":
                scope = "all"
            else:
                order = a
        rows = self.engine.ranked(order, scope=scope)
        for line in format_rows(rows, count, len(rows)):
            self.say(line)
        return True

    def cmd_info(self, args: List[str]) -> bool:
        if len(args) != 1:
            self.error("'info' command requires exactly one word.")
            return True
        word = args[0].lower()
        part = self.engine.partition(word)
        full = self.engine.stats(word, restrict=False)
        self.say(f"WORD:     {word}")
        self.say(f"MAX Opts: {full.max_bucket}")
        self.say(f"AVE Opts: {full.expected_bucket:.3f}")
        self.say(f"Entropy:  {full.entropy_bits:.3f}")
        self.say(f"Solve:    {full.solve_probability:.3f}")
        for line in part.describe(self.engine.words):
            self.say("  " + line)
        self.say(f"Total Count: {part.total()}")
        return True

    def cmd_help(self, args: List[str]) -> bool:
        self.say(HELP.format(sorts=", ".join(get_order_ids())))
        return True

    def cmd_quit(self, args: List[str]) -> bool:
        return False

    def loop(self, stream: TextIO = sys.stdin) -> None:
        while True:
            self.out.write("> ")
            self.out.flush()
            line = stream.readline()
            if not line:  # EOF
                self.say()
                return
            if not self.handle(line):
                return


def main():
    ap = argparse.ArgumentParser(description="wordsieve: interactive Wordle analyzer")
    ap.add_argument("--words", required=True, help="path to the word list (whitespace-separated)")
    ap.add_argument("--N", type=int, help="word length (default: length of the first word)")
    ap.add_argument("--max-repeat", type=int, default=DEFAULT_MAX_LETTER_REPEAT,
                    help="cap on tracked copies of a single letter (raised to fit the word list)")
    ap.add_argument("--workers", type=int, help="threads for precomputation (default: CPU count)")
    ap.add_argument("--progress", choices=["auto", "bar", "off"], default="auto",
                    help="Show precompute progress (auto=bar if stderr is a terminal).")
    ap.add_argument("--strict", action="store_true", help="fail instead of dropping bad tokens")
    ap.add_argument("--log-level", default="INFO", help="logging level (DEBUG, INFO, WARNING...)")
    args = ap.parse_args()

    logging.basicConfig(level=args.log_level.upper(), format="%(levelname)s %(name)s: %(message)s")

    N = args.N or infer_length(read_tokens(args.words))
    words, rep = load_wordlist(N, args.words)
    print(pretty_summary(rep))
    if args.strict and not rep["passed"]:
        print("Error: " + "; ".join(rep["issues"]), file=sys.stderr)
        sys.exit(1)

    try:
        engine = Engine(words, N, max_letter_repeat=args.max_repeat)
    except WordsieveError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)

    show = args.progress == "bar" or (args.progress == "auto" and sys.stderr.isatty())
    with tqdm(total=engine.size, ncols=80, desc="Processing", unit="word", disable=not show) as bar:
        engine.precompute(workers=args.workers,
                          progress=lambda frac: bar.update(round(frac * engine.size) - bar.n))
    print(f"...{engine.size} words are analyzed; {3 ** engine.length} results each...")

    analyzer = Analyzer(engine, colour=sys.stdout.isatty())
    analyzer.cmd_help([])
    analyzer.loop()


if __name__ == "__main__":
    main()
