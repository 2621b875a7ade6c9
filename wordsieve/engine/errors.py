"""
Error taxonomy for the analysis engine.

  - ValidationError  : malformed external input (word tokens, result strings,
                       filter patterns). Loading recovers by dropping the token.
  - RangeError       : out-of-range code / position / letter / length passed
                       across a component boundary. A programming error.
  - UnknownWordError : a word requested by text that isn't in the dictionary.
                       The command is rejected; no state changes.

An empty candidate set is NOT an error: stats collapse to Stats.zero().
"""


class WordsieveError(Exception):
    """Base class for every error raised by wordsieve."""


class ValidationError(WordsieveError, ValueError):
    pass


class RangeError(WordsieveError, IndexError):
    pass


class UnknownWordError(WordsieveError, LookupError):
    def __init__(self, word: str):
        super().__init__(f"word not in dictionary: {word!r}")
        self.word = word
