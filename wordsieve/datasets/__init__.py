from .validator import clean_words, infer_length, load_wordlist, validate_wordlist, pretty_summary
from .io import read_tokens, write_lines

__all__ = ["clean_words", "infer_length", "load_wordlist", "validate_wordlist", "pretty_summary",
           "read_tokens", "write_lines"]
