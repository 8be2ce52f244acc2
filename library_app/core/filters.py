import re
from typing import Sequence

# Characters PostgREST treats as syntax inside or=(...) filters
_RESERVED = re.compile(r'[,()"\\]')


def ilike_any(columns: Sequence[str], term: str) -> str:
    """or_() expression matching `term` case-insensitively in any of `columns`.

    Reserved characters become the single-character wildcard `_`, so
    "Dune, Messiah" still matches the title it names.
    """
    pattern = _RESERVED.sub("_", term.strip())
    return ",".join(f"{column}.ilike.%{pattern}%" for column in columns)
