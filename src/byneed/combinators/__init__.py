"""Combinators - streams and folds built on thunks and runners."""

from byneed.combinators.folds import fold_left, fold_right, fold_right_until
from byneed.combinators.stream import EMPTY, Stream, cons, from_iterable, iterate, repeat, unfold

__all__ = [
    # Streams
    "Stream",
    "EMPTY",
    "cons",
    "iterate",
    "unfold",
    "from_iterable",
    "repeat",
    # Folds
    "fold_left",
    "fold_right",
    "fold_right_until",
]
