"""Random sources for shuffling the Chinchón deck."""

import random
import secrets


def create_rng(seed: int | None = None) -> random.Random:
    """Return the generator that shuffles and reshuffles a game's deck.

    A seed gives a reproducible deal, used by tests and ``cli.simulate``
    replays. Without one, real games shuffle with ``secrets.SystemRandom``.
    """
    if seed is None:
        return secrets.SystemRandom()
    return random.Random(seed)
