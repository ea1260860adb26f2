from __future__ import annotations

import random
from typing import Optional

UPPER = "ABCDEFGHJKLMNPQRSTUVWXYZ"  # no I, O
LOWER = "abcdefghijkmnopqrstuvwxyz"  # no l
DIGITS = "23456789"  # no 0, 1
SPECIAL = "@#$%"


class PasswordGenerator:
    """
    Readable 10-character login password: 1 upper, 2 lower, 5 digits,
    1 special, 1 from the letter/digit pool, in that order.
    Pass a seeded `random.Random` for reproducible output.
    """

    def __init__(self, rng: Optional[random.Random] = None):
        self.rng = rng or random.SystemRandom()

    def generate(self) -> str:
        pick = self.rng.choice
        chars = [pick(UPPER)]
        chars += [pick(LOWER) for _ in range(2)]
        chars += [pick(DIGITS) for _ in range(5)]
        chars.append(pick(SPECIAL))
        chars.append(pick(UPPER + LOWER + DIGITS))
        return "".join(chars)
