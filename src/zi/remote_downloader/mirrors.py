"""
Community mirror list.
"""

import random
from typing import Iterator, List


class MirrorList:
    """
    Base URLs of mirrors serving the same files as the canonical source.

    Parsed from a text resource with one URL per line; blank lines are
    ignored.
    """

    def __init__(self, text: str):
        self.text = text
        self.mirrors: List[str] = [line.strip() for line in text.splitlines() if line.strip()]

    def choose(self, rng: random.Random) -> str:
        """
        Pick a mirror uniformly at random.

        Raises:
            IndexError: If the list is empty
        """
        return rng.choice(self.mirrors)

    def __len__(self) -> int:
        return len(self.mirrors)

    def __iter__(self) -> Iterator[str]:
        return iter(self.mirrors)

    def __getitem__(self, index: int) -> str:
        return self.mirrors[index]

    def __repr__(self) -> str:
        return f"MirrorList({len(self.mirrors)} mirrors)"
