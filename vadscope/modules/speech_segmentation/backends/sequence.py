"""
Replay frame prober.

Returns probabilities from a precomputed sequence, one per window. Useful
when probabilities come from an external inference step, and for tests.
"""

from typing import Iterable, List

import numpy as np


class SequenceProber:
    """
    Prober that replays a fixed probability sequence.

    ``reset()`` rewinds to the first value. Asking for more windows than
    there are values raises ``IndexError``.

    Example:
        prober = SequenceProber([0.1, 0.9, 0.95, 0.2])
        detector = SpeechDetector(prober, sample_rate=16000)
    """

    def __init__(self, probabilities: Iterable[float] = (), **kwargs):
        self.probabilities: List[float] = [float(p) for p in probabilities]
        self.position = 0
        self.reset_count = 0

    @property
    def name(self) -> str:
        return "sequence"

    def probe(self, window: np.ndarray, sample_rate: int) -> float:
        if self.position >= len(self.probabilities):
            raise IndexError(
                f"Probability sequence exhausted after {len(self.probabilities)} windows"
            )
        prob = self.probabilities[self.position]
        self.position += 1
        return prob

    def reset(self) -> None:
        self.position = 0
        self.reset_count += 1

    def __len__(self) -> int:
        return len(self.probabilities)

    def __repr__(self) -> str:
        return f"SequenceProber(windows={len(self.probabilities)})"
