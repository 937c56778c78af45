"""
Segmentation state machine.

A single forward pass over per-window speech probabilities that produces raw
(unpadded) speech ranges in sample offsets. It combines:

- hysteresis: a window opens speech at ``prob >= threshold`` and only counts
  as silence at ``prob <= neg_threshold``; values in between keep the
  current state
- a hangover: silence must last ``min_silence_samples`` before a segment is
  closed, and speech resuming during that period cancels the closure
- a minimum speech length: closed segments not longer than
  ``min_speech_samples`` are dropped
- max-duration splitting: a segment running past ``max_speech_samples`` is
  cut, preferably at the last silence that lasted at least
  ``min_silence_samples_at_max_speech``

Raw ranges are ``(start, end)`` with ``end`` exclusive.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Optional, Tuple

from .config import DetectorConfig

logger = logging.getLogger("vadscope")

RawRange = Tuple[int, int]


class Phase(str, Enum):
    IDLE = "idle"
    TRIGGERED = "triggered"


@dataclass
class SegmentationState:
    """
    Mutable state of one run.

    ``None`` means "unset" for every offset field.

    Attributes:
        phase: IDLE outside speech, TRIGGERED inside a candidate segment
        start: Start offset of the open segment
        temp_end: Offset where the current tentative silence began
        prev_end: Silence start long enough to be used as a max-duration cut point
        next_start: Offset where speech resumed after ``prev_end``
    """
    phase: Phase = Phase.IDLE
    start: Optional[int] = None
    temp_end: Optional[int] = None
    prev_end: Optional[int] = None
    next_start: Optional[int] = None

    @property
    def triggered(self) -> bool:
        return self.phase is Phase.TRIGGERED

    def open(self, start: int) -> None:
        self.phase = Phase.TRIGGERED
        self.start = start

    def clear(self) -> None:
        """Return to IDLE with every offset unset."""
        self.phase = Phase.IDLE
        self.start = None
        self.temp_end = None
        self.prev_end = None
        self.next_start = None


class SegmentationStateMachine:
    """
    Converts a probability sequence into raw speech ranges.

    Frames are fed one at a time through ``step()`` so transitions can be
    inspected individually; ``run()`` drives a whole sequence.

    Example:
        machine = SegmentationStateMachine(config)
        ranges = machine.run(probs, total_samples=len(audio))
    """

    def __init__(self, config: DetectorConfig):
        self.config = config
        self.state = SegmentationState()
        self.segments: List[RawRange] = []

    def reset(self) -> None:
        self.state = SegmentationState()
        self.segments = []

    def _emit(self, start: int, end: int) -> None:
        logger.debug(f"Speech segment emitted: [{start}, {end})")
        self.segments.append((start, end))

    def step(self, index: int, prob: float) -> None:
        """Process the window at ``index`` with speech probability ``prob``."""
        cfg = self.config
        state = self.state
        pos = index * cfg.window_size_samples

        # Speech resumed during a tentative silence
        if prob >= cfg.threshold and state.temp_end is not None:
            state.temp_end = None
            if state.prev_end is not None and (
                state.next_start is None or state.next_start < state.prev_end
            ):
                state.next_start = pos

        if prob >= cfg.threshold and not state.triggered:
            state.open(pos)
            logger.debug(f"Speech opened at sample {pos} (p={prob:.3f})")
            return

        if state.triggered and pos - state.start > cfg.max_speech_samples:
            if state.prev_end is not None:
                # Cut at the last long-enough silence
                self._emit(state.start, state.prev_end)
                resume = state.next_start
                if resume is not None and resume >= state.prev_end:
                    state.phase = Phase.TRIGGERED
                    state.start = resume
                else:
                    state.phase = Phase.IDLE
                    state.start = None
                state.prev_end = None
                state.next_start = None
                state.temp_end = None
                logger.debug(
                    f"Max speech duration reached at sample {pos}; split at silence, "
                    f"state={state.phase.value}"
                )
            else:
                self._emit(state.start, pos)
                state.clear()
                logger.debug(f"Max speech duration reached at sample {pos}; hard split")
                return

        if prob <= cfg.neg_threshold and state.triggered:
            if state.temp_end is None:
                state.temp_end = pos

            if pos - state.temp_end > cfg.min_silence_samples_at_max_speech:
                state.prev_end = state.temp_end

            if pos - state.temp_end < cfg.min_silence_samples:
                return

            end = state.temp_end
            if end - state.start > cfg.min_speech_samples:
                self._emit(state.start, end)
            else:
                logger.debug(
                    f"Dropped short speech [{state.start}, {end}) "
                    f"({end - state.start} <= {cfg.min_speech_samples:.0f} samples)"
                )
            state.clear()

    def finish(self, total_samples: int) -> List[RawRange]:
        """Close a segment still open at the end of the audio and return all ranges."""
        state = self.state
        if state.triggered and total_samples - state.start > self.config.min_speech_samples:
            self._emit(state.start, total_samples)
        state.clear()
        return list(self.segments)

    def run(self, probs: Iterable[float], total_samples: int) -> List[RawRange]:
        """Process a full probability sequence from a fresh state."""
        self.reset()
        for index, prob in enumerate(probs):
            self.step(index, float(prob))
        return self.finish(total_samples)


def detect_raw_segments(
    probs: Iterable[float],
    config: DetectorConfig,
    total_samples: int
) -> List[RawRange]:
    """Run the state machine over ``probs`` and return raw ``(start, end)`` ranges."""
    return SegmentationStateMachine(config).run(probs, total_samples)
