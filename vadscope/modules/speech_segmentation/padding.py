"""
Padding and merge pass.

Raw speech ranges are widened by ``speech_pad_samples`` on both sides. When
two neighbours are closer than two pads, the silence between them is split
evenly instead. Ranges that then overlap or touch are merged.
"""

from typing import List, Sequence, Tuple

Range = Tuple[int, int]


def pad_segments(
    segments: Sequence[Range],
    speech_pad_samples: int,
    total_samples: int
) -> List[Range]:
    """
    Return a new list of padded ranges, in emission order.

    Gaps between neighbours are always measured on the unpadded input.
    """
    if not segments:
        return []

    pad = speech_pad_samples
    starts = [start for start, _ in segments]
    ends = [end for _, end in segments]
    new_starts = list(starts)
    new_ends = list(ends)

    new_starts[0] = max(0, starts[0] - pad)

    for i in range(len(segments) - 1):
        gap = starts[i + 1] - ends[i]
        if gap < 2 * pad:
            half = gap // 2
            new_ends[i] = ends[i] + half
            new_starts[i + 1] = max(0, starts[i + 1] - half)
        else:
            new_ends[i] = min(total_samples, ends[i] + pad)
            new_starts[i + 1] = max(0, starts[i + 1] - pad)

    new_ends[-1] = min(total_samples, ends[-1] + pad)

    return list(zip(new_starts, new_ends))


def merge_segments(segments: Sequence[Range]) -> List[Range]:
    """Sort by start and merge ranges that overlap or touch."""
    if not segments:
        return []

    ordered = sorted(segments, key=lambda r: r[0])
    merged: List[Range] = []
    left, right = ordered[0]

    for start, end in ordered[1:]:
        if start > right:
            merged.append((left, right))
            left, right = start, end
        else:
            right = max(right, end)

    merged.append((left, right))
    return merged


def pad_and_merge(
    segments: Sequence[Range],
    speech_pad_samples: int,
    total_samples: int
) -> List[Range]:
    """Pad raw ranges, then merge any that now overlap."""
    return merge_segments(pad_segments(segments, speech_pad_samples, total_samples))
