#!/usr/bin/env python3
"""
Silence region detection.

Scans the buffer in non-overlapping windows, classifies each window as
silent when it is quiet (RMS below threshold) or when the smoothed voice
activity ratio shows no voiced structure, accumulates silent runs into
regions and finally merges regions separated by short gaps.
"""

from collections import deque
from typing import Iterator, List, Optional

import numpy as np

from audio_sentence_detector.lib.audio_io import calculate_rms
from audio_sentence_detector.lib.logging_config import log_debug, log_trace
from audio_sentence_detector.processing.detection.data_structures import (
    DetectorConfig,
    SilentRegion,
    WindowAnalysis,
)
from audio_sentence_detector.processing.detection.voice_activity import is_voice

SMOOTHING_WINDOW_S = 0.1        # span of the voice activity buffer
SMOOTHED_VOICE_RATIO = 0.6      # ratio must exceed this to count as voiced
REGION_MERGE_GAP_S = 0.3


class VoiceActivityBuffer:
    """Bounded queue of the most recent per-window voice decisions."""

    def __init__(self, capacity: int):
        self.capacity = max(1, int(capacity))
        self._decisions: deque = deque(maxlen=self.capacity)

    @classmethod
    def for_stream(cls, sample_rate: int, window_size: int) -> 'VoiceActivityBuffer':
        """Buffer spanning roughly 100 ms of analysis windows."""
        return cls(int(np.floor(SMOOTHING_WINDOW_S * sample_rate / window_size)))

    def push(self, decision: bool) -> None:
        self._decisions.append(bool(decision))

    @property
    def voiced_ratio(self) -> float:
        if not self._decisions:
            return 0.0
        return sum(self._decisions) / len(self._decisions)

    def __len__(self) -> int:
        return len(self._decisions)


def iter_window_analyses(
    samples: np.ndarray,
    sample_rate: int,
    config: DetectorConfig,
) -> Iterator[WindowAnalysis]:
    """Yield RMS and voice decision for each window, in buffer order."""
    window_size = config.window_size
    total = samples.shape[0]
    for index, start in enumerate(range(0, total, window_size)):
        end = min(start + window_size, total)
        window = samples[start:end]
        yield WindowAnalysis(
            index=index,
            start_sample=start,
            end_sample=end,
            rms=calculate_rms(window),
            is_voice=is_voice(window, sample_rate, config),
        )


def _make_region(start_sample: int, end_sample: int, sample_rate: int, max_rms: float) -> SilentRegion:
    return SilentRegion(
        start=start_sample / sample_rate,
        end=end_sample / sample_rate,
        duration=(end_sample - start_sample) / sample_rate,
        avg_rms=max_rms,
    )


def detect_silent_regions(
    samples: np.ndarray,
    sample_rate: int,
    config: DetectorConfig,
) -> List[SilentRegion]:
    """
    Find silent regions in a mono buffer.

    Args:
        samples: Mono float samples in [-1, 1]
        sample_rate: Sample rate in Hz
        config: Detector configuration

    Returns:
        Ordered, merged list of SilentRegion
    """
    samples = np.asarray(samples, dtype=np.float64)
    total = samples.shape[0]
    regions: List[SilentRegion] = []
    if total == 0:
        return regions

    voice_buffer = VoiceActivityBuffer.for_stream(sample_rate, config.window_size)
    silence_start: Optional[int] = None
    max_rms_in_silence = 0.0

    for window in iter_window_analyses(samples, sample_rate, config):
        voice_buffer.push(window.is_voice)
        ratio = voice_buffer.voiced_ratio
        silent = ratio <= SMOOTHED_VOICE_RATIO or window.rms < config.silence_threshold

        if config.debug:
            log_trace(
                "window",
                window_index=window.index,
                position_s=window.start_sample / sample_rate,
                rms=window.rms,
                voice=window.is_voice,
                voice_ratio=ratio,
                silent=silent,
            )

        if silent:
            if silence_start is None:
                silence_start = window.start_sample
                max_rms_in_silence = window.rms
            else:
                max_rms_in_silence = max(max_rms_in_silence, window.rms)
        elif silence_start is not None:
            duration = (window.start_sample - silence_start) / sample_rate
            if duration >= config.min_silence_duration:
                regions.append(_make_region(silence_start, window.start_sample, sample_rate, max_rms_in_silence))
            silence_start = None
            max_rms_in_silence = 0.0

    if silence_start is not None:
        duration = (total - silence_start) / sample_rate
        if duration >= config.min_silence_duration:
            regions.append(_make_region(silence_start, total, sample_rate, max_rms_in_silence))

    log_debug(f"Silence scan produced {len(regions)} raw regions")
    return merge_close_regions(regions)


def merge_close_regions(regions: List[SilentRegion], max_gap: float = REGION_MERGE_GAP_S) -> List[SilentRegion]:
    """
    Merge neighbouring regions whose gap is shorter than ``max_gap``.

    Single left-to-right pass: a merged region becomes the current region
    and is compared with the following one only.
    """
    if len(regions) < 2:
        return list(regions)

    merged: List[SilentRegion] = []
    current = regions[0]

    for next_region in regions[1:]:
        gap = next_region.start - current.end
        if gap < max_gap:
            current = SilentRegion(
                start=current.start,
                end=next_region.end,
                duration=next_region.end - current.start,
                avg_rms=(current.avg_rms + next_region.avg_rms) / 2,
            )
        else:
            merged.append(current)
            current = next_region

    merged.append(current)
    return merged
