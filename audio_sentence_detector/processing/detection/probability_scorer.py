#!/usr/bin/env python3
"""
Sentence probability scoring.

A sentence candidate is scored from five independent sub-scores, each
clamped to [0, 1]:

1. length            - Gaussian around the ideal sentence length
2. silence strength  - how quiet the bounding silent region is
3. silence duration  - sigmoid of the bounding region's duration
4. voice transition  - voiced at the start, unvoiced at the end
5. energy contour    - balance of energy rises and falls (speech-like dynamics)

The weighted sum of the sub-scores is the sentence probability.
"""

import math
from typing import List, Optional

import numpy as np

from audio_sentence_detector.lib.logging_config import log_trace
from audio_sentence_detector.processing.detection.data_structures import (
    DetectorConfig,
    ProbabilityComponents,
    SilentRegion,
)
from audio_sentence_detector.processing.detection.voice_activity import is_voice

SCORE_WEIGHTS = {
    "length": 0.25,
    "silence_strength": 0.15,
    "silence_duration": 0.15,
    "voice_transition": 0.25,
    "energy_contour": 0.20,
}

NO_REGION_SCORE = 0.3
NEUTRAL_CONTOUR_SCORE = 0.5

TRANSITION_WINDOW_S = 0.1
TRANSITION_WINDOW_COUNT = 3
START_VOICE_WEIGHT = 0.7
END_SILENCE_WEIGHT = 0.3

CONTOUR_WINDOW_S = 0.05
RISE_FACTOR = 1.1
FALL_FACTOR = 0.9


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def length_score(duration: float, config: DetectorConfig) -> float:
    """Gaussian centered on the ideal length with sigma = ideal / 2."""
    ideal = config.ideal_sentence_length
    sigma = ideal / 2
    return _clamp(math.exp(-((duration - ideal) ** 2) / (2 * sigma ** 2)))


def silence_strength_score(region: Optional[SilentRegion], config: DetectorConfig) -> float:
    if region is None:
        return NO_REGION_SCORE
    if config.silence_threshold == 0:
        return 1.0 if region.avg_rms == 0 else 0.0
    return _clamp(1 - region.avg_rms / config.silence_threshold)


def silence_duration_score(region: Optional[SilentRegion], config: DetectorConfig) -> float:
    if region is None:
        return NO_REGION_SCORE
    x = -5 * (region.duration / config.ideal_silence_duration - 0.5)
    # exp overflows long before the sigmoid stops being ~0
    if x > 700:
        return 0.0
    return _clamp(1 / (1 + math.exp(x)))


def voice_transition_score(
    samples: np.ndarray,
    sample_rate: int,
    start: float,
    end: float,
    config: DetectorConfig,
) -> float:
    """
    Reward sentences that start voiced and end unvoiced.

    Three overlapping 100 ms windows are taken at each edge, stepping
    inward by half a window. Windows are clipped to the sentence; an
    empty window still counts towards the normalization.
    """
    window_size = int(math.floor(TRANSITION_WINDOW_S * sample_rate))
    start_index = int(math.floor(start * sample_rate))
    end_index = int(math.floor(end * sample_rate))

    start_voiced = 0
    end_voiced = 0
    for i in range(TRANSITION_WINDOW_COUNT):
        offset = int(i * window_size / 2)

        head_from = start_index + offset
        head_to = min(start_index + offset + window_size, end_index)
        head = samples[head_from:head_to] if head_to > head_from else samples[0:0]

        tail_from = max(end_index - window_size - offset, start_index)
        tail_to = end_index - offset
        tail = samples[tail_from:tail_to] if tail_to > tail_from else samples[0:0]

        if head.shape[0] > 0 and is_voice(head, sample_rate, config):
            start_voiced += 1
        if tail.shape[0] > 0 and is_voice(tail, sample_rate, config):
            end_voiced += 1

    start_ratio = start_voiced / TRANSITION_WINDOW_COUNT
    end_ratio = end_voiced / TRANSITION_WINDOW_COUNT
    return _clamp(start_ratio * START_VOICE_WEIGHT + (1 - end_ratio) * END_SILENCE_WEIGHT)


def window_energies(segment: np.ndarray, sample_rate: int) -> List[float]:
    """Mean squared amplitude of consecutive full 50 ms windows."""
    window_size = int(math.floor(CONTOUR_WINDOW_S * sample_rate))
    if window_size <= 0:
        return []
    count = segment.shape[0] // window_size
    if count == 0:
        return []
    frames = segment[: count * window_size].reshape(count, window_size)
    return [float(e) for e in np.mean(frames * frames, axis=1)]


def energy_contour_score(segment: np.ndarray, sample_rate: int) -> float:
    """
    Ratio of the rarer to the more common energy movement.

    Fewer than two windows is neutral; a perfectly flat contour (no rises,
    no falls) scores 0.
    """
    energies = window_energies(np.asarray(segment, dtype=np.float64), sample_rate)
    if len(energies) < 2:
        return NEUTRAL_CONTOUR_SCORE

    rises = 0
    falls = 0
    for previous, current in zip(energies, energies[1:]):
        if current > previous * RISE_FACTOR:
            rises += 1
        if current < previous * FALL_FACTOR:
            falls += 1

    most = max(rises, falls)
    if most == 0:
        return 0.0
    return _clamp(min(rises, falls) / most)


def score_components(
    start: float,
    end: float,
    samples: np.ndarray,
    sample_rate: int,
    config: DetectorConfig,
    region: Optional[SilentRegion] = None,
) -> ProbabilityComponents:
    """Compute every sub-score and the weighted probability of a span."""
    samples = np.asarray(samples, dtype=np.float64)
    duration = end - start

    length = length_score(duration, config)
    strength = silence_strength_score(region, config)
    silence_duration = silence_duration_score(region, config)
    transition = voice_transition_score(samples, sample_rate, start, end, config)

    start_index = int(math.floor(start * sample_rate))
    end_index = int(math.floor(end * sample_rate))
    contour = energy_contour_score(samples[start_index:max(start_index, end_index)], sample_rate)

    probability = _clamp(
        length * SCORE_WEIGHTS["length"]
        + strength * SCORE_WEIGHTS["silence_strength"]
        + silence_duration * SCORE_WEIGHTS["silence_duration"]
        + transition * SCORE_WEIGHTS["voice_transition"]
        + contour * SCORE_WEIGHTS["energy_contour"]
    )

    components = ProbabilityComponents(
        length=length,
        silence_strength=strength,
        silence_duration=silence_duration,
        voice_transition=transition,
        energy_contour=contour,
        probability=probability,
    )

    if config.debug:
        log_trace("sentence_score", span_start_s=start, span_end_s=end, **components.to_dict())

    return components


def score(
    start: float,
    end: float,
    samples: np.ndarray,
    sample_rate: int,
    config: DetectorConfig,
    region: Optional[SilentRegion] = None,
) -> float:
    """Probability in [0, 1] that ``[start, end)`` is a spoken sentence."""
    return score_components(start, end, samples, sample_rate, config, region).probability
