#!/usr/bin/env python3
"""
Spectral voice activity detection for a single analysis window.

A window is classified as voice from four features: zero-crossing rate,
spectral centroid, formant band energy and weighted voice-band energy.
Each feature is turned into a score, the scores are combined with fixed
weights and the sum is compared against a strict decision threshold.
"""

from typing import Sequence, Tuple

import numpy as np

from audio_sentence_detector.processing.detection.data_structures import (
    DetectorConfig,
    FormantRange,
    VoiceFeatures,
)
from audio_sentence_detector.processing.detection.spectral import (
    ArrayLike,
    bin_frequencies,
    bin_resolution,
    magnitude_spectrum,
)

# zcr, centroid, formant, energy
FEATURE_WEIGHTS = (0.3, 0.2, 0.3, 0.2)
VOICE_DECISION_THRESHOLD = 0.6

MIN_VOICED_ZCR = 0.1
CENTROID_RANGE_HZ = (100.0, 3000.0)
FORMANT_PRESENCE_THRESHOLD = 0.1

PITCH_WEIGHT = 2.0
FORMANT_WEIGHT = 1.5


def zero_crossing_rate(window: ArrayLike) -> float:
    """Fraction of adjacent sample pairs whose sign differs (0 counts as positive)."""
    samples = np.asarray(window, dtype=np.float64)
    if samples.shape[0] < 2:
        return 0.0
    negative = samples < 0
    crossings = np.count_nonzero(negative[1:] != negative[:-1])
    return crossings / (samples.shape[0] - 1)


def spectral_centroid(magnitudes: np.ndarray, sample_rate: int) -> float:
    """Energy-weighted mean frequency of the spectrum, 0 for an empty spectrum."""
    total = float(np.sum(magnitudes))
    if total == 0:
        return 0.0
    freqs = bin_frequencies(sample_rate, magnitudes.shape[0])
    return float(np.sum(freqs * magnitudes)) / total


def formant_energies(
    magnitudes: np.ndarray,
    sample_rate: int,
    formant_ranges: Sequence[FormantRange],
) -> Tuple[float, ...]:
    """Share of the total magnitude that falls inside each formant band."""
    n_bins = magnitudes.shape[0]
    total = float(np.sum(magnitudes))
    if n_bins == 0 or total == 0:
        return tuple(0.0 for _ in formant_ranges)

    resolution = bin_resolution(sample_rate, n_bins)
    energies = []
    for low, high in formant_ranges:
        min_bin = int(np.floor(low / resolution))
        max_bin = int(np.ceil(high / resolution))
        band = magnitudes[min_bin:min(max_bin + 1, n_bins)]
        energies.append(float(np.sum(band)) / total)
    return tuple(energies)


def voice_band_energy(magnitudes: np.ndarray, sample_rate: int, config: DetectorConfig) -> float:
    """
    Weighted voice-band magnitude divided by the total magnitude.

    Bins between the fundamental minimum and the top of the third formant
    count, with pitch-range bins doubled and formant-band bins weighted
    1.5 (a formant band takes precedence over the pitch range).
    """
    total = float(np.sum(magnitudes))
    if total == 0:
        return 0.0

    freqs = bin_frequencies(sample_rate, magnitudes.shape[0])
    in_band = (freqs >= config.fundamental_freq_min) & (freqs <= config.third_formant_max)

    weights = np.ones_like(freqs)
    pitch = (freqs >= config.fundamental_freq_min) & (freqs <= config.fundamental_freq_max)
    weights[pitch] = PITCH_WEIGHT
    for low, high in config.formant_freq_ranges:
        weights[(freqs >= low) & (freqs <= high)] = FORMANT_WEIGHT

    return float(np.sum(magnitudes[in_band] * weights[in_band])) / total


def analyze_voice(window: ArrayLike, sample_rate: int, config: DetectorConfig) -> VoiceFeatures:
    """Compute every voice feature of a window and the resulting decision."""
    samples = np.asarray(window, dtype=np.float64)

    zcr = zero_crossing_rate(samples)
    magnitudes = magnitude_spectrum(samples)
    centroid = spectral_centroid(magnitudes, sample_rate)
    formants = formant_energies(magnitudes, sample_rate, config.formant_freq_ranges)
    band_energy = voice_band_energy(magnitudes, sample_rate, config)

    zcr_score = 1.0 if MIN_VOICED_ZCR < zcr < config.zero_crossing_rate_threshold else 0.0
    centroid_score = 1.0 if CENTROID_RANGE_HZ[0] < centroid < CENTROID_RANGE_HZ[1] else 0.0
    formant_score = sum(1 for e in formants if e > FORMANT_PRESENCE_THRESHOLD) / len(formants)
    energy_score = 1.0 if band_energy > config.voice_activity_threshold else 0.0

    final_score = (
        zcr_score * FEATURE_WEIGHTS[0]
        + centroid_score * FEATURE_WEIGHTS[1]
        + formant_score * FEATURE_WEIGHTS[2]
        + energy_score * FEATURE_WEIGHTS[3]
    )

    return VoiceFeatures(
        zcr=zcr,
        spectral_centroid=centroid,
        formant_energies=formants,
        voice_band_energy=band_energy,
        zcr_score=zcr_score,
        centroid_score=centroid_score,
        formant_score=formant_score,
        energy_score=energy_score,
        final_score=final_score,
        is_voice=final_score > VOICE_DECISION_THRESHOLD,
    )


def is_voice(window: ArrayLike, sample_rate: int, config: DetectorConfig) -> bool:
    """True when the window carries speech-like spectral structure."""
    return analyze_voice(window, sample_rate, config).is_voice
