#!/usr/bin/env python3
"""Tests for per-window voice activity detection."""

import numpy as np
import pytest

from audio_sentence_detector.processing.detection.voice_activity import (
    analyze_voice,
    formant_energies,
    is_voice,
    spectral_centroid,
    voice_band_energy,
    zero_crossing_rate,
)
from audio_sentence_detector.processing.detection.spectral import magnitude_spectrum

from conftest import tone, voiced


def test_zero_crossing_rate():
    assert zero_crossing_rate([1.0, -1.0, 1.0, -1.0, 1.0]) == pytest.approx(1.0)
    assert zero_crossing_rate([0.5, 0.2, 0.1]) == 0.0
    # zero counts as positive
    assert zero_crossing_rate([0.0, 1.0, 0.0]) == 0.0
    assert zero_crossing_rate([0.3]) == 0.0
    assert zero_crossing_rate([]) == 0.0


def test_spectral_centroid_of_silence_is_zero():
    assert spectral_centroid(np.zeros(1024), 8000) == 0.0


def test_harmonic_window_is_voice(config, sample_rate):
    features = analyze_voice(voiced(0.256, envelope=False), sample_rate, config)

    assert 0.1 < features.zcr < 0.3
    assert features.spectral_centroid == pytest.approx(1500, rel=0.05)
    assert all(e > 0.1 for e in features.formant_energies)
    assert features.voice_band_energy > config.voice_activity_threshold
    assert features.final_score == pytest.approx(1.0)
    assert features.is_voice


def test_silent_window_is_not_voice(config, sample_rate):
    features = analyze_voice(np.zeros(2048), sample_rate, config)
    assert features.final_score == 0.0
    assert not features.is_voice


def test_high_tone_is_not_voice(config, sample_rate):
    t = np.arange(2048) / sample_rate
    # above the third formant band, crossing zero on most samples
    assert not is_voice(0.5 * np.sin(2 * np.pi * 3500 * t), sample_rate, config)


def test_formant_energies_are_shares_of_total(config, sample_rate):
    magnitudes = magnitude_spectrum(voiced(0.256, envelope=False))
    energies = formant_energies(magnitudes, sample_rate, config.formant_freq_ranges)
    assert len(energies) == 3
    assert all(0.0 <= e <= 1.0 for e in energies)


def test_formant_weight_takes_precedence_over_pitch(sample_rate, config):
    # one bin at 200 Hz sits in the pitch range only, weight 2.0
    magnitudes = np.zeros(1024)
    pitch_bin = int(200 / (sample_rate / 2048))
    magnitudes[pitch_bin] = 1.0
    assert voice_band_energy(magnitudes, sample_rate, config) == pytest.approx(2.0)

    # 500 Hz is inside the first formant band, weight 1.5
    magnitudes = np.zeros(1024)
    magnitudes[128] = 1.0
    assert voice_band_energy(magnitudes, sample_rate, config) == pytest.approx(1.5)


def test_voice_features_serialize(config, sample_rate):
    import json

    data = analyze_voice(voiced(0.1), sample_rate, config).to_dict()
    assert set(data) >= {"zcr", "formant_energies", "final_score", "is_voice"}
    assert isinstance(data["formant_energies"], list)
    json.dumps(data)


@pytest.mark.parametrize("sample_rate", [8000, 16000])
def test_pure_low_tone_is_not_voice(config, sample_rate):
    """A 200 Hz sine only earns the centroid and band-energy scores."""
    features = analyze_voice(tone(2048 / sample_rate, sample_rate=sample_rate), sample_rate, config)

    assert features.zcr < 0.1
    assert features.zcr_score == 0.0
    assert all(e <= 0.1 for e in features.formant_energies)
    assert features.final_score <= 0.4 + 1e-9
    assert not features.is_voice
