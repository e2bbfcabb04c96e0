#!/usr/bin/env python3
"""
Shared fixtures: synthetic speech-like signals.

The "voiced" signal is three equal sines at 500, 1500 and 2500 Hz, one in
each default formant band, which the voice activity detector classifies
as voice in every full window. A slow amplitude envelope gives the energy
contour something to follow. A single low sine ("tone") crosses zero too
rarely and leaves the formant bands almost empty, so it never counts as voice.
"""

import numpy as np
import pytest

from audio_sentence_detector.processing.detection.data_structures import DetectorConfig

SAMPLE_RATE = 8000


def voiced(duration_s: float, sample_rate: int = SAMPLE_RATE, envelope: bool = True) -> np.ndarray:
    t = np.arange(int(round(duration_s * sample_rate))) / sample_rate
    signal = 0.25 * (
        np.sin(2 * np.pi * 500 * t)
        + np.sin(2 * np.pi * 1500 * t)
        + np.sin(2 * np.pi * 2500 * t)
    )
    if envelope:
        signal = signal * (0.6 + 0.4 * np.sin(2 * np.pi * 3 * t))
    return signal


def silence(duration_s: float, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    return np.zeros(int(round(duration_s * sample_rate)))


def tone(duration_s: float, freq_hz: float = 200.0, amplitude: float = 0.5, sample_rate: int = SAMPLE_RATE) -> np.ndarray:
    t = np.arange(int(round(duration_s * sample_rate))) / sample_rate
    return amplitude * np.sin(2 * np.pi * freq_hz * t)


@pytest.fixture
def sample_rate():
    return SAMPLE_RATE


@pytest.fixture
def config():
    return DetectorConfig()


@pytest.fixture
def speech_pause_speech():
    """3 s voiced, 1 s digital silence, 3 s voiced."""
    return np.concatenate([voiced(3.0), silence(1.0), voiced(3.0)])
