#!/usr/bin/env python3
"""
audio-sentence-detector: offline sentence segmentation of speech audio.

Combines energy-based silence detection with spectral voice activity
detection to cut a mono PCM buffer into probable sentences, each scored
with a confidence value.
"""

from audio_sentence_detector.processing.detection import (
    AudioSentenceDetector,
    DetectorConfig,
    Sentence,
    SilentRegion,
    detect,
)
from audio_sentence_detector.lib.logging_config import (
    SentenceDetectionError,
    InvalidConfigurationError,
    AudioDecodeError,
    OutputError,
)
from audio_sentence_detector.lib.audio_io import to_mono

__version__ = "1.0.0"

__all__ = [
    'AudioSentenceDetector',
    'DetectorConfig',
    'Sentence',
    'SilentRegion',
    'detect',
    'to_mono',
    'SentenceDetectionError',
    'InvalidConfigurationError',
    'AudioDecodeError',
    'OutputError',
]
