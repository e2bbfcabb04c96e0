#!/usr/bin/env python3
"""
Sentence detection core.

Segments a mono float buffer into probable spoken sentences from silence
regions and spectral voice activity, and scores each sentence.

Available components:
- DetectorConfig: Validated, immutable detector configuration
- SilentRegion / Sentence: Pipeline value types
- AudioSentenceDetector / detect: Detection entry points
- detect_silent_regions / merge_close_regions: Silence detector
- find_sentence_boundaries / merge_short_segments: Boundary builder
- score / score_components: Sentence probability scorer
- analyze_voice / is_voice: Per-window voice activity detection
- magnitude_spectrum / fft: Spectral engine
"""

from audio_sentence_detector.processing.detection.data_structures import (
    DetectorConfig,
    SilentRegion,
    Sentence,
    WindowAnalysis,
    VoiceFeatures,
    ProbabilityComponents,
    DecodedAudio,
)

from audio_sentence_detector.processing.detection.spectral import fft, magnitude_spectrum

from audio_sentence_detector.processing.detection.voice_activity import analyze_voice, is_voice

from audio_sentence_detector.processing.detection.silence_detector import (
    VoiceActivityBuffer,
    detect_silent_regions,
    merge_close_regions,
)

from audio_sentence_detector.processing.detection.probability_scorer import score, score_components

from audio_sentence_detector.processing.detection.boundary_builder import (
    find_sentence_boundaries,
    merge_short_segments,
)

from audio_sentence_detector.processing.detection.sentence_detector import AudioSentenceDetector, detect

from audio_sentence_detector.processing.detection.detection_audit import write_detection_audit


__all__ = [
    # Data structures
    'DetectorConfig',
    'SilentRegion',
    'Sentence',
    'WindowAnalysis',
    'VoiceFeatures',
    'ProbabilityComponents',
    'DecodedAudio',
    # Spectral engine and VAD
    'fft',
    'magnitude_spectrum',
    'analyze_voice',
    'is_voice',
    # Pipeline stages
    'VoiceActivityBuffer',
    'detect_silent_regions',
    'merge_close_regions',
    'find_sentence_boundaries',
    'merge_short_segments',
    'score',
    'score_components',
    # Entry points
    'AudioSentenceDetector',
    'detect',
    # Audit utilities
    'write_detection_audit',
]
