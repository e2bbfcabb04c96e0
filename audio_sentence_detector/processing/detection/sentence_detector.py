#!/usr/bin/env python3
"""
Audio sentence detector.

Entry point of the detection core: validates the call arguments, runs the
silence detector and the boundary builder over one mono buffer and
returns the scored sentences. Decoding helpers reduce decoded audio to
mono before detection.
"""

import pathlib
from typing import Any, List, Optional, Sequence, Tuple, Union

import numpy as np

from audio_sentence_detector.lib.audio_io import decode_audio_bytes, decode_audio_file, to_mono
from audio_sentence_detector.lib.logging_config import log_completion, log_progress, log_trace
from audio_sentence_detector.processing.detection.boundary_builder import find_sentence_boundaries
from audio_sentence_detector.processing.detection.data_structures import (
    DecodedAudio,
    DetectorConfig,
    Sentence,
    SilentRegion,
)
from audio_sentence_detector.processing.detection.silence_detector import detect_silent_regions

Samples = Union[np.ndarray, Sequence[float]]


def _prepare_samples(samples: Samples, sample_rate: int) -> np.ndarray:
    if isinstance(sample_rate, bool) or not isinstance(sample_rate, (int, np.integer)) or sample_rate <= 0:
        raise ValueError(f"sample_rate must be a positive integer, got {sample_rate!r}")
    data = np.asarray(samples, dtype=np.float64)
    if data.ndim != 1:
        raise ValueError(f"samples must be a 1-D mono sequence, got shape {data.shape}")
    return data


class AudioSentenceDetector:
    """
    Segments mono audio into probable sentences.

    The configuration is validated once when the detector is built; a
    detector can then be reused for any number of buffers.
    """

    def __init__(self, config: Optional[DetectorConfig] = None, **overrides: Any):
        """
        Initialize the detector.

        Args:
            config: Base configuration (defaults when omitted)
            **overrides: Individual DetectorConfig fields to replace
        """
        base = config or DetectorConfig()
        self.config = base.with_overrides(**overrides) if overrides else base

    def detect(self, samples: Samples, sample_rate: int) -> List[Sentence]:
        """
        Detect sentences in a mono buffer.

        Args:
            samples: Mono float samples in [-1, 1]
            sample_rate: Sample rate in Hz

        Returns:
            Ordered list of Sentence (empty for an empty buffer)
        """
        return self.analyze(samples, sample_rate)[1]

    def analyze(self, samples: Samples, sample_rate: int) -> Tuple[List[SilentRegion], List[Sentence]]:
        """
        Detect silent regions and sentences in a mono buffer.

        Returns:
            (merged silent regions, ordered sentences); both empty for an
            empty buffer
        """
        data = _prepare_samples(samples, sample_rate)
        if data.shape[0] == 0:
            return [], []

        duration = data.shape[0] / sample_rate
        log_progress(
            f"Detecting sentences in {duration:.2f}s of audio",
            details=f"{data.shape[0]} samples at {sample_rate}Hz",
        )

        regions = detect_silent_regions(data, sample_rate, self.config)
        sentences = find_sentence_boundaries(regions, data, sample_rate, self.config)

        if self.config.debug:
            log_trace(
                "detection_summary",
                audio_duration_s=duration,
                sample_rate=sample_rate,
                region_count=len(regions),
                sentence_count=len(sentences),
            )

        log_completion(
            f"Detected {len(sentences)} sentences",
            stats={"silent_regions": len(regions), "audio_duration_s": round(duration, 3)},
        )
        return regions, sentences

    def detect_silent_regions(self, samples: Samples, sample_rate: int) -> List[SilentRegion]:
        """Silent regions of a mono buffer, merged."""
        return detect_silent_regions(_prepare_samples(samples, sample_rate), sample_rate, self.config)

    def find_sentence_boundaries(
        self,
        regions: List[SilentRegion],
        samples: Samples,
        sample_rate: int,
    ) -> List[Sentence]:
        """Scored sentences bounded by the given regions."""
        data = _prepare_samples(samples, sample_rate)
        return find_sentence_boundaries(regions, data, sample_rate, self.config)

    def analyze_audio(self, decoded: DecodedAudio) -> Tuple[List[SilentRegion], List[Sentence]]:
        """Reduce decoded audio to mono and detect regions and sentences."""
        return self.analyze(to_mono(decoded.channel_data), decoded.sample_rate)

    def detect_audio(self, decoded: DecodedAudio) -> List[Sentence]:
        """Reduce decoded audio to mono and detect sentences."""
        return self.analyze_audio(decoded)[1]

    def detect_file(self, path: Union[str, pathlib.Path]) -> List[Sentence]:
        """Decode an audio file and detect sentences in it."""
        return self.detect_audio(decode_audio_file(path))

    def detect_bytes(self, payload: bytes) -> List[Sentence]:
        """Decode an in-memory audio payload and detect sentences in it."""
        return self.detect_audio(decode_audio_bytes(payload))


def detect(samples: Samples, sample_rate: int, config: Optional[DetectorConfig] = None) -> List[Sentence]:
    """Detect sentences in a mono buffer with the given (or default) configuration."""
    return AudioSentenceDetector(config).detect(samples, sample_rate)
