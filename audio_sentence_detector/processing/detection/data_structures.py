#!/usr/bin/env python3
"""
Data structures for the sentence detection pipeline.

This module defines the configuration and the value types that flow
between the pipeline stages: silent regions from the silence detector,
sentences from the boundary builder, and the per-window and per-sentence
score decompositions used for diagnostics.
"""

from dataclasses import dataclass, field, fields, replace, asdict
from typing import List, Optional, Dict, Any, Tuple

import numpy as np

from audio_sentence_detector.lib.logging_config import InvalidConfigurationError


FormantRange = Tuple[float, float]

DEFAULT_FORMANT_FREQ_RANGES: Tuple[FormantRange, ...] = (
    (270.0, 730.0),
    (840.0, 2290.0),
    (1690.0, 3010.0),
)


@dataclass(frozen=True)
class DetectorConfig:
    """
    Configuration for silence detection, boundary building and scoring.

    Validated once at construction; every stage reads it but never
    changes it. Use ``with_overrides`` to derive a modified copy.
    """
    # Silence detection
    min_silence_duration: float = 0.5      # Shortest silent run kept as a region (s)
    silence_threshold: float = 0.01        # RMS below this is silent
    window_size: int = 2048                # Analysis window in samples (power of two)

    # Sentence boundaries
    min_sentence_length: float = 1.0       # Shorter candidates are dropped (s)
    max_sentence_length: float = 15.0      # Longer candidates are split (s)
    allow_gaps: bool = True                # False pushes boundaries into the next gap
    min_segment_length: float = 0.0        # > 0 enables the short-segment merge pass
    align_to_audio_boundaries: bool = False

    # Scoring
    ideal_sentence_length: float = 5.0
    ideal_silence_duration: float = 0.8

    # Voice activity
    fundamental_freq_min: float = 85.0
    fundamental_freq_max: float = 255.0
    formant_freq_ranges: Tuple[FormantRange, ...] = DEFAULT_FORMANT_FREQ_RANGES
    voice_activity_threshold: float = 0.4
    zero_crossing_rate_threshold: float = 0.3

    debug: bool = False

    def __post_init__(self):
        # Normalize ranges to tuples so the config stays hashable
        ranges = tuple((float(low), float(high)) for low, high in self.formant_freq_ranges)
        object.__setattr__(self, "formant_freq_ranges", ranges)
        self._validate()

    def _validate(self) -> None:
        size = self.window_size
        if isinstance(size, bool) or not isinstance(size, (int, np.integer)) or size <= 0 or (size & (size - 1)) != 0:
            raise InvalidConfigurationError(
                f"window_size must be a positive power of two, got {size!r}",
                field="window_size",
            )

        for name in (
            "min_silence_duration",
            "silence_threshold",
            "min_sentence_length",
            "min_segment_length",
            "voice_activity_threshold",
            "zero_crossing_rate_threshold",
        ):
            if getattr(self, name) < 0:
                raise InvalidConfigurationError(f"{name} must not be negative", field=name)

        for name in ("max_sentence_length", "ideal_sentence_length", "ideal_silence_duration"):
            if getattr(self, name) <= 0:
                raise InvalidConfigurationError(f"{name} must be positive", field=name)

        if self.min_sentence_length > self.max_sentence_length:
            raise InvalidConfigurationError(
                f"min_sentence_length ({self.min_sentence_length}) exceeds "
                f"max_sentence_length ({self.max_sentence_length})",
                field="min_sentence_length",
            )

        if self.fundamental_freq_min > self.fundamental_freq_max:
            raise InvalidConfigurationError(
                "fundamental_freq_min exceeds fundamental_freq_max",
                field="fundamental_freq_min",
            )

        if len(self.formant_freq_ranges) != 3:
            raise InvalidConfigurationError(
                "formant_freq_ranges must contain exactly three bands",
                field="formant_freq_ranges",
            )
        for low, high in self.formant_freq_ranges:
            if low < 0 or low > high:
                raise InvalidConfigurationError(
                    f"invalid formant band [{low}, {high}]",
                    field="formant_freq_ranges",
                )

    @property
    def third_formant_max(self) -> float:
        """Upper edge of the voice band used for voice-band energy."""
        return self.formant_freq_ranges[2][1]

    def with_overrides(self, **overrides: Any) -> 'DetectorConfig':
        """Return a validated copy with the given fields replaced."""
        unknown = set(overrides) - {f.name for f in fields(self)}
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown configuration field(s): {', '.join(sorted(unknown))}",
                field=sorted(unknown)[0],
            )
        return replace(self, **overrides)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["formant_freq_ranges"] = [list(r) for r in self.formant_freq_ranges]
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DetectorConfig':
        """Create from dictionary, starting from defaults."""
        return cls().with_overrides(**data)


@dataclass(frozen=True)
class SilentRegion:
    """
    A maximal run of silent or non-voiced analysis windows.

    ``avg_rms`` keeps the loudest window RMS seen inside the run; after
    two regions are merged it holds the mean of their values.
    """
    start: float        # seconds
    end: float          # seconds
    duration: float     # seconds
    avg_rms: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "avg_rms": self.avg_rms,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SilentRegion':
        """Create from dictionary."""
        return cls(
            start=data["start"],
            end=data["end"],
            duration=data.get("duration", data["end"] - data["start"]),
            avg_rms=data["avg_rms"],
        )


@dataclass(frozen=True)
class Sentence:
    """A probable spoken sentence with its confidence."""
    index: int
    start: float        # seconds
    end: float          # seconds
    duration: float     # seconds
    probability: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "index": self.index,
            "start": self.start,
            "end": self.end,
            "duration": self.duration,
            "probability": self.probability,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Sentence':
        """Create from dictionary."""
        return cls(
            index=data["index"],
            start=data["start"],
            end=data["end"],
            duration=data.get("duration", data["end"] - data["start"]),
            probability=data.get("probability", 0.0),
        )


@dataclass(frozen=True)
class WindowAnalysis:
    """Features of one non-overlapping analysis window of the silence scan."""
    index: int
    start_sample: int
    end_sample: int
    rms: float
    is_voice: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass(frozen=True)
class VoiceFeatures:
    """Per-window voice activity features and their normalized scores."""
    zcr: float
    spectral_centroid: float
    formant_energies: Tuple[float, ...]
    voice_band_energy: float
    zcr_score: float
    centroid_score: float
    formant_score: float
    energy_score: float
    final_score: float
    is_voice: bool

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data["formant_energies"] = list(self.formant_energies)
        return data


@dataclass(frozen=True)
class ProbabilityComponents:
    """The five clamped sub-scores of a sentence and their weighted result."""
    length: float
    silence_strength: float
    silence_duration: float
    voice_transition: float
    energy_contour: float
    probability: float

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)


@dataclass
class DecodedAudio:
    """
    PCM output of the decoding adapter.

    ``channel_data`` holds one float array per channel, all of equal length.
    """
    sample_rate: int
    channel_data: List[np.ndarray] = field(default_factory=list)

    @property
    def num_channels(self) -> int:
        return len(self.channel_data)

    @property
    def num_samples(self) -> int:
        return len(self.channel_data[0]) if self.channel_data else 0

    @property
    def duration_s(self) -> float:
        """Duration of the decoded audio in seconds."""
        if self.sample_rate <= 0:
            return 0.0
        return self.num_samples / self.sample_rate

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (without sample data)."""
        return {
            "sample_rate": self.sample_rate,
            "num_channels": self.num_channels,
            "num_samples": self.num_samples,
            "duration_s": self.duration_s,
        }
