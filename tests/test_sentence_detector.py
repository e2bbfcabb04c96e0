#!/usr/bin/env python3
"""End-to-end tests of the detector facade."""

import numpy as np
import pytest

from audio_sentence_detector import (
    AudioSentenceDetector,
    DetectorConfig,
    InvalidConfigurationError,
    detect,
)
from audio_sentence_detector.processing.detection.data_structures import DecodedAudio

from conftest import silence, tone, voiced


def test_speech_pause_speech_gives_two_sentences(speech_pause_speech, sample_rate):
    sentences = detect(speech_pause_speech, sample_rate)

    assert len(sentences) == 2
    first, second = sentences
    assert first.start == 0.0
    assert first.end == pytest.approx(3.072)
    assert 3.8 <= second.start <= 4.1
    assert second.end == pytest.approx(7.0)
    for s in sentences:
        assert s.probability > 0.3
        assert s.duration == pytest.approx(s.end - s.start)


def test_pure_silence_gives_no_sentences(sample_rate):
    assert detect(silence(5.0), sample_rate) == []


def test_long_utterance_is_split(sample_rate):
    sentences = detect(voiced(20.0), sample_rate, DetectorConfig(max_sentence_length=15.0))

    assert len(sentences) == 2
    assert sentences[0].start == 0.0
    assert sentences[0].duration == pytest.approx(10.0)
    assert sentences[1].start == pytest.approx(10.0)
    assert sentences[1].end == pytest.approx(20.0)


def test_empty_buffer_gives_no_sentences(sample_rate):
    assert detect([], sample_rate) == []
    assert detect(np.zeros(0), sample_rate) == []


def test_detection_is_deterministic(speech_pause_speech, sample_rate):
    detector = AudioSentenceDetector()
    assert detector.detect(speech_pause_speech, sample_rate) == detector.detect(speech_pause_speech, sample_rate)


def test_sentence_invariants(sample_rate):
    samples = np.concatenate([
        voiced(2.5), silence(0.8), voiced(4.0), silence(1.2), voiced(0.6), silence(0.7), voiced(3.0),
    ])
    total = samples.shape[0] / sample_rate
    sentences = detect(samples, sample_rate)

    assert sentences
    assert [s.index for s in sentences] == list(range(len(sentences)))
    for previous, current in zip(sentences, sentences[1:]):
        assert previous.end <= current.start + 1e-9
    for s in sentences:
        assert 0.0 <= s.start < s.end <= total + 1e-9
        assert 1.0 <= s.duration <= 15.0 + 1e-9
        assert 0.0 <= s.probability <= 1.0


def test_alignment_covers_the_whole_buffer(speech_pause_speech, sample_rate):
    detector = AudioSentenceDetector(align_to_audio_boundaries=True)
    sentences = detector.detect(np.concatenate([silence(0.6), speech_pause_speech]), sample_rate)
    assert sentences[0].start == 0.0
    assert sentences[-1].end == pytest.approx(7.6)


def test_short_segment_merge(speech_pause_speech, sample_rate):
    detector = AudioSentenceDetector(min_segment_length=10.0)
    sentences = detector.detect(speech_pause_speech, sample_rate)
    assert len(sentences) == 1
    assert sentences[0].index == 0
    assert sentences[0].start == 0.0
    assert sentences[0].end == pytest.approx(7.0)


def test_overrides_replace_config_fields():
    detector = AudioSentenceDetector(DetectorConfig(min_silence_duration=0.3), max_sentence_length=8.0)
    assert detector.config.min_silence_duration == 0.3
    assert detector.config.max_sentence_length == 8.0


@pytest.mark.parametrize("overrides", [
    {"window_size": 1000},
    {"window_size": 0},
    {"min_sentence_length": 20.0, "max_sentence_length": 15.0},
    {"silence_threshold": -0.1},
    {"max_sentence_length": 0.0},
    {"formant_freq_ranges": ((270, 730), (840, 2290))},
    {"formant_freq_ranges": ((730, 270), (840, 2290), (1690, 3010))},
    {"no_such_field": 1},
])
def test_invalid_configuration_is_rejected(overrides):
    with pytest.raises(InvalidConfigurationError):
        AudioSentenceDetector(**overrides)


def test_invalid_configuration_names_the_field():
    with pytest.raises(InvalidConfigurationError) as excinfo:
        DetectorConfig(window_size=1000)
    assert excinfo.value.field == "window_size"
    assert excinfo.value.stage == "configuration"


@pytest.mark.parametrize("sample_rate", [0, -8000, 8000.5, True])
def test_invalid_sample_rate_is_rejected(sample_rate):
    with pytest.raises(ValueError):
        detect(np.zeros(100), sample_rate)


def test_multichannel_array_is_rejected(sample_rate):
    with pytest.raises(ValueError):
        detect(np.zeros((2, 100)), sample_rate)


def test_decoded_audio_is_mixed_down(speech_pause_speech, sample_rate):
    decoded = DecodedAudio(sample_rate=sample_rate, channel_data=[speech_pause_speech, speech_pause_speech])
    detector = AudioSentenceDetector()
    mono = detector.detect(speech_pause_speech, sample_rate)
    mixed = detector.detect_audio(decoded)
    assert [(s.start, s.end) for s in mixed] == [(s.start, s.end) for s in mono]


def test_config_round_trips_through_dict():
    config = DetectorConfig(min_silence_duration=0.3, allow_gaps=False)
    assert DetectorConfig.from_dict(config.to_dict()) == config


def test_detect_file_and_bytes(tmp_path, speech_pause_speech, sample_rate):
    import soundfile as sf

    path = tmp_path / "speech.wav"
    sf.write(str(path), speech_pause_speech, sample_rate, subtype="FLOAT")
    detector = AudioSentenceDetector()

    from_file = detector.detect_file(path)
    from_bytes = detector.detect_bytes(path.read_bytes())
    assert len(from_file) == 2
    assert [(s.start, s.end) for s in from_bytes] == [(s.start, s.end) for s in from_file]


@pytest.mark.parametrize("sample_rate", [8000, 16000])
def test_pure_tone_bursts_give_no_sentences(sample_rate):
    """Loud 200 Hz bursts around a pause are never voice, so every window is silent."""
    samples = np.concatenate([
        tone(3.0, sample_rate=sample_rate),
        silence(1.0, sample_rate=sample_rate),
        tone(3.0, sample_rate=sample_rate),
    ])
    regions, sentences = AudioSentenceDetector().analyze(samples, sample_rate)

    assert len(regions) == 1
    assert regions[0].start == 0.0
    assert regions[0].end == pytest.approx(7.0)
    assert sentences == []


def test_long_pure_tone_gives_no_sentences(sample_rate):
    assert detect(tone(20.0), sample_rate, DetectorConfig(max_sentence_length=15.0)) == []


def test_analyze_returns_regions_and_sentences(speech_pause_speech, sample_rate):
    detector = AudioSentenceDetector()
    regions, sentences = detector.analyze(speech_pause_speech, sample_rate)

    assert regions == detector.detect_silent_regions(speech_pause_speech, sample_rate)
    assert sentences == detector.detect(speech_pause_speech, sample_rate)
    assert detector.analyze([], sample_rate) == ([], [])


def test_debug_traces_reach_the_root_logger(caplog, speech_pause_speech, sample_rate):
    """Only the root logger is configured; the package logger keeps its default."""
    import logging

    caplog.set_level(logging.DEBUG)
    detect(speech_pause_speech, sample_rate, DetectorConfig(debug=True))

    events = [getattr(r, "trace_event", None) for r in caplog.records]
    assert "window" in events
    assert "sentence_score" in events
    summary = [r for r in caplog.records if getattr(r, "trace_event", None) == "detection_summary"]
    assert len(summary) == 1
    assert summary[0].sentence_count == 2
    assert summary[0].region_count == 1
