#!/usr/bin/env python3
"""Tests for CLI parsing, configuration precedence and the detection run."""

import io
import json

import numpy as np
import pytest
import soundfile as sf

from audio_sentence_detector.framework.cli import build_config, main, parse_args
from audio_sentence_detector.framework.pipeline_runner import run_detection
from audio_sentence_detector.lib.environment import config_overrides_from_env, default_log_level
from audio_sentence_detector.lib.logging_config import InvalidConfigurationError

from conftest import SAMPLE_RATE, silence, voiced


@pytest.fixture
def speech_file(tmp_path):
    path = tmp_path / "speech.wav"
    samples = np.concatenate([voiced(3.0), silence(1.0), voiced(3.0)])
    sf.write(str(path), samples, SAMPLE_RATE, subtype="FLOAT")
    return path


def test_env_overrides_are_typed():
    overrides = config_overrides_from_env({
        "SENTENCE_DETECTOR_MIN_SILENCE_DURATION": "0.4",
        "SENTENCE_DETECTOR_WINDOW_SIZE": "1024",
        "SENTENCE_DETECTOR_ALLOW_GAPS": "false",
        "SENTENCE_DETECTOR_DEBUG": "1",
        "SENTENCE_DETECTOR_MAX_SENTENCE_LENGTH": "",
        "UNRELATED": "x",
    })
    assert overrides == {
        "min_silence_duration": 0.4,
        "window_size": 1024,
        "allow_gaps": False,
        "debug": True,
    }


@pytest.mark.parametrize("key, value", [
    ("SENTENCE_DETECTOR_WINDOW_SIZE", "big"),
    ("SENTENCE_DETECTOR_ALLOW_GAPS", "maybe"),
])
def test_env_overrides_reject_bad_values(key, value):
    with pytest.raises(InvalidConfigurationError):
        config_overrides_from_env({key: value})


def test_default_log_level_from_env():
    assert default_log_level({}) == "WARNING"
    assert default_log_level({"SENTENCE_DETECTOR_LOG_LEVEL": "debug"}) == "DEBUG"


@pytest.mark.parametrize("value", ["TRACE", "verbose", ""])
def test_unknown_log_level_falls_back_to_warning(value):
    assert default_log_level({"SENTENCE_DETECTOR_LOG_LEVEL": value}) == "WARNING"


def test_unknown_env_log_level_still_runs(monkeypatch, speech_file):
    monkeypatch.setenv("SENTENCE_DETECTOR_LOG_LEVEL", "TRACE")
    args = parse_args(["-a", str(speech_file)])
    assert args.log_level == "WARNING"
    assert run_detection(args, stdout=io.StringIO()) == 0


def test_flags_take_precedence_over_env():
    args = parse_args(["-a", "x.wav", "--min-silence-duration", "0.7", "--no-gaps"])
    config = build_config(args, environ={
        "SENTENCE_DETECTOR_MIN_SILENCE_DURATION": "0.4",
        "SENTENCE_DETECTOR_SILENCE_THRESHOLD": "0.02",
    })
    assert config.min_silence_duration == 0.7
    assert config.silence_threshold == 0.02
    assert config.allow_gaps is False
    assert config.max_sentence_length == 15.0


def test_show_defaults(capsys):
    assert main(["--show-defaults"]) == 0
    assert "Min Silence Duration: 0.5s" in capsys.readouterr().out


def test_run_prints_json_without_outdir(speech_file):
    out = io.StringIO()
    assert run_detection(parse_args(["-a", str(speech_file)]), stdout=out) == 0

    payload = json.loads(out.getvalue())
    assert payload["metadata"]["sample_rate"] == SAMPLE_RATE
    assert payload["sentence_count"] == 2
    assert payload["sentences"][0]["start"] == 0.0


def test_run_writes_requested_formats(tmp_path, speech_file):
    outdir = tmp_path / "out"
    args = parse_args(["-a", str(speech_file), "-o", str(outdir), "-f", "json", "csv", "srt", "--audit"])
    assert run_detection(args) == 0

    assert (outdir / "speech_sentences.json").exists()
    assert (outdir / "speech_sentences.csv").exists()
    assert (outdir / "speech_sentences.srt").exists()
    assert len(list(outdir.glob("detection_audit_speech_*.json"))) == 1


def test_run_skips_srt_without_sentences(tmp_path):
    path = tmp_path / "quiet.wav"
    sf.write(str(path), silence(2.0), SAMPLE_RATE, subtype="FLOAT")
    outdir = tmp_path / "out"
    assert run_detection(parse_args(["-a", str(path), "-o", str(outdir), "-f", "json", "srt"])) == 0
    assert (outdir / "quiet_sentences.json").exists()
    assert not (outdir / "quiet_sentences.srt").exists()


def test_run_fails_on_missing_audio(tmp_path):
    assert run_detection(parse_args(["-a", str(tmp_path / "missing.wav")])) == 1


def test_run_fails_on_invalid_config(speech_file):
    assert run_detection(parse_args(["-a", str(speech_file), "--window-size", "1000"])) == 1


def test_run_requires_audio_files():
    assert run_detection(parse_args([])) == 1


def test_debug_run_goes_through_the_detector(caplog, speech_file):
    """--debug on the CLI emits the per-file detection summary trace."""
    import logging

    caplog.set_level(logging.DEBUG)
    assert run_detection(parse_args(["-a", str(speech_file), "--debug"]), stdout=io.StringIO()) == 0

    summary = [r for r in caplog.records if getattr(r, "trace_event", None) == "detection_summary"]
    assert len(summary) == 1
    assert summary[0].sentence_count == 2
    assert summary[0].sample_rate == SAMPLE_RATE
