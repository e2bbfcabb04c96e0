#!/usr/bin/env python3
# framework/cli.py - CLI argument parsing and configuration assembly

import argparse
from typing import Any, Dict, Optional

from audio_sentence_detector.lib.environment import LOG_LEVELS, config_overrides_from_env, default_log_level
from audio_sentence_detector.processing.detection.data_structures import DetectorConfig
from audio_sentence_detector.providers.file_writers import OUTPUT_WRITERS

# flag dest -> type, for the numeric DetectorConfig fields
NUMERIC_CONFIG_FLAGS = {
    "min_silence_duration": float,
    "silence_threshold": float,
    "window_size": int,
    "min_sentence_length": float,
    "max_sentence_length": float,
    "min_segment_length": float,
    "ideal_sentence_length": float,
    "ideal_silence_duration": float,
    "fundamental_freq_min": float,
    "fundamental_freq_max": float,
    "voice_activity_threshold": float,
    "zero_crossing_rate_threshold": float,
}


# ---------- CLI ----------
def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(
        description="audio-sentence-detector: offline sentence segmentation of speech audio."
    )
    p.add_argument("-a", "--audio-files", nargs='+', metavar="AUDIO_FILE", help="Audio files to analyze. Multi-channel audio is mixed down to mono.")
    p.add_argument("-o", "--outdir", metavar="OUTPUT_DIR", help="Directory to write outputs into (created if missing). Without it results are printed as JSON.")
    p.add_argument("-f", "--formats", nargs='+', choices=sorted(OUTPUT_WRITERS), default=["json"], help="Output formats to write into --outdir [Default: json]")
    p.add_argument("-l", "--log-level", choices=LOG_LEVELS, default=default_log_level(), help="Set logging level (DEBUG, INFO, WARNING, ERROR) [Default: WARNING or $SENTENCE_DETECTOR_LOG_LEVEL]")
    p.add_argument("--log-file", metavar="LOG_FILE", help="Also write logs to this file.")
    p.add_argument("--structured-logs", action="store_true", help="Emit logs as JSON lines.")
    p.add_argument("--audit", action="store_true", help="Write a detection audit JSON per file into --outdir.")
    p.add_argument("--debug", action="store_true", help="Emit per-window and per-sentence diagnostic traces (implies DEBUG logging).")

    g = p.add_argument_group("detector configuration")
    for dest, kind in NUMERIC_CONFIG_FLAGS.items():
        g.add_argument(f"--{dest.replace('_', '-')}", dest=dest, type=kind, default=None, help=f"[Default: {getattr(DetectorConfig(), dest)}]")
    g.add_argument("--no-gaps", action="store_true", help="Extend each sentence to the middle of the following silence instead of leaving gaps.")
    g.add_argument("--align-to-audio-boundaries", action="store_true", help="Stretch the first and last sentence to the edges of the audio.")

    p.add_argument("--show-defaults", action="store_true", help="Show all default values and exit.")

    args = p.parse_args(argv)

    return args


def config_overrides_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    for dest in NUMERIC_CONFIG_FLAGS:
        value = getattr(args, dest, None)
        if value is not None:
            overrides[dest] = value
    if getattr(args, "no_gaps", False):
        overrides["allow_gaps"] = False
    if getattr(args, "align_to_audio_boundaries", False):
        overrides["align_to_audio_boundaries"] = True
    if getattr(args, "debug", False):
        overrides["debug"] = True
    return overrides


def build_config(args: argparse.Namespace, environ=None) -> DetectorConfig:
    """Defaults, then SENTENCE_DETECTOR_* environment values, then flags."""
    overrides = config_overrides_from_env(environ)
    overrides.update(config_overrides_from_args(args))
    return DetectorConfig().with_overrides(**overrides)


def show_defaults():
    """Display all default values used by the detector."""
    defaults = DetectorConfig()
    print("\n=== Default Values ===")

    print("\nSilence Detection:")
    print(f"  - Min Silence Duration: {defaults.min_silence_duration}s")
    print(f"  - Silence Threshold (RMS): {defaults.silence_threshold}")
    print(f"  - Window Size: {defaults.window_size} samples")

    print("\nSentence Boundaries:")
    print(f"  - Min Sentence Length: {defaults.min_sentence_length}s")
    print(f"  - Max Sentence Length: {defaults.max_sentence_length}s")
    print(f"  - Allow Gaps: {defaults.allow_gaps} (use --no-gaps to disable)")
    print(f"  - Min Segment Length: {defaults.min_segment_length}s (0 disables merging)")
    print(f"  - Align To Audio Boundaries: {defaults.align_to_audio_boundaries}")

    print("\nScoring:")
    print(f"  - Ideal Sentence Length: {defaults.ideal_sentence_length}s")
    print(f"  - Ideal Silence Duration: {defaults.ideal_silence_duration}s")

    print("\nVoice Activity:")
    print(f"  - Fundamental Frequency: {defaults.fundamental_freq_min}-{defaults.fundamental_freq_max} Hz")
    bands = ", ".join(f"{int(lo)}-{int(hi)}" for lo, hi in defaults.formant_freq_ranges)
    print(f"  - Formant Bands: {bands} Hz")
    print(f"  - Voice Activity Threshold: {defaults.voice_activity_threshold}")
    print(f"  - Zero Crossing Rate Threshold: {defaults.zero_crossing_rate_threshold}")

    print("\nOutput:")
    print("  - Formats: json (csv, srt available)")
    print("  - Log Level: WARNING")

    print("\nNote: Any value can also be set as SENTENCE_DETECTOR_<FIELD> in the environment or a .env file.")


# ---------- main ----------
def main(argv: Optional[list[str]] = None) -> int:
    from audio_sentence_detector.lib.environment import load_environment
    from audio_sentence_detector.framework.pipeline_runner import run_detection

    load_environment()
    args = parse_args(argv)

    # Handle show-defaults flag (doesn't require other args)
    if args.show_defaults:
        show_defaults()
        return 0

    return run_detection(args)
