#!/usr/bin/env python3
# framework/pipeline_runner.py - Detection run over the CLI's audio files

import datetime
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from audio_sentence_detector.framework.cli import build_config
from audio_sentence_detector.lib.audio_io import decode_audio_file
from audio_sentence_detector.lib.environment import ensure_outdir
from audio_sentence_detector.lib.logging_config import (
    AudioDecodeError,
    InvalidConfigurationError,
    OutputError,
    configure_global_logging,
    get_logger,
    log_completion,
    log_exception,
    log_intermediate_save,
    log_progress,
    log_status,
)
from audio_sentence_detector.lib.progress import ProgressTracker
from audio_sentence_detector.processing.detection import AudioSentenceDetector, write_detection_audit
from audio_sentence_detector.providers.file_writers import OUTPUT_WRITERS
from audio_sentence_detector.providers.file_writers.json_writer import sentences_to_payload
from audio_sentence_detector.providers.file_writers.format_utils import format_duration


def detection_payload(result: Dict[str, Any]) -> Dict[str, Any]:
    return sentences_to_payload(result["sentences"], metadata={
        "audio_file": result["audio_file"],
        "sample_rate": result["sample_rate"],
        "audio_duration_s": result["audio_duration_s"],
    })


def detect_one_file(detector: AudioSentenceDetector, audio_path: str) -> Dict[str, Any]:
    """Decode one file, detect sentences and return everything the outputs need."""
    decoded = decode_audio_file(audio_path)
    log_progress(
        f"Decoded {Path(audio_path).name}",
        details=f"{decoded.num_channels} channel(s), {format_duration(decoded.duration_s)} at {decoded.sample_rate}Hz",
    )
    regions, sentences = detector.analyze_audio(decoded)
    return {
        "audio_file": str(audio_path),
        "sample_rate": decoded.sample_rate,
        "audio_duration_s": decoded.duration_s,
        "regions": regions,
        "sentences": sentences,
    }


def write_outputs(result: Dict[str, Any], outdir: Path, formats: List[str], run_id: str, audit: bool, detector: AudioSentenceDetector) -> List[Path]:
    """Write the requested formats (and optionally the audit) for one file."""
    base_name = Path(result["audio_file"]).stem
    sentences = result["sentences"]
    written: List[Path] = []

    for fmt in formats:
        writer, extension = OUTPUT_WRITERS[fmt]
        out_file = outdir / f"{base_name}_sentences{extension}"
        if fmt == "srt" and not sentences:
            log_status(f"No sentences in {base_name}, skipping SRT output", level="WARNING")
            continue
        if fmt == "json":
            writer(sentences, out_file, metadata={
                "audio_file": result["audio_file"],
                "sample_rate": result["sample_rate"],
                "audio_duration_s": result["audio_duration_s"],
                "run_id": run_id,
            })
        else:
            writer(sentences, out_file)
        log_intermediate_save(str(out_file), f"{fmt.upper()} sentences saved to")
        written.append(out_file)

    if audit:
        written.append(write_detection_audit(
            result["regions"],
            sentences,
            detector.config,
            outdir,
            f"{base_name}_{run_id}",
            audio_file=result["audio_file"],
            audio_duration_s=result["audio_duration_s"],
            sample_rate=result["sample_rate"],
        ))

    return written


def run_detection(args, stdout=None) -> int:
    """Main detection run.

    Args:
        args: Command line arguments
        stdout: Stream for JSON results when no output directory is given

    Returns:
        int: Exit code (0 for success, 1 for error)
    """
    stdout = stdout or sys.stdout
    log_level = "DEBUG" if args.debug else args.log_level
    configure_global_logging(
        log_level=log_level,
        log_file=args.log_file,
        structured_output=args.structured_logs,
    )
    logger = get_logger()

    # Early return if no audio files provided
    if not args.audio_files:
        log_status("No audio files given (use -a/--audio-files)", level="ERROR")
        return 1

    try:
        config = build_config(args)
    except InvalidConfigurationError as e:
        log_exception(logger, e)
        return 1

    if args.audit and not args.outdir:
        log_status("--audit requires --outdir", level="ERROR")
        return 1

    outdir: Optional[Path] = ensure_outdir(args.outdir) if args.outdir else None
    run_id = datetime.datetime.now().strftime("%Y%m%d_%H%M%S")
    detector = AudioSentenceDetector(config)
    log_status(f"Files: {len(args.audio_files)} | Outputs: {', '.join(args.formats) if outdir else 'stdout'}")

    results: List[Dict[str, Any]] = []
    tracker = ProgressTracker(disable=len(args.audio_files) < 2)
    tracker.start()
    try:
        with tracker.task_context("Detecting sentences", total=len(args.audio_files), stage="detection") as task_id:
            for audio_path in args.audio_files:
                try:
                    result = detect_one_file(detector, audio_path)
                except AudioDecodeError:
                    # already logged by the decoder's error context
                    log_status(f"Failed to decode {audio_path}", level="ERROR")
                    return 1

                if outdir is not None:
                    try:
                        write_outputs(result, outdir, args.formats, run_id, args.audit, detector)
                    except OutputError:
                        log_status(f"Failed to write outputs for {audio_path}", level="ERROR")
                        return 1
                results.append(result)
                tracker.update(task_id, advance=1)
    finally:
        tracker.stop()

    if outdir is None:
        payload = [detection_payload(r) for r in results]
        json.dump(payload[0] if len(payload) == 1 else payload, stdout, indent=2)
        stdout.write("\n")

    log_completion(
        f"Processed {len(results)} file(s)",
        stats={
            "sentences": sum(len(r["sentences"]) for r in results),
            "elapsed_s": round(tracker.get_metrics("detection").duration, 2),
        },
    )
    return 0
