#!/usr/bin/env python3
"""
Detection audit utilities.

Writes a JSON audit file describing one detection run: the configuration
used, the silent regions found and the sentences emitted, so that
boundary decisions can be inspected after the fact.
"""

import json
from typing import List, Dict, Any, Optional
from pathlib import Path
from datetime import datetime

from audio_sentence_detector.processing.detection.data_structures import (
    DetectorConfig,
    Sentence,
    SilentRegion,
)
from audio_sentence_detector.lib.logging_config import log_intermediate_save


def build_detection_audit(
    regions: List[SilentRegion],
    sentences: List[Sentence],
    config: DetectorConfig,
    run_id: str,
    audio_file: Optional[str] = None,
    audio_duration_s: Optional[float] = None,
    sample_rate: Optional[int] = None,
) -> Dict[str, Any]:
    """Assemble the audit document for one run."""
    probabilities = [s.probability for s in sentences]
    return {
        "run_id": run_id,
        "timestamp": datetime.now().isoformat(),
        "audio_file": audio_file,
        "audio_duration_s": audio_duration_s,
        "sample_rate": sample_rate,
        "config": config.to_dict(),
        "silent_regions": [r.to_dict() for r in regions],
        "sentences": [s.to_dict() for s in sentences],
        "summary": {
            "region_count": len(regions),
            "sentence_count": len(sentences),
            "total_silence_s": sum(r.duration for r in regions),
            "total_sentence_s": sum(s.duration for s in sentences),
            "mean_probability": sum(probabilities) / len(probabilities) if probabilities else None,
        },
    }


def write_detection_audit(
    regions: List[SilentRegion],
    sentences: List[Sentence],
    config: DetectorConfig,
    output_path: Path,
    run_id: str,
    audio_file: Optional[str] = None,
    audio_duration_s: Optional[float] = None,
    sample_rate: Optional[int] = None,
) -> Path:
    """
    Write detection_audit_<run>.json.

    Args:
        regions: Silent regions of the run
        sentences: Sentences emitted by the run
        config: Detector configuration used
        output_path: Directory to write the audit file
        run_id: Unique run identifier
        audio_file: Optional source audio path
        audio_duration_s: Optional audio duration
        sample_rate: Optional sample rate

    Returns:
        Path to the written audit file
    """
    output_path = Path(output_path)
    output_path.mkdir(parents=True, exist_ok=True)

    audit_data = build_detection_audit(
        regions,
        sentences,
        config,
        run_id,
        audio_file=audio_file,
        audio_duration_s=audio_duration_s,
        sample_rate=sample_rate,
    )

    audit_file = output_path / f"detection_audit_{run_id}.json"
    with open(audit_file, 'w', encoding='utf-8') as f:
        json.dump(audit_data, f, indent=2, ensure_ascii=False)

    log_intermediate_save(str(audit_file), "Detection audit saved to")
    return audit_file
