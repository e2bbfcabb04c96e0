#!/usr/bin/env python3
from __future__ import annotations
from typing import List, Dict, Optional, Any
from pathlib import Path
import json

from audio_sentence_detector.lib.logging_config import get_logger, OutputError, error_context
from audio_sentence_detector.processing.detection.data_structures import Sentence


def sentences_to_payload(sentences: List[Sentence], metadata: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Build the JSON document for a sentence list."""
    return {
        "metadata": dict(metadata or {}),
        "sentence_count": len(sentences),
        "sentences": [s.to_dict() for s in sentences],
    }


@error_context(reraise=True)
def write_sentences_json(
    sentences: List[Sentence],
    path: str | Path,
    metadata: Optional[Dict[str, Any]] = None,
) -> None:
    """
    Write sentences as JSON with optional run metadata.

    An empty sentence list is valid here: "no sentences" is a result.

    Raises
    ------
    OutputError
        If the file cannot be written
    """
    logger = get_logger()
    output_path = Path(path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, "w", encoding="utf-8") as f:
            json.dump(sentences_to_payload(sentences, metadata), f, indent=2, ensure_ascii=False)
    except OSError as e:
        raise OutputError(f"Failed to write JSON file: {e}", output_path=str(output_path), cause=e)

    logger.info(f"Wrote {len(sentences)} sentences to JSON: {output_path}")
