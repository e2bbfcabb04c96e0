#!/usr/bin/env python3
from __future__ import annotations
from typing import List
from pathlib import Path
import csv

from audio_sentence_detector.lib.logging_config import get_logger, OutputError, error_context
from audio_sentence_detector.processing.detection.data_structures import Sentence

CSV_COLUMNS = ["index", "start", "end", "duration", "probability"]


@error_context(reraise=True)
def write_sentences_csv(sentences: List[Sentence], path: str | Path) -> None:
    """
    Write one CSV row per sentence (times in seconds, 3 decimals).

    Args:
        sentences: Sentences to write
        path: Output file path for the CSV
    """
    logger = get_logger()
    output_path = Path(path)

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', newline='', encoding='utf-8') as csvfile:
            writer = csv.writer(csvfile)
            writer.writerow(CSV_COLUMNS)
            for s in sentences:
                writer.writerow([
                    s.index,
                    f"{s.start:.3f}",
                    f"{s.end:.3f}",
                    f"{s.duration:.3f}",
                    f"{s.probability:.4f}",
                ])
    except OSError as e:
        raise OutputError(f"Failed to write CSV file: {e}", output_path=str(output_path), cause=e)

    logger.info(f"Wrote {len(sentences)} sentences to CSV: {output_path}")
