#!/usr/bin/env python3
from __future__ import annotations
from typing import List
from pathlib import Path

from audio_sentence_detector.lib.logging_config import get_logger, OutputError, error_context
from audio_sentence_detector.processing.detection.data_structures import Sentence
from audio_sentence_detector.providers.file_writers.format_utils import format_timestamp


def sentence_cue_text(sentence: Sentence) -> str:
    """Placeholder cue text for a sentence that has not been transcribed yet."""
    return f"Sentence {sentence.index + 1} (p={sentence.probability:.2f})"


@error_context(reraise=True)
def write_sentences_srt(sentences: List[Sentence], path: str | Path) -> None:
    """
    Write one SRT cue per sentence. Ensures non-negative, non-inverted times.

    Parameters
    ----------
    sentences : List[Sentence]
        Sentences to write
    path : str | Path
        Output file path

    Raises
    ------
    OutputError
        If there are no sentences or the file cannot be written
    """
    logger = get_logger()
    output_path = Path(path)

    if not sentences:
        raise OutputError("No sentences provided for SRT output", output_path=str(output_path))

    lines: list[str] = []
    for i, s in enumerate(sentences, start=1):
        start_s = max(0.0, s.start)
        end_s = max(start_s, s.end)
        lines += [
            str(i),
            f"{format_timestamp(start_s, 'srt')} --> {format_timestamp(end_s, 'srt')}",
            sentence_cue_text(s),
            "",
        ]

    try:
        output_path.parent.mkdir(parents=True, exist_ok=True)
        output_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    except OSError as e:
        raise OutputError(f"Failed to write SRT file: {e}", output_path=str(output_path), cause=e)

    logger.info(f"Successfully wrote SRT file with {len(sentences)} cues: {output_path}")
