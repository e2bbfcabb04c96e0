#!/usr/bin/env python3
"""
Output writers for detected sentences.
"""

from audio_sentence_detector.providers.file_writers.json_writer import write_sentences_json
from audio_sentence_detector.providers.file_writers.csv_writer import write_sentences_csv
from audio_sentence_detector.providers.file_writers.srt_writer import write_sentences_srt

# format name -> (writer, file extension)
OUTPUT_WRITERS = {
    "json": (write_sentences_json, ".json"),
    "csv": (write_sentences_csv, ".csv"),
    "srt": (write_sentences_srt, ".srt"),
}

__all__ = [
    'write_sentences_json',
    'write_sentences_csv',
    'write_sentences_srt',
    'OUTPUT_WRITERS',
]
