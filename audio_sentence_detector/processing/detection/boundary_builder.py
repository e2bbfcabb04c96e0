#!/usr/bin/env python3
"""
Sentence boundary builder.

Turns the ordered silent regions into sentence candidates:

1. The span between the previous region's end and the next region's start
   becomes a sentence when its length is within bounds
2. Overlong spans are cut into equal parts no longer than the maximum
3. Spans shorter than the minimum are dropped
4. The remainder after the last region becomes a trailing sentence
5. Optionally the first/last sentence is stretched to the buffer edges
6. Optionally short sentences are merged into groups of a minimum length
"""

import math
from dataclasses import replace
from typing import Callable, List, Optional

import numpy as np

from audio_sentence_detector.lib.logging_config import log_debug
from audio_sentence_detector.processing.detection.data_structures import (
    DetectorConfig,
    Sentence,
    SilentRegion,
)
from audio_sentence_detector.processing.detection.probability_scorer import score

# (start, end, region) -> probability
SpanScorer = Callable[[float, float, Optional[SilentRegion]], float]


def _boundary_after(regions: List[SilentRegion], i: int, config: DetectorConfig) -> float:
    """Where a sentence ending at region ``i`` stops."""
    region = regions[i]
    if not config.allow_gaps and i < len(regions) - 1:
        return (region.end + regions[i + 1].start) / 2
    return region.start


def _next_last_end(regions: List[SilentRegion], i: int, config: DetectorConfig) -> float:
    region = regions[i]
    if not config.allow_gaps and i < len(regions) - 1:
        return (region.end + regions[i + 1].start) / 2
    return region.end


def _split_span(
    span_start: float,
    duration: float,
    final_end: float,
    region: Optional[SilentRegion],
    config: DetectorConfig,
    scorer: SpanScorer,
) -> List[Sentence]:
    """Cut an overlong span into ceil(duration / max) equal parts."""
    num_parts = math.ceil(duration / config.max_sentence_length)
    part_duration = duration / num_parts

    parts: List[Sentence] = []
    for j in range(num_parts):
        part_start = span_start + j * part_duration
        is_last = j == num_parts - 1
        part_end = final_end if is_last else span_start + (j + 1) * part_duration
        parts.append(Sentence(
            index=0,
            start=part_start,
            end=part_end,
            duration=part_end - part_start,
            probability=scorer(part_start, part_end, region if is_last else None),
        ))
    return parts


def _reindex(sentences: List[Sentence]) -> List[Sentence]:
    return [s if s.index == i else replace(s, index=i) for i, s in enumerate(sentences)]


def find_sentence_boundaries(
    regions: List[SilentRegion],
    samples: np.ndarray,
    sample_rate: int,
    config: DetectorConfig,
    scorer: Optional[SpanScorer] = None,
) -> List[Sentence]:
    """
    Build scored sentences from silent regions.

    Args:
        regions: Ordered silent regions from the silence detector
        samples: Mono float samples the regions were detected in
        sample_rate: Sample rate in Hz
        config: Detector configuration
        scorer: Optional span scorer; defaults to the probability scorer

    Returns:
        Ordered list of Sentence with contiguous indices from 0
    """
    samples = np.asarray(samples, dtype=np.float64)
    total_duration = samples.shape[0] / sample_rate

    if scorer is None:
        def scorer(start: float, end: float, region: Optional[SilentRegion]) -> float:
            return score(start, end, samples, sample_rate, config, region)

    sentences: List[Sentence] = []
    last_end = 0.0

    for i, region in enumerate(regions):
        duration = region.start - last_end

        if config.min_sentence_length <= duration <= config.max_sentence_length:
            end = _boundary_after(regions, i, config)
            sentences.append(Sentence(
                index=len(sentences),
                start=last_end,
                end=end,
                duration=end - last_end,
                probability=scorer(last_end, end, region),
            ))
        elif duration > config.max_sentence_length:
            sentences.extend(_split_span(
                last_end, duration, _boundary_after(regions, i, config), region, config, scorer
            ))

        last_end = _next_last_end(regions, i, config)

    if last_end < total_duration:
        remaining = total_duration - last_end
        if config.min_sentence_length <= remaining <= config.max_sentence_length:
            sentences.append(Sentence(
                index=len(sentences),
                start=last_end,
                end=total_duration,
                duration=remaining,
                probability=scorer(last_end, total_duration, None),
            ))
        elif remaining > config.max_sentence_length:
            sentences.extend(_split_span(last_end, remaining, total_duration, None, config, scorer))

    if config.align_to_audio_boundaries:
        sentences = align_to_audio_boundaries(sentences, total_duration, scorer)

    if config.min_segment_length > 0:
        sentences = merge_short_segments(sentences, config.min_segment_length)

    log_debug(f"Boundary builder produced {len(sentences)} sentences from {len(regions)} regions")
    return _reindex(sentences)


def align_to_audio_boundaries(
    sentences: List[Sentence],
    total_duration: float,
    scorer: SpanScorer,
) -> List[Sentence]:
    """
    Stretch the first sentence to 0 and the last one to the buffer end.

    Without any sentence a non-empty buffer becomes one sentence spanning
    the whole buffer.
    """
    if not sentences:
        if total_duration <= 0:
            return []
        return [Sentence(
            index=0,
            start=0.0,
            end=total_duration,
            duration=total_duration,
            probability=scorer(0.0, total_duration, None),
        )]

    aligned = list(sentences)
    first = aligned[0]
    aligned[0] = replace(first, start=0.0, duration=first.end)
    last = aligned[-1]
    aligned[-1] = replace(last, end=total_duration, duration=total_duration - last.start)
    return aligned


def _merge_group(group: List[Sentence]) -> Sentence:
    if len(group) == 1:
        return group[0]
    start = group[0].start
    end = group[-1].end
    return Sentence(
        index=group[0].index,
        start=start,
        end=end,
        duration=end - start,
        probability=sum(s.probability for s in group) / len(group),
    )


def merge_short_segments(sentences: List[Sentence], min_segment_length: float) -> List[Sentence]:
    """
    Greedily group consecutive sentences until a group reaches the minimum.

    A group grows while its summed duration plus the next sentence stays
    within ``min_segment_length``. When the next sentence would overshoot,
    a group that already meets the minimum is flushed and the sentence
    starts a new group; a group that is still too short absorbs the
    sentence and is flushed immediately, even if that overshoots.
    """
    if len(sentences) <= 1:
        return _reindex(list(sentences))

    merged: List[Sentence] = []
    group: List[Sentence] = []

    for sentence in sentences:
        if not group:
            group.append(sentence)
            continue

        group_duration = sum(s.duration for s in group)
        if group_duration + sentence.duration <= min_segment_length:
            group.append(sentence)
        elif group_duration >= min_segment_length:
            merged.append(_merge_group(group))
            group = [sentence]
        else:
            group.append(sentence)
            merged.append(_merge_group(group))
            group = []

    if group:
        merged.append(_merge_group(group))

    return _reindex(merged)
