#!/usr/bin/env python3
from __future__ import annotations
import io
import pathlib
from typing import Sequence

import numpy as np

from audio_sentence_detector.lib.logging_config import get_logger, AudioDecodeError, error_context
from audio_sentence_detector.processing.detection.data_structures import DecodedAudio

# Decoding adapter: turns encoded audio into per-channel float PCM.
# soundfile handles WAV/FLAC/OGG directly; librosa (audioread/ffmpeg) covers the rest.


def calculate_rms(samples: np.ndarray | Sequence[float]) -> float:
    """Root-mean-square amplitude of a block of samples (0 for an empty block)."""
    block = np.asarray(samples, dtype=np.float64)
    if block.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(block * block)))


def calculate_rms_level(samples: np.ndarray | Sequence[float], start_idx: int, end_idx: int) -> float:
    """RMS of ``samples[start_idx:end_idx]``."""
    return calculate_rms(np.asarray(samples)[start_idx:end_idx])


def to_mono(channel_data: Sequence[np.ndarray | Sequence[float]]) -> np.ndarray:
    """
    Reduce per-channel sample sequences to one mono sequence.

    Parameters
    ----------
    channel_data : Sequence
        One sample sequence per channel, all of equal length

    Returns
    -------
    np.ndarray
        ``mono[i]`` is the mean of ``channel_data[c][i]`` over channels
    """
    if len(channel_data) == 0:
        return np.zeros(0, dtype=np.float32)

    channels = [np.asarray(c, dtype=np.float32) for c in channel_data]
    lengths = {c.shape[0] for c in channels}
    if len(lengths) != 1:
        raise ValueError(f"All channels must have the same length, got lengths {sorted(lengths)}")

    if len(channels) == 1:
        return channels[0].copy()
    return np.mean(np.stack(channels), axis=0, dtype=np.float64).astype(np.float32)


def _from_frames(data: np.ndarray, sample_rate: int) -> DecodedAudio:
    # soundfile returns (frames, channels) with always_2d=True
    channel_data = [np.ascontiguousarray(data[:, c], dtype=np.float32) for c in range(data.shape[1])]
    return DecodedAudio(sample_rate=int(sample_rate), channel_data=channel_data)


@error_context(reraise=True)
def decode_audio_file(path: str | pathlib.Path) -> DecodedAudio:
    """
    Decode an audio file into per-channel float PCM at its native rate.

    Parameters
    ----------
    path : str | pathlib.Path
        Audio file to decode

    Returns
    -------
    DecodedAudio
        Sample rate and channel data

    Raises
    ------
    AudioDecodeError
        If the file is missing or no decoder can read it
    """
    import soundfile as sf

    logger = get_logger()
    src_path = pathlib.Path(path)

    if not src_path.exists():
        raise AudioDecodeError(f"Source audio file not found: {src_path}", audio_path=str(src_path))
    if not src_path.is_file():
        raise AudioDecodeError(f"Source path is not a file: {src_path}", audio_path=str(src_path))

    logger.info(f"Decoding audio: {src_path}")

    # Try soundfile first (faster for common formats)
    try:
        data, sr = sf.read(str(src_path), dtype="float32", always_2d=True)
        return _from_frames(data, sr)
    except Exception as sf_error:
        logger.debug(f"soundfile could not read {src_path}: {sf_error}; falling back to librosa")

    # Fall back to librosa (handles more formats)
    try:
        import librosa

        audio, sr = librosa.load(str(src_path), sr=None, mono=False)
        audio = np.atleast_2d(np.asarray(audio, dtype=np.float32))
        return DecodedAudio(sample_rate=int(sr), channel_data=[row.copy() for row in audio])
    except Exception as e:
        raise AudioDecodeError(
            f"Could not decode audio file: {e}",
            audio_path=str(src_path),
            cause=e
        )


@error_context(reraise=True)
def decode_audio_bytes(payload: bytes) -> DecodedAudio:
    """
    Decode an in-memory encoded audio payload.

    Raises
    ------
    AudioDecodeError
        If the payload is empty or cannot be decoded
    """
    import soundfile as sf

    if not payload:
        raise AudioDecodeError("Audio payload is empty")

    try:
        data, sr = sf.read(io.BytesIO(payload), dtype="float32", always_2d=True)
    except Exception as e:
        raise AudioDecodeError(f"Could not decode audio payload: {e}", cause=e)

    return _from_frames(data, sr)


def load_mono_samples(path: str | pathlib.Path) -> tuple[np.ndarray, int]:
    """Decode a file and return ``(mono_samples, sample_rate)``."""
    decoded = decode_audio_file(path)
    return to_mono(decoded.channel_data), decoded.sample_rate
