#!/usr/bin/env python3
"""
Spectral engine: Hamming window, iterative radix-2 FFT and magnitude spectrum.

Magnitudes are not normalized by the window length; every consumer
compares them relative to each other.
"""

from functools import lru_cache
from typing import Sequence, Tuple, Union

import numpy as np

ArrayLike = Union[np.ndarray, Sequence[float]]


def is_power_of_two(n: int) -> bool:
    return n > 0 and (n & (n - 1)) == 0


def next_power_of_two(n: int) -> int:
    """Smallest power of two >= n (1 for n <= 1)."""
    if n <= 1:
        return 1
    return 1 << (int(n) - 1).bit_length()


@lru_cache(maxsize=32)
def _hamming(n: int) -> np.ndarray:
    # np.hamming evaluates 0.54 - 0.46 * cos(2*pi*i / (n - 1))
    window = np.hamming(n)
    window.setflags(write=False)
    return window


@lru_cache(maxsize=32)
def _fft_tables(n: int) -> Tuple[np.ndarray, Tuple[np.ndarray, ...]]:
    """Bit-reversal permutation and per-stage twiddle factors for size ``n``."""
    bits = n.bit_length() - 1
    indices = np.arange(n)
    reversed_indices = np.zeros(n, dtype=np.int64)
    for b in range(bits):
        reversed_indices |= ((indices >> b) & 1) << (bits - 1 - b)
    reversed_indices.setflags(write=False)

    twiddles = []
    size = 2
    while size <= n:
        half = size // 2
        theta = -2.0 * np.pi * np.arange(half) / size
        tw = np.cos(theta) + 1j * np.sin(theta)
        tw.setflags(write=False)
        twiddles.append(tw)
        size *= 2
    return reversed_indices, tuple(twiddles)


def fft(real: ArrayLike, imag: ArrayLike = None) -> np.ndarray:
    """
    Iterative decimation-in-time Cooley-Tukey FFT.

    Args:
        real: Real part of the input, length a power of two
        imag: Imaginary part (zeros when omitted)

    Returns:
        Complex spectrum of the same length
    """
    real = np.asarray(real, dtype=np.float64)
    n = real.shape[0]
    if not is_power_of_two(n):
        raise ValueError(f"FFT length must be a power of two, got {n}")

    data = real.astype(np.complex128)
    if imag is not None:
        data = data + 1j * np.asarray(imag, dtype=np.float64)
    if n == 1:
        return data

    order, twiddles = _fft_tables(n)
    data = data[order]

    size = 2
    for tw in twiddles:
        half = size // 2
        blocks = data.reshape(-1, size)
        even = blocks[:, :half].copy()
        odd = blocks[:, half:] * tw
        blocks[:, :half] = even + odd
        blocks[:, half:] = even - odd
        data = blocks.reshape(n)
        size *= 2

    return data


def magnitude_spectrum(window: ArrayLike) -> np.ndarray:
    """
    Magnitude of the first N/2 FFT bins of a Hamming-windowed frame.

    Frames whose length is not a power of two are zero-padded to the next
    power of two after the Hamming window is applied over their own length.
    """
    samples = np.asarray(window, dtype=np.float64)
    n = samples.shape[0]
    if n == 0:
        return np.zeros(0, dtype=np.float64)

    weighted = samples * _hamming(n)
    padded_n = next_power_of_two(n)
    if padded_n != n:
        weighted = np.concatenate([weighted, np.zeros(padded_n - n)])

    spectrum = fft(weighted)
    return np.abs(spectrum[: padded_n // 2])


def bin_resolution(sample_rate: int, n_bins: int) -> float:
    """Frequency spacing in Hz between adjacent magnitude bins."""
    if n_bins <= 0:
        return 0.0
    return sample_rate / (n_bins * 2)


def bin_frequencies(sample_rate: int, n_bins: int) -> np.ndarray:
    """Center frequency in Hz of each magnitude bin."""
    return np.arange(n_bins) * bin_resolution(sample_rate, n_bins)
