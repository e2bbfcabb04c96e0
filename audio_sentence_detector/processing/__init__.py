"""
Processing stages for audio-sentence-detector.

The detection subpackage holds the analysis pipeline: spectral engine,
voice activity detection, silence detection, boundary building and
probability scoring.
"""
