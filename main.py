#!/usr/bin/env python3
# main.py - audio-sentence-detector CLI runner

from __future__ import annotations

from audio_sentence_detector.framework.cli import main

if __name__ == "__main__":
    raise SystemExit(main())
