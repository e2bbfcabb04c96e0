#!/usr/bin/env python3
"""
Command line runner for audio-sentence-detector.
"""
