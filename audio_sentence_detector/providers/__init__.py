#!/usr/bin/env python3
"""
audio-sentence-detector providers package.
"""
