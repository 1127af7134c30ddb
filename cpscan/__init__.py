"""Creature-screen scanner.

Normalizes screenshots of a creature-detail screen, runs Tesseract OCR on
them, and recovers the species name, CP, HP, Stardust cost and moves from
the noisy transcript with layered positional heuristics.
"""
