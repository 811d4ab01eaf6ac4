"""Sequence management engine: template codec, counters, allocation and reformatting."""
