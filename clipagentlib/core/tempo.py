#!/usr/bin/env python3

import math

from clipagentlib.core import utils

#============================================

# range accepted by a single ffmpeg atempo filter
TEMPO_MIN = 0.5
TEMPO_MAX = 2.0
UNITY_TOLERANCE = 1e-9

#============================================

def clamp_tempo_chain(factor: float) -> tuple:
	"""
	Split a playback speed into atempo factors that each lie in
	[0.5, 2.0] and multiply back to the requested speed.

	Args:
		factor: requested speed multiplier, must be positive and finite.

	Returns:
		tuple of floats; empty when no tempo change is needed.
	"""
	if not math.isfinite(factor) or factor <= 0:
		raise ValueError("tempo factor must be positive and finite")
	if abs(factor - 1.0) < UNITY_TOLERANCE:
		return ()
	chain = []
	remainder = float(factor)
	while remainder > TEMPO_MAX:
		chain.append(TEMPO_MAX)
		remainder /= TEMPO_MAX
	while remainder < TEMPO_MIN:
		chain.append(TEMPO_MIN)
		remainder /= TEMPO_MIN
	chain.append(remainder)
	return tuple(chain)

#============================================

def format_tempo_chain(chain: tuple) -> str:
	return ",".join(f"atempo={utils.format_number(value)}" for value in chain)
