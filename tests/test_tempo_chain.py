#!/usr/bin/env python3

"""
Pytest coverage for the atempo chain clamper.
"""

# Standard Library
import math
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from clipagentlib.core import tempo

#============================================

FACTORS = [0.01, 0.1, 0.2, 0.25, 0.3, 0.49, 0.5, 0.75, 0.99, 1.01, 1.2,
	1.5, 2.0, 2.01, 3.0, 4.0, 5.5, 7.3, 8.0, 9.99, 10.0]

#============================================

@pytest.mark.parametrize("factor", FACTORS)
def test_chain_product_matches_factor(factor: float) -> None:
	"""
	Ensure every chain multiplies back to the requested speed.
	"""
	chain = tempo.clamp_tempo_chain(factor)
	assert len(chain) > 0
	assert math.prod(chain) == pytest.approx(factor, abs=1e-6)
	for value in chain:
		assert tempo.TEMPO_MIN <= value <= tempo.TEMPO_MAX

#============================================

def test_unity_speed_is_empty_chain() -> None:
	"""
	Ensure a 1x speed needs no atempo filter.
	"""
	assert tempo.clamp_tempo_chain(1.0) == ()
	assert tempo.clamp_tempo_chain(1) == ()

#============================================

def test_in_range_factor_is_single_element() -> None:
	assert tempo.clamp_tempo_chain(1.5) == (1.5,)
	assert tempo.clamp_tempo_chain(0.5) == (0.5,)
	assert tempo.clamp_tempo_chain(2.0) == (2.0,)

#============================================

def test_out_of_range_factors_split() -> None:
	assert tempo.clamp_tempo_chain(4.0) == (2.0, 2.0)
	assert tempo.clamp_tempo_chain(3.0) == (2.0, 1.5)
	assert tempo.clamp_tempo_chain(0.25) == (0.5, 0.5)
	assert tempo.clamp_tempo_chain(0.3) == pytest.approx((0.5, 0.6))

#============================================

def test_non_positive_or_infinite_factor_raises() -> None:
	with pytest.raises(ValueError):
		tempo.clamp_tempo_chain(0)
	with pytest.raises(ValueError):
		tempo.clamp_tempo_chain(-2.0)
	with pytest.raises(ValueError):
		tempo.clamp_tempo_chain(float('inf'))
	with pytest.raises(ValueError):
		tempo.clamp_tempo_chain(float('nan'))

#============================================

def test_format_tempo_chain() -> None:
	assert tempo.format_tempo_chain((2.0, 1.5)) == "atempo=2,atempo=1.5"
	assert tempo.format_tempo_chain((1.2,)) == "atempo=1.2"
	assert tempo.format_tempo_chain(()) == ""
