#!/usr/bin/env python3

"""
Edit operations and the plan that orders them.
"""

import dataclasses
import math

#============================================

CROP_SQUARE = 'square'
CROP_PORTRAIT_FILL = 'portrait_fill'
CROP_MODES = (CROP_SQUARE, CROP_PORTRAIT_FILL)

FORMAT_MP4 = 'mp4'
FORMAT_GIF = 'gif'
OUTPUT_FORMATS = (FORMAT_MP4, FORMAT_GIF)

BRIGHTNESS_MIN = -1.0
BRIGHTNESS_MAX = 1.0

#============================================

@dataclasses.dataclass(frozen=True)
class Trim():
	start: float = 0.0
	end: float = None

	def is_valid(self) -> bool:
		if not math.isfinite(self.start) or self.start < 0:
			return False
		if self.end is None:
			return True
		if not math.isfinite(self.end) or self.end <= self.start:
			return False
		return True

#============================================

@dataclasses.dataclass(frozen=True)
class Grayscale():
	pass

#============================================

@dataclasses.dataclass(frozen=True)
class Speed():
	factor: float = 1.0

	def is_valid(self) -> bool:
		return math.isfinite(self.factor) and self.factor > 0

#============================================

@dataclasses.dataclass(frozen=True)
class Mute():
	pass

#============================================

@dataclasses.dataclass(frozen=True)
class Brightness():
	value: float = 0.0

	def is_valid(self) -> bool:
		return BRIGHTNESS_MIN <= self.value <= BRIGHTNESS_MAX

#============================================

@dataclasses.dataclass(frozen=True)
class Crop():
	mode: str = CROP_SQUARE

	def is_valid(self) -> bool:
		return self.mode in CROP_MODES

#============================================

# Trim is realized with seek/duration flags, the rest is filter order
CANONICAL_ORDER = (Trim, Grayscale, Speed, Brightness, Crop, Mute)
OPERATION_TYPES = CANONICAL_ORDER

#============================================

def operation_kind(operation) -> str:
	return type(operation).__name__.lower()

#============================================

@dataclasses.dataclass(frozen=True)
class Plan():
	operations: tuple = ()
	output_extension: str = FORMAT_MP4

	#============================
	def find(self, operation_type):
		"""
		Return the operation of the given type, or None.
		"""
		for operation in self.operations:
			if isinstance(operation, operation_type):
				return operation
		return None

	#============================
	def has(self, operation_type) -> bool:
		return self.find(operation_type) is not None

	#============================
	def is_empty(self) -> bool:
		return len(self.operations) == 0
