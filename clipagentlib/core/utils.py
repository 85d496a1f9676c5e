#!/usr/bin/env python3

import os
import re
import shlex
import time
from decimal import Decimal

#============================================

_QUIET_MODE = False

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)
	return

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def show_command(args: list) -> str:
	"""
	Return a shell-quoted one line rendering of an argument list.
	"""
	showcmd = " ".join(shlex.quote(str(arg)) for arg in args)
	showcmd = re.sub("  *", " ", showcmd)
	if not is_quiet_mode():
		print(f"CMD: '{showcmd}'")
	return showcmd

#============================================

def format_fixed(value: float, places: int = 2) -> str:
	return f"{value:.{places}f}"

#============================================

def format_number(value: float, digits: int = 6) -> str:
	"""
	Compact number text: 2.0 -> '2', 1.25 -> '1.25'.
	"""
	text = f"{value:.{digits}g}"
	if 'e' in text:
		text = f"{value:.{digits}f}".rstrip('0').rstrip('.')
	return text

#============================================

def parse_timecode(raw_time) -> Decimal:
	"""
	Parse seconds or a [hh:]mm:ss timecode into Decimal seconds.
	"""
	if raw_time is None:
		raise RuntimeError("time value is required")
	if isinstance(raw_time, int):
		return Decimal(raw_time)
	if isinstance(raw_time, float):
		return Decimal(str(raw_time))
	if isinstance(raw_time, str):
		value = raw_time.strip()
		if ':' not in value:
			return Decimal(value)
		parts = value.split(':')
		seconds = Decimal(parts.pop())
		minutes = Decimal(parts.pop())
		hours = Decimal(0)
		if len(parts) > 0:
			hours = Decimal(parts.pop())
		return hours * Decimal(3600) + minutes * Decimal(60) + seconds
	raise RuntimeError("time values must be int, float, or timecode string")

#============================================

def get_extension(filename: str, default: str = '.mp4') -> str:
	base = os.path.basename(filename)
	dot = base.rfind('.')
	if dot <= 0:
		return default
	return base[dot:].lower()

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.exists(filepath):
		raise RuntimeError(f"file not found: {filepath}")
	return

#============================================

def make_timestamp() -> str:
	return str(int(time.time() * 1000))
