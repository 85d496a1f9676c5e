#!/usr/bin/env python3

"""
Keyword rules that turn a free-text editing prompt into edit operations.

Every rule is an independent (kind, pattern, extractor) entry. All rules
are scanned over the whole prompt, so clause order never changes which
operations are found. When a kind is mentioned more than once the
configured duplicate policy ('first' or 'last' mention) picks the winner.
"""

import dataclasses
import re
from decimal import Decimal, InvalidOperation

from clipagentlib.core import config as config_module
from clipagentlib.core import operations
from clipagentlib.core import utils
from clipagentlib.core.operations import FORMAT_MP4

#============================================

NUMBER = r"(\d+(?:\.\d+)?|\.\d+)"
TIMECODE = r"(\d+:\d{2}(?::\d{2})?(?:\.\d+)?|\d+(?:\.\d+)?)"
UNIT = r"(s|secs?|seconds?|m|mins?|minutes?)\b"
# a time value with an optional unit that is not a speed multiplier
TIME = TIMECODE + r"(?:\s*" + UNIT + r")?(?!\w|[.:]\d|\s*(?:x|times)\b)"
TIME_WITH_UNIT = TIMECODE + r"\s*" + UNIT
SUBJECT = r"(?:\s+(?:it|this|the\s+video|the\s+clip|video|clip))?"

#============================================

@dataclasses.dataclass(frozen=True)
class ParseResult():
	operations: frozenset = frozenset()
	output_extension: str = FORMAT_MP4

#============================================

def _to_seconds(time_text: str, unit_text: str = None) -> float:
	try:
		seconds = utils.parse_timecode(time_text)
	except (InvalidOperation, RuntimeError):
		return None
	if unit_text is not None and unit_text.lower().startswith('m'):
		seconds = seconds * Decimal(60)
	return float(seconds)

#============================================

def _to_float(number_text: str) -> float:
	try:
		return float(number_text)
	except (TypeError, ValueError):
		return None

#============================================

def _clamp_brightness(value: float) -> float:
	return max(operations.BRIGHTNESS_MIN, min(operations.BRIGHTNESS_MAX, value))

#============================================
# trim extractors

def _trim_window(match, settings: dict):
	start = _to_seconds(match.group(1), match.group(2))
	end = _to_seconds(match.group(3), match.group(4))
	if start is None or end is None:
		return None
	return operations.Trim(start=start, end=end)

def _trim_start(match, settings: dict):
	start = _to_seconds(match.group(1), match.group(2))
	if start is None:
		return None
	return operations.Trim(start=start, end=None)

def _trim_end(match, settings: dict):
	end = _to_seconds(match.group(1), match.group(2))
	if end is None:
		return None
	return operations.Trim(start=0.0, end=end)

#============================================
# speed extractors

def _speed_up(match, settings: dict):
	factor = _to_float(match.group(1))
	if factor is None:
		return None
	return operations.Speed(factor=factor)

def _slow_down(match, settings: dict):
	factor = _to_float(match.group(1))
	if factor is None or factor <= 0:
		return None
	# "slow down to 0.5x" and "slow down by 2x" both mean half speed
	if factor > 1.0:
		factor = 1.0 / factor
	return operations.Speed(factor=factor)

def _times_slower(match, settings: dict):
	factor = _to_float(match.group(1))
	if factor is None or factor <= 0:
		return None
	return operations.Speed(factor=1.0 / factor)

def _fixed_speed(factor: float):
	def extractor(match, settings: dict):
		return operations.Speed(factor=factor)
	return extractor

#============================================
# brightness extractors

def _brightness_amount(match, settings: dict, group: int = 1) -> float:
	number_text = match.group(group)
	if number_text is None:
		return settings['brightness_step']
	value = _to_float(number_text)
	if value is None:
		return None
	if match.group(group + 1) is not None:
		value = value / 100.0
	return value

def _brighten(match, settings: dict):
	value = _brightness_amount(match, settings)
	if value is None:
		return None
	return operations.Brightness(value=_clamp_brightness(abs(value)))

def _darken(match, settings: dict):
	value = _brightness_amount(match, settings)
	if value is None:
		return None
	return operations.Brightness(value=_clamp_brightness(-abs(value)))

def _brightness_verb(match, settings: dict):
	value = _brightness_amount(match, settings, group=2)
	if value is None:
		return None
	if match.group(1).lower() in ('decrease', 'lower', 'reduce'):
		value = -abs(value)
	else:
		value = abs(value)
	return operations.Brightness(value=_clamp_brightness(value))

def _brightness_value(match, settings: dict):
	value = _to_float(match.group(2))
	if value is None:
		return None
	if match.group(3) is not None:
		value = value / 100.0
	if match.group(1) == '-':
		value = -value
	return operations.Brightness(value=_clamp_brightness(value))

#============================================

def _brightness_step(sign: float):
	def extractor(match, settings: dict):
		value = sign * settings['brightness_step']
		return operations.Brightness(value=_clamp_brightness(value))
	return extractor

#============================================

def _constant(operation):
	def extractor(match, settings: dict):
		return operation
	return extractor

#============================================

_FLAGS = re.IGNORECASE

# (kind, pattern, extractor); grayscale and mute are flags, trim clauses
# are merged into one window after selection
PROMPT_RULES = [
	# trim
	('trim_window', re.compile(r"\bbetween\s+" + TIME + r"\s+(?:and|to|-)\s+" + TIME,
		_FLAGS), _trim_window),
	('trim_window', re.compile(r"\bfrom\s+" + TIME
		+ r"\s*(?:to|until|till|through|-)\s*" + TIME, _FLAGS), _trim_window),
	('trim_start', re.compile(r"\b(?:trim|cut|remove|skip|drop)" + r"(?:\s+off)?(?:\s+the)?"
		+ r"\s+first\s+" + TIME_WITH_UNIT, _FLAGS), _trim_start),
	('trim_start', re.compile(r"\b(?:trim|cut|clip|start|begin)\w*\s+(?:at|from)\s+" + TIME
		+ r"(?!\s*(?:to|until|till|through|-))", _FLAGS), _trim_start),
	('trim_end', re.compile(r"\bkeep(?:\s+only)?(?:\s+the)?\s+first\s+" + TIME_WITH_UNIT,
		_FLAGS), _trim_end),
	('trim_end', re.compile(r"\b(?:trim|cut|clip|shorten)" + SUBJECT
		+ r"\s+(?:down\s+)?(?:to|until|till)\s+" + TIME_WITH_UNIT, _FLAGS), _trim_end),
	('trim_end', re.compile(r"\b(?:end|stop)\s+at\s+" + TIME, _FLAGS), _trim_end),
	# grayscale
	('grayscale', re.compile(r"\bblack\s*(?:and|&|n|-)\s*white\b|\bb\s*&\s*w\b"
		r"|\bgr[ae]y\s*-?\s*scale\b|\bmonochrome\b|\bdesaturate\b", _FLAGS),
		_constant(operations.Grayscale())),
	# speed
	('speed', re.compile(r"\bspeed\s*(?:it\s+)?up\s+(?:to|by)\s+" + NUMBER
		+ r"\s*(?:x|times)?", _FLAGS), _speed_up),
	('speed', re.compile(r"\bslow\s*(?:it\s+)?down\s+(?:to|by)\s+" + NUMBER
		+ r"\s*(?:x|times)?", _FLAGS), _slow_down),
	('speed', re.compile(r"(?<![\w.])" + NUMBER
		+ r"\s*(?:x|times)\s+(?:the\s+)?(?:speed|faster)\b", _FLAGS), _speed_up),
	('speed', re.compile(r"(?<![\w.])" + NUMBER + r"\s*(?:x|times)\s+slower\b",
		_FLAGS), _times_slower),
	('speed', re.compile(r"\bspeed\s+(?:of\s+|to\s+|at\s+|=\s*)?" + NUMBER
		+ r"\s*(?:x|times)\b", _FLAGS), _speed_up),
	('speed', re.compile(r"\bhalf\s+(?:the\s+)?speed\b", _FLAGS), _fixed_speed(0.5)),
	('speed', re.compile(r"\bdouble\s+(?:the\s+)?speed\b", _FLAGS), _fixed_speed(2.0)),
	# mute
	('mute', re.compile(r"\bmut(?:e|ed|ing)\b|\b(?:remove|strip|drop)\s+(?:the\s+)?audio\b"
		r"|\b(?:no|without)\s+(?:audio|sound)\b|\bsilent\b", _FLAGS),
		_constant(operations.Mute())),
	# brightness
	('brightness', re.compile(r"\b(increase|raise|boost|decrease|lower|reduce)\s+(?:the\s+)?"
		r"brightness(?:\s+by\s+" + NUMBER + r"\s*(%)?)?", _FLAGS), _brightness_verb),
	('brightness', re.compile(r"\bbrighten" + SUBJECT + r"(?:\s+up)?(?:\s+by\s+[+-]?" + NUMBER
		+ r"\s*(%)?)?", _FLAGS), _brighten),
	('brightness', re.compile(r"\bdarken" + SUBJECT + r"(?:\s+by\s+[+-]?" + NUMBER
		+ r"\s*(%)?)?", _FLAGS), _darken),
	('brightness', re.compile(r"\bmake" + SUBJECT + r"\s+brighter\b", _FLAGS),
		_brightness_step(1.0)),
	('brightness', re.compile(r"\bmake" + SUBJECT + r"\s+darker\b", _FLAGS),
		_brightness_step(-1.0)),
	('brightness', re.compile(r"\bbrightness\s*(?:to|of|by|at|=|:)?\s*([+-])?" + NUMBER
		+ r"\s*(%)?", _FLAGS), _brightness_value),
	# crop
	('crop', re.compile(r"\bsquare\b|(?<![\w:.])1\s*:\s*1(?!\w|[:.]\d)", _FLAGS),
		_constant(operations.Crop(mode=operations.CROP_SQUARE))),
	('crop', re.compile(r"\bportrait\b|\bvertical\b"
		r"|(?<![\w:.])9\s*[:x/]\s*16(?!\w|[:.]\d)", _FLAGS),
		_constant(operations.Crop(mode=operations.CROP_PORTRAIT_FILL))),
]

# "gif" anywhere, including joined forms like "to_gif", but not "gift"
GIF_PATTERN = re.compile(r"gif(?!t)", _FLAGS)

#============================================

def _collect_candidates(prompt: str, settings: dict) -> dict:
	"""
	Run every rule over the prompt and group hits by kind.

	Returns:
		dict of kind -> list of (start, end, operation)
	"""
	candidates = {}
	for kind, pattern, extractor in PROMPT_RULES:
		for match in pattern.finditer(prompt):
			operation = extractor(match, settings)
			if operation is None:
				continue
			if hasattr(operation, 'is_valid') and not operation.is_valid():
				continue
			candidates.setdefault(kind, []).append(
				(match.start(), match.end(), operation))
	return candidates

#============================================

def _drop_time_clashes(prompt: str, candidates: dict) -> None:
	"""
	Remove crop hits that sit inside a trim phrase, so a timecode such as
	"9:16" in "between 9:16 and 9:30" is not read as an aspect ratio.
	"""
	if 'crop' not in candidates:
		return
	spans = []
	for kind, pattern, extractor in PROMPT_RULES:
		if kind.startswith('trim'):
			spans += [(match.start(), match.end()) for match in pattern.finditer(prompt)]
	kept = []
	for hit in candidates['crop']:
		if any(hit[0] < span_end and span_start < hit[1] for span_start, span_end in spans):
			continue
		kept.append(hit)
	if len(kept) == 0:
		del candidates['crop']
		return
	candidates['crop'] = kept

#============================================

def _drop_overlaps(hits: list) -> list:
	"""
	Keep one hit per overlapping cluster, preferring the earliest and
	then the longest match.
	"""
	ordered = sorted(hits, key=lambda hit: (hit[0], -(hit[1] - hit[0])))
	kept = []
	for hit in ordered:
		if len(kept) > 0 and hit[0] < kept[-1][1]:
			continue
		kept.append(hit)
	return kept

#============================================

def _select(hits: list, policy: str):
	hits = _drop_overlaps(hits)
	if policy == 'last':
		return hits[-1][2]
	return hits[0][2]

#============================================

def _resolve_trim(selected: dict):
	"""
	Merge the chosen trim clauses into a single Trim, or None.
	"""
	window = selected.pop('trim_window', None)
	start_trim = selected.pop('trim_start', None)
	end_trim = selected.pop('trim_end', None)
	if window is not None:
		return window
	if start_trim is not None and end_trim is not None:
		merged = operations.Trim(start=start_trim.start, end=end_trim.end)
		if not merged.is_valid():
			return None
		return merged
	if start_trim is not None:
		return start_trim
	return end_trim

#============================================

def parse_prompt(prompt: str, config: dict = None) -> ParseResult:
	"""
	Extract edit operations and an output format hint from a prompt.

	Never raises for prompt content; text that matches no rule is ignored.

	Args:
		prompt: free-text editing instructions.
		config: loaded config dict, defaults when None.

	Returns:
		ParseResult with an unordered operation set and 'mp4' or 'gif'.
	"""
	if config is None:
		config = config_module.default_config()
	settings = config['parse']
	if prompt is None:
		prompt = ''
	candidates = _collect_candidates(prompt, settings)
	_drop_time_clashes(prompt, candidates)
	selected = {}
	for kind, hits in candidates.items():
		selected[kind] = _select(hits, settings['duplicates'])
	trim = _resolve_trim(selected)
	found = set(selected.values())
	if trim is not None:
		found.add(trim)
	output_extension = operations.FORMAT_MP4
	if GIF_PATTERN.search(prompt):
		output_extension = operations.FORMAT_GIF
	return ParseResult(operations=frozenset(found), output_extension=output_extension)
