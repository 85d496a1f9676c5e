#!/usr/bin/env python3

"""
Lower an edit plan into the ffmpeg argument list that performs it.
"""

from clipagentlib.core import config as config_module
from clipagentlib.core import operations
from clipagentlib.core import tempo
from clipagentlib.core import utils

#============================================

GRAYSCALE_FILTER = "hue=s=0"
# commas inside crop expressions are escaped for the filtergraph parser
SQUARE_CROP_FILTER = "crop=min(iw\\,ih):min(iw\\,ih)"

#============================================

def _speed_filter(operation: operations.Speed) -> str:
	return f"setpts={1.0 / operation.factor:.4f}*PTS"

#============================================

def _brightness_filter(operation: operations.Brightness) -> str:
	return f"eq=brightness={operation.value:.2f}"

#============================================

def _crop_filter(operation: operations.Crop, encoding: dict) -> str:
	if operation.mode == operations.CROP_SQUARE:
		return SQUARE_CROP_FILTER
	width = encoding['portrait_width']
	height = encoding['portrait_height']
	return (f"scale={width}:{height}:force_original_aspect_ratio=increase,"
		f"crop={width}:{height}")

#============================================

def build_video_filters(plan: operations.Plan, encoding: dict) -> list:
	"""
	Video filters in plan order, with the gif frame rate sampled last.
	"""
	filters = []
	for operation in plan.operations:
		if isinstance(operation, operations.Trim):
			continue
		if isinstance(operation, operations.Grayscale):
			filters.append(GRAYSCALE_FILTER)
		elif isinstance(operation, operations.Speed):
			filters.append(_speed_filter(operation))
		elif isinstance(operation, operations.Brightness):
			filters.append(_brightness_filter(operation))
		elif isinstance(operation, operations.Crop):
			filters.append(_crop_filter(operation, encoding))
		elif isinstance(operation, operations.Mute):
			continue
		else:
			raise RuntimeError("unsupported operation type")
	if plan.output_extension == operations.FORMAT_GIF:
		filters.append(f"fps={encoding['gif_fps']}")
	return filters

#============================================

def build_audio_filters(plan: operations.Plan) -> list:
	if plan.has(operations.Mute):
		return []
	speed = plan.find(operations.Speed)
	if speed is None:
		return []
	chain = tempo.clamp_tempo_chain(speed.factor)
	if len(chain) == 0:
		return []
	return [tempo.format_tempo_chain(chain)]

#============================================

def compile_plan(plan: operations.Plan, input_name: str, output_name: str,
	config: dict = None) -> list:
	"""
	Build the ffmpeg arguments for a plan.

	Seek goes before the input for fast seeking, duration goes after the
	input and is relative to the seek point.

	Args:
		plan: assembled plan in canonical order.
		input_name: name of the input resource.
		output_name: name of the output resource.
		config: loaded config dict, defaults when None.

	Returns:
		list of argument strings, without the ffmpeg program name.
	"""
	if config is None:
		config = config_module.default_config()
	encoding = config['encoding']
	args = []
	trim = plan.find(operations.Trim)
	start = 0.0
	if trim is not None:
		start = trim.start
	if start > 0:
		args += ['-ss', utils.format_fixed(start)]
	args += ['-i', input_name]
	if trim is not None and trim.end is not None and trim.end > start:
		args += ['-t', utils.format_fixed(trim.end - start)]

	video_filters = build_video_filters(plan, encoding)
	if len(video_filters) > 0:
		args += ['-vf', ",".join(video_filters)]

	muted = plan.has(operations.Mute)
	if muted:
		args += ['-an']
	else:
		audio_filters = build_audio_filters(plan)
		if len(audio_filters) > 0:
			args += ['-af', ",".join(audio_filters)]

	if plan.output_extension == operations.FORMAT_GIF:
		args += ['-loop', '0']
	else:
		args += ['-c:v', encoding['video_codec']]
		args += ['-preset', encoding['preset']]
		args += ['-pix_fmt', encoding['pixel_format']]
		if not muted:
			args += ['-c:a', encoding['audio_codec']]
		args += ['-movflags', '+faststart']
	args += [output_name]
	return args
