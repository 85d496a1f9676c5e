#!/usr/bin/env python3

from clipagentlib.core import operations
from clipagentlib.core import parser
from clipagentlib.core import utils

#============================================

def _is_noop_trim(operation) -> bool:
	return operation.start == 0 and operation.end is None

#============================================

def assemble_plan(parse_result: parser.ParseResult) -> operations.Plan:
	"""
	Validate parsed operations and place them in canonical order.

	Invalid operations (end before start, non-positive speed, brightness
	outside [-1, 1], unknown crop mode) are omitted, never raised.
	"""
	by_type = {}
	for operation in parse_result.operations:
		if not isinstance(operation, operations.OPERATION_TYPES):
			continue
		if hasattr(operation, 'is_valid') and not operation.is_valid():
			continue
		if isinstance(operation, operations.Trim) and _is_noop_trim(operation):
			continue
		by_type[type(operation)] = operation
	ordered = []
	for operation_type in operations.CANONICAL_ORDER:
		if operation_type in by_type:
			ordered.append(by_type[operation_type])
	output_extension = parse_result.output_extension
	if output_extension not in operations.OUTPUT_FORMATS:
		output_extension = operations.FORMAT_MP4
	return operations.Plan(operations=tuple(ordered),
		output_extension=output_extension)

#============================================

def plan_editing_steps(prompt: str, config: dict = None) -> operations.Plan:
	parse_result = parser.parse_prompt(prompt, config)
	return assemble_plan(parse_result)

#============================================

def describe_operation(operation) -> str:
	if isinstance(operation, operations.Trim):
		end_text = 'end'
		if operation.end is not None:
			end_text = f"{utils.format_number(operation.end)}s"
		return f"Trim from {utils.format_number(operation.start)}s to {end_text}"
	if isinstance(operation, operations.Grayscale):
		return "Convert to black and white"
	if isinstance(operation, operations.Speed):
		return f"Change playback speed to {utils.format_number(operation.factor)}x"
	if isinstance(operation, operations.Brightness):
		if operation.value < 0:
			return f"Darken by {utils.format_number(abs(operation.value))}"
		return f"Brighten by {utils.format_number(operation.value)}"
	if isinstance(operation, operations.Crop):
		if operation.mode == operations.CROP_SQUARE:
			return "Crop to a centered square"
		return "Crop to fill a 9:16 portrait frame"
	if isinstance(operation, operations.Mute):
		return "Remove the audio track"
	raise RuntimeError("unsupported operation type")

#============================================

def describe_plan(plan: operations.Plan) -> list:
	"""
	One display sentence per operation, in plan order.
	"""
	return [describe_operation(operation) for operation in plan.operations]

#============================================

def plan_to_dict(plan: operations.Plan) -> dict:
	steps = []
	for operation in plan.operations:
		step = {'kind': operations.operation_kind(operation)}
		if isinstance(operation, operations.Trim):
			step['start'] = operation.start
			step['end'] = operation.end
		elif isinstance(operation, operations.Speed):
			step['factor'] = operation.factor
		elif isinstance(operation, operations.Brightness):
			step['value'] = operation.value
		elif isinstance(operation, operations.Crop):
			step['mode'] = operation.mode
		steps.append(step)
	return {
		'output_extension': plan.output_extension,
		'operations': steps,
	}
