#!/usr/bin/env python3

import os
from clipagentlib.core import compiler
from clipagentlib.core import config as config_module
from clipagentlib.core import operations
from clipagentlib.core import planner
from clipagentlib.core import utils
from clipagentlib.media import ffmpeg_exec
from clipagentlib.media.ffmpeg_exec import FfmpegExecutor

#============================================

SUPPORTED_INPUT_EXTENSIONS = {
	'.mp4': 'video/mp4',
	'.mov': 'video/quicktime',
	'.webm': 'video/webm',
	'.ogg': 'video/ogg',
}

OUTPUT_MIME_TYPES = {
	operations.FORMAT_MP4: 'video/mp4',
	operations.FORMAT_GIF: 'image/gif',
}

#============================================

def check_input_file(source_file: str) -> None:
	utils.ensure_file_exists(source_file)
	extension = utils.get_extension(source_file, default='')
	if extension not in SUPPORTED_INPUT_EXTENSIONS:
		raise RuntimeError("unsupported file type, please use MP4, MOV, WEBM, or OGG")

#============================================

def input_resource_name(source_file: str) -> str:
	return f"input{utils.get_extension(source_file)}"

#============================================

def output_resource_name(plan: operations.Plan) -> str:
	return f"output.{plan.output_extension}"

#============================================

def default_output_file(plan: operations.Plan) -> str:
	return f"agentic-{utils.make_timestamp()}.{plan.output_extension}"

#============================================

def expected_output_seconds(plan: operations.Plan, source_seconds: float) -> float:
	"""
	Estimate the edited duration from the source duration, for progress.
	"""
	if source_seconds is None:
		return None
	seconds = source_seconds
	trim = plan.find(operations.Trim)
	if trim is not None:
		end = source_seconds
		if trim.end is not None:
			end = min(trim.end, source_seconds)
		seconds = max(0.0, end - trim.start)
	speed = plan.find(operations.Speed)
	if speed is not None:
		seconds = seconds / speed.factor
	if seconds <= 0:
		return None
	return seconds

#============================================

class EditSession():
	def __init__(self, config_file: str = None, cache_dir: str = None,
		keep_temp: bool = False, executor: FfmpegExecutor = None):
		self.config = config_module.load_config(config_file)
		self.executor = executor
		if self.executor is None:
			self.executor = FfmpegExecutor(cache_dir=cache_dir, keep_temp=keep_temp)
		self._plan = None
		self._plan_prompt = None

	#============================
	def plan(self, prompt: str) -> operations.Plan:
		"""
		Return the plan for a prompt, reusing it while the prompt is unchanged.
		"""
		if prompt is None or prompt.strip() == '':
			raise RuntimeError("describe the edit you want to make")
		if self._plan is not None and prompt == self._plan_prompt:
			return self._plan
		self._plan = planner.plan_editing_steps(prompt, self.config)
		self._plan_prompt = prompt
		return self._plan

	#============================
	def describe(self, prompt: str) -> list:
		return planner.describe_plan(self.plan(prompt))

	#============================
	def compile(self, prompt: str, source_file: str) -> list:
		plan = self.plan(prompt)
		return compiler.compile_plan(plan, input_resource_name(source_file),
			output_resource_name(plan), self.config)

	#============================
	def run(self, prompt: str, source_file: str, output_file: str = None) -> str:
		"""
		Plan, compile and execute an edit, writing the result to disk.

		Returns:
			path of the written output file.
		"""
		check_input_file(source_file)
		plan = self.plan(prompt)
		input_name = input_resource_name(source_file)
		output_name = output_resource_name(plan)
		args = compiler.compile_plan(plan, input_name, output_name, self.config)
		if output_file is None:
			output_file = default_output_file(plan)
		with open(source_file, 'rb') as source_handle:
			input_bytes = source_handle.read()
		source_seconds = ffmpeg_exec.probe_duration(source_file, self.executor.ffprobe_bin)
		data = self.executor.run(args, input_name, input_bytes, output_name,
			expected_seconds=expected_output_seconds(plan, source_seconds))
		output_dir = os.path.dirname(os.path.abspath(output_file))
		if not os.path.isdir(output_dir):
			os.makedirs(output_dir)
		with open(output_file, 'wb') as output_handle:
			output_handle.write(data)
		if not utils.is_quiet_mode():
			print(f"wrote {output_file} ({OUTPUT_MIME_TYPES[plan.output_extension]})")
		return output_file
