#!/usr/bin/env python3

import json
import os
import shutil
import subprocess
import tempfile
import time

from tqdm import tqdm

from clipagentlib.core import utils

#============================================

PROGRESS_CAP = 99
STDERR_TAIL_LINES = 12

#============================================

def probe_duration(mediafile: str, ffprobe_bin: str = 'ffprobe') -> float:
	"""
	Return container duration in seconds, or None when unknown.
	"""
	if shutil.which(ffprobe_bin) is None:
		return None
	cmd = [ffprobe_bin, '-v', 'error', '-show_entries', 'format=duration',
		'-of', 'json', mediafile]
	proc = subprocess.run(cmd, stdout=subprocess.PIPE, stderr=subprocess.PIPE)
	if proc.returncode != 0:
		return None
	try:
		data = json.loads(proc.stdout.decode('utf-8'))
		duration = float(data.get('format', {}).get('duration'))
	except (ValueError, TypeError):
		return None
	if duration <= 0:
		return None
	return duration

#============================================

def parse_progress_seconds(line: str) -> float:
	"""
	Read the output position from one '-progress' key=value line.
	"""
	if '=' not in line:
		return None
	key, value = line.strip().split('=', 1)
	if key not in ('out_time_us', 'out_time_ms'):
		return None
	try:
		# ffmpeg reports both keys in microseconds
		return int(value) / 1000000.0
	except ValueError:
		return None

#============================================

class FfmpegExecutor():
	def __init__(self, ffmpeg_bin: str = 'ffmpeg', ffprobe_bin: str = 'ffprobe',
		cache_dir: str = None, keep_temp: bool = False, progress_callback=None):
		self.ffmpeg_bin = ffmpeg_bin
		self.ffprobe_bin = ffprobe_bin
		self.cache_dir = cache_dir
		self.keep_temp = keep_temp
		self.progress_callback = progress_callback
		self.last_work_dir = None

	#============================
	def is_available(self) -> bool:
		return shutil.which(self.ffmpeg_bin) is not None

	#============================
	def run(self, args: list, input_name: str, input_bytes: bytes,
		output_name: str, expected_seconds: float = None) -> bytes:
		"""
		Write the input, run ffmpeg with the compiled arguments, and read
		back the output.

		Args:
			args: compiled arguments, without the program name.
			input_name: file name the arguments use for the input.
			input_bytes: raw input media.
			output_name: file name the arguments use for the output.
			expected_seconds: output duration used for progress, probed
				from the input when None.

		Returns:
			raw output media bytes.
		"""
		if not self.is_available():
			raise RuntimeError(f"{self.ffmpeg_bin} not found, cannot process the video")
		work_dir = self._make_work_dir()
		self.last_work_dir = work_dir
		try:
			input_path = os.path.join(work_dir, input_name)
			output_path = os.path.join(work_dir, output_name)
			with open(input_path, 'wb') as input_file:
				input_file.write(input_bytes)
			if expected_seconds is None:
				expected_seconds = probe_duration(input_path, self.ffprobe_bin)
			self._exec(args, work_dir, expected_seconds)
			if not os.path.isfile(output_path):
				raise RuntimeError(f"ffmpeg did not write {output_name}")
			with open(output_path, 'rb') as output_file:
				data = output_file.read()
			self._report(100)
			return data
		finally:
			if not self.keep_temp:
				shutil.rmtree(work_dir, ignore_errors=True)

	#============================
	def _make_work_dir(self) -> str:
		if self.cache_dir is None:
			return tempfile.mkdtemp(prefix="clipagent-run-")
		if not os.path.exists(self.cache_dir):
			os.makedirs(self.cache_dir)
		return tempfile.mkdtemp(prefix="clipagent-run-", dir=self.cache_dir)

	#============================
	def _exec(self, args: list, work_dir: str, expected_seconds: float) -> None:
		cmd = [self.ffmpeg_bin, '-y', '-hide_banner', '-nostats',
			'-progress', 'pipe:1']
		cmd += [str(arg) for arg in args]
		utils.show_command(cmd)
		t0 = time.time()
		log_path = os.path.join(work_dir, "ffmpeg-stderr.log")
		quiet_mode = utils.is_quiet_mode()
		progress_bar = None
		if not quiet_mode:
			progress_bar = tqdm(total=100, unit='%')
		try:
			with open(log_path, 'w+') as log_file:
				proc = subprocess.Popen(cmd, cwd=work_dir, stdout=subprocess.PIPE,
					stderr=log_file, universal_newlines=True)
				last_percent = 0
				for line in proc.stdout:
					seconds = parse_progress_seconds(line)
					if seconds is None or not expected_seconds:
						continue
					percent = min(PROGRESS_CAP, int(round(seconds / expected_seconds * 100)))
					if percent <= last_percent:
						continue
					if progress_bar is not None:
						progress_bar.update(percent - last_percent)
					last_percent = percent
					self._report(percent)
				proc.stdout.close()
				returncode = proc.wait()
				if returncode != 0:
					log_file.seek(0)
					tail = log_file.read().strip().splitlines()[-STDERR_TAIL_LINES:]
					message = "\n".join(tail)
					raise RuntimeError(f"ffmpeg failed with exit code {returncode}: {message}")
		finally:
			if progress_bar is not None:
				progress_bar.close()
		if not quiet_mode:
			print(f"Complete in {int(time.time() - t0)} seconds")

	#============================
	def _report(self, percent: int) -> None:
		if self.progress_callback is not None:
			self.progress_callback(percent)
