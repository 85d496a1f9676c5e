#!/usr/bin/env python3

import copy
import os
import yaml

#============================================

CONFIG_VERSION = 1
DUPLICATE_POLICIES = ('first', 'last')

DEFAULT_CONFIG = {
	'parse': {
		'duplicates': 'first',
		'brightness_step': 0.1,
	},
	'encoding': {
		'video_codec': 'libx264',
		'audio_codec': 'aac',
		'preset': 'veryfast',
		'pixel_format': 'yuv420p',
		'gif_fps': 12,
		'portrait_width': 720,
		'portrait_height': 1280,
	},
}

#============================================

def default_config() -> dict:
	return copy.deepcopy(DEFAULT_CONFIG)

#============================================

def load_config(config_file: str = None) -> dict:
	"""
	Load an optional yaml config file, falling back to defaults.
	"""
	if config_file is None:
		return default_config()
	loader = ConfigLoader(config_file)
	return loader.load()

#============================================

class ConfigLoader():
	def __init__(self, config_file: str):
		self.config_file = config_file

	#============================
	def load(self) -> dict:
		data = self._load_yaml()
		if data.get('clipagent') != CONFIG_VERSION:
			raise RuntimeError(f"clipagent must be set to {CONFIG_VERSION}")
		config = default_config()
		config['parse'] = self._parse_parse_section(data.get('parse', {}))
		config['encoding'] = self._parse_encoding(data.get('encoding', {}))
		return config

	#============================
	def _load_yaml(self) -> dict:
		if not os.path.isfile(self.config_file):
			raise RuntimeError(f"config file not found: {self.config_file}")
		file_size = os.path.getsize(self.config_file)
		if file_size > 10 ** 7:
			raise RuntimeError("yaml file is larger than 10MB")
		with open(self.config_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise RuntimeError("config yaml must be a mapping at the top level")
		return data

	#============================
	def _parse_parse_section(self, section: dict) -> dict:
		if section is None:
			section = {}
		if not isinstance(section, dict):
			raise RuntimeError("parse must be a mapping")
		defaults = DEFAULT_CONFIG['parse']
		duplicates = str(section.get('duplicates', defaults['duplicates'])).lower()
		if duplicates not in DUPLICATE_POLICIES:
			raise RuntimeError("parse.duplicates must be first or last")
		step = section.get('brightness_step', defaults['brightness_step'])
		if isinstance(step, bool) or not isinstance(step, (int, float)):
			raise RuntimeError("parse.brightness_step must be a number")
		if step <= 0 or step > 1:
			raise RuntimeError("parse.brightness_step must be in (0, 1]")
		return {
			'duplicates': duplicates,
			'brightness_step': float(step),
		}

	#============================
	def _parse_encoding(self, section: dict) -> dict:
		if section is None:
			section = {}
		if not isinstance(section, dict):
			raise RuntimeError("encoding must be a mapping")
		encoding = dict(DEFAULT_CONFIG['encoding'])
		for key in ('video_codec', 'audio_codec', 'preset', 'pixel_format'):
			value = section.get(key)
			if value is None:
				continue
			if not isinstance(value, str) or value.strip() == '':
				raise RuntimeError(f"encoding.{key} must be a non-empty string")
			encoding[key] = value.strip()
		gif_fps = section.get('gif_fps')
		if gif_fps is not None:
			if isinstance(gif_fps, bool) or not isinstance(gif_fps, int) or gif_fps <= 0:
				raise RuntimeError("encoding.gif_fps must be a positive integer")
			encoding['gif_fps'] = gif_fps
		portrait = section.get('portrait')
		if portrait is not None:
			if not isinstance(portrait, list) or len(portrait) != 2:
				raise RuntimeError("encoding.portrait must be [width, height]")
			width = int(portrait[0])
			height = int(portrait[1])
			if width <= 0 or height <= 0:
				raise RuntimeError("encoding.portrait values must be positive")
			if width % 2 != 0 or height % 2 != 0:
				raise RuntimeError("encoding.portrait values must be even")
			encoding['portrait_width'] = width
			encoding['portrait_height'] = height
		return encoding
