#!/usr/bin/env python3

"""
Pytest coverage for yaml config loading.
"""

# Standard Library
import os
import sys

# PIP3 modules
import pytest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from clipagentlib.core import config as config_module

#============================================

def _write_config(path, lines: list) -> str:
	with open(path, "w") as handle:
		handle.write("\n".join(lines))
		handle.write("\n")
	return str(path)

#============================================

def test_defaults_without_file() -> None:
	config = config_module.load_config(None)
	assert config['parse']['duplicates'] == 'first'
	assert config['encoding']['video_codec'] == 'libx264'
	assert config['encoding']['gif_fps'] == 12
	config['encoding']['gif_fps'] = 3
	assert config_module.default_config()['encoding']['gif_fps'] == 12

#============================================

def test_full_config(tmp_path) -> None:
	lines = []
	lines.append("clipagent: 1")
	lines.append("parse:")
	lines.append("  duplicates: last")
	lines.append("  brightness_step: 0.25")
	lines.append("encoding:")
	lines.append("  video_codec: libx265")
	lines.append("  preset: medium")
	lines.append("  gif_fps: 10")
	lines.append("  portrait: [540, 960]")
	config_file = _write_config(tmp_path / "config.yaml", lines)
	config = config_module.load_config(config_file)
	assert config['parse'] == {'duplicates': 'last', 'brightness_step': 0.25}
	assert config['encoding']['video_codec'] == 'libx265'
	assert config['encoding']['preset'] == 'medium'
	assert config['encoding']['audio_codec'] == 'aac'
	assert config['encoding']['gif_fps'] == 10
	assert config['encoding']['portrait_width'] == 540
	assert config['encoding']['portrait_height'] == 960

#============================================

@pytest.mark.parametrize("lines", [
	["clipagent: 2"],
	["- not a mapping"],
	["clipagent: 1", "parse: {duplicates: merge}"],
	["clipagent: 1", "parse: {brightness_step: 0}"],
	["clipagent: 1", "parse: {brightness_step: fast}"],
	["clipagent: 1", "encoding: {gif_fps: 0}"],
	["clipagent: 1", "encoding: {portrait: [720]}"],
	["clipagent: 1", "encoding: {portrait: [721, 1280]}"],
	["clipagent: 1", "encoding: {video_codec: ''}"],
	["clipagent: 1", "encoding: [libx264]"],
])
def test_invalid_config_raises(tmp_path, lines: list) -> None:
	config_file = _write_config(tmp_path / "bad.yaml", lines)
	with pytest.raises(RuntimeError):
		config_module.load_config(config_file)

#============================================

def test_missing_config_raises(tmp_path) -> None:
	with pytest.raises(RuntimeError):
		config_module.load_config(str(tmp_path / "missing.yaml"))
