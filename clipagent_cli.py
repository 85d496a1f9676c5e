#!/usr/bin/env python3

"""
Command line front end: prompt in, edit plan and ffmpeg command out.
"""

# Standard Library
import argparse
import re
import shlex
import sys

# PIP3 modules
import yaml
from rich.console import Console
from rich.text import Text

# local repo modules
from clipagentlib.core import planner
from clipagentlib.core import utils
from clipagentlib.core.session import EditSession

#============================================

DEFAULT_PROMPT = ("Trim the first 5 seconds, convert to black and white, "
	"speed up to 1.2x, and mute the audio.")

NORD_COLORS = {
	'foreground': "#D8DEE9",
	'dim': "#4C566A",
	'header': "#88C0D0",
	'command': "#ECEFF4",
	'flags': "#81A1C1",
	'numbers': "#B48EAD",
	'paths': "#A3BE8C",
	'strings': "#EBCB8B",
	'error': "#BF616A",
}

COMMAND_STYLES = [
	(re.compile(r"\blibx264\b|\blibx265\b|\baac\b"), NORD_COLORS['foreground']),
	(re.compile(r"(?<![\w=])--?[A-Za-z][A-Za-z0-9_:-]*"), NORD_COLORS['flags']),
	(re.compile(r"\b\d+\.\d+\b"), NORD_COLORS['numbers']),
	(re.compile(r"\b\d+\b(?!\.\d)"), NORD_COLORS['numbers']),
	(re.compile(r"'[^']*'|\"[^\"]*\""), NORD_COLORS['strings']),
	(re.compile(r"\b(?:input|output)\.\w+\b"), NORD_COLORS['paths']),
]

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Prompt driven video editor")
	parser.add_argument('-p', '--prompt', dest='prompt', default=DEFAULT_PROMPT,
		help='editing instructions in plain text')
	parser.add_argument('-i', '--input', dest='input_file',
		help='source video (mp4, mov, webm, ogg)')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output file, defaults to agentic-<timestamp>.<ext>')
	parser.add_argument('-y', '--config', dest='config_file',
		help='optional yaml config with parse and encoding settings')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='print the plan and ffmpeg command, do not render')
	parser.add_argument('-d', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the plan as yaml and exit')
	parser.add_argument('-c', '--cache-dir', dest='cache_dir',
		help='directory for temporary render files')
	parser.add_argument('-k', '--keep-temp', dest='keep_temp',
		help='keep temporary render files', action='store_true')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress progress output')
	parser.set_defaults(keep_temp=False)
	args = parser.parse_args()
	return args

#============================================

def highlight_command(command: str) -> Text:
	text = Text(command, style=f"bold {NORD_COLORS['command']}")
	for pattern, style in COMMAND_STYLES:
		for match in pattern.finditer(command):
			text.stylize(style, match.start(), match.end())
	return text

#============================================

def print_plan(console: Console, steps: list) -> None:
	console.print(Text("Planned steps", style=f"bold {NORD_COLORS['header']}"))
	if len(steps) == 0:
		console.print(Text("  (no recognized edits)", style=NORD_COLORS['dim']))
	for step in steps:
		console.print(Text(f"  - {step}", style=NORD_COLORS['foreground']))

#============================================

def main():
	args = parse_args()
	utils.set_quiet_mode(args.quiet)
	console = Console()
	try:
		session = EditSession(config_file=args.config_file, cache_dir=args.cache_dir,
			keep_temp=args.keep_temp)
		plan = session.plan(args.prompt)
		if args.dump_plan:
			print(yaml.safe_dump(planner.plan_to_dict(plan), sort_keys=False))
			return
		print_plan(console, planner.describe_plan(plan))
		source_file = args.input_file
		if source_file is None:
			source_file = "input.mp4"
		compiled = session.compile(args.prompt, source_file)
		command = " ".join(shlex.quote(arg) for arg in ['ffmpeg'] + compiled)
		console.print(highlight_command(command))
		if args.dry_run:
			return
		if args.input_file is None:
			raise RuntimeError("an input video is required unless --dry-run is set")
		session.run(args.prompt, args.input_file, args.output_file)
	except RuntimeError as exc:
		console.print(Text(f"error: {exc}", style=f"bold {NORD_COLORS['error']}"))
		sys.exit(1)


if __name__ == '__main__':
	main()
