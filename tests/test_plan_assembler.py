#!/usr/bin/env python3

import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from clipagentlib.core import operations
from clipagentlib.core import parser
from clipagentlib.core import planner

#============================================

DEFAULT_PROMPT = ("Trim the first 5 seconds, convert to black and white, "
	"speed up to 1.2x, and mute the audio.")

#============================================

class PlanAssemblerTest(unittest.TestCase):
	#============================================
	def test_default_prompt_canonical_order(self) -> None:
		"""Ensure the stock prompt assembles in canonical order."""
		plan = planner.plan_editing_steps(DEFAULT_PROMPT)
		self.assertEqual(plan.operations, (
			operations.Trim(start=5.0, end=None),
			operations.Grayscale(),
			operations.Speed(factor=1.2),
			operations.Mute(),
		))
		self.assertEqual(plan.output_extension, operations.FORMAT_MP4)

	#============================================
	def test_clause_order_does_not_matter(self) -> None:
		"""Ensure swapping clauses yields the same plan."""
		first = planner.plan_editing_steps(
			"mute it, go square, brighten by 0.2, grayscale, 2x speed, as a gif")
		second = planner.plan_editing_steps(
			"as a gif, 2x speed, grayscale, brighten by 0.2, go square, mute it")
		self.assertEqual(first, second)
		kinds = [operations.operation_kind(op) for op in first.operations]
		self.assertEqual(kinds, ['grayscale', 'speed', 'brightness', 'crop', 'mute'])

	#============================================
	def test_invalid_operations_are_omitted(self) -> None:
		"""Ensure degenerate values never reach the plan."""
		parse_result = parser.ParseResult(operations=frozenset([
			operations.Trim(start=8.0, end=3.0),
			operations.Speed(factor=0.0),
			operations.Brightness(value=3.0),
			operations.Crop(mode='diagonal'),
			operations.Grayscale(),
		]), output_extension=operations.FORMAT_MP4)
		plan = planner.assemble_plan(parse_result)
		self.assertEqual(plan.operations, (operations.Grayscale(),))

	#============================================
	def test_noop_trim_is_omitted(self) -> None:
		parse_result = parser.ParseResult(
			operations=frozenset([operations.Trim(start=0.0, end=None)]))
		plan = planner.assemble_plan(parse_result)
		self.assertTrue(plan.is_empty())

	#============================================
	def test_unknown_format_falls_back_to_mp4(self) -> None:
		parse_result = parser.ParseResult(output_extension='webm')
		plan = planner.assemble_plan(parse_result)
		self.assertEqual(plan.output_extension, operations.FORMAT_MP4)

	#============================================
	def test_plan_is_immutable(self) -> None:
		plan = planner.plan_editing_steps(DEFAULT_PROMPT)
		with self.assertRaises(AttributeError):
			plan.output_extension = operations.FORMAT_GIF

#============================================

class PlanDescriberTest(unittest.TestCase):
	#============================================
	def test_describe_default_prompt(self) -> None:
		"""Ensure one sentence per operation in plan order."""
		plan = planner.plan_editing_steps(DEFAULT_PROMPT)
		self.assertEqual(planner.describe_plan(plan), [
			"Trim from 5s to end",
			"Convert to black and white",
			"Change playback speed to 1.2x",
			"Remove the audio track",
		])

	#============================================
	def test_describe_all_kinds(self) -> None:
		plan = operations.Plan(operations=(
			operations.Trim(start=2.5, end=8.0),
			operations.Brightness(value=-0.3),
			operations.Crop(mode=operations.CROP_PORTRAIT_FILL),
		))
		self.assertEqual(planner.describe_plan(plan), [
			"Trim from 2.5s to 8s",
			"Darken by 0.3",
			"Crop to fill a 9:16 portrait frame",
		])

	#============================================
	def test_describe_empty_plan(self) -> None:
		self.assertEqual(planner.describe_plan(operations.Plan()), [])

	#============================================
	def test_plan_to_dict(self) -> None:
		plan = planner.plan_editing_steps("trim between 1s and 3s, 1.5x speed, gif")
		self.assertEqual(planner.plan_to_dict(plan), {
			'output_extension': 'gif',
			'operations': [
				{'kind': 'trim', 'start': 1.0, 'end': 3.0},
				{'kind': 'speed', 'factor': 1.5},
			],
		})

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
