#!/usr/bin/env python3

"""
Tests for the in-process preview engine.
"""

# Standard Library
import os
import sys
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from danmulib.core import compiler
from danmulib.core import engine
from danmulib.core import utils

#============================================

def _delayed_script() -> str:
	clip = {'id': 'clip_1', 'resource_id': 'r1', 'start_time': 1000,
		'duration': 2000, 'track_id': 'track_1', 'animations': []}
	resource = {'id': 'r1', 'type': 'text', 'content': "Hi", 'opacity': 1}
	return compiler.compile_clip(clip, resource)

#============================================

class EvaluateObjectTest(unittest.TestCase):
	#============================================
	def test_percent_interpolation(self) -> None:
		"""Ensure percentages blend linearly across a step."""
		definition = {'kind': 'text', 'name': 'obj_a', 'attrs': {'x': "50%"}}
		statements = [{'name': 'obj_a', 'properties': {'x': "10%"},
			'duration': 0.5, 'chained': False, 'line': 3}]
		self.assertEqual(engine.evaluate_object(definition, statements, 250)['x'], "30%")
		self.assertEqual(engine.evaluate_object(definition, statements, 600)['x'], "10%")

	#============================================
	def test_chain_follows_previous_step(self) -> None:
		"""Ensure a then step starts when the step before it ends."""
		definition = {'kind': 'text', 'name': 'obj_a', 'attrs': {'alpha': 0}}
		statements = [
			{'name': 'obj_a', 'properties': {}, 'duration': 1.0,
				'chained': False, 'line': 3},
			{'name': 'obj_a', 'properties': {'alpha': 1}, 'duration': 1.0,
				'chained': True, 'line': 4},
		]
		self.assertEqual(engine.evaluate_object(definition, statements, 900)['alpha'], 0)
		self.assertEqual(engine.evaluate_object(definition, statements, 1500)['alpha'], 0.5)
		self.assertEqual(engine.evaluate_object(definition, statements, 2500)['alpha'], 1)

#============================================

class PreviewEngineTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)
		self.now = 0.0
		self.engine = engine.PreviewEngine({'time_sync_func': lambda: self.now})
		self.engine.init()

	#============================================
	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_delayed_clip_visibility(self) -> None:
		"""Ensure a delayed clip is hidden, then shown, then gone."""
		added = []
		self.engine.add({'dm': {'text': _delayed_script(), 'stime': 0},
			'parsed': False, 'success': added.append})
		self.assertEqual(len(added), 1)
		self.now = 500
		self.assertEqual(self.engine.visible_objects(), [])
		self.assertEqual(len(self.engine.object_states()), 1)
		self.now = 1500
		visible = self.engine.visible_objects()
		self.assertEqual([state['name'] for state in visible], ['obj_clip1'])
		self.assertEqual(visible[0]['attrs']['content'], "Hi")
		self.now = 3500
		self.assertEqual(self.engine.object_states(), [])

	#============================================
	def test_parse_error_reaches_callback(self) -> None:
		"""Ensure an invalid script reports through the error callback."""
		errors = []
		self.engine.add({'dm': {'text': "set obj_x {} 1s\n", 'stime': 0},
			'parsed': False, 'error': errors.append})
		self.assertEqual(len(errors), 1)
		self.assertIn("line 1", errors[0])
		self.assertEqual(self.engine.dm_list, [])

	#============================================
	def test_test_entries_and_clear(self) -> None:
		"""Ensure test entries are kept apart and clear empties both lists."""
		self.engine.add({'dm': {'text': _delayed_script()}, 'test': True})
		self.engine.add({'dm': {'text': _delayed_script(), 'dmid': 'main'}})
		self.assertEqual(len(self.engine.test_danmakus), 1)
		self.assertEqual(len(self.engine.dm_list), 1)
		self.engine.remove('main')
		self.assertEqual(self.engine.dm_list, [])
		self.engine.clear()
		self.assertEqual(self.engine.test_danmakus, [])

	#============================================
	def test_pre_parsed_request(self) -> None:
		"""Ensure parsed requests skip the text parser."""
		definition = {'kind': 'path', 'name': 'obj_p', 'attrs': {'duration': 1.0}}
		self.engine.add({'dm': {'defs': [definition], 'sets': []}, 'parsed': True})
		states = self.engine.object_states(100)
		self.assertEqual(states[0]['kind'], 'path')

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
