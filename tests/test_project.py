#!/usr/bin/env python3

"""
Tests for project-level compile, delete and preview wiring.
"""

# Standard Library
import os
import sys
import tempfile
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from danmulib.core import utils
from danmulib.core.project import DanmuProject

#============================================

def _project_data() -> dict:
	return {
		'danmu': 1,
		'resources': [
			{'type': 'text', 'id': 'r1', 'content': "Hi", 'duration': 2000},
			{'type': 'path', 'id': 'r2', 'd': "M0 0 L5 5"},
		],
		'timeline': {'tracks': [
			{'clips': [
				{'resource': 'r1', 'id': 'c1', 'start': 0},
				{'resource': 'r2', 'id': 'c2', 'start': 500},
			]},
			{'clips': [{'resource': 'r1', 'id': 'c3', 'start': 1000}]},
		]},
	}

#============================================

class DanmuProjectTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)

	#============================================
	def tearDown(self) -> None:
		utils.set_quiet_mode(False)

	#============================================
	def test_compile_and_validate(self) -> None:
		"""Ensure every visible clip becomes one parsed def."""
		project = DanmuProject(data=_project_data())
		parsed = project.validate()
		self.assertEqual([item['name'] for item in parsed['defs']],
			['obj_c1', 'obj_c2', 'obj_c3'])

	#============================================
	def test_delete_resource_cascades(self) -> None:
		"""Ensure deleting a resource removes its clips on every track."""
		project = DanmuProject(data=_project_data())
		removed = project.delete_resource('r1')
		self.assertEqual(removed, 2)
		self.assertIsNone(project.resources.find_resource_by_id('r1'))
		self.assertEqual([clip['id'] for clip in project.timeline.clips()], ['c2'])
		self.assertNotIn("obj_c1", project.compile())

	#============================================
	def test_write_script(self) -> None:
		"""Ensure the compiled script is written to disk."""
		project = DanmuProject(data=_project_data())
		with tempfile.TemporaryDirectory() as temp_dir:
			output_file = os.path.join(temp_dir, "nested", "show.bas")
			project.write_script(output_file)
			with open(output_file, 'r', encoding='utf-8') as handle:
				self.assertEqual(handle.read(), project.compile())
		with self.assertRaises(RuntimeError):
			project.write_script()

	#============================================
	def test_start_preview_loads_script(self) -> None:
		"""Ensure the preview session receives the compiled script."""
		project = DanmuProject(data=_project_data())
		session = project.start_preview(container='stage')
		self.assertTrue(session.is_ready())
		self.assertEqual(session.engine.container, 'stage')
		self.assertEqual(len(session.engine.dm_list), 1)
		self.assertEqual(session.get_current_time(), 0)
		project.delete_resource('r2')
		project.recompile()
		self.assertIs(project.session, session)
		self.assertEqual(len(session.engine.dm_list), 1)
		names = [item['name'] for item in session.engine.dm_list[0]['defs']]
		self.assertEqual(names, ['obj_c1', 'obj_c3'])

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
