#!/usr/bin/env python3

"""
Tests for loading danmu project yaml files.
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
from danmulib.core.loader import ProjectLoader

#============================================

PROJECT_YAML = """
danmu: 1
resources:
  - type: text
    id: greet
    content: "Hello"
    color: "#ff0000"
    duration: 3000
  - type: button
    id: go
    text: "Go"
timeline:
  tracks:
    - name: Main
      clips:
        - resource: greet
          start: "00:01.0"
          animations:
            - type: then
              duration: 500
              properties:
                x: 20
                color: "white"
        - resource: missing
          start: 200
    - id: overlay
      visible: false
      clips:
        - resource: go
          id: go_clip
          start: 0
          duration: 800
playback:
  easing: linear
output:
  file: out/show.bas
"""

#============================================

class ProjectLoaderTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		self.temp_dir = tempfile.TemporaryDirectory()
		self.yaml_path = os.path.join(self.temp_dir.name, "show.danmu.yaml")
		with open(self.yaml_path, 'w', encoding='utf-8') as handle:
			handle.write(PROJECT_YAML)

	#============================================
	def tearDown(self) -> None:
		self.temp_dir.cleanup()

	#============================================
	def test_load_resources(self) -> None:
		"""Ensure resources are created through the factory."""
		project = ProjectLoader(self.yaml_path).load()
		greet = project.resources.find_resource_by_id('greet')
		self.assertEqual(greet['color'], 0xff0000)
		self.assertEqual(greet['durationMs'], 3000)
		self.assertEqual(greet['fontFamily'], "黑体")
		self.assertEqual(len(project.resources), 2)

	#============================================
	def test_load_tracks_and_clips(self) -> None:
		"""Ensure timecodes, ids and animations are parsed."""
		project = ProjectLoader(self.yaml_path).load()
		tracks = project.timeline.tracks
		self.assertEqual([track['id'] for track in tracks], ['track_1', 'overlay'])
		self.assertFalse(tracks[1]['visible'])
		clips = tracks[0]['clips']
		self.assertEqual([clip['start_time'] for clip in clips], [200, 1000])
		greet_clip = clips[1]
		self.assertEqual(greet_clip['duration'], 3000)
		self.assertEqual(greet_clip['animations'][0]['properties'],
			{'x': 20, 'color': 0xffffff})
		self.assertEqual(project.timeline.find_clip('go_clip')['duration'], 800)

	#============================================
	def test_dangling_clip_is_kept(self) -> None:
		"""Ensure a clip for an unknown resource is loaded, not rejected."""
		project = ProjectLoader(self.yaml_path).load()
		dangling = project.timeline.tracks[0]['clips'][0]
		self.assertEqual(dangling['resource_id'], 'missing')

	#============================================
	def test_output_override(self) -> None:
		"""Ensure the command-line output path wins over the yaml."""
		project = ProjectLoader(self.yaml_path).load()
		self.assertEqual(project.output['file'], 'out/show.bas')
		project = ProjectLoader(self.yaml_path, output_override='x.bas').load()
		self.assertEqual(project.output['file'], 'x.bas')
		self.assertEqual(project.playback['easing'], 'linear')

	#============================================
	def test_required_keys(self) -> None:
		"""Ensure the version key and sections are required."""
		loader = ProjectLoader(None)
		with self.assertRaises(RuntimeError):
			loader.load_data({'resources': [], 'timeline': {}})
		with self.assertRaises(RuntimeError):
			loader.load_data({'danmu': 2, 'resources': [], 'timeline': {}})
		with self.assertRaises(RuntimeError):
			loader.load_data({'danmu': 1, 'resources': []})
		with self.assertRaises(RuntimeError):
			loader.load_data({'danmu': 1, 'resources': [{'id': 'a'}], 'timeline': {}})

	#============================================
	def test_bad_timecode_names_the_field(self) -> None:
		"""Ensure malformed times raise RuntimeError with the field label."""
		for bad_value in ("soon", ":", "1:2:3:4", "nan"):
			data = {
				'danmu': 1,
				'resources': [{'type': 'text', 'id': 'r'}],
				'timeline': {'tracks': [{'clips': [{'id': 'c', 'resource': 'r',
					'start': bad_value}]}]},
			}
			with self.assertRaises(RuntimeError) as context:
				ProjectLoader(None).load_data(data)
			self.assertIn("clip c start", str(context.exception))

	#============================================
	def test_unknown_segment_type(self) -> None:
		"""Ensure animation segments must be set or then."""
		data = {
			'danmu': 1,
			'resources': [{'type': 'text', 'id': 'r1'}],
			'timeline': {'tracks': [{'clips': [{'resource': 'r1',
				'animations': [{'type': 'wait', 'duration': 100}]}]}]},
		}
		with self.assertRaises(RuntimeError):
			ProjectLoader(None).load_data(data)

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
