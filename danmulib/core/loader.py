#!/usr/bin/env python3

import os
import yaml
from danmulib.core import resources
from danmulib.core import timeline
from danmulib.core import utils

#============================================

class ProjectData():
	def __init__(self):
		self.yaml_file = None
		self.output_override = None
		self.data = {}
		self.resources = resources.ResourceStore()
		self.timeline = timeline.Timeline()
		self.playback = {}
		self.output = {}

#============================================

class ProjectLoader():
	def __init__(self, yaml_file: str, output_override: str = None):
		self.yaml_file = yaml_file
		self.output_override = output_override

	#============================
	def load(self) -> ProjectData:
		project = ProjectData()
		project.yaml_file = self.yaml_file
		project.output_override = self.output_override
		project.data = self._load_yaml()
		return self.load_data(project.data, project)

	#============================
	def load_data(self, data: dict, project: ProjectData = None) -> ProjectData:
		if project is None:
			project = ProjectData()
			project.output_override = self.output_override
			project.data = data
		self._validate_required_keys(data)
		self._parse_resources(project, data.get('resources', []))
		self._parse_timeline(project, data.get('timeline', {}))
		project.playback = self._parse_playback(data.get('playback', {}))
		project.output = self._parse_output(project, data.get('output', {}))
		return project

	#============================
	def _load_yaml(self) -> dict:
		file_size = os.path.getsize(self.yaml_file)
		if file_size > 10 ** 7:
			raise RuntimeError("yaml file is larger than 10MB")
		with open(self.yaml_file, 'r', encoding='utf-8') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise RuntimeError("danmu yaml must be a mapping at the top level")
		return data

	#============================
	def _validate_required_keys(self, data: dict) -> None:
		if not isinstance(data, dict):
			raise RuntimeError("danmu yaml must be a mapping at the top level")
		if data.get('danmu') != 1:
			raise RuntimeError("danmu must be set to 1")
		required_keys = ('resources', 'timeline')
		for key in required_keys:
			if key not in data:
				raise RuntimeError(f"missing required key: {key}")

	#============================
	def _parse_resources(self, project: ProjectData, resource_list: list) -> None:
		if resource_list is None:
			return
		if not isinstance(resource_list, list):
			raise RuntimeError("resources must be a list")
		for index, entry in enumerate(resource_list, start=1):
			if not isinstance(entry, dict):
				raise RuntimeError(f"resources entry {index} must be a mapping")
			values = dict(entry)
			danmu_type = values.pop('type', None)
			if danmu_type is None:
				raise RuntimeError(f"resources entry {index} requires type")
			if values.get('id') is None:
				raise RuntimeError(f"resources entry {index} requires id")
			values['id'] = str(values['id'])
			if 'duration' in values and 'durationMs' not in values:
				values['durationMs'] = utils.parse_time_ms(values.pop('duration'),
					f"resource {values['id']} duration")
			resource = resources.create_danmu(danmu_type, **values)
			project.resources.add(resource)

	#============================
	def _parse_timeline(self, project: ProjectData, timeline_data: dict) -> None:
		if not isinstance(timeline_data, dict):
			raise RuntimeError("timeline must be a mapping")
		duration = timeline_data.get('duration')
		if duration is not None:
			project.timeline.duration = utils.parse_time_ms(duration, "timeline duration")
		tracks = timeline_data.get('tracks', [])
		if not isinstance(tracks, list):
			raise RuntimeError("timeline.tracks must be a list")
		for index, track_data in enumerate(tracks, start=1):
			self._parse_track(project, track_data, index)

	#============================
	def _parse_track(self, project: ProjectData, track_data: dict, index: int) -> None:
		if not isinstance(track_data, dict):
			raise RuntimeError(f"timeline.tracks entry {index} must be a mapping")
		track_id = track_data.get('id')
		if track_id is None:
			track_id = f"track_{index}"
		track_id = project.timeline.add_track(
			name=track_data.get('name'),
			track_id=str(track_id),
			visible=track_data.get('visible', True),
			locked=track_data.get('locked', False),
		)
		clips = track_data.get('clips', [])
		if not isinstance(clips, list):
			raise RuntimeError(f"track {track_id} clips must be a list")
		for clip_data in clips:
			self._parse_clip(project, track_id, clip_data)

	#============================
	def _parse_clip(self, project: ProjectData, track_id: str, clip_data: dict) -> None:
		if not isinstance(clip_data, dict):
			raise RuntimeError(f"track {track_id} clips entries must be mappings")
		resource_id = clip_data.get('resource')
		if resource_id is None:
			raise RuntimeError(f"track {track_id} clip requires resource")
		resource = project.resources.find_resource_by_id(str(resource_id))
		if resource is None:
			# clips may outlive their resource; keep a placeholder reference
			resource = {'id': str(resource_id), 'type': None, 'durationMs': None}
		clip_id = clip_data.get('id')
		label = f"clip {clip_id}" if clip_id is not None else f"track {track_id} clip"
		start_time = utils.parse_time_ms(clip_data.get('start', 0), f"{label} start")
		duration = None
		if clip_data.get('duration') is not None:
			duration = utils.parse_time_ms(clip_data.get('duration'), f"{label} duration")
		clip = project.timeline.add_clip(resource, track_id, start_time,
			clip_id=str(clip_id) if clip_id is not None else None,
			duration=duration)
		if clip_data.get('name') is not None:
			clip['name'] = clip_data['name']
		animations = clip_data.get('animations', [])
		if not isinstance(animations, list):
			raise RuntimeError(f"clip {clip['id']} animations must be a list")
		for animation_data in animations:
			project.timeline.add_clip_animation(clip['id'],
				self._parse_animation(clip['id'], animation_data))

	#============================
	def _parse_animation(self, clip_id: str, animation_data: dict) -> dict:
		if not isinstance(animation_data, dict):
			raise RuntimeError(f"clip {clip_id} animations entries must be mappings")
		delay = animation_data.get('delay')
		if delay is not None:
			delay = utils.parse_time_ms(delay, f"clip {clip_id} animation delay")
		properties = dict(animation_data.get('properties') or {})
		for key in list(properties.keys()):
			if 'color' in key.lower() and isinstance(properties[key], str):
				properties[key] = resources.parse_color(properties[key])
		return timeline.create_animation(
			animation_data.get('type'),
			utils.parse_time_ms(animation_data.get('duration', 0),
				f"clip {clip_id} animation duration"),
			properties,
			delay=delay,
			animation_id=animation_data.get('id'),
		)

	#============================
	def _parse_playback(self, playback: dict) -> dict:
		if playback is None:
			playback = {}
		if not isinstance(playback, dict):
			raise RuntimeError("playback must be a mapping")
		return {
			'easing': playback.get('easing', 'linear'),
			'visible': bool(playback.get('visible', True)),
			'font_family': playback.get('font_family', ''),
		}

	#============================
	def _parse_output(self, project: ProjectData, output: dict) -> dict:
		if output is None:
			output = {}
		if not isinstance(output, dict):
			raise RuntimeError("output must be a mapping")
		output_file = output.get('file')
		if project.output_override is not None:
			output_file = project.output_override
		return {
			'file': output_file,
		}
