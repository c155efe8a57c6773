#!/usr/bin/env python3

from danmulib.core import compiler
from danmulib.core import resources
from danmulib.core import utils

#============================================

DEFAULT_TIMELINE_MS = 300000
DEFAULT_CLIP_MS = 5000
EXTENSION_BUFFER_MS = 60000
SEGMENT_TYPES = ('set', 'then')

#============================================

def create_animation(segment_type: str, duration, properties: dict = None,
	delay=None, animation_id: str = None) -> dict:
	if segment_type not in SEGMENT_TYPES:
		raise RuntimeError(f"animation type must be set or then: {segment_type}")
	utils.ensure_non_negative(duration, "animation duration")
	if delay is not None:
		utils.ensure_non_negative(delay, "animation delay")
	if properties is None:
		properties = {}
	if not isinstance(properties, dict):
		raise RuntimeError("animation properties must be a mapping")
	if animation_id is None:
		animation_id = utils.gen_prefixed_id('anim')
	segment = {
		'id': animation_id,
		'type': segment_type,
		'duration': duration,
		'properties': dict(properties),
	}
	if delay is not None:
		segment['delay'] = delay
	return segment

#============================================

def clip_end(clip: dict):
	return clip['start_time'] + clip['duration']

#============================================

class Timeline():
	def __init__(self, duration: int = DEFAULT_TIMELINE_MS):
		self.tracks = []
		self.duration = duration
		self.current_time = 0
		self.selected_clip_id = None
		self.selected_animation_id = None

	#============================
	def add_track(self, name: str = None, track_id: str = None,
		visible: bool = True, locked: bool = False) -> str:
		if track_id is None:
			track_id = utils.gen_prefixed_id('track')
		if self.find_track(track_id) is not None:
			raise RuntimeError(f"track id already exists: {track_id}")
		if name is None:
			name = f"Track {len(self.tracks) + 1}"
		self.tracks.append({
			'id': track_id,
			'name': name,
			'clips': [],
			'visible': bool(visible),
			'locked': bool(locked),
			'expanded': False,
		})
		return track_id

	#============================
	def remove_track(self, track_id: str) -> None:
		for index, track in enumerate(self.tracks):
			if track['id'] == track_id:
				clip_ids = [clip['id'] for clip in track['clips']]
				if self.selected_clip_id in clip_ids:
					self.set_selected_clip(None)
				self.tracks.pop(index)
				return

	#============================
	def find_track(self, track_id: str):
		for track in self.tracks:
			if track['id'] == track_id:
				return track
		return None

	#============================
	def _require_track(self, track_id: str) -> dict:
		track = self.find_track(track_id)
		if track is None:
			raise RuntimeError(f"track not found: {track_id}")
		return track

	#============================
	def toggle_track_expand(self, track_id: str) -> None:
		track = self._require_track(track_id)
		track['expanded'] = not track['expanded']

	#============================
	def set_track_visible(self, track_id: str, visible: bool) -> None:
		self._require_track(track_id)['visible'] = bool(visible)

	#============================
	def set_track_locked(self, track_id: str, locked: bool) -> None:
		self._require_track(track_id)['locked'] = bool(locked)

	#============================
	def add_clip(self, resource: dict, track_id: str, time,
		clip_id: str = None, duration=None) -> dict:
		"""
		Place a resource on a track at a time in milliseconds.

		The clip length follows the resource durationMs unless given.
		"""
		track = self._require_track(track_id)
		if clip_id is None:
			clip_id = utils.gen_prefixed_id('clip')
		if self.find_clip(clip_id) is not None:
			raise RuntimeError(f"clip id already exists: {clip_id}")
		identifier = compiler.make_identifier(clip_id)
		for other in self.clips():
			if compiler.make_identifier(other['id']) == identifier:
				raise RuntimeError(f"clip id {clip_id} collides with {other['id']} as {identifier}")
		if duration is None:
			duration = resource.get('durationMs') or DEFAULT_CLIP_MS
		utils.ensure_non_negative(duration, "clip duration")
		if time is None or isinstance(time, bool) or not isinstance(time, (int, float)):
			raise RuntimeError("clip start must be a number")
		# drops left of zero land at zero
		start_time = max(0, time)
		clip = {
			'id': clip_id,
			'resource_id': resource['id'],
			'name': resources.get_item_name(resource),
			'start_time': start_time,
			'duration': duration,
			'track_id': track_id,
			'animations': [],
		}
		track['clips'].append(clip)
		self._sort_and_extend(track, clip)
		return clip

	#============================
	def _sort_and_extend(self, track: dict, clip: dict) -> None:
		track['clips'].sort(key=lambda item: item['start_time'])
		end_time = clip_end(clip)
		if end_time > self.duration:
			self.duration = end_time + EXTENSION_BUFFER_MS

	#============================
	def find_clip(self, clip_id: str):
		for track in self.tracks:
			for clip in track['clips']:
				if clip['id'] == clip_id:
					return clip
		return None

	#============================
	def _find_clip_with_track(self, clip_id: str) -> tuple:
		for track in self.tracks:
			for clip in track['clips']:
				if clip['id'] == clip_id:
					return (track, clip)
		return (None, None)

	#============================
	def _require_clip(self, clip_id: str) -> dict:
		clip = self.find_clip(clip_id)
		if clip is None:
			raise RuntimeError(f"clip not found: {clip_id}")
		return clip

	#============================
	def remove_clip(self, clip_id: str) -> None:
		for track in self.tracks:
			for index, clip in enumerate(track['clips']):
				if clip['id'] == clip_id:
					if self.selected_clip_id == clip_id:
						self.set_selected_clip(None)
					track['clips'].pop(index)
					return

	#============================
	def remove_clips_by_resource_id(self, resource_id: str) -> int:
		removed = 0
		for track in self.tracks:
			kept = []
			for clip in track['clips']:
				if clip['resource_id'] == resource_id:
					if self.selected_clip_id == clip['id']:
						self.set_selected_clip(None)
					removed += 1
					continue
				kept.append(clip)
			track['clips'] = kept
		return removed

	#============================
	def update_clip(self, clip_id: str, updates: dict) -> dict:
		(track, clip) = self._find_clip_with_track(clip_id)
		if clip is None:
			raise RuntimeError(f"clip not found: {clip_id}")
		for key in ('id', 'track_id', 'animations'):
			if key in updates and updates[key] != clip[key]:
				raise RuntimeError(f"clip {key} cannot be changed with update_clip")
		values = dict(updates)
		if 'start_time' in values:
			values['start_time'] = max(0, values['start_time'])
		if 'duration' in values:
			utils.ensure_non_negative(values['duration'], "clip duration")
		clip.update(values)
		if 'start_time' in values or 'duration' in values:
			self._sort_and_extend(track, clip)
		return clip

	#============================
	def set_current_time(self, time) -> None:
		self.current_time = max(0, min(time, self.duration))

	#============================
	def set_selected_clip(self, clip_id) -> None:
		self.selected_clip_id = clip_id
		if clip_id is None:
			self.selected_animation_id = None

	#============================
	def set_selected_animation(self, animation_id) -> None:
		self.selected_animation_id = animation_id

	#============================
	def add_clip_animation(self, clip_id: str, animation: dict) -> None:
		clip = self._require_clip(clip_id)
		clip['animations'].append(animation)

	#============================
	def insert_clip_animation(self, clip_id: str, index: int, animation: dict) -> None:
		clip = self._require_clip(clip_id)
		index = max(0, min(index, len(clip['animations'])))
		clip['animations'].insert(index, animation)

	#============================
	def remove_clip_animation(self, clip_id: str, animation_id: str) -> None:
		clip = self._require_clip(clip_id)
		for index, animation in enumerate(clip['animations']):
			if animation['id'] == animation_id:
				clip['animations'].pop(index)
				if self.selected_animation_id == animation_id:
					self.selected_animation_id = None
				return

	#============================
	def update_clip_animation(self, clip_id: str, animation_id: str,
		updates: dict) -> None:
		clip = self._require_clip(clip_id)
		for animation in clip['animations']:
			if animation['id'] != animation_id:
				continue
			if 'type' in updates and updates['type'] not in SEGMENT_TYPES:
				raise RuntimeError(f"animation type must be set or then: {updates['type']}")
			if 'duration' in updates:
				utils.ensure_non_negative(updates['duration'], "animation duration")
			if updates.get('delay') is not None:
				utils.ensure_non_negative(updates['delay'], "animation delay")
			animation.update(updates)
			return

	#============================
	def move_clip_animation(self, clip_id: str, animation_id: str, index: int) -> None:
		clip = self._require_clip(clip_id)
		animations = clip['animations']
		for current, animation in enumerate(animations):
			if animation['id'] == animation_id:
				animations.pop(current)
				index = max(0, min(index, len(animations)))
				animations.insert(index, animation)
				return
		raise RuntimeError(f"animation not found: {animation_id}")

	#============================
	def clips(self) -> list:
		result = []
		for track in self.tracks:
			result.extend(track['clips'])
		return result
