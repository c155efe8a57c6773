#!/usr/bin/env python3

"""
In-process preview engine.

It implements the engine collaborator interface the playback session drives
(init/add/play/pause/seek/clear/remove/visible/resize) and evaluates object
state from the script at the time reported by time_sync_func. Any engine
exposing the same methods can replace it.
"""

from danmulib.core import parser
from danmulib.core import utils

#============================================

def _percent_value(value):
	if isinstance(value, str) and value.endswith('%'):
		try:
			return float(value[:-1])
		except ValueError:
			return None
	return None

#============================================

def _mix(start_value, end_value, ratio: float):
	"""
	Linear blend for numbers and percentages, step change for anything else.
	"""
	if ratio >= 1:
		return end_value
	numeric = (int, float)
	if isinstance(start_value, numeric) and isinstance(end_value, numeric) \
		and not isinstance(start_value, bool) and not isinstance(end_value, bool):
		return start_value + (end_value - start_value) * ratio
	start_percent = _percent_value(start_value)
	end_percent = _percent_value(end_value)
	if start_percent is not None and end_percent is not None:
		mixed = start_percent + (end_percent - start_percent) * ratio
		return f"{mixed:g}%"
	return start_value

#============================================

def evaluate_object(definition: dict, statements: list, local_ms: float) -> dict:
	"""
	Evaluate one def at a time relative to the script start.

	Every plain set opens a branch at time zero, every then set continues
	the branch opened by the statement before it.
	"""
	attrs = dict(definition['attrs'])
	chain_end_ms = 0.0
	for statement in statements:
		if not statement['chained']:
			chain_end_ms = 0.0
		step_start = chain_end_ms
		step_ms = statement['duration'] * 1000.0
		chain_end_ms = step_start + step_ms
		if local_ms < step_start:
			continue
		if step_ms <= 0 or local_ms >= chain_end_ms:
			attrs.update(statement['properties'])
			continue
		ratio = (local_ms - step_start) / step_ms
		for key, value in statement['properties'].items():
			attrs[key] = _mix(attrs.get(key, value), value, ratio)
	return attrs

#============================================

class PreviewEngine():
	LIST_ATTRS = ('dm_list', 'test_danmakus')

	def __init__(self, options: dict):
		self.options = dict(options)
		self.container = self.options.get('container')
		self.easing = self.options.get('easing', 'linear')
		self.font_family = self.options.get('font_family', '')
		self.is_visible = bool(self.options.get('visible', True))
		self.time_sync_func = self.options.get('time_sync_func') or (lambda: 0.0)
		self.dm_list = []
		self.test_danmakus = []
		self.playing = False
		self.initialized = False
		self.size = None
		self.dm_counter = 0

	#============================
	def init(self) -> None:
		self.initialized = True

	#============================
	def add(self, request: dict) -> None:
		dm = dict(request.get('dm') or {})
		success = request.get('success')
		error = request.get('error')
		try:
			if request.get('parsed'):
				script = {'defs': dm.get('defs', []), 'sets': dm.get('sets', [])}
			else:
				script = parser.parse_script(dm.get('text', ""))
		except RuntimeError as exc:
			if error is not None:
				error(str(exc))
			return
		self.dm_counter += 1
		entry = {
			'dmid': dm.get('dmid') or f"dm_{self.dm_counter:04d}",
			'stime': float(dm.get('stime') or 0),
			'text': dm.get('text'),
			'defs': script['defs'],
			'sets': script['sets'],
		}
		if request.get('test'):
			self.test_danmakus.append(entry)
		else:
			self.dm_list.append(entry)
		if success is not None:
			success(entry)

	#============================
	def play(self) -> None:
		self.playing = True

	#============================
	def pause(self) -> None:
		self.playing = False

	#============================
	def seek(self, seconds: float, refresh: bool = True) -> None:
		if refresh:
			utils.log_message(f"preview seek to {utils.format_time(seconds * 1000)}")

	#============================
	def clear(self) -> None:
		self.dm_list = []
		self.test_danmakus = []

	#============================
	def remove(self, dmid) -> None:
		self.dm_list = [entry for entry in self.dm_list if entry['dmid'] != dmid]

	#============================
	def visible(self, show: bool) -> None:
		self.is_visible = bool(show)

	#============================
	def resize(self, width: int, height: int) -> None:
		self.size = (width, height)

	#============================
	def object_states(self, time_ms: float = None) -> list:
		"""
		List the objects alive at time_ms (default: the synced time).
		"""
		if time_ms is None:
			time_ms = self.time_sync_func()
		states = []
		for entry in self.dm_list:
			local_ms = time_ms - entry['stime'] * 1000.0
			if local_ms < 0:
				continue
			for definition in entry['defs']:
				lifetime = definition['attrs'].get('duration')
				if isinstance(lifetime, (int, float)) and local_ms >= lifetime * 1000.0:
					continue
				statements = [statement for statement in entry['sets']
					if statement['name'] == definition['name']]
				attrs = evaluate_object(definition, statements, local_ms)
				states.append({
					'dmid': entry['dmid'],
					'name': definition['name'],
					'kind': definition['kind'],
					'attrs': attrs,
				})
		return states

	#============================
	def visible_objects(self, time_ms: float = None) -> list:
		states = self.object_states(time_ms)
		return [state for state in states if state['attrs'].get('alpha', 1) > 0]
