#!/usr/bin/env python3

"""
Compile timeline tracks and danmu resources into script text.

Each clip becomes one "def" block followed by its timing statements:

	def text obj_clip1 {
	    content = "Hi"
	    duration = 3s
	    alpha = 0
	}
	set obj_clip1 {} 1s
	then set obj_clip1 { alpha = 1 } 0s

The compiler keeps no state between calls.
"""

import re
from danmulib.core import formatter
from danmulib.core import resources

#============================================

INDENT = "    "
# identity and timeline-owned keys never reach the declaration body
EXCLUDED_KEYS = ('id', 'type', 'name', 'durationMs', 'parentId',
	'content', 'text', 'd')
RENAMED_KEYS = {'opacity': 'alpha'}

#============================================

def make_identifier(clip_id: str) -> str:
	return "obj_" + re.sub(r'[^a-zA-Z0-9]', '', str(clip_id))

#============================================

def declaration_kind(resource: dict) -> str:
	danmu_type = resource.get('type')
	if danmu_type == 'text':
		return 'text'
	if danmu_type == 'button':
		return 'button'
	if danmu_type == 'path':
		return 'path'
	raise RuntimeError(f"unsupported danmu type: {danmu_type}")

#============================================

def _script_key(key: str) -> str:
	return RENAMED_KEYS.get(key, key)

#============================================

def _emit_declaration(identifier: str, clip: dict, resource: dict) -> list:
	kind = declaration_kind(resource)
	start_time = clip['start_time']
	delayed = start_time > 0
	lines = [f"def {kind} {identifier} {{"]
	required_key = resources.REQUIRED_FIELDS[kind]
	required_value = resource.get(required_key)
	if required_value is not None and required_value != "":
		text = formatter.format_value(required_key, required_value)
		lines.append(f"{INDENT}{required_key} = {text}")
	for key, value in resource.items():
		if key in EXCLUDED_KEYS:
			continue
		script_key = _script_key(key)
		# a delayed object starts hidden, its opacity comes back with the reveal
		if delayed and script_key == 'alpha':
			continue
		text = formatter.format_value(key, value)
		if text == "":
			continue
		lines.append(f"{INDENT}{script_key} = {text}")
	total_ms = start_time + clip['duration']
	lines.append(f"{INDENT}duration = {formatter.format_seconds(total_ms)}s")
	if delayed:
		lines.append(f"{INDENT}alpha = 0")
	lines.append("}")
	return lines

#============================================

def _target_alpha(resource: dict):
	opacity = resource.get('opacity')
	if opacity is None:
		return 1
	return opacity

#============================================

def _emit_reveal(identifier: str, clip: dict, resource: dict) -> list:
	wait = formatter.format_seconds(clip['start_time'])
	alpha = formatter.format_value('alpha', _target_alpha(resource))
	return [
		f"set {identifier} {{}} {wait}s",
		f"then set {identifier} {{ alpha = {alpha} }} 0s",
	]

#============================================

def _emit_segment(identifier: str, clip: dict, segment: dict,
	chain_open: bool) -> list:
	segment_type = segment.get('type')
	properties = formatter.format_mapping(segment.get('properties') or {},
		rename=RENAMED_KEYS)
	seconds = formatter.format_seconds(segment.get('duration') or 0)
	if segment_type == 'then':
		keyword = "then set" if chain_open else "set"
		return [f"{keyword} {identifier} {properties} {seconds}s"]
	if segment_type == 'set':
		# parallel branch measured from the reveal point
		offset = clip['start_time'] + (segment.get('delay') or 0)
		if offset <= 0:
			return [f"set {identifier} {properties} {seconds}s"]
		wait = formatter.format_seconds(offset)
		return [
			f"set {identifier} {{}} {wait}s",
			f"then set {identifier} {properties} {seconds}s",
		]
	raise RuntimeError(f"unsupported animation type: {segment_type}")

#============================================

def compile_clip(clip: dict, resource: dict) -> str:
	"""
	Compile one clip and its resource into a script block.

	Args:
		clip: Timeline clip with start_time, duration and animations.
		resource: Danmu resource referenced by the clip.

	Returns:
		str: Script block ending with a newline.
	"""
	identifier = make_identifier(clip['id'])
	lines = _emit_declaration(identifier, clip, resource)
	chain_open = False
	if clip['start_time'] > 0:
		lines.extend(_emit_reveal(identifier, clip, resource))
		chain_open = True
	for segment in clip.get('animations') or []:
		lines.extend(_emit_segment(identifier, clip, segment, chain_open))
		chain_open = True
	return "\n".join(lines) + "\n"

#============================================

def _build_lookup(resource_source):
	if hasattr(resource_source, 'find_resource_by_id'):
		return resource_source.find_resource_by_id
	if isinstance(resource_source, dict):
		return resource_source.get
	if not isinstance(resource_source, (list, tuple)):
		raise TypeError("resources must be a list or provide find_resource_by_id")
	table = {}
	for resource in resource_source:
		table.setdefault(resource.get('id'), resource)
	return table.get

#============================================

def strip_blank_lines(script: str) -> str:
	lines = [line for line in script.splitlines() if line.strip() != ""]
	if len(lines) == 0:
		return ""
	return "\n".join(lines) + "\n"

#============================================

def compile_timeline(tracks: list, resource_source) -> str:
	"""
	Compile every visible track into one script.

	Clips whose resource cannot be found are skipped.
	"""
	if not isinstance(tracks, (list, tuple)):
		raise TypeError("tracks must be a list")
	find_resource = _build_lookup(resource_source)
	blocks = []
	for track in tracks:
		if not track.get('visible', True):
			continue
		for clip in track.get('clips', []):
			resource = find_resource(clip.get('resource_id'))
			if resource is None:
				continue
			blocks.append(compile_clip(clip, resource))
	return strip_blank_lines("\n".join(blocks))
