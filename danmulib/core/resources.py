#!/usr/bin/env python3

import math
import PIL.ImageColor
from danmulib.core import utils

#============================================

DANMU_TYPES = ('text', 'button', 'path')

# variant field that carries the visible payload of each type
REQUIRED_FIELDS = {
	'text': 'content',
	'button': 'text',
	'path': 'd',
}

DEFAULT_NAMES = {
	'text': "文本弹幕",
	'button': "按钮弹幕",
	'path': "路径弹幕",
}

#============================================

def parse_color(value):
	"""
	Normalize a color to an integer 0xRRGGBB value.
	"""
	if value is None:
		return None
	if isinstance(value, bool):
		raise RuntimeError("invalid color value")
	if isinstance(value, int):
		return value
	if isinstance(value, (list, tuple)) and len(value) == 3:
		(red, green, blue) = (int(channel) for channel in value)
		return (red << 16) + (green << 8) + blue
	if isinstance(value, str):
		text = value.strip()
		if text.lower().startswith('0x'):
			return int(text, 16)
		try:
			rgb = PIL.ImageColor.getrgb(text)
		except ValueError as exc:
			raise RuntimeError(f"invalid color value: {value}") from exc
		return (rgb[0] << 16) + (rgb[1] << 8) + rgb[2]
	raise RuntimeError(f"invalid color value: {value}")

#============================================

def _duration_ms(value, fallback: int):
	if value is None:
		return fallback
	try:
		number = float(value)
	except (TypeError, ValueError):
		return fallback
	if not math.isfinite(number):
		return fallback
	if number.is_integer():
		return int(number)
	return number

#============================================

def _validate_opacity(value) -> None:
	if value is None:
		return
	if isinstance(value, bool) or not isinstance(value, (int, float)):
		raise RuntimeError("opacity must be a number")
	if value < 0 or value > 1:
		raise RuntimeError("opacity must be between 0 and 1")

#============================================

def _normalize_colors(resource: dict) -> None:
	for key in list(resource.keys()):
		if 'color' in key.lower() and resource[key] is not None:
			resource[key] = parse_color(resource[key])

#============================================

def _base_defaults(danmu_type: str, overrides: dict) -> dict:
	resource_id = overrides.get('id')
	if resource_id is None:
		resource_id = utils.gen_id(10)
	return {
		'id': str(resource_id),
		'type': danmu_type,
		'name': overrides.get('name'),
		'x': overrides.get('x', 50),
		'y': overrides.get('y', 50),
		'zIndex': overrides.get('zIndex', 1),
		'durationMs': _duration_ms(overrides.get('durationMs'), 2000),
		'scale': overrides.get('scale', 1),
		'rotateX': overrides.get('rotateX', 0),
		'rotateY': overrides.get('rotateY', 0),
		'rotateZ': overrides.get('rotateZ', 0),
		'opacity': overrides.get('opacity', 1),
		'anchorX': overrides.get('anchorX', 0.5),
		'anchorY': overrides.get('anchorY', 0.5),
		'parentId': overrides.get('parentId'),
	}

#============================================

def _finish_resource(resource: dict, overrides: dict) -> dict:
	# keep extra attributes the caller supplied so they still reach the script
	for key, value in overrides.items():
		if key not in resource:
			resource[key] = value
	_normalize_colors(resource)
	_validate_opacity(resource.get('opacity'))
	return resource

#============================================

def create_text_danmu(**overrides) -> dict:
	resource = _base_defaults('text', overrides)
	resource.update({
		'content': overrides.get('content', ""),
		'fontSize': overrides.get('fontSize', 5),
		'fontFamily': overrides.get('fontFamily', "黑体"),
		'bold': overrides.get('bold', 0),
		'textShadow': overrides.get('textShadow', 0),
		'color': overrides.get('color', 0xffffff),
		'strokeWidth': overrides.get('strokeWidth', 1),
		'strokeColor': overrides.get('strokeColor', 0xffffff),
		'textColor': overrides.get('textColor'),
	})
	return _finish_resource(resource, overrides)

#============================================

def create_button_danmu(**overrides) -> dict:
	resource = _base_defaults('button', overrides)
	resource.update({
		'text': overrides.get('text', ""),
		'fontSize': overrides.get('fontSize', 5),
		'textColor': overrides.get('textColor', 0xffffff),
		'fillColor': overrides.get('fillColor', 0xff9100),
		'fillAlpha': overrides.get('fillAlpha', 0.8),
		'target': overrides.get('target'),
	})
	return _finish_resource(resource, overrides)

#============================================

def create_path_danmu(**overrides) -> dict:
	resource = _base_defaults('path', overrides)
	resource.update({
		'd': overrides.get('d', ""),
		'viewBox': overrides.get('viewBox'),
		'borderWidth': overrides.get('borderWidth', 1),
		'borderColor': overrides.get('borderColor', 0xffffff),
		'borderAlpha': overrides.get('borderAlpha', 0.8),
		'fillColor': overrides.get('fillColor', 0x00a1d6),
		'fillAlpha': overrides.get('fillAlpha', 0.8),
		'width': overrides.get('width', 20),
	})
	return _finish_resource(resource, overrides)

#============================================

def create_danmu(danmu_type: str, **overrides) -> dict:
	if danmu_type == 'text':
		return create_text_danmu(**overrides)
	if danmu_type == 'button':
		return create_button_danmu(**overrides)
	if danmu_type == 'path':
		return create_path_danmu(**overrides)
	raise RuntimeError(f"unsupported danmu type: {danmu_type}")

#============================================

def create_danmu_by_key(key: str, **payload) -> dict:
	"""
	Create a danmu with the presets used when dropping a new item.
	"""
	if key == 'text':
		options = {'content': "", 'zIndex': 3, 'durationMs': 5000}
	elif key == 'path':
		options = {'zIndex': 1, 'durationMs': 2000, 'scale': 0.8}
	elif key == 'button':
		options = {'text': DEFAULT_NAMES['button'], 'zIndex': 1,
			'durationMs': 2000, 'scale': 1}
	else:
		raise RuntimeError(f"unsupported danmu type: {key}")
	options.update(payload)
	return create_danmu(key, **options)

#============================================

def get_default_name(resource: dict) -> str:
	return DEFAULT_NAMES.get(resource.get('type'), "未知项目")

#============================================

def get_item_name(resource: dict) -> str:
	name = resource.get('name')
	if name:
		return name
	return get_default_name(resource)

#============================================

class ResourceStore():
	def __init__(self, resources: list = None):
		self.resources = []
		for resource in resources or []:
			self.add(resource)

	#============================
	def add(self, resource: dict) -> dict:
		danmu_type = resource.get('type')
		if danmu_type not in DANMU_TYPES:
			raise RuntimeError(f"unsupported danmu type: {danmu_type}")
		if resource.get('id') is None:
			raise RuntimeError("resource id is required")
		if self.find_resource_by_id(resource['id']) is not None:
			raise RuntimeError(f"resource id already exists: {resource['id']}")
		_validate_opacity(resource.get('opacity'))
		self.resources.append(resource)
		return resource

	#============================
	def create(self, danmu_type: str, **overrides) -> dict:
		return self.add(create_danmu_by_key(danmu_type, **overrides))

	#============================
	def find_resource_by_id(self, resource_id: str):
		for resource in self.resources:
			if resource.get('id') == resource_id:
				return resource
		return None

	#============================
	def update(self, resource_id: str, updates: dict) -> dict:
		resource = self.find_resource_by_id(resource_id)
		if resource is None:
			raise RuntimeError(f"resource not found: {resource_id}")
		if 'type' in updates and updates['type'] != resource['type']:
			raise RuntimeError("resource type cannot change")
		if 'id' in updates and updates['id'] != resource['id']:
			raise RuntimeError("resource id cannot change")
		merged = dict(resource)
		merged.update(updates)
		_normalize_colors(merged)
		_validate_opacity(merged.get('opacity'))
		resource.update(merged)
		return resource

	#============================
	def remove(self, resource_id: str) -> bool:
		for index, resource in enumerate(self.resources):
			if resource.get('id') == resource_id:
				self.resources.pop(index)
				return True
		return False

	#============================
	def list(self) -> list:
		return list(self.resources)

	#============================
	def __len__(self) -> int:
		return len(self.resources)
