#!/usr/bin/env python3

"""
Convert resource attribute values into script literal text.
"""

import math

#============================================

PERCENT_KEYS = ('x', 'y', 'fontSize')

#============================================

def _is_number(value) -> bool:
	if isinstance(value, bool):
		return False
	return isinstance(value, (int, float))

#============================================

def format_number(value) -> str:
	"""
	Render a number the way the script expects: 2.0 -> "2", 0.5 -> "0.5".
	"""
	if isinstance(value, bool):
		return "1" if value else "0"
	if isinstance(value, float):
		if math.isfinite(value) and value.is_integer():
			return str(int(value))
		return repr(value)
	return str(value)

#============================================

def format_seconds(time_ms) -> str:
	return format_number(time_ms / 1000)

#============================================

def quote_string(value: str) -> str:
	escaped = value.replace('\\', '\\\\')
	escaped = escaped.replace('"', '\\"')
	escaped = escaped.replace('\r', '\\r').replace('\n', '\\n')
	return f'"{escaped}"'

#============================================

def format_value(key: str, value) -> str:
	"""
	Format one attribute value as a script literal.

	Args:
		key: Attribute name, used to select color and percentage handling.
		value: Attribute value from the resource or animation segment.

	Returns:
		str: Literal text, or an empty string when the attribute is omitted.
	"""
	if value is None:
		return ""
	if 'color' in str(key).lower() and _is_number(value) and value >= 0:
		return "0x" + format(int(value), '06x')
	if key in PERCENT_KEYS and _is_number(value):
		return format_number(value) + "%"
	if isinstance(value, str):
		return quote_string(value)
	if isinstance(value, dict):
		return format_mapping(value)
	if isinstance(value, (bool, int, float)):
		return format_number(value)
	return str(value)

#============================================

def format_mapping(properties: dict, rename: dict = None) -> str:
	"""
	Format a property map as "{ k = v, ... }", skipping empty values.
	"""
	parts = []
	for key, value in properties.items():
		text = format_value(key, value)
		if text == "":
			continue
		if rename is not None:
			key = rename.get(key, key)
		parts.append(f"{key} = {text}")
	if len(parts) == 0:
		return "{}"
	return "{ " + ", ".join(parts) + " }"
