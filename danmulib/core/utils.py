#!/usr/bin/env python3

import random
import sys
from decimal import Decimal
from decimal import InvalidOperation

#============================================

_QUIET_MODE = False
_EVENT_REPORTER = None
_ID_CHARS = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def set_event_reporter(reporter) -> None:
	"""
	Register a callback that receives every log event as a dict.
	"""
	global _EVENT_REPORTER
	_EVENT_REPORTER = reporter

#============================================

def clear_event_reporter() -> None:
	global _EVENT_REPORTER
	_EVENT_REPORTER = None

#============================================

def _report(level: str, message: str) -> None:
	if _EVENT_REPORTER is not None:
		_EVENT_REPORTER({'event': 'log', 'level': level, 'message': message})

#============================================

def log_message(message: str) -> None:
	_report('info', message)
	if not is_quiet_mode():
		print(message)

#============================================

def log_warning(message: str) -> None:
	_report('warning', message)
	if not is_quiet_mode():
		print(f"warning: {message}", file=sys.stderr)

#============================================

def gen_id(length: int = 10) -> str:
	return "".join(random.choice(_ID_CHARS) for _ in range(length))

#============================================

def gen_prefixed_id(prefix: str) -> str:
	return f"{prefix}_{gen_id(7).lower()}"

#============================================

def parse_timecode(raw_time, label: str = "time value") -> Decimal:
	if raw_time is None:
		raise RuntimeError(f"{label} is required")
	if isinstance(raw_time, bool):
		raise RuntimeError(f"{label} must be int, float, or timecode string")
	if isinstance(raw_time, int):
		return Decimal(raw_time)
	if isinstance(raw_time, float):
		value = Decimal(str(raw_time))
	elif isinstance(raw_time, str):
		try:
			value = _parse_timecode_text(raw_time.strip())
		except (InvalidOperation, IndexError) as exc:
			raise RuntimeError(f"{label} is not a valid time: {raw_time!r}") from exc
	else:
		raise RuntimeError(f"{label} must be int, float, or timecode string")
	if not value.is_finite():
		raise RuntimeError(f"{label} is not a valid time: {raw_time!r}")
	return value

#============================================

def _parse_timecode_text(value: str) -> Decimal:
	if ':' not in value:
		return Decimal(value)
	parts = value.split(':')
	if len(parts) > 3:
		raise IndexError("too many timecode fields")
	seconds = Decimal(parts.pop())
	minutes = Decimal(parts.pop())
	hours = Decimal(0)
	if len(parts) > 0:
		hours = Decimal(parts.pop())
	return hours * Decimal(3600) + minutes * Decimal(60) + seconds

#============================================

def parse_time_ms(raw_time, label: str = "time value") -> int:
	"""
	Integers are milliseconds, timecode strings are [hh:]mm:ss.fff.
	"""
	if isinstance(raw_time, str) and ':' in raw_time:
		seconds = parse_timecode(raw_time, label)
		return int((seconds * Decimal(1000)).to_integral_value())
	value = parse_timecode(raw_time, label)
	return int(value.to_integral_value())

#============================================

def format_time(time_ms) -> str:
	"""
	Format milliseconds as [hh:]mm:ss.fff for display.
	"""
	total_ms = int(max(0, time_ms))
	ms = total_ms % 1000
	total_seconds = total_ms // 1000
	seconds = total_seconds % 60
	total_minutes = total_seconds // 60
	minutes = total_minutes % 60
	hours = total_minutes // 60
	text = f"{minutes:02d}:{seconds:02d}.{ms:03d}"
	if hours > 0:
		text = f"{hours:02d}:" + text
	return text

#============================================

def ensure_non_negative(value, label: str):
	if value is None or isinstance(value, bool) or not isinstance(value, (int, float)):
		raise RuntimeError(f"{label} must be a number")
	if value < 0:
		raise RuntimeError(f"{label} must be non-negative")
	return value
