#!/usr/bin/env python3

import time

#============================================

def _perf_counter_ms() -> float:
	return time.perf_counter() * 1000.0

#============================================

class VirtualClock():
	"""
	Editor-owned millisecond clock that the rendering engine reads.

	State is base_ms plus start_instant; start_instant is None while paused.
	"""
	def __init__(self, time_func=None):
		# time_func returns a monotonic reading in milliseconds
		self.time_func = time_func or _perf_counter_ms
		self.base_ms = 0.0
		self.start_instant = None

	#============================
	def now_ms(self) -> float:
		if self.start_instant is None:
			return self.base_ms
		return self.base_ms + (self.time_func() - self.start_instant)

	#============================
	def is_running(self) -> bool:
		return self.start_instant is not None

	#============================
	def play(self) -> None:
		if self.start_instant is None:
			self.start_instant = self.time_func()

	#============================
	def pause(self) -> None:
		if self.start_instant is not None:
			self.base_ms = self.now_ms()
			self.start_instant = None

	#============================
	def seek(self, ms) -> None:
		self.base_ms = max(0.0, float(ms))
		if self.start_instant is not None:
			self.start_instant = self.time_func()

	#============================
	def set(self, ms) -> None:
		if self.start_instant is not None:
			raise RuntimeError("clock.set() requires a paused clock; use seek()")
		self.base_ms = max(0.0, float(ms))
