#!/usr/bin/env python3

from danmulib.core import utils
from danmulib.core.clock import VirtualClock

#============================================

DEFAULT_OPTIONS = {
	'container': None,
	'easing': 'linear',
	'visible': True,
	'font_family': '',
}

#============================================

class PlaybackSession():
	"""
	Bind one virtual clock to one rendering engine instance.

	The engine is built with the clock's now_ms as its time source, so the
	engine only ever sees editor time. reset() clears the engine in place
	and rebuilds it from the last init options only when clearing fails or
	no instance exists.
	"""
	# engine attributes that hold loaded objects and are emptied on reset
	ENGINE_LIST_ATTRS = ('dm_list', 'test_danmakus')

	def __init__(self, engine_factory=None, clock: VirtualClock = None):
		self.engine_factory = engine_factory
		self.clock = clock or VirtualClock()
		self.engine = None
		self.last_options = None

	#============================
	def init(self, options: dict = None) -> None:
		merged = dict(DEFAULT_OPTIONS)
		merged.update(options or {})
		self.last_options = merged
		if self.engine_factory is None:
			raise RuntimeError("rendering engine not found; cannot initialize playback")
		self.clock.pause()
		self.clock.set(0)
		self.clock.play()
		engine_options = dict(merged)
		engine_options['time_sync_func'] = self.clock.now_ms
		try:
			engine = self.engine_factory(engine_options)
			if hasattr(engine, 'init'):
				engine.init()
		except Exception as exc:
			self.engine = None
			raise RuntimeError(f"rendering engine failed to initialize: {exc}") from exc
		self.engine = engine

	#============================
	def is_ready(self) -> bool:
		return self.engine is not None

	#============================
	def _call_engine(self, method: str, *args):
		if self.engine is None:
			return None
		func = getattr(self.engine, method, None)
		if func is None:
			return None
		try:
			return func(*args)
		except Exception as exc:
			utils.log_warning(f"engine {method} failed: {exc}")
			return None

	#============================
	def _soft_clear_engine(self) -> None:
		"""
		Empty the engine's loaded objects without rebuilding it.
		"""
		clear = getattr(self.engine, 'clear', None)
		if clear is not None:
			clear()
		for attr in self.ENGINE_LIST_ATTRS:
			if isinstance(getattr(self.engine, attr, None), list):
				setattr(self.engine, attr, [])

	#============================
	def reset(self) -> None:
		if self.last_options is None:
			utils.log_message("playback reset skipped: session was never initialized")
			return
		self.pause()
		if self.engine is not None:
			try:
				self._soft_clear_engine()
			except Exception as exc:
				utils.log_warning(f"engine clear failed, rebuilding: {exc}")
				self.engine = None
			else:
				self.clock.set(0)
				return
		self.init(self.last_options)
		# a rebuilt session rests at zero like a soft-cleared one
		self.pause()
		self.clock.set(0)

	#============================
	def play(self) -> None:
		self.clock.play()
		self._call_engine('play')

	#============================
	def pause(self) -> None:
		self._call_engine('pause')
		self.clock.pause()

	#============================
	def toggle(self) -> None:
		if self.clock.is_running():
			self.pause()
			return
		self.play()

	#============================
	def seek(self, seconds: float, refresh: bool = True) -> None:
		seconds = max(0.0, float(seconds or 0))
		self.clock.seek(seconds * 1000.0)
		self._call_engine('seek', seconds, refresh)

	#============================
	def get_current_time(self) -> float:
		return self.clock.now_ms()

	#============================
	def clear(self) -> None:
		self._call_engine('clear')

	#============================
	def visible(self, show: bool) -> None:
		self._call_engine('visible', show)

	#============================
	def resize(self, width: int, height: int) -> None:
		self._call_engine('resize', width, height)

	#============================
	def remove(self, dmid) -> None:
		self._call_engine('remove', dmid)

	#============================
	def add_parsed(self, dm: dict, test: bool = False, success=None,
		error=None) -> None:
		self._call_engine('add', {
			'dm': dm,
			'parsed': True,
			'test': test,
			'success': success,
			'error': error,
		})

	#============================
	def add_script(self, script: str, test: bool = False, success=None,
		error=None) -> None:
		self._call_engine('add', {
			'dm': {'text': script, 'stime': 0},
			'parsed': False,
			'test': test,
			'success': success,
			'error': error,
		})

	#============================
	def reload(self, script: str, success=None, error=None) -> None:
		"""
		Replace the loaded script after a recompile and rewind to zero.
		"""
		self.reset()
		self.add_script(script, success=success, error=error)
