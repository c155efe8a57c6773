#!/usr/bin/env python3

import os
from danmulib.core import compiler
from danmulib.core import parser
from danmulib.core import utils
from danmulib.core.engine import PreviewEngine
from danmulib.core.loader import ProjectLoader
from danmulib.core.session import PlaybackSession

#============================================

class DanmuProject():
	def __init__(self, yaml_file: str = None, output_override: str = None,
		data: dict = None):
		loader = ProjectLoader(yaml_file, output_override=output_override)
		if data is not None:
			self._project = loader.load_data(data)
		else:
			self._project = loader.load()
		self.session = None
		self._sync_public_fields()

	#============================
	def _sync_public_fields(self) -> None:
		self.yaml_file = self._project.yaml_file
		self.data = self._project.data
		self.resources = self._project.resources
		self.timeline = self._project.timeline
		self.playback = self._project.playback
		self.output = self._project.output

	#============================
	def compile(self) -> str:
		return compiler.compile_timeline(self.timeline.tracks, self.resources)

	#============================
	def validate(self) -> dict:
		"""
		Compile and parse the script, returning the parsed defs and sets.
		"""
		return parser.parse_script(self.compile())

	#============================
	def delete_resource(self, resource_id: str) -> int:
		"""
		Remove a resource and every clip that references it.
		"""
		self.resources.remove(resource_id)
		removed = self.timeline.remove_clips_by_resource_id(resource_id)
		utils.log_message(f"deleted resource {resource_id} and {removed} clip(s)")
		return removed

	#============================
	def write_script(self, output_file: str = None) -> str:
		output_file = output_file or self.output.get('file')
		if output_file is None:
			raise RuntimeError("output.file is required to write a script")
		script = self.compile()
		os.makedirs(os.path.dirname(output_file) or '.', exist_ok=True)
		with open(output_file, 'w', encoding='utf-8') as handle:
			handle.write(script)
		return output_file

	#============================
	def start_preview(self, engine_factory=PreviewEngine, container=None) -> PlaybackSession:
		if self.session is None:
			self.session = PlaybackSession(engine_factory)
			options = dict(self.playback)
			options['container'] = container
			self.session.init(options)
		self.recompile()
		return self.session

	#============================
	def recompile(self) -> str:
		"""
		Compile the current timeline and reload it into the preview session.
		"""
		script = self.compile()
		if self.session is not None:
			self.session.reload(script,
				error=lambda message: utils.log_warning(f"script rejected: {message}"))
		return script
