#!/usr/bin/env python3

"""
Textual TUI that previews a danmu project against the virtual clock.
"""

# Standard Library
import argparse
import os
import re
import sys
import time
import traceback

script_dir = os.path.dirname(os.path.abspath(__file__))
if script_dir not in sys.path:
	sys.path.insert(0, script_dir)

# PIP3 modules
from textual.app import App, ComposeResult
from textual.containers import Horizontal, Vertical
from textual.widgets import RichLog, Static
from rich.text import Text

# local repo modules
from danmulib.core import utils
from danmulib.core.project import DanmuProject

#============================================

NORD_COLORS = {
	'background': "#2E3440",
	'foreground': "#D8DEE9",
	'dim': "#4C566A",
	'header': "#88C0D0",
	'keyword': "#81A1C1",
	'numbers': "#B48EAD",
	'names': "#A3BE8C",
	'strings': "#EBCB8B",
	'error': "#BF616A",
}

SEEK_STEP_SECONDS = 1.0

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="danmu preview TUI")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='main yaml file that describes resources and tracks')
	parser.add_argument('-d', '--debug', dest='debug_log', action='store_true',
		help='write debug log to danmu_tui.log in the current directory')
	args = parser.parse_args()
	return args

#============================================

class DanmuTuiApp(App):
	BINDINGS = [
		("space", "toggle", "Play/Pause"),
		("left", "seek_back", "Back 1s"),
		("right", "seek_forward", "Forward 1s"),
		("r", "reset", "Reset"),
		("c", "recompile", "Recompile"),
		("q", "quit", "Quit"),
	]

	CSS = """
	#root {
		height: 1fr;
	}

	#top_row {
		height: 40%;
		min-height: 8;
	}

	#left_panel {
		width: 40%;
		height: 1fr;
		border: solid gray;
	}

	#right_panel {
		width: 60%;
		height: 1fr;
		border: solid gray;
	}

	#clock_title {
		height: 1;
		color: #88C0D0;
	}

	#clock {
		height: 1fr;
	}

	#objects_title {
		height: 1;
		color: #88C0D0;
	}

	#objects {
		height: 1fr;
	}

	#footer_note {
		height: 1;
		color: #4C566A;
	}

	#log {
		height: 1fr;
		border: solid gray;
	}
	"""

	def __init__(self, yaml_file: str, debug_log: bool = False):
		super().__init__()
		self.yaml_file = yaml_file
		self.project = None
		self.session = None
		self.script_text = ""
		self.error_text = None
		self.clock_widget = None
		self.objects_widget = None
		self.log_widget = None
		self.script_styles = self._build_script_styles()
		self.debug_mode = debug_log
		self.log_path = None
		if self.debug_mode:
			self.log_path = os.path.join(os.getcwd(), "danmu_tui.log")
			self._reset_log()
			self._write_log(f"debug log: {self.log_path}")

	#============================
	def compose(self) -> ComposeResult:
		yield Static("DANMU PREVIEW", id="header")
		with Vertical(id="root"):
			with Horizontal(id="top_row"):
				with Vertical(id="left_panel"):
					yield Static("Clock", id="clock_title")
					yield Static("", id="clock")
					yield Static("space play/pause, arrows seek, r reset, c recompile, q quit",
						id="footer_note")
				with Vertical(id="right_panel"):
					yield Static("Visible objects", id="objects_title")
					yield Static("", id="objects")
			yield RichLog(id="log", wrap=True, highlight=False)

	#============================
	def on_mount(self) -> None:
		self.clock_widget = self.query_one("#clock", Static)
		self.objects_widget = self.query_one("#objects", Static)
		self.log_widget = self.query_one(RichLog)
		utils.set_quiet_mode(True)
		utils.set_event_reporter(self._report_event)
		self._load_project()
		self.set_interval(0.1, self._refresh_status)

	#============================
	def on_unmount(self) -> None:
		utils.clear_event_reporter()
		utils.set_quiet_mode(False)

	#============================
	def _load_project(self) -> None:
		try:
			self.project = DanmuProject(self.yaml_file)
			self.session = self.project.start_preview()
			self.script_text = self.project.compile()
			self.error_text = None
			self._show_script()
		except Exception as exc:
			self._set_error(str(exc), traceback.format_exc())

	#============================
	def _report_event(self, event: dict) -> None:
		message = event.get('message', '')
		self._write_log(f"{event.get('level')}: {message}")
		if self.log_widget is None:
			return
		style = NORD_COLORS['foreground']
		if event.get('level') == 'warning':
			style = NORD_COLORS['error']
		self.log_widget.write(Text(message, style=style))

	#============================
	def _set_error(self, text: str, trace_text: str = None) -> None:
		self.error_text = text
		if trace_text:
			self._write_log(trace_text)
		if self.log_widget is not None:
			self.log_widget.write(
				Text(f"error: {text}", style=f"bold {NORD_COLORS['error']}")
			)

	#============================
	def _show_script(self) -> None:
		if self.log_widget is None:
			return
		self.log_widget.clear()
		for line in self.script_text.splitlines():
			self.log_widget.write(self._highlight_line(line))

	#============================
	def action_toggle(self) -> None:
		if self.session is not None:
			self.session.toggle()

	#============================
	def action_seek_back(self) -> None:
		self._seek_by(-SEEK_STEP_SECONDS)

	#============================
	def action_seek_forward(self) -> None:
		self._seek_by(SEEK_STEP_SECONDS)

	#============================
	def _seek_by(self, delta_seconds: float) -> None:
		if self.session is None:
			return
		current_seconds = self.session.get_current_time() / 1000.0
		self.session.seek(max(0.0, current_seconds + delta_seconds), refresh=False)

	#============================
	def action_reset(self) -> None:
		if self.project is None:
			return
		self.project.recompile()

	#============================
	def action_recompile(self) -> None:
		try:
			fresh = DanmuProject(self.yaml_file)
		except Exception as exc:
			self._set_error(str(exc), traceback.format_exc())
			return
		if self.session is not None:
			fresh.session = self.session
		self.project = fresh
		self.script_text = fresh.recompile()
		self.error_text = None
		self._show_script()
		self._write_log("recompiled")

	#============================
	def _refresh_status(self) -> None:
		self._update_clock()
		self._update_objects()

	#============================
	def _update_clock(self) -> None:
		if self.clock_widget is None:
			return
		clock = Text()
		if self.session is None:
			clock.append("Status: ", style=NORD_COLORS['dim'])
			status = "failed" if self.error_text is not None else "loading"
			clock.append(status, style=NORD_COLORS['error'])
			self.clock_widget.update(clock)
			return
		running = self.session.clock.is_running()
		clock.append("Status: ", style=NORD_COLORS['dim'])
		clock.append("playing" if running else "paused", style=NORD_COLORS['names'])
		clock.append("\n")
		clock.append("Time: ", style=NORD_COLORS['dim'])
		clock.append(self._format_clock(self.session.get_current_time(),
			self.project.timeline.duration), style=NORD_COLORS['numbers'])
		clock.append("\n")
		clock.append("YAML: ", style=NORD_COLORS['dim'])
		clock.append(self.yaml_file, style=NORD_COLORS['names'])
		self.clock_widget.update(clock)

	#============================
	def _update_objects(self) -> None:
		if self.objects_widget is None or self.session is None:
			return
		engine = self.session.engine
		if engine is None or not hasattr(engine, 'visible_objects'):
			return
		objects = Text()
		for state in engine.visible_objects():
			objects.append(state['name'], style=NORD_COLORS['names'])
			objects.append(f" ({state['kind']})", style=NORD_COLORS['dim'])
			objects.append(" ")
			objects.append(self._summarize_state(state['attrs']),
				style=NORD_COLORS['foreground'])
			objects.append("\n")
		self.objects_widget.update(objects)

	#============================
	def _summarize_state(self, attrs: dict) -> str:
		label = attrs.get('content') or attrs.get('text') or attrs.get('d') or ""
		if len(label) > 24:
			label = label[:21] + "..."
		parts = []
		if label:
			parts.append(f'"{label}"')
		for key in ('x', 'y', 'alpha'):
			if key in attrs:
				value = attrs[key]
				if isinstance(value, float):
					value = f"{value:.2f}"
				parts.append(f"{key}={value}")
		return " ".join(parts)

	#============================
	def _format_clock(self, current_ms: float, total_ms: float) -> str:
		return f"{utils.format_time(current_ms)} / {utils.format_time(total_ms)}"

	#============================
	def _build_script_styles(self) -> list:
		return [
			(re.compile(r"^\s*(def|then set|set)\b"), NORD_COLORS['keyword']),
			(re.compile(r"\bobj_[A-Za-z0-9]+\b"), NORD_COLORS['names']),
			(re.compile(r"\b0x[0-9a-fA-F]+\b|-?\b\d+(?:\.\d+)?(?:%|s)?"),
				NORD_COLORS['numbers']),
			(re.compile(r"\"(?:[^\"\\]|\\.)*\""), NORD_COLORS['strings']),
		]

	#============================
	def _highlight_line(self, line: str):
		text = Text(line, style=NORD_COLORS['foreground'])
		for pattern, style in self.script_styles:
			for match in pattern.finditer(line):
				text.stylize(style, match.start(), match.end())
		return text

	#============================
	def _write_log(self, message: str) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		timestamp = time.strftime("%Y-%m-%d %H:%M:%S")
		line = f"[{timestamp}] {message}\n"
		with open(self.log_path, "a", encoding="utf-8") as handle:
			handle.write(line)

	#============================
	def _reset_log(self) -> None:
		if not self.debug_mode or self.log_path is None:
			return
		with open(self.log_path, "w", encoding="utf-8"):
			return

#============================================

def main():
	args = parse_args()
	app = DanmuTuiApp(args.yamlfile, debug_log=args.debug_log)
	app.run()

#============================================

if __name__ == '__main__':
	main()
