#!/usr/bin/env python3

# Standard Library
import os
import sys
import types

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

# local repo modules
from danmu_tui import DanmuTuiApp

#============================================

def test_format_clock() -> None:
	"""
	Ensure the clock shows position and timeline length.
	"""
	stub = types.SimpleNamespace()
	assert DanmuTuiApp._format_clock(stub, 61500, 300000) == "01:01.500 / 05:00.000"
	assert DanmuTuiApp._format_clock(stub, 3723004, 3723004) == \
		"01:02:03.004 / 01:02:03.004"

#============================================

def test_summarize_state() -> None:
	"""
	Ensure object summaries show the label and position.
	"""
	stub = types.SimpleNamespace()
	attrs = {'content': "A very long greeting for everyone", 'x': "50%", 'alpha': 0.25}
	summary = DanmuTuiApp._summarize_state(stub, attrs)
	assert summary == '"A very long greeting ..." x=50% alpha=0.25'
