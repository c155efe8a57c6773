#!/usr/bin/env python3

"""
Parse the def/set/then script subset produced by the compiler.

parse_script() returns {'defs': [...], 'sets': [...]} where every def is
{'kind', 'name', 'attrs'} and every set is
{'name', 'properties', 'duration', 'chained', 'line'}.
Durations are seconds, percentages stay as "N%" strings, colors are ints.
"""

import re

#============================================

DEF_KINDS = ('text', 'button', 'path')
_IDENT_RE = re.compile(r'[A-Za-z_][A-Za-z0-9_]*')
_NUMBER_RE = re.compile(r'-?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?')
_HEX_RE = re.compile(r'0[xX][0-9a-fA-F]+')
_ESCAPES = {'n': "\n", 'r': "\r", '"': '"', '\\': '\\'}

#============================================

class _Scanner():
	def __init__(self, text: str, line_number: int):
		self.text = text
		self.pos = 0
		self.line_number = line_number

	#============================
	def error(self, message: str) -> RuntimeError:
		return RuntimeError(f"line {self.line_number}: {message}")

	#============================
	def skip_spaces(self) -> None:
		while self.pos < len(self.text) and self.text[self.pos] in " \t":
			self.pos += 1

	#============================
	def at_end(self) -> bool:
		self.skip_spaces()
		return self.pos >= len(self.text)

	#============================
	def peek(self) -> str:
		self.skip_spaces()
		if self.pos >= len(self.text):
			return ""
		return self.text[self.pos]

	#============================
	def expect(self, char: str) -> None:
		if self.peek() != char:
			raise self.error(f"expected '{char}'")
		self.pos += 1

	#============================
	def identifier(self) -> str:
		self.skip_spaces()
		match = _IDENT_RE.match(self.text, self.pos)
		if match is None:
			raise self.error("expected identifier")
		self.pos = match.end()
		return match.group(0)

	#============================
	def keyword(self, word: str) -> bool:
		self.skip_spaces()
		match = _IDENT_RE.match(self.text, self.pos)
		if match is None or match.group(0) != word:
			return False
		self.pos = match.end()
		return True

	#============================
	def value(self):
		char = self.peek()
		if char == '"':
			return self.string()
		if char == '{':
			return self.mapping()
		match = _HEX_RE.match(self.text, self.pos)
		if match is not None:
			self.pos = match.end()
			return int(match.group(0), 16)
		match = _NUMBER_RE.match(self.text, self.pos)
		if match is None:
			raise self.error("expected a value")
		self.pos = match.end()
		number_text = match.group(0)
		number = float(number_text)
		if number.is_integer() and re.fullmatch(r'-?\d+', number_text):
			number = int(number_text)
		suffix = self.text[self.pos:self.pos + 1]
		if suffix == '%':
			self.pos += 1
			return f"{number_text}%"
		if suffix == 's':
			self.pos += 1
			return float(number)
		return number

	#============================
	def string(self) -> str:
		self.expect('"')
		chars = []
		while self.pos < len(self.text):
			char = self.text[self.pos]
			self.pos += 1
			if char == '"':
				return "".join(chars)
			if char == '\\':
				if self.pos >= len(self.text):
					break
				escaped = self.text[self.pos]
				self.pos += 1
				chars.append(_ESCAPES.get(escaped, escaped))
				continue
			chars.append(char)
		raise self.error("unterminated string")

	#============================
	def mapping(self) -> dict:
		self.expect('{')
		result = {}
		if self.peek() == '}':
			self.pos += 1
			return result
		while True:
			key = self.identifier()
			self.expect('=')
			result[key] = self.value()
			char = self.peek()
			if char == ',':
				self.pos += 1
				continue
			if char == '}':
				self.pos += 1
				return result
			raise self.error("expected ',' or '}'")

#============================================

def _parse_set(scanner: _Scanner, chained: bool) -> dict:
	if not scanner.keyword('set'):
		raise scanner.error("expected 'set'")
	name = scanner.identifier()
	properties = scanner.mapping()
	duration = scanner.value()
	if not isinstance(duration, float):
		raise scanner.error("set duration must be given in seconds")
	if not scanner.at_end():
		raise scanner.error("unexpected text after set statement")
	return {
		'name': name,
		'properties': properties,
		'duration': duration,
		'chained': chained,
		'line': scanner.line_number,
	}

#============================================

def parse_script(script: str) -> dict:
	"""
	Parse script text into defs and sets.

	Args:
		script: Script text without blank lines.

	Returns:
		dict: {'defs': list, 'sets': list}
	"""
	defs = []
	sets = []
	declared = set()
	current = None
	lines = script.split("\n")
	if len(lines) > 0 and lines[-1] == "":
		lines.pop()
	for line_number, line in enumerate(lines, start=1):
		if line.strip() == "":
			raise RuntimeError(f"line {line_number}: blank lines are not permitted")
		scanner = _Scanner(line, line_number)
		if current is not None:
			if scanner.peek() == '}':
				scanner.pos += 1
				if not scanner.at_end():
					raise scanner.error("unexpected text after '}'")
				defs.append(current)
				current = None
				continue
			key = scanner.identifier()
			scanner.expect('=')
			current['attrs'][key] = scanner.value()
			if not scanner.at_end():
				raise scanner.error("unexpected text after attribute")
			continue
		if scanner.keyword('def'):
			kind = scanner.identifier()
			if kind not in DEF_KINDS:
				raise scanner.error(f"unknown def kind: {kind}")
			name = scanner.identifier()
			if name in declared:
				raise scanner.error(f"duplicate def: {name}")
			scanner.expect('{')
			if not scanner.at_end():
				raise scanner.error("unexpected text after '{'")
			declared.add(name)
			current = {'kind': kind, 'name': name, 'attrs': {}}
			continue
		chained = scanner.keyword('then')
		statement = _parse_set(scanner, chained)
		if statement['name'] not in declared:
			raise scanner.error(f"set before def: {statement['name']}")
		sets.append(statement)
	if current is not None:
		raise RuntimeError(f"unterminated def block: {current['name']}")
	return {'defs': defs, 'sets': sets}
