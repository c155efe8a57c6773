import argparse
import os
from danmulib.core.project import DanmuProject

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Export danmu YAML to a script file")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='main yaml file that describes resources and tracks')
	parser.add_argument('-o', '--output', dest='output_file',
		help='output script file path')
	args = parser.parse_args()
	return args

#============================================

class ScriptExporter():
	def __init__(self, yaml_file: str, output_file: str = None):
		self.yaml_file = yaml_file
		self.project = DanmuProject(self.yaml_file)
		self.output_file = output_file or self.project.output.get('file') \
			or self._default_output_path()

	#============================
	def _default_output_path(self) -> str:
		base, _ = os.path.splitext(self.yaml_file)
		if base.endswith('.danmu'):
			base = base[:-len('.danmu')]
		return base + ".bas"

	#============================
	def export(self) -> str:
		# parse before writing so a bad script never lands on disk
		self.project.validate()
		return self.project.write_script(self.output_file)

#============================================

def main():
	args = parse_args()
	exporter = ScriptExporter(args.yamlfile, args.output_file)
	exporter.export()
	print(f"wrote {exporter.output_file}")


if __name__ == '__main__':
	main()
