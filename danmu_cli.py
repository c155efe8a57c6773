#!/usr/bin/env python3

import argparse
import yaml
from danmulib.core import utils
from danmulib.core.project import DanmuProject

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(description="Danmu timeline script compiler")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='main yaml file that describes resources and tracks')
	parser.add_argument('-o', '--output', dest='output_file',
		help='override output script file from yaml')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='compile and validate only, do not write the script')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the loaded tracks and resources')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress status messages')
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	utils.set_quiet_mode(args.quiet)
	project = DanmuProject(args.yamlfile, output_override=args.output_file)
	if args.dump_plan:
		plan = {
			'duration': project.timeline.duration,
			'tracks': project.timeline.tracks,
			'resources': project.resources.list(),
		}
		print(yaml.safe_dump(plan, sort_keys=False, allow_unicode=True))
		return
	parsed = project.validate()
	if args.dry_run:
		utils.log_message(f"dry run: {len(parsed['defs'])} objects, "
			f"{len(parsed['sets'])} set statements")
		return
	if project.output.get('file') is None:
		print(project.compile(), end="")
		return
	output_file = project.write_script()
	utils.log_message(f"wrote {output_file}")


if __name__ == '__main__':
	main()
