#!/usr/bin/env python3

import argparse
import yaml
from reelfoldlib.core import utils
from reelfoldlib.core.project import ReelfoldProject

#============================================

def parse_args():
	"""
	Parse command-line arguments.
	"""
	parser = argparse.ArgumentParser(
		description="Assemble clips into a movie and sync audio to the edit")
	parser.add_argument('-y', '--yaml', dest='yamlfile', required=True,
		help='yaml build script with the profile, film, and sync sections')
	parser.add_argument('-n', '--dry-run', dest='dry_run', action='store_true',
		help='validate only, do not run ffmpeg or sox')
	parser.add_argument('-p', '--dump-plan', dest='dump_plan', action='store_true',
		help='print the clip ledger, merge plan, and audio placements')
	parser.add_argument('-C', '--clean', dest='clean', action='store_true',
		help='remove intermediate files from the build directory and exit')
	parser.add_argument('-k', '--keep-temp', dest='keep_temp',
		help='keep intermediate files', action='store_true')
	parser.add_argument('-K', '--no-keep-temp', dest='keep_temp',
		help='remove intermediate files', action='store_false')
	parser.add_argument('-q', '--quiet', dest='quiet', action='store_true',
		help='suppress command echo and progress output')
	parser.set_defaults(keep_temp=False)
	args = parser.parse_args()
	return args

#============================================

def main():
	args = parse_args()
	utils.set_quiet_mode(args.quiet)
	project = ReelfoldProject(args.yamlfile, dry_run=args.dry_run,
		keep_temp=args.keep_temp)
	if args.clean:
		removed = project.clean()
		utils.echo(f"removed {len(removed)} intermediate file(s)")
		return
	if args.dump_plan:
		print(yaml.safe_dump(project.plan(), sort_keys=False))
		return
	project.run()


if __name__ == '__main__':
	main()
