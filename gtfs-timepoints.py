#!/usr/bin/env python3

import itertools as it, operator as op, functools as ft
import sys

import yaml

import gtfs_timepoints as tt


def main(args=None):
	conf, conf_engine = tt.gtfs.FeedConf(), tt.engine.EngineConf()

	import argparse
	parser = argparse.ArgumentParser(
		description='Build GTFS feed with interpolated stop times'
			' from a compact timepoint schedule and a dense stop path.')
	parser.add_argument('input_dir',
		help='Path to directory with stops.txt, shapes.txt'
			' and stop_id_sequence.txt (dense stop path, one stop id per line).')

	group = parser.add_argument_group('Schedule/input options')
	group.add_argument('-s', '--schedule', metavar='path',
		help='YAML file with control points and per-service compact trips to use'
			' instead of the built-in tables. Structure:'
			' {control_points: {ids: [...], offsets: [...]},'
				' services: {Weekday: [[bus, block, "HH:MM", Full], ...]}}')
	group.add_argument('--stop-sequence', metavar='path',
		help='Dense stop path file to use instead of one in input_dir.')

	group = parser.add_argument_group('Misc/debug options')
	group.add_argument('--engine-conf', metavar='yaml-data',
		help='Override values for EngineConf as a YAML mapping.'
			' Example: {loop_length: null, headsign_split_index: 40}')
	group.add_argument('--feed-conf', metavar='yaml-data',
		help='Override values for FeedConf as a YAML mapping.'
			' Example: {service_end_date: "20271231"}')
	group.add_argument('--debug', action='store_true', help='Verbose operation mode.')

	cmds = parser.add_subparsers(title='Commands', dest='call')


	cmd = cmds.add_parser('build',
		help='Project all trips and write GTFS feed files.')
	cmd.add_argument('output_dir', nargs='?', default='gtfs',
		help='Directory to write GTFS feed files to. Default: %(default)s')


	cmd = cmds.add_parser('check',
		help='Project all trips and report alignment errors, without writing anything.'
			' Exits with non-zero code if there were any errors.')


	cmd = cmds.add_parser('show-trip',
		help='Print projected stop times for specified trip(s).')
	cmd.add_argument('trip_id', nargs='+', help='Trip ID to show. Example: weekday_1_1')


	opts = parser.parse_args(sys.argv[1:] if args is None else args)

	tt.u.logging.basicConfig(
		format='%(asctime)s :: %(name)s %(levelname)s :: %(message)s',
		datefmt='%Y-%m-%d %H:%M:%S',
		level=tt.u.logging.DEBUG if opts.debug else tt.u.logging.WARNING )
	log = tt.u.get_logger('tt.main')

	for conf_obj, conf_yaml in [(conf_engine, opts.engine_conf), (conf, opts.feed_conf)]:
		if not conf_yaml: continue
		tt.u.attr_update( conf_obj, yaml.safe_load(conf_yaml),
			lambda k, v: parser.error( 'Unrecognized {} option:'
				' {!r} (value: {!r})'.format(type(conf_obj).__name__, k, v) ) )

	sched = None
	if opts.schedule:
		try: sched = tt.schedule.load_schedule(opts.schedule)
		except ValueError as err: parser.error('Failed to load --schedule file: {}'.format(err))

	if opts.call == 'build':
		try:
			projections = tt.build_feed(
				opts.input_dir, opts.output_dir, sched, conf, conf_engine,
				path_sequence=opts.stop_sequence, timer_func=tt.calc_timer )
		except tt.engine.FormatError as err:
			log.error('Aborting on malformed schedule data: {}', err)
			return 1
		except ValueError as err: parser.error('Failed to load input data: {}'.format(err))
		err_count = len(list(projections.iter_diagnostics()))
		if err_count:
			log.warning( 'Feed written with {:,} alignment error(s),'
				' check affected trips with "show-trip" command', err_count )
		return

	if opts.call not in ['check', 'show-trip']:
		parser.error('Action not implemented: {}'.format(opts.call))

	try:
		stops, sched, projector = tt.init_projector(
			opts.input_dir, sched, conf, conf_engine,
			path_sequence=opts.stop_sequence, timer_func=tt.calc_timer )
	except ValueError as err: parser.error('Failed to load input data: {}'.format(err))
	try: projections = projector.project(sched.trips)
	except tt.engine.FormatError as err:
		log.error('Aborting on malformed schedule data: {}', err)
		return 1

	if opts.call == 'check':
		errors = list(projections.iter_diagnostics())
		for err in errors: print(err)
		print('Trips: {:,}, stop times: {:,}, alignment errors: {:,}'.format(
			len(projections), len(list(projections.iter_records())), len(errors) ))
		return 1 if errors else 0

	elif opts.call == 'show-trip':
		for n, trip_id in enumerate(opts.trip_id):
			proj = projections.get(trip_id)
			if proj is None: parser.error('No such trip: {!r}'.format(trip_id))
			if n: print()
			proj.pretty_print(stops)

if __name__ == '__main__': sys.exit(main())
