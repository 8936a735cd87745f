import itertools as it, operator as op, functools as ft
from pathlib import Path
import time

from . import engine, gtfs, schedule, utils as u, types as t


def calc_timer(func, *args, log=u.get_logger('tt.timer'), timer_name=None, **kws):
	if not timer_name:
		func_base = func if not isinstance(func, ft.partial) else func.func
		timer_name = '.'.join([func_base.__module__.strip('__'), func_base.__qualname__])
	log.debug('[{}] Starting...', timer_name)
	td = time.monotonic()
	data = func(*args, **kws)
	td = time.monotonic() - td
	log.debug('[{}] Finished in: {:.1f}s', timer_name, td)
	return data


def init_projector(
		input_dir, sched=None, conf=None, conf_engine=None,
		path_sequence=None, timer_func=None, log=u.get_logger('tt.init') ):
	'''Load stop catalogue and dense path from input_dir,
		returning (stops, schedule, projector) tuple.
		Projector uses route_id from feed conf for its trip records.'''
	timer_func = timer_func or (lambda f,*a,**k: f(*a,**k))
	input_dir = Path(input_dir)
	if not conf: conf = gtfs.FeedConf()
	if not sched: sched = schedule.default_schedule()
	if not path_sequence: path_sequence = input_dir / 'stop_id_sequence.txt'

	stops = timer_func(gtfs.parse_stops, input_dir)
	dense_path = timer_func(gtfs.parse_dense_path, path_sequence, stops)
	log.debug(
		'Loaded inputs: stops={:,}, dense-path={:,}, services={}, trips={:,}',
		len(stops), len(dense_path), ','.join(sched.services()), len(sched.trips) )
	projector = engine.TimetableProjector(
		sched.cp_table, dense_path, conf.route_id, conf=conf_engine )
	return stops, sched, projector


def build_feed(
		input_dir, output_dir, sched=None, conf=None, conf_engine=None,
		path_sequence=None, timer_func=None ):
	'''Project all schedule trips and write GTFS feed to output_dir.
		Raises engine.FormatError on corrupt schedule data, before anything gets written.'''
	if not conf: conf = gtfs.FeedConf()
	stops, sched, projector = init_projector( input_dir, sched,
		conf, conf_engine, path_sequence=path_sequence, timer_func=timer_func )

	project = projector.project
	if timer_func: project = ft.partial(timer_func, project)
	projections = project(sched.trips)

	write_feed = gtfs.write_feed
	if timer_func: write_feed = ft.partial(timer_func, write_feed)
	write_feed(output_dir, conf, stops, projections, Path(input_dir) / 'shapes.txt')
	return projections
