import itertools as it, operator as op, functools as ft
from collections import namedtuple
from pathlib import Path
import csv, shutil, enum

from . import utils as u, types as t


log = u.get_logger('tt.gtfs')


@u.attr_struct(vals_to_attrs=True)
class FeedConf:

	agency_id = 'IC'
	agency_name = 'Irvine Connect'
	agency_url = 'https://www.cityofirvine.org/irvine-connect'
	agency_timezone = 'America/Los_Angeles'

	route_id = '5956'
	route_short_name = 'IC'
	route_long_name = 'Irvine Connect'
	route_type = 3 # bus
	route_color = '00ABD6'
	route_text_color = 'FFFFFF'

	# service_id -> monday..sunday flags
	service_weekdays = (
		('Weekday', (1, 1, 1, 1, 1, 0, 0)),
		('Weekend', (0, 0, 0, 0, 0, 1, 1)) )
	service_start_date = '20250101'
	service_end_date = '20261231'

	# (service_id, date) pairs for calendar_dates.txt with exception_type=2
	service_removed_dates = tuple(('Weekday', d) for d in [
		'20260101', # New Year's Day
		'20260525', # Memorial Day
		'20260704', # Independence Day
		'20261126', # Thanksgiving
		'20261225' ]) # Christmas


weekday_columns = [ 'monday', 'tuesday',
	'wednesday', 'thursday', 'friday', 'saturday', 'sunday' ]

class CalendarException(enum.Enum): added, removed = '1', '2'


### Input

def iter_gtfs_tuples(gtfs_dir, filename):
	log.debug('Processing gtfs file: {}', filename)
	if filename.endswith('.txt'): filename = filename[:-4]
	tuple_t = ''.join(' '.join(filename.rstrip('s').split('_')).title().split())
	p = Path(gtfs_dir) / '{}.txt'.format(filename)
	with p.open(encoding='utf-8-sig') as src:
		src_csv = csv.reader(src)
		tuple_t = namedtuple(tuple_t, list(v.strip() for v in next(src_csv)))
		for line in src_csv:
			if not line: continue
			try: yield tuple_t(*line)
			except TypeError:
				log.debug('Skipping bogus CSV line (file: {}): {!r}', p, line)

def parse_stops(gtfs_dir):
	'Read station catalogue from stops.txt.'
	stops = t.public.Stops()
	for s in iter_gtfs_tuples(gtfs_dir, 'stops'):
		stops.add(t.public.Stop(s.stop_id, s.stop_name, float(s.stop_lon), float(s.stop_lat)))
	return stops

def parse_dense_path(path, stops=None):
	'''Read dense stop path - one stop id per line, blank lines skipped.
		Ids missing from stops catalogue (if passed) are dropped with a warning.'''
	stop_ids = list()
	with open(str(path), encoding='utf-8-sig') as src:
		for line in src:
			stop_id = line.strip()
			if not stop_id: continue
			if stops is not None and stop_id not in stops:
				log.warning('Stop id {} in dense path sequence is missing from stops catalogue', stop_id)
				continue
			stop_ids.append(stop_id)
	if not stop_ids: raise ValueError('Dense stop path is empty: {}'.format(path))
	return t.input.DensePath(stop_ids)


### Output

def write_gtfs_rows(gtfs_dir, filename, fields, rows):
	p, n = Path(gtfs_dir) / '{}.txt'.format(filename), 0
	with u.safe_replacement(p, newline='') as dst:
		dst_csv = csv.writer(dst, lineterminator='\n')
		dst_csv.writerow(fields)
		for n, row in enumerate(rows, 1): dst_csv.writerow(row)
	log.debug('Wrote gtfs file: {} ({:,} rows)', p.name, n)
	return n

def write_feed(gtfs_dir, conf, stops, projections, shapes_src=None):
	'Write full GTFS feed for projected trips into gtfs_dir.'
	gtfs_dir = Path(gtfs_dir)
	gtfs_dir.mkdir(parents=True, exist_ok=True)
	w = ft.partial(write_gtfs_rows, gtfs_dir)

	w( 'agency', 'agency_id agency_name agency_url agency_timezone'.split(),
		[[conf.agency_id, conf.agency_name, conf.agency_url, conf.agency_timezone]] )

	w( 'calendar', ['service_id'] + weekday_columns + ['start_date', 'end_date'],
		( [svc_id] + list(weekdays) + [conf.service_start_date, conf.service_end_date]
			for svc_id, weekdays in conf.service_weekdays ) )
	w( 'calendar_dates', 'service_id date exception_type'.split(),
		( [svc_id, date, CalendarException.removed.value]
			for svc_id, date in conf.service_removed_dates ) )

	w( 'routes', ( 'route_id agency_id route_short_name'
			' route_long_name route_type route_color route_text_color' ).split(),
		[[ conf.route_id, conf.agency_id, conf.route_short_name,
			conf.route_long_name, conf.route_type, conf.route_color, conf.route_text_color ]] )

	if shapes_src and Path(shapes_src).exists():
		with u.safe_replacement(gtfs_dir / 'shapes.txt', 'wb') as dst,\
				open(str(shapes_src), 'rb') as src:
			shutil.copyfileobj(src, dst)
	elif shapes_src: log.warning('Shapes file not found, not copying it: {}', shapes_src)

	w( 'stops', 'stop_id stop_code stop_name stop_lat stop_lon'.split(),
		([s.id, '', s.name, s.lat, s.lon] for s in stops) )

	w( 'trips', t.public.TripRecord.gtfs_fields,
		(proj.summary.gtfs_row() for proj in projections) )
	return w( 'stop_times', t.public.StopTimeRecord.gtfs_fields,
		(rec.gtfs_row() for rec in projections.iter_records()) )
