### Static compact schedule: control points, offsets and per-service trip tables

import itertools as it, operator as op, functools as ft
from collections import OrderedDict

from . import utils as u, types as t


log = u.get_logger('tt.schedule')


control_points = OrderedDict([
	('157583', 'Dock 4'),
	('157593', 'Alton/Hoag'),
	('157601', 'Lake/Barranca'),
	('198349', 'Yale/Bryan'),
	('157625', 'Yale/Irvine'),
	('157667', 'Yale/Deerfield'),
	('157641', 'Sand Canyon/Hoag') ])

# Minutes from first control point, extra last one is the return to Dock 4
control_point_offsets = [0, 15, 30, 45, 65, 75, 95, 110]

# service_id: [(bus_id, block_id, start_time, pattern), ...]
service_trips = OrderedDict()

service_trips['Weekday'] = [
	(1, '0520', '06:00', 'Full'),
	(1, '0520', '08:00', 'Full'),
	(1, '0520', '09:50', 'Full'),
	(1, '0520', '11:50', 'Full'),
	(1, '0520', '13:55', 'Full'),
	(1, '0520', '15:50', 'Full'),
	(1, '0520', '17:55', 'Full'),

	(2, '0535', '06:20', 'Full'),
	(2, '0535', '08:20', 'Full'),
	(2, '0535', '10:10', 'Full'),
	(2, '0535', '12:10', 'Full'),
	(2, '0535', '14:15', 'Full'),
	(2, '0535', '16:10', 'Full'),
	(2, '0535', '18:15', 'Full'),

	(3, '0600', '06:40', 'Full'),
	(3, '0600', '08:40', 'Full'),
	(3, '0600', '10:30', 'Full'),
	(3, '0600', '12:30', 'Full'),
	(3, '0600', '14:35', 'Full'),
	(3, '0600', '16:30', 'Full'),
	(3, '0600', '18:35', 'ShortYale'), # ends 19:40

	(4, '0520', '07:00', 'Full'),
	(4, '0520', '08:55', 'Full'),
	(4, '0520', '10:50', 'Full'),
	(4, '0520', '12:50', 'Full'),
	(4, '0520', '14:55', 'Full'),
	(4, '0520', '16:50', 'Full'),
	(4, '0520', '18:55', 'ShortYale'), # ends 20:00

	(5, '0535', '07:20', 'Full'),
	(5, '0535', '09:15', 'Full'),
	(5, '0535', '11:20', 'Full'),
	(5, '0535', '13:10', 'Full'),
	(5, '0535', '15:10', 'Full'),
	(5, '0535', '17:10', 'Full'),
	# Printed timetable has 20:05 at Yale/Irvine here, offsets give 20:20
	(5, '0535', '19:15', 'ShortYale'),

	(6, '0550', '07:40', 'Full'),
	(6, '0550', '09:35', 'Full'),
	(6, '0550', '11:40', 'Full'),
	(6, '0550', '13:30', 'Full'),
	(6, '0550', '15:30', 'Full'),
	(6, '0550', '17:30', 'Full') ]

service_trips['Weekend'] = [
	(1, '0720', '08:00', 'Full'),
	(1, '0720', '10:00', 'Full'),
	(1, '0720', '11:50', 'Full'),
	(1, '0720', '13:50', 'Full'),
	(1, '0720', '15:55', 'Full'),
	(1, '0720', '17:50', 'Full'),
	(1, '0720', '19:55', 'Full'),

	(2, '0735', '08:20', 'Full'),
	(2, '0735', '10:20', 'Full'),
	(2, '0735', '12:10', 'Full'),
	(2, '0735', '14:10', 'Full'),
	(2, '0735', '16:15', 'Full'),
	(2, '0735', '18:15', 'Full'),
	(2, '0735', '20:15', 'Full'),

	(3, '0800', '08:40', 'Full'),
	(3, '0800', '10:40', 'Full'),
	(3, '0800', '12:30', 'Full'),
	(3, '0800', '14:30', 'Full'),
	(3, '0800', '16:30', 'Full'),
	(3, '0800', '18:30', 'Full'),
	(3, '0800', '20:35', 'ShortYale'), # ends 21:40

	(4, '0720', '09:00', 'Full'),
	(4, '0720', '10:55', 'Full'),
	(4, '0720', '12:50', 'Full'),
	(4, '0720', '14:50', 'Full'),
	(4, '0720', '16:55', 'Full'),
	(4, '0720', '18:50', 'Full'),
	(4, '0720', '20:55', 'ShortYale'), # ends 22:00

	(5, '0735', '09:20', 'Full'),
	(5, '0735', '11:15', 'Full'),
	(5, '0735', '13:20', 'Full'),
	(5, '0735', '15:15', 'Full'),
	(5, '0735', '17:15', 'Full'),
	(5, '0735', '19:10', 'Full'),
	(5, '0735', '21:15', 'ShortYale'), # ends 22:20

	(6, '0750', '09:40', 'Full'),
	(6, '0750', '11:35', 'Full'),
	(6, '0750', '13:40', 'Full'),
	(6, '0750', '15:40', 'Full'),
	(6, '0750', '17:35', 'Full') ]


@u.attr_struct
class Schedule:
	keys = 'cp_table trips'

	def services(self):
		return list(OrderedDict.fromkeys(map(op.attrgetter('service_id'), self.trips)))


trip_id_fmt = '{service}_{bus}_{n}'

def iter_service_trips(service_id, raw_trips):
	'Yield CompactTripDefinitions for (bus, block, start, pattern) tuples of one service.'
	for n, raw in enumerate(raw_trips, 1):
		if isinstance(raw, dict):
			raw = op.itemgetter('bus_id', 'block_id', 'start_time', 'pattern')(raw)
		bus_id, block_id, start_time, pattern = raw
		trip_id = trip_id_fmt.format(service=service_id.lower(), bus=bus_id, n=n)
		yield t.input.CompactTripDefinition(
			bus_id, str(block_id), service_id, start_time, pattern, trip_id )

def parse_schedule(data):
	'''Build Schedule from a mapping with "control_points" and "services" keys.
		control_points: {ids: [...], offsets: [...]}
		services: {service_id: [[bus, block, start_time, pattern], ...]}'''
	cps = data['control_points']
	cp_table = t.input.ControlPointTable.from_lists(cps['ids'], cps['offsets'])
	trips = list()
	for service_id, raw_trips in data['services'].items():
		trips.extend(iter_service_trips(service_id, raw_trips or list()))
	log.debug(
		'Parsed schedule: control-points={}, services={}, trips={}',
		len(cp_table), len(data['services']), len(trips) )
	return Schedule(cp_table, trips)

def default_schedule():
	return parse_schedule(dict(
		control_points=dict(ids=list(control_points), offsets=control_point_offsets),
		services=service_trips ))

def load_schedule(path):
	'Load Schedule from YAML file, same structure as parse_schedule() data.'
	with open(str(path)) as src: data = u.yaml_load(src)
	try: return parse_schedule(data)
	except (KeyError, TypeError) as err:
		raise ValueError('Invalid schedule file structure ({}): {}'.format(path, err)) from err
