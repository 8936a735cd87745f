import itertools as it, operator as op, functools as ft
from collections import UserList

from .. import utils as u


@u.attr_struct(repr=False, eq=False)
class Stop:
	keys = 'id name lon lat'
	def __hash__(self): return hash(self.id)
	def __eq__(self, stop): return type(self) is type(stop) and self.id == stop.id
	def __repr__(self):
		if self.id == self.name: return '<Stop {}>'.format(self.id)
		return '<Stop {} [{}]>'.format(self.name, self.id)

class Stops:
	'Station catalogue, ordered as it was read.'

	def __init__(self): self.set_idx = dict()

	def add(self, stop):
		if stop.id in self.set_idx: stop = self.set_idx[stop.id]
		else: self.set_idx[stop.id] = stop
		return stop

	def get(self, stop_id): return self.set_idx.get(stop_id)

	def __contains__(self, stop_id): return stop_id in self.set_idx
	def __getitem__(self, stop_id): return self.set_idx[stop_id]
	def __len__(self): return len(self.set_idx)
	def __iter__(self): return iter(self.set_idx.values())


### Projection results

@u.attr_struct
class ProjectedTimepoint: keys = 'stop_id dts'

@u.attr_struct
class StopTimeRecord:
	keys = 'trip_id dts_arr dts_dep stop_id stop_sequence headsign timepoint'

	gtfs_fields = ( 'trip_id arrival_time departure_time'
		' stop_id stop_sequence stop_headsign timepoint' ).split()

	def gtfs_row(self):
		return [ self.trip_id, u.dts_format(self.dts_arr), u.dts_format(self.dts_dep),
			self.stop_id, self.stop_sequence, self.headsign, int(self.timepoint) ]

@u.attr_struct
class TripRecord:
	keys = 'route_id service_id trip_id shape_id block_id'
	gtfs_fields = keys.split()
	def gtfs_row(self): return list(u.attr.astuple(self))


@u.attr_struct
class TripProjection:
	trip = u.attr_init()
	summary = u.attr_init()
	timepoints = u.attr_init(list)
	anchors = u.attr_init(list)
	records = u.attr_init(list)
	diagnostics = u.attr_init(list) # AlignmentError instances

	@property
	def trip_id(self): return self.trip.trip_id

	def __len__(self): return len(self.records)
	def __iter__(self): return iter(self.records)

	def pretty_print(self, stops=None, dts_format_func=None, indent=0, **print_kws):
		if not dts_format_func: dts_format_func = u.dts_format
		p = lambda tpl,*a,**k: print(' '*indent + tpl.format(*a,**k), **print_kws)
		stop_name = lambda stop_id: stops[stop_id].name\
			if stops and stop_id in stops else stop_id

		p( 'Trip {} (service: {}, block: {}, pattern: {}, stops: {}):',
			self.trip_id, self.trip.service_id, self.trip.block_id,
			self.trip.pattern.name, len(self.records) )
		for err in self.diagnostics: p('  ! {}', err)
		for rec in self.records:
			p( '  {tp} {0.stop_sequence:>3d} {dts} {name} [{0.stop_id}] -> {0.headsign}',
				rec, tp='*' if rec.timepoint else ' ',
				dts=dts_format_func(rec.dts_arr), name=stop_name(rec.stop_id) )

class Projections(UserList):
	'TripProjection list, in the same order as trips were passed to the engine.'

	def add(self, projection): self.append(projection)

	def get(self, trip_id):
		for proj in self:
			if proj.trip_id == trip_id: return proj

	def iter_records(self): return it.chain.from_iterable(self)
	def iter_diagnostics(self):
		return it.chain.from_iterable(proj.diagnostics for proj in self)

	def stat_mean_stops(self):
		if not len(self): return 0
		return sum(map(len, self)) / len(self)
