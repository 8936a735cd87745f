### Projection engine input data: control points, compact trips, dense stop path

import itertools as it, operator as op, functools as ft
import enum

from .. import utils as u


class TripPattern(enum.Enum):
	'''Trip variants, with [min_index, max_index] range
		of control-point table that each one covers as its value.'''
	full = 0, 7 # Dock 4 -> Sand Canyon -> back to Dock 4
	short_yale = 0, 4 # outbound only, turns back at Yale/Irvine
	start_yale = 4, 7 # bus entering service mid-loop, inbound portion only

	@property
	def min_index(self): return self.value[0]
	@property
	def max_index(self): return self.value[1]
	def __len__(self): return self.max_index - self.min_index + 1

	@classmethod
	def parse(cls, name):
		'Lookup pattern by either "ShortYale" or "short_yale" style name.'
		if isinstance(name, cls): return name
		key = ''.join('_' + c.lower() if c.isupper() else c for c in str(name)).lstrip('_')
		try: return cls[key]
		except KeyError:
			raise ValueError('Unknown trip pattern: {!r}'.format(name)) from None


@u.attr_struct
class ControlPoint: keys = 'stop_id offset'

class ControlPointTable:
	'''Ordered canonical timepoint stations with minute-offsets from the first one.
		Last entry is normally a loop-closure alias of the first station.'''

	def __init__(self, points):
		self.points = tuple(points)
		if not self.points: raise ValueError('Empty control-point table')
		for cp1, cp2 in zip(self.points, self.points[1:]):
			if cp2.offset < cp1.offset:
				raise ValueError( 'Control-point offsets must be non-decreasing:'
					' {} (+{}) -> {} (+{})'.format(cp1.stop_id, cp1.offset, cp2.stop_id, cp2.offset) )

	@classmethod
	def from_lists(cls, stop_ids, offsets):
		'''Build table from station ids and offsets.
			If there is one more offset than ids, it is
				used for the loop-closure return to the first station.'''
		stop_ids = list(map(str, stop_ids))
		if len(offsets) == len(stop_ids) + 1: stop_ids.append(stop_ids[0])
		if len(offsets) != len(stop_ids):
			raise ValueError('Mismatch between control-point ids'
				' ({}) and offsets ({})'.format(len(stop_ids), len(offsets)))
		return cls(ControlPoint(stop_id, int(offset)) for stop_id, offset in zip(stop_ids, offsets))

	def pattern_points(self, pattern):
		if pattern.max_index >= len(self.points):
			raise ValueError( 'Pattern {} range [{}, {}] is outside of'
				' control-point table (len={})'.format(
					pattern.name, pattern.min_index, pattern.max_index, len(self.points) ) )
		return self.points[pattern.min_index:pattern.max_index+1]

	def __getitem__(self, n): return self.points[n]
	def __len__(self): return len(self.points)
	def __iter__(self): return iter(self.points)


@u.attr_struct
class CompactTripDefinition:
	bus_id = u.attr_init()
	block_id = u.attr_init()
	service_id = u.attr_init()
	start_time = u.attr_init() # "HH:MM" string, as authored
	pattern = u.attr_init(converter=TripPattern.parse)
	trip_id = u.attr_init(None)


class DensePath:
	'''Every physical stop of one or more loop traversals, in order.
		Same stop id can be present multiple times, e.g. depot at start/end of each loop.'''

	def __init__(self, stop_ids):
		self.stop_ids = tuple(map(str, stop_ids))
		if not self.stop_ids: raise ValueError('Empty dense stop path')

	def find(self, stop_id, start=0):
		'Index of leftmost stop_id occurrence at or after start, or None.'
		for n in range(start, len(self.stop_ids)):
			if self.stop_ids[n] == stop_id: return n

	_loop_length = None
	@property
	def loop_length(self):
		'Smallest period that tiles the whole path, or its length if it does not repeat.'
		if not self._loop_length:
			ids, n_max = self.stop_ids, len(self.stop_ids)
			for n in range(1, n_max + 1):
				if n_max % n: continue
				if all(ids[k] == ids[k % n] for k in range(n, n_max)): break
			self._loop_length = n
		return self._loop_length

	def __getitem__(self, n): return self.stop_ids[n]
	def __len__(self): return len(self.stop_ids)
	def __iter__(self): return iter(self.stop_ids)
