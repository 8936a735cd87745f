import itertools as it, operator as op, functools as ft

from . import utils as u, types as t


@u.attr_struct(vals_to_attrs=True)
class EngineConf:
	shape_id = '63618'

	# Trips ending at short-turn stop get its headsign on all stops,
	#  otherwise it's picked by stop position within the loop (before/after split).
	short_turn_stop_id = '157625' # Yale/Irvine
	headsign_short_turn = 'Yale Ave @ Irvine Blvd'
	headsign_outbound = 'Northwood High School'
	headsign_inbound = 'Irvine Station'
	headsign_split_index = 45 # stop 198259
	loop_length = 86 # None - use repeating period of the dense path

	log_trip_details = False


class ProjectionError(Exception): pass

class FormatError(ProjectionError):
	'Malformed compact schedule value, which makes whole source table suspect.'

class AlignmentError(ProjectionError):
	'Timepoint station cannot be found in the dense path at or after search cursor.'

	def __init__(self, tp_idx, stop_id, cursor, trip_id=None):
		self.tp_idx, self.stop_id, self.cursor, self.trip_id = tp_idx, stop_id, cursor, trip_id
		super(AlignmentError, self).__init__(
			'Timepoint #{} (stop {}) not found in dense path after index {}{}'.format(
				tp_idx, stop_id, cursor, '' if not trip_id else ' [trip {}]'.format(trip_id) ) )


def expand_pattern(trip, cp_table):
	'Return ProjectedTimepoint list for all control points in trip pattern range.'
	try: dts_start = u.dts_parse(trip.start_time)
	except ValueError as err:
		raise FormatError( 'Unparseable start time for'
			' trip {}: {!r}'.format(trip.trip_id, trip.start_time) ) from err
	points = cp_table.pattern_points(trip.pattern)
	offset_base = points[0].offset # relative to pattern start, not table start
	return list(
		t.public.ProjectedTimepoint(cp.stop_id, dts_start + (cp.offset - offset_base) * 60)
		for cp in points )


def align_timepoints(stop_ids, dense_path, errors=None, trip_id=None):
	'''Map each timepoint stop id to an index in the dense path.
		Leftmost match at or after cursor is used, and cursor is moved past it,
			so that repeated stops (e.g. depot at loop start/end) get consumed in order.
		Missing stops are added to errors list as AlignmentError,
			with anchor pinned to the cursor, or raised if errors=None.
		Cursor is not moved after such fallback, so next stop can still match there.'''
	anchors, cursor = list(), 0
	for tp_idx, stop_id in enumerate(stop_ids):
		anchor = dense_path.find(stop_id, cursor)
		if anchor is None:
			err = AlignmentError(tp_idx, stop_id, cursor, trip_id)
			if errors is None: raise err
			errors.append(err)
			anchors.append(min(cursor, len(dense_path) - 1))
			continue
		anchors.append(anchor)
		cursor = anchor + 1
	return anchors


def interpolate_times(timepoints, anchors):
	'''Iterate over (path_idx, dts, is_timepoint) for every dense path stop between anchors.
		Times are proportional to number of stops in segment,
			rounded down to whole minutes from segment start.
		End of each segment is emitted as start of the next one, except for the last one.'''
	if len(anchors) == 1:
		yield anchors[0], timepoints[0].dts, True
		return
	seg_last = len(anchors) - 2
	for seg, (tp_a, tp_b, a, b) in enumerate(zip(timepoints, timepoints[1:], anchors, anchors[1:])):
		n, dt_min = b - a, (tp_b.dts - tp_a.dts) // 60
		for j in range(n + 1 if seg == seg_last else n):
			offset = (dt_min * j) // n if n > 0 else 0
			yield a + j, tp_a.dts + offset * 60, j == 0 or j == n


def headsign_func(conf, timepoints, loop_length):
	'Return headsign(path_idx) function for a trip with specified timepoints.'
	if timepoints and timepoints[-1].stop_id == conf.short_turn_stop_id:
		return lambda path_idx: conf.headsign_short_turn
	def headsign(path_idx):
		if path_idx % loop_length < conf.headsign_split_index: return conf.headsign_outbound
		return conf.headsign_inbound
	return headsign


class TimetableProjector:

	def __init__(self, cp_table, dense_path, route_id, conf=None):
		'''Projection engine for compact trips
			onto specific control-point table and dense stop path.'''
		self.conf, self.log = conf or EngineConf(), u.get_logger('tt.engine')
		self.cp_table, self.dense_path, self.route_id = cp_table, dense_path, route_id
		self.loop_length = self.conf.loop_length or dense_path.loop_length
		self.log.debug(
			'Projector init: control-points={}, dense-path={} (loop-length={})',
			len(cp_table), len(dense_path), self.loop_length )

	def project_trip(self, trip):
		'''Build TripProjection for a single CompactTripDefinition.
			FormatError is raised for malformed trip data,
				while alignment issues are only logged and stored in "diagnostics" list.'''
		timepoints = expand_pattern(trip, self.cp_table)
		diagnostics = list()
		anchors = align_timepoints(
			list(map(op.attrgetter('stop_id'), timepoints)),
			self.dense_path, diagnostics, trip.trip_id )
		for err in diagnostics: self.log.warning('Alignment error: {}', err)

		headsign = headsign_func(self.conf, timepoints, self.loop_length)
		records, seq_base = list(), anchors[0]
		for path_idx, dts, is_tp in interpolate_times(timepoints, anchors):
			records.append(t.public.StopTimeRecord(
				trip.trip_id, dts, dts, self.dense_path[path_idx],
				path_idx - seq_base + 1, headsign(path_idx), is_tp ))

		summary = t.public.TripRecord( self.route_id,
			trip.service_id, trip.trip_id, self.conf.shape_id, trip.block_id )
		if self.conf.log_trip_details:
			self.log.debug(
				'Trip {}: timepoints={}, anchors={}, records={}',
				trip.trip_id, len(timepoints), anchors, len(records) )
		return t.public.TripProjection(
			trip, summary, timepoints, anchors, records, diagnostics )

	def project(self, trips):
		'Project all trips in order, stopping on first FormatError.'
		projections = t.public.Projections()
		for trip in trips: projections.add(self.project_trip(trip))
		err_count = len(list(projections.iter_diagnostics()))
		self.log.debug(
			'Projected trips: {:,} (mean-stops={:,.1f}), alignment errors: {:,}',
			len(projections), projections.stat_mean_stops(), err_count )
		return projections
