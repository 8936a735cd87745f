import itertools as it, operator as op, functools as ft
import unittest

from . import _common as c

tt = c.tt


class PatternExpanderTests(unittest.TestCase):

	def expand(self, start_time, pattern):
		timepoints = tt.engine.expand_pattern(c.trip(start_time, pattern), c.cp_table())
		return c.dts_list(map(op.attrgetter('dts'), timepoints)), timepoints

	def test_full(self):
		times, timepoints = self.expand('06:00', 'Full')
		self.assertEqual(times, [ '06:00:00', '06:15:00', '06:30:00',
			'06:45:00', '07:05:00', '07:15:00', '07:35:00', '07:50:00' ])
		self.assertEqual(timepoints[-1].stop_id, timepoints[0].stop_id)
		self.assertEqual(timepoints[0].stop_id, '157583')

	def test_short_yale(self):
		times, timepoints = self.expand('18:35', 'ShortYale')
		self.assertEqual(times, ['18:35:00', '18:50:00', '19:05:00', '19:20:00', '19:40:00'])
		self.assertEqual(timepoints[-1].stop_id, '157625')

	def test_start_yale_offsets_are_relative(self):
		times, timepoints = self.expand('06:00', 'StartYale')
		self.assertEqual(times, ['06:00:00', '06:10:00', '06:30:00', '06:45:00'])
		self.assertEqual(
			list(map(op.attrgetter('stop_id'), timepoints)),
			['157625', '157667', '157641', '157583'] )

	def test_timepoint_count(self):
		for pattern in tt.t.input.TripPattern:
			with self.subTest(pattern=pattern):
				times, timepoints = self.expand('12:00', pattern)
				self.assertEqual(len(timepoints), pattern.max_index - pattern.min_index + 1)

	def test_malformed_start_time(self):
		for start_time in ['6h00', '', '06:60', '06-00', None, 360]:
			with self.subTest(start_time=start_time):
				with self.assertRaises(tt.engine.FormatError):
					tt.engine.expand_pattern(c.trip(start_time), c.cp_table())

	def test_pattern_outside_table(self):
		cp_table = tt.t.input.ControlPointTable.from_lists(['a', 'b', 'c'], [0, 5, 10, 15])
		with self.assertRaises(ValueError):
			tt.engine.expand_pattern(c.trip('06:00', 'Full'), cp_table)


class PathAlignerTests(unittest.TestCase):

	def test_duplicate_stops_consumed_in_order(self):
		path = tt.t.input.DensePath('a b c a b c a'.split())
		self.assertEqual(tt.engine.align_timepoints('a c a c a'.split(), path), [0, 2, 3, 5, 6])

	def test_leftmost_match(self):
		path = tt.t.input.DensePath('a x b x b c'.split())
		self.assertEqual(tt.engine.align_timepoints('a b c'.split(), path), [0, 2, 5])

	def test_missing_stop_strict(self):
		path = tt.t.input.DensePath('a b c'.split())
		with self.assertRaises(tt.engine.AlignmentError) as ctx:
			tt.engine.align_timepoints('a z c'.split(), path)
		self.assertEqual((ctx.exception.tp_idx, ctx.exception.stop_id, ctx.exception.cursor), (1, 'z', 1))

	def test_missing_stop_fallback(self):
		path = tt.t.input.DensePath('a b c d'.split())
		errors = list()
		anchors = tt.engine.align_timepoints('a z c d'.split(), path, errors, trip_id='t1')
		self.assertEqual(anchors, [0, 1, 2, 3])
		self.assertEqual(len(errors), 1)
		err, = errors
		self.assertEqual((err.tp_idx, err.stop_id, err.cursor, err.trip_id), (1, 'z', 1, 't1'))
		self.assertIn('t1', str(err))

	def test_fallback_at_path_end(self):
		path = tt.t.input.DensePath('a b c'.split())
		errors = list()
		anchors = tt.engine.align_timepoints('a c a'.split(), path, errors)
		self.assertEqual(anchors, [0, 2, 2])
		self.assertEqual(errors[0].cursor, 3)

	def test_fallback_keeps_cursor(self):
		path = tt.t.input.DensePath('a b c a b c'.split())
		errors = list()
		anchors = tt.engine.align_timepoints('a z b c'.split(), path, errors)
		self.assertEqual(anchors, [0, 1, 1, 2])
		self.assertEqual((errors[0].stop_id, errors[0].cursor), ('z', 1))


class TimeInterpolatorTests(unittest.TestCase):

	tp = lambda self, *times: list(
		tt.t.public.ProjectedTimepoint('s{}'.format(n), tt.u.dts_parse(v))
		for n, v in enumerate(times) )

	def interpolate(self, timepoints, anchors):
		return list( (idx, tt.u.dts_format(dts)[:5], int(is_tp))
			for idx, dts, is_tp in tt.engine.interpolate_times(timepoints, anchors) )

	def test_proportional_floor(self):
		self.assertEqual(
			self.interpolate(self.tp('06:00', '06:10'), [0, 3]),
			[(0, '06:00', 1), (1, '06:03', 0), (2, '06:06', 0), (3, '06:10', 1)] )

	def test_segment_end_emitted_once(self):
		records = self.interpolate(self.tp('06:00', '06:04', '06:10'), [0, 2, 4])
		self.assertEqual(list(map(op.itemgetter(0), records)), [0, 1, 2, 3, 4])
		self.assertEqual(records[2], (2, '06:04', 1))

	def test_zero_length_segment(self):
		records = self.interpolate(self.tp('06:00', '06:05', '06:05', '06:15'), [0, 2, 2, 4])
		self.assertEqual(list(map(op.itemgetter(0), records)), [0, 1, 2, 3, 4])
		records = self.interpolate(self.tp('06:00', '06:05', '06:05'), [0, 2, 2])
		self.assertEqual(records, [(0, '06:00', 1), (1, '06:02', 0), (2, '06:05', 1)])

	def test_single_timepoint(self):
		self.assertEqual(self.interpolate(self.tp('06:00'), [5]), [(5, '06:00', 1)])


class HeadsignTests(unittest.TestCase):

	def test_short_turn_overrides_position(self):
		conf = c.engine_conf()
		timepoints = tt.engine.expand_pattern(c.trip('18:35', 'ShortYale'), c.cp_table())
		headsign = tt.engine.headsign_func(conf, timepoints, 16)
		self.assertEqual(set(map(headsign, range(40))), {conf.headsign_short_turn})

	def test_positional_split(self):
		conf = c.engine_conf()
		timepoints = tt.engine.expand_pattern(c.trip('06:00', 'Full'), c.cp_table())
		headsign = tt.engine.headsign_func(conf, timepoints, 16)
		for idx, expected in [
				(0, conf.headsign_outbound), (7, conf.headsign_outbound),
				(8, conf.headsign_inbound), (15, conf.headsign_inbound),
				(16, conf.headsign_outbound), (24, conf.headsign_inbound) ]:
			self.assertEqual(headsign(idx), expected)

	def test_default_labels(self):
		conf = tt.engine.EngineConf()
		self.assertEqual(conf.short_turn_stop_id, '157625')
		self.assertEqual(conf.headsign_short_turn, 'Yale Ave @ Irvine Blvd')
		self.assertEqual((conf.loop_length, conf.headsign_split_index), (86, 45))


class ProjectorTests(c.ProjectionAssertions, unittest.TestCase):

	def test_missing_timepoint_stop(self):
		stop_ids = list(s for s in c.loop_stop_ids if s != '157601')
		projector = c.projector(stop_ids=stop_ids)
		with self.assertLogs('tt.engine', 'WARNING'):
			proj = projector.project_trip(c.trip('06:00'))
		self.assertEqual(len(proj.diagnostics), 1)
		err, = proj.diagnostics
		self.assertEqual((err.tp_idx, err.stop_id, err.cursor), (2, '157601', 3))
		self.assertEqual(len(proj.records), len(stop_ids))
		self.assert_projection_invariants(proj, len(stop_ids))

	def test_missing_timepoint_next_stop_at_cursor(self):
		# Next timepoint 198349 is right where 157601 search stopped, trip must not spill into 2nd loop
		stop_ids = list(s for s in c.loop_stop_ids if s not in ['157601', 'f02', 'f03'])
		with self.assertLogs('tt.engine', 'WARNING'):
			proj = c.projector(loops=2, stop_ids=stop_ids).project_trip(c.trip('06:00'))
		self.assertEqual(len(proj.diagnostics), 1)
		self.assertEqual(proj.diagnostics[0].stop_id, '157601')
		self.assertEqual(proj.anchors, [0, 2, 3, 3, 5, 6, 10, 12])
		self.assertEqual(len(proj.records), len(stop_ids))
		self.assertEqual(list(map(op.attrgetter('stop_id'), proj.records)), stop_ids)
		self.assertEqual(tt.u.dts_format(proj.records[-1].dts_arr), '07:50:00')
		self.assert_projection_invariants(proj, len(stop_ids))

	def test_missing_depot_return(self):
		# Path ending at Sand Canyon - return to depot gets pinned to the last stop
		stop_ids = c.loop_stop_ids[:14]
		proj = c.projector(stop_ids=stop_ids).project_trip(c.trip('06:00'))
		self.assertEqual(len(proj.diagnostics), 1)
		self.assertEqual(proj.anchors[-2:], [13, 13])
		self.assertEqual(len(proj.records), 14)
		self.assertEqual(
			list(map(op.attrgetter('stop_sequence'), proj.records)), list(range(1, 15)) )
		self.assertEqual(proj.records[-1].stop_id, '157641')

	def test_cursor_resets_per_trip(self):
		projector = c.projector(loops=2)
		trips = list(c.trip(v, trip_id='t{}'.format(n)) for n, v in enumerate(['06:00', '08:00']))
		projections = projector.project(trips)
		self.assertEqual(list(map(op.attrgetter('trip_id'), projections)), ['t0', 't1'])
		self.assertEqual(projections[0].anchors, projections[1].anchors)
		for proj in projections: self.assert_projection_invariants(proj, len(c.loop_stop_ids))

	def test_format_error_aborts_batch(self):
		projector = c.projector()
		trips = [c.trip('06:00', trip_id='ok'), c.trip('6:OO', trip_id='bad')]
		with self.assertRaises(tt.engine.FormatError):
			projector.project(trips)

	def test_summary_record(self):
		proj = c.projector().project_trip(c.trip('06:00', trip_id='weekday_1_1'))
		self.assertEqual(
			proj.summary.gtfs_row(), ['5956', 'Weekday', 'weekday_1_1', '63618', '0520'] )

	def test_loop_length_from_path(self):
		projector = c.projector(loops=3, loop_length=None)
		self.assertEqual(projector.loop_length, len(c.loop_stop_ids))

	def test_stop_time_row(self):
		proj = c.projector().project_trip(c.trip('06:00'))
		self.assertEqual(proj.records[1].gtfs_row(), [
			'test_1_1', '06:07:00', '06:07:00', 'f01', 2, 'Northwood High School', 0 ])
