import itertools as it, operator as op, functools as ft
from collections import OrderedDict
import os, re, logging, contextlib, tempfile, stat

import attr
import yaml


class LogMessage:
	def __init__(self, fmt, a, k): self.fmt, self.a, self.k = fmt, a, k
	def __str__(self): return self.fmt.format(*self.a, **self.k) if self.a or self.k else self.fmt

class LogStyleAdapter(logging.LoggerAdapter):
	def __init__(self, logger, extra=None):
		super(LogStyleAdapter, self).__init__(logger, extra or {})
	def log(self, level, msg, *args, **kws):
		if not self.isEnabledFor(level): return
		log_kws = {} if 'exc_info' not in kws else dict(exc_info=kws.pop('exc_info'))
		msg, kws = self.process(msg, kws)
		self.logger._log(level, LogMessage(msg, args, kws), (), log_kws)

get_logger = lambda name: LogStyleAdapter(logging.getLogger(name))


def attr_struct(cls=None, vals_to_attrs=False, defaults=..., **kws):
	if not cls:
		return ft.partial( attr_struct,
			vals_to_attrs=vals_to_attrs, defaults=defaults, **kws )
	try:
		keys = cls.keys
		del cls.keys
	except AttributeError: keys = list()
	else:
		attr_kws = dict()
		if defaults is not ...: attr_kws['default'] = defaults
		if isinstance(keys, str): keys = keys.split()
		for k in keys: setattr(cls, k, attr.ib(**attr_kws))
	if vals_to_attrs:
		for k, v in list(vars(cls).items()):
			if k.startswith('_') or k in keys or callable(v) or isinstance(v, property): continue
			setattr(cls, k, attr.ib(v))
	kws.setdefault('hash', not hasattr(cls, '__hash__'))
	kws.setdefault('slots', True)
	return attr.s(cls, **kws)

def attr_init(factory_or_default=attr.NOTHING, **attr_kws):
	if callable(factory_or_default): factory_or_default = attr.Factory(factory_or_default)
	return attr.ib(default=factory_or_default, **attr_kws)

def attr_update(obj, updates, err_func=None):
	'Set attributes from updates mapping, calling err_func(k, v) (or raising) for unknown ones.'
	names = set(a.name for a in attr.fields(type(obj)))
	for k, v in updates.items():
		if k not in names:
			if err_func: err_func(k, v)
			raise KeyError(k)
		setattr(obj, k, v)
	return obj


@contextlib.contextmanager
def safe_replacement(path, *open_args, mode=None, **open_kws):
	path = str(path)
	if mode is None:
		try: mode = stat.S_IMODE(os.lstat(path).st_mode)
		except OSError: pass
	open_kws.update( delete=False,
		dir=os.path.dirname(path), prefix=os.path.basename(path)+'.' )
	if not open_args: open_kws['mode'] = 'w'
	with tempfile.NamedTemporaryFile(*open_args, **open_kws) as tmp:
		try:
			if mode is not None: os.fchmod(tmp.fileno(), mode)
			yield tmp
			if not tmp.closed: tmp.flush()
			os.rename(tmp.name, path)
		finally:
			try: os.unlink(tmp.name)
			except OSError: pass


def yaml_load(stream, dict_cls=OrderedDict, loader_cls=yaml.SafeLoader):
	'''Load YAML without sexagesimal/date resolution,
		so that e.g. "06:00" stays a string and not int 360.'''
	if not hasattr(yaml_load, '_cls'):
		class CustomLoader(loader_cls): pass
		def construct_mapping(loader, node):
			loader.flatten_mapping(node)
			return dict_cls(loader.construct_pairs(node))
		CustomLoader.add_constructor(
			yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping )
		res_map = CustomLoader.yaml_implicit_resolvers = CustomLoader.yaml_implicit_resolvers.copy()
		res_int = list('-+0123456789')
		for c in res_int: res_map.pop(c, None)
		CustomLoader.add_implicit_resolver(
			'tag:yaml.org,2002:int',
			re.compile(r'''^(?:[-+]?0b[0-1_]+
				|[-+]?0[0-7_]+
				|[-+]?(?:0|[1-9][0-9_]*)
				|[-+]?0x[0-9a-fA-F_]+)$''', re.X), res_int )
		yaml_load._cls = CustomLoader
	return yaml.load(stream, yaml_load._cls)


def dts_parse(dts_str):
	'Parse "HH:MM" or "HH:MM:SS" clock time into seconds since service-day midnight.'
	if not isinstance(dts_str, str):
		raise ValueError('Clock time must be a string, not {!r}'.format(dts_str))
	dts_vals = dts_str.strip().split(':')
	if len(dts_vals) == 2: dts_vals.append('00')
	if len(dts_vals) != 3 or not all(v.isdigit() for v in dts_vals):
		raise ValueError('Malformed clock time value: {!r}'.format(dts_str))
	h, m, s = map(int, dts_vals)
	if m >= 60 or s >= 60: raise ValueError('Malformed clock time value: {!r}'.format(dts_str))
	return h * 3600 + m * 60 + s

def dts_format(dts):
	# GTFS times go past 24:00:00 for trips running after midnight
	dts = int(dts)
	return '{:02d}:{:02d}:{:02d}'.format(dts // 3600, (dts % 3600) // 60, dts % 60)
