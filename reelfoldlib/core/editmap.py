#!/usr/bin/env python3

from collections import namedtuple
from fractions import Fraction
from reelfoldlib.core import mapfile
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ConsistencyError
from reelfoldlib.core.errors import ValidationError

EditMapEntry = namedtuple('EditMapEntry', [
	'dest_start',
	'source_start',
	'duration',
	'fade_in',
	'fade_out',
])

#============================================

class EditMap():
	"""
	Every placement of each source asset on the output timeline.

	All times are exact Fraction seconds.
	"""
	def __init__(self, fps: Fraction):
		self.fps = fps
		self.total_duration = Fraction(0)
		self._entries = {}

	#============================
	@classmethod
	def load(cls, records: list, fps) -> 'EditMap':
		fps = utils.parse_fps(fps)
		if len(records) == 0:
			raise ConsistencyError("map has no records")
		edit_map = cls(fps)
		running_time = Fraction(0)
		for record in records:
			duration = utils.seconds_from_frames(record.frame_count, fps)
			entry = EditMapEntry(
				dest_start=running_time,
				source_start=utils.seconds_from_frames(record.source_start_frame, fps),
				duration=duration,
				fade_in=utils.seconds_from_frames(record.fade_in_frames, fps),
				fade_out=utils.seconds_from_frames(record.fade_out_frames, fps),
			)
			edit_map._entries.setdefault(record.source_asset, []).append(entry)
			running_time += duration
		edit_map.total_duration = running_time
		return edit_map

	#============================
	@classmethod
	def from_file(cls, path: str, fps) -> 'EditMap':
		return cls.load(mapfile.read_map_file(path), fps)

	#============================
	def assets(self) -> list:
		return list(self._entries.keys())

	#============================
	def __contains__(self, asset: str) -> bool:
		return asset in self._entries

	#============================
	def entries(self, asset: str) -> list:
		if asset not in self._entries:
			raise ValidationError(f"can't find video asset '{asset}' in map")
		return list(self._entries[asset])
