#!/usr/bin/env python3

"""
Mix audio assets into a buffer so they line up with an edited movie.

Each audio file is assumed to be in sync with the original video asset it
is mapped to. Every placement of that asset in the edit map becomes one
additive mix call with its own position and fades.
"""

import os
from collections import namedtuple
from fractions import Fraction
from reelfoldlib.core import utils
from reelfoldlib.core.editmap import EditMap
from reelfoldlib.core.errors import ConsistencyError
from reelfoldlib.core.errors import ValidationError
from reelfoldlib.media import sox

MixBuffer = namedtuple('MixBuffer', [
	'path',
	'channels',
	'sample_count',
	'sample_rate',
])

MixSpan = namedtuple('MixSpan', [
	'source_start',
	'sample_count',
	'dest_start',
	'fade_in',
	'fade_out',
])

#============================================

def buffer_length(total_duration: Fraction, sample_rate: int) -> int:
	return max(1, utils.samples_from_seconds(total_duration, sample_rate))

#============================================

def entry_to_samples(entry, sample_rate: int) -> MixSpan:
	dest_start = utils.samples_from_seconds(entry.dest_start, sample_rate)
	source_start = utils.samples_from_seconds(entry.source_start, sample_rate)
	sample_count = utils.samples_from_seconds(entry.duration, sample_rate)
	fade_in = utils.samples_from_seconds(entry.fade_in, sample_rate)
	fade_out = utils.samples_from_seconds(entry.fade_out, sample_rate)
	if sample_count < 1:
		sample_count = 1
	fade_in = min(fade_in, sample_count)
	fade_out = min(fade_out, sample_count)
	if fade_in + fade_out > sample_count:
		raise ConsistencyError(
			f"fades exceed duration ({fade_in} + {fade_out} > {sample_count} samples)"
		)
	return MixSpan(source_start, sample_count, dest_start, fade_in, fade_out)

#============================================

class SyncEngine():
	def __init__(self, mixer=None):
		self.mixer = mixer if mixer is not None else sox

	#============================
	def create_buffer(self, path: str, channels: int, total_duration: Fraction,
		sample_rate: int) -> MixBuffer:
		if channels not in (1, 2):
			raise ValidationError("invalid number of channels")
		sample_rate = utils.parse_sample_rate(sample_rate)
		buffer = MixBuffer(path, channels,
			buffer_length(total_duration, sample_rate), sample_rate)
		self.mixer.makeMixBuffer(buffer.path, buffer.channels,
			buffer.sample_count, buffer.sample_rate)
		return buffer

	#============================
	def mix(self, audio_path: str, entries: list, buffer: MixBuffer,
		sample_rate: int = None) -> list:
		if sample_rate is None:
			sample_rate = buffer.sample_rate
		if sample_rate != buffer.sample_rate:
			raise ValidationError(
				f"mix sample rate {sample_rate} differs from buffer rate {buffer.sample_rate}"
			)
		spans = [entry_to_samples(entry, sample_rate) for entry in entries]
		for span in spans:
			self.mixer.mixIntoBuffer(audio_path, span.source_start,
				span.sample_count, span.dest_start, span.fade_in, span.fade_out,
				buffer.path, buffer.channels, buffer.sample_rate,
				buffer.sample_count)
		return spans

	#============================
	def render(self, buffer: MixBuffer, level: int, output_path: str,
		sample_rate: int = None) -> str:
		if isinstance(level, bool) or not isinstance(level, int):
			raise ValidationError("level target must be an integer")
		if level < 0 or level > 32767:
			raise ValidationError("invalid level target")
		if sample_rate is None:
			sample_rate = buffer.sample_rate
		sample_rate = utils.parse_sample_rate(sample_rate)
		return self.mixer.renderMixBuffer(buffer.path, level, sample_rate,
			output_path)

#============================================

class SyncSession():
	def __init__(self, engine: SyncEngine = None):
		self.engine = engine if engine is not None else SyncEngine()
		self.build_dir = None
		self.edit_map = None
		self.sample_rate = None
		self.source_dir = None
		self.source_ext = None
		self.buffer = None

	#============================
	def set_build_dir(self, dirpath: str) -> None:
		if self.edit_map is not None:
			raise ValidationError("can't change build directory after loading map")
		utils.ensure_dir_exists(dirpath)
		self.build_dir = dirpath

	#============================
	def load_map(self, map_name: str, sample_rate: int, fps) -> EditMap:
		utils.check_extension(map_name, "map name")
		sample_rate = utils.parse_sample_rate(sample_rate)
		if self.build_dir is None:
			raise ValidationError("must set build directory first")
		if self.edit_map is not None:
			raise ValidationError("can't reload map")
		self.edit_map = EditMap.from_file(os.path.join(self.build_dir, map_name), fps)
		self.sample_rate = sample_rate
		return self.edit_map

	#============================
	def set_source(self, dirpath: str, ext: str) -> None:
		utils.check_extension(ext)
		utils.ensure_dir_exists(dirpath)
		self.source_dir = dirpath
		self.source_ext = ext

	#============================
	def begin(self, buffer_name: str, channels: int) -> MixBuffer:
		utils.check_extension(buffer_name, "buffer name")
		if self.edit_map is None:
			raise ValidationError("must load map before beginning")
		if self.buffer is not None:
			raise ValidationError("can't begin sync another time")
		self.buffer = self.engine.create_buffer(
			os.path.join(self.build_dir, buffer_name), channels,
			self.edit_map.total_duration, self.sample_rate)
		return self.buffer

	#============================
	def mix(self, wav_name: str, video_asset: str) -> list:
		utils.check_name(wav_name, "audio asset name")
		if self.buffer is None:
			raise ValidationError("can't mix until buffer file created")
		if self.source_dir is None:
			raise ValidationError("can't mix unless source directory loaded")
		entries = self.edit_map.entries(video_asset)
		audio_path = os.path.join(self.source_dir, f"{wav_name}.{self.source_ext}")
		utils.ensure_file_exists(audio_path)
		utils.echo(f"mixing {audio_path} into {len(entries)} placement(s) of {video_asset}")
		return self.engine.mix(audio_path, entries, self.buffer)

	#============================
	def end(self, output_name: str, level: int) -> str:
		utils.check_extension(output_name, "output name")
		if self.buffer is None:
			raise ValidationError("can't render until buffer file created")
		output_path = os.path.join(self.build_dir, output_name)
		return self.engine.render(self.buffer, level, output_path)
