#!/usr/bin/env python3

import os
import re
from collections import namedtuple
from reelfoldlib.core import mapfile
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ConsistencyError
from reelfoldlib.core.errors import ValidationError

STATE_UNINITIALIZED = 'uninitialized'
STATE_SOURCE_DECLARED = 'source_declared'
STATE_CLIPS_DECLARED = 'clips_declared'

ClipPlacement = namedtuple('ClipPlacement', [
	'clip_name',
	'source_asset',
	'source_start_frame',
	'frame_count',
	'fade_in_frames',
	'fade_out_frames',
])

#============================================

def clean_intermediates(dirpath: str, prefix: str, ext: str) -> list:
	"""
	Delete files named prefix + digits + '.' + ext directly inside dirpath.

	Returns:
		list of removed paths, empty when nothing matched.
	"""
	utils.check_name(prefix, "prefix")
	utils.check_extension(ext)
	utils.ensure_dir_exists(dirpath)
	pattern = re.compile('^' + re.escape(prefix) + '[0-9]+' + re.escape('.' + ext) + '$')
	removed = []
	for filename in sorted(os.listdir(dirpath)):
		if pattern.match(filename) is None:
			continue
		filepath = os.path.join(dirpath, filename)
		if os.path.isfile(filepath):
			os.remove(filepath)
			removed.append(filepath)
	return removed

#============================================

class ClipLedger():
	def __init__(self):
		self.state = STATE_UNINITIALIZED
		self.source_dir = None
		self.video_ext = None
		self.descriptor_ext = None
		self._placements = []

	#============================
	def declare_source(self, dirpath: str, video_ext: str,
		descriptor_ext: str) -> None:
		if self.state == STATE_CLIPS_DECLARED:
			raise ValidationError("can't change clip directory after first clip")
		utils.check_extension(video_ext, "video extension")
		utils.check_extension(descriptor_ext, "descriptor extension")
		if video_ext == descriptor_ext:
			raise ValidationError("video and descriptor extensions must be different")
		utils.ensure_dir_exists(dirpath)
		self.source_dir = dirpath
		self.video_ext = video_ext
		self.descriptor_ext = descriptor_ext
		self.state = STATE_SOURCE_DECLARED

	#============================
	def video_path(self, clip_name: str) -> str:
		if self.source_dir is None:
			raise ValidationError("declare clip source directory first")
		return os.path.join(self.source_dir, f"{clip_name}.{self.video_ext}")

	#============================
	def descriptor_path(self, clip_name: str) -> str:
		if self.source_dir is None:
			raise ValidationError("declare clip source directory first")
		return os.path.join(self.source_dir, f"{clip_name}.{self.descriptor_ext}")

	#============================
	def append_clip(self, clip_name: str, fade_in: int = 0,
		fade_out: int = 0) -> ClipPlacement:
		utils.check_name(clip_name, "clip name")
		utils.check_frame_count(fade_in, "fade-in frames")
		utils.check_frame_count(fade_out, "fade-out frames")
		if self.state == STATE_UNINITIALIZED:
			raise ValidationError("declare clip source directory before adding clips")
		video_file = self.video_path(clip_name)
		utils.ensure_file_exists(video_file)
		descriptor = mapfile.read_descriptor_file(self.descriptor_path(clip_name))
		if fade_in + fade_out > descriptor.frame_count:
			raise ConsistencyError(f"clip '{clip_name}' has too much fading")
		placement = ClipPlacement(
			clip_name=clip_name,
			source_asset=descriptor.source_asset,
			source_start_frame=descriptor.source_start_frame,
			frame_count=descriptor.frame_count,
			fade_in_frames=fade_in,
			fade_out_frames=fade_out,
		)
		self._placements.append(placement)
		self.state = STATE_CLIPS_DECLARED
		return placement

	#============================
	@property
	def placements(self) -> tuple:
		return tuple(self._placements)

	#============================
	def __len__(self) -> int:
		return len(self._placements)

	#============================
	def total_frames(self) -> int:
		return sum(placement.frame_count for placement in self._placements)

	#============================
	def map_records(self) -> list:
		return [
			mapfile.MapRecord(
				source_asset=placement.source_asset,
				source_start_frame=placement.source_start_frame,
				frame_count=placement.frame_count,
				fade_in_frames=placement.fade_in_frames,
				fade_out_frames=placement.fade_out_frames,
			)
			for placement in self._placements
		]
