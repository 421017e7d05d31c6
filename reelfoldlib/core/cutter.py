#!/usr/bin/env python3

import os
from fractions import Fraction
from reelfoldlib.core import mapfile
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ValidationError
from reelfoldlib.media import ffmpeg

#============================================

class ClipCutter():
	"""
	Cut frame ranges out of ingested assets into clips plus descriptors.
	"""
	def __init__(self, fps: Fraction = Fraction(25), transcoder=None):
		self.fps = utils.parse_fps(fps)
		self.transcoder = transcoder if transcoder is not None else ffmpeg
		self.source_dir = None
		self.source_ext = None
		self.dest_dir = None
		self.dest_video_ext = None
		self.dest_descriptor_ext = None
		self.dest_options = []
		self.asset_name = None
		self.asset_path = None
		self.position = 0

	#============================
	def set_source(self, dirpath: str, ext: str) -> None:
		utils.check_extension(ext)
		utils.ensure_dir_exists(dirpath)
		self.source_dir = dirpath
		self.source_ext = ext
		self.asset_name = None
		self.asset_path = None
		self.position = 0

	#============================
	def set_dest(self, dirpath: str, video_ext: str, descriptor_ext: str,
		options=None) -> None:
		utils.check_extension(video_ext, "video extension")
		utils.check_extension(descriptor_ext, "descriptor extension")
		if video_ext == descriptor_ext:
			raise ValidationError("video and descriptor extensions must be different")
		utils.ensure_dir_exists(dirpath)
		self.dest_dir = dirpath
		self.dest_video_ext = video_ext
		self.dest_descriptor_ext = descriptor_ext
		self.dest_options = utils.split_options(options)

	#============================
	def load(self, asset_name: str) -> None:
		utils.check_name(asset_name, "asset name")
		if self.source_dir is None:
			raise ValidationError("load source directory before loading assets")
		asset_path = os.path.join(self.source_dir, f"{asset_name}.{self.source_ext}")
		utils.ensure_file_exists(asset_path)
		self.asset_name = asset_name
		self.asset_path = asset_path
		self.position = 0

	#============================
	def _require_asset(self) -> None:
		if self.asset_name is None:
			raise ValidationError("load asset before seeking")

	#============================
	def seek(self, frame: int) -> None:
		self._require_asset()
		self.position = int(frame)

	#============================
	def skip(self, delta: int) -> None:
		# the result may go negative, read() rejects it
		self._require_asset()
		self.position += int(delta)

	#============================
	def read(self, clip_name: str, frame_count: int) -> mapfile.ClipDescriptor:
		utils.check_name(clip_name, "clip name")
		if isinstance(frame_count, bool) or not isinstance(frame_count, int):
			raise ValidationError("clip frame count must be an integer")
		if frame_count <= 0:
			raise ValidationError("clip frame count must be greater than zero")
		self._require_asset()
		if self.position < 0:
			raise ValidationError("asset position must be zero or greater")
		if self.dest_dir is None:
			raise ValidationError("destination clip directory must be set")
		base_path = os.path.join(self.dest_dir, clip_name)
		descriptor_path = f"{base_path}.{self.dest_descriptor_ext}"
		video_path = f"{base_path}.{self.dest_video_ext}"
		utils.remove_if_exists(descriptor_path)
		utils.remove_if_exists(video_path)
		descriptor = mapfile.ClipDescriptor(self.asset_name, self.position,
			frame_count)
		mapfile.write_descriptor_file(descriptor_path, descriptor)
		self.transcoder.extractClip(self.asset_path, video_path,
			utils.seconds_from_frames(self.position, self.fps),
			utils.seconds_from_frames(frame_count, self.fps),
			self.dest_options)
		self.position += frame_count
		return descriptor
