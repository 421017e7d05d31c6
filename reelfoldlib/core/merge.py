#!/usr/bin/env python3

"""
Merge-tree assembly of the clip ledger into one movie file.

ffmpeg is asked to join at most max_inputs files per invocation, so the
clip list is folded in passes until one file remains. A physical file is
never given twice to the same invocation.
"""

import os
import re
import shutil
from collections import namedtuple
from fractions import Fraction
from tqdm import tqdm
from reelfoldlib.core import ledger as ledger_module
from reelfoldlib.core import mapfile
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ValidationError
from reelfoldlib.media import ffmpeg

ACTION_FADE = 'fade'
ACTION_COPY = 'copy'
ACTION_SOURCE = 'source'

MergeNode = namedtuple('MergeNode', ['path', 'intermediate'])

BuildReport = namedtuple('BuildReport', [
	'video_file',
	'map_file',
	'fade_count',
	'copy_count',
	'concat_count',
	'pass_count',
])

#============================================

def classify_placements(placements, video_path) -> list:
	"""
	Decide how each placement enters the working list.

	Args:
		placements: ClipPlacement sequence in movie order.
		video_path: callable mapping a clip name to its video file.

	Returns:
		list of (action, source_path) tuples in movie order.
	"""
	seen_paths = set()
	actions = []
	for placement in placements:
		source_path = video_path(placement.clip_name)
		if placement.fade_in_frames > 0 or placement.fade_out_frames > 0:
			actions.append((ACTION_FADE, source_path))
			continue
		canonical = os.path.realpath(source_path)
		if canonical in seen_paths:
			actions.append((ACTION_COPY, source_path))
			continue
		seen_paths.add(canonical)
		actions.append((ACTION_SOURCE, source_path))
	return actions

#============================================

def chunk_nodes(nodes: list, max_inputs: int) -> list:
	return [nodes[index:index + max_inputs]
		for index in range(0, len(nodes), max_inputs)]

#============================================

class MergeScheduler():
	def __init__(self, clip_ledger, build_dir: str, name: str,
		prefix: str = 'tmp', video_ext: str = 'mp4', map_ext: str = 'map',
		options=None, max_inputs: int = 8, fps: Fraction = Fraction(25),
		keep_temp: bool = False, transcoder=None):
		utils.check_name(name, "movie name")
		utils.check_name(prefix, "prefix")
		utils.check_extension(video_ext, "video extension")
		utils.check_extension(map_ext, "map extension")
		if video_ext == map_ext:
			raise ValidationError("video and map extensions must be different")
		if re.match('^' + re.escape(prefix) + '[0-9]+$', name) is not None:
			raise ValidationError(
				f"movie name '{name}' collides with intermediate prefix '{prefix}'"
			)
		if isinstance(max_inputs, bool) or not isinstance(max_inputs, int):
			raise ValidationError("concat limit must be an integer")
		if max_inputs < 2:
			raise ValidationError("concat limit must be at least two")
		self.ledger = clip_ledger
		self.build_dir = build_dir
		self.name = name
		self.prefix = prefix
		self.video_ext = video_ext
		self.map_ext = map_ext
		self.options = utils.split_options(options)
		self.max_inputs = max_inputs
		self.fps = utils.parse_fps(fps)
		self.keep_temp = keep_temp
		self.transcoder = transcoder if transcoder is not None else ffmpeg
		self._counter = 0

	#============================
	@property
	def video_file(self) -> str:
		return os.path.join(self.build_dir, f"{self.name}.{self.video_ext}")

	#============================
	@property
	def map_file(self) -> str:
		return os.path.join(self.build_dir, f"{self.name}.{self.map_ext}")

	#============================
	def clean(self) -> list:
		return ledger_module.clean_intermediates(self.build_dir, self.prefix,
			self.video_ext)

	#============================
	def plan(self) -> BuildReport:
		"""Count the invocations a build would issue, without running any."""
		self._check_ready()
		actions = classify_placements(self.ledger.placements, self.ledger.video_path)
		node_count = len(actions)
		concat_count = 0
		pass_count = 0
		while node_count > 1:
			full_chunks, remainder = divmod(node_count, self.max_inputs)
			merged = full_chunks
			if remainder > 1:
				merged += 1
			concat_count += merged
			node_count = full_chunks + (1 if remainder > 0 else 0)
			pass_count += 1
		return BuildReport(
			video_file=self.video_file,
			map_file=self.map_file,
			fade_count=sum(1 for action in actions if action[0] == ACTION_FADE),
			copy_count=sum(1 for action in actions if action[0] == ACTION_COPY),
			concat_count=concat_count,
			pass_count=pass_count,
		)

	#============================
	def build(self) -> BuildReport:
		self._check_ready()
		utils.ensure_dir_exists(self.build_dir)
		self.clean()
		self._counter = 0
		utils.remove_if_exists(self.video_file)
		utils.remove_if_exists(self.map_file)
		mapfile.write_map_file(self.map_file, self.ledger.map_records())
		nodes, fade_count, copy_count = self._materialize()
		concat_count = 0
		pass_count = 0
		while len(nodes) > 1:
			pass_count += 1
			utils.echo(f"merge pass {pass_count}: {len(nodes)} files")
			nodes, merged = self._fold_pass(nodes)
			concat_count += merged
		self._finish(nodes[0])
		if not self.keep_temp:
			self.clean()
		utils.echo(f"built {self.video_file}")
		return BuildReport(
			video_file=self.video_file,
			map_file=self.map_file,
			fade_count=fade_count,
			copy_count=copy_count,
			concat_count=concat_count,
			pass_count=pass_count,
		)

	#============================
	def _check_ready(self) -> None:
		if len(self.ledger) == 0:
			raise ValidationError("must declare at least one clip before building")

	#============================
	def _next_intermediate(self) -> str:
		self._counter += 1
		filename = f"{self.prefix}{self._counter}.{self.video_ext}"
		return os.path.join(self.build_dir, filename)

	#============================
	def _materialize(self) -> tuple:
		placements = self.ledger.placements
		actions = classify_placements(placements, self.ledger.video_path)
		items = zip(placements, actions)
		if not utils.is_quiet_mode():
			items = tqdm(items, total=len(placements))
		nodes = []
		fade_count = 0
		copy_count = 0
		for placement, (action, source_path) in items:
			if action == ACTION_FADE:
				outfile = self._next_intermediate()
				fade_filter = self.transcoder.fadeFilter(placement.frame_count,
					placement.fade_in_frames, placement.fade_out_frames, self.fps)
				self.transcoder.fadeVideo(source_path, outfile, fade_filter,
					self.options)
				nodes.append(MergeNode(outfile, True))
				fade_count += 1
			elif action == ACTION_COPY:
				outfile = self._next_intermediate()
				shutil.copyfile(source_path, outfile)
				nodes.append(MergeNode(outfile, True))
				copy_count += 1
			else:
				nodes.append(MergeNode(source_path, False))
		return (nodes, fade_count, copy_count)

	#============================
	def _fold_pass(self, nodes: list) -> tuple:
		new_nodes = []
		merged = 0
		for chunk in chunk_nodes(nodes, self.max_inputs):
			if len(chunk) == 1:
				new_nodes.append(chunk[0])
				continue
			outfile = self._next_intermediate()
			self.transcoder.concatenateVideos([node.path for node in chunk],
				outfile, self.options)
			merged += 1
			new_nodes.append(MergeNode(outfile, True))
			if not self.keep_temp:
				self._discard([node for node in chunk if node.intermediate])
		return (new_nodes, merged)

	#============================
	def _discard(self, nodes: list) -> None:
		for node in nodes:
			utils.remove_if_exists(node.path)

	#============================
	def _finish(self, node: MergeNode) -> None:
		if node.intermediate:
			shutil.move(node.path, self.video_file)
		else:
			# a lone untouched clip stays in the clip library
			shutil.copyfile(node.path, self.video_file)
		utils.ensure_file_exists(self.video_file)
