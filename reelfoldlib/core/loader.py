#!/usr/bin/env python3

import os
import yaml
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ValidationError

CUT_STEP_KINDS = ('load', 'seek', 'skip', 'read')

#============================================

class ProjectData():
	def __init__(self):
		self.yaml_file = None
		self.base_dir = None
		self.dry_run = False
		self.keep_temp = False
		self.data = {}
		self.profile = {}
		self.cuts = None
		self.film = {}
		self.sync = None

#============================================

class ProjectLoader():
	def __init__(self, yaml_file: str, dry_run: bool = False,
		keep_temp: bool = False):
		self.yaml_file = yaml_file
		self.dry_run = dry_run
		self.keep_temp = keep_temp
		self.base_dir = os.path.dirname(os.path.abspath(yaml_file))

	#============================
	def load(self) -> ProjectData:
		project = ProjectData()
		project.yaml_file = self.yaml_file
		project.base_dir = self.base_dir
		project.dry_run = self.dry_run
		project.keep_temp = self.keep_temp
		project.data = self._load_yaml()
		self._validate_required_keys(project.data)
		project.profile = self._parse_profile(project.data.get('profile'))
		if project.data.get('cuts') is not None:
			project.cuts = self._parse_cuts(project.data.get('cuts'))
		project.film = self._parse_film(project.data.get('film'))
		if project.data.get('sync') is not None:
			project.sync = self._parse_sync(project.data.get('sync'))
		return project

	#============================
	def _load_yaml(self) -> dict:
		utils.ensure_file_exists(self.yaml_file)
		file_size = os.path.getsize(self.yaml_file)
		if file_size > 10 ** 7:
			raise ValidationError("yaml file is larger than 10MB")
		with open(self.yaml_file, 'r') as data_file:
			data = yaml.safe_load(data_file)
		if not isinstance(data, dict):
			raise ValidationError("project yaml must be a mapping at the top level")
		return data

	#============================
	def _validate_required_keys(self, data: dict) -> None:
		if data.get('reelfold') != 1:
			raise ValidationError("reelfold must be set to 1")
		required_keys = ('profile', 'film')
		for key in required_keys:
			if key not in data:
				raise ValidationError(f"missing required key: {key}")

	#============================
	def _mapping(self, value, where: str) -> dict:
		if not isinstance(value, dict):
			raise ValidationError(f"{where} must be a mapping")
		return value

	#============================
	def _path(self, value, where: str) -> str:
		if not isinstance(value, str) or value == '':
			raise ValidationError(f"{where} must be a directory path")
		if os.path.isabs(value):
			return value
		return os.path.join(self.base_dir, value)

	#============================
	def _int(self, value, where: str, minimum: int = 0) -> int:
		if isinstance(value, bool) or not isinstance(value, int):
			raise ValidationError(f"{where} must be an integer")
		if value < minimum:
			raise ValidationError(f"{where} must be at least {minimum}")
		return value

	#============================
	def _parse_profile(self, profile) -> dict:
		profile = self._mapping(profile, "profile")
		fps = utils.parse_fps(profile.get('fps', 25))
		sample_rate = utils.parse_sample_rate(profile.get('sample_rate', 48000))
		return {
			'fps': fps,
			'sample_rate': sample_rate,
		}

	#============================
	def _parse_cuts(self, cuts) -> dict:
		cuts = self._mapping(cuts, "cuts")
		source = self._mapping(cuts.get('source'), "cuts.source")
		dest = self._mapping(cuts.get('dest'), "cuts.dest")
		steps = cuts.get('steps')
		if not isinstance(steps, list) or len(steps) == 0:
			raise ValidationError("cuts.steps must be a non-empty list")
		parsed_steps = []
		for index, step in enumerate(steps, start=1):
			parsed_steps.append(self._parse_cut_step(step, index))
		return {
			'source_dir': self._path(source.get('dir'), "cuts.source.dir"),
			'source_ext': utils.check_extension(source.get('ext', 'mp4')),
			'dest_dir': self._path(dest.get('dir'), "cuts.dest.dir"),
			'video_ext': utils.check_extension(dest.get('video_ext', 'mp4')),
			'descriptor_ext': utils.check_extension(dest.get('descriptor_ext', 'clip')),
			'options': utils.split_options(dest.get('options')),
			'steps': parsed_steps,
		}

	#============================
	def _parse_cut_step(self, step, index: int) -> dict:
		where = f"cuts.steps[{index}]"
		step = self._mapping(step, where)
		kinds = [kind for kind in CUT_STEP_KINDS if kind in step]
		if len(kinds) != 1:
			raise ValidationError(f"{where} needs exactly one of {', '.join(CUT_STEP_KINDS)}")
		kind = kinds[0]
		if kind == 'load':
			return {'kind': kind, 'asset': utils.check_name(step['load'], "asset name")}
		if kind == 'read':
			return {
				'kind': kind,
				'clip': utils.check_name(step['read'], "clip name"),
				'frames': self._int(step.get('frames'), f"{where}.frames", 1),
			}
		if isinstance(step[kind], bool) or not isinstance(step[kind], int):
			raise ValidationError(f"{where}.{kind} must be an integer")
		return {'kind': kind, 'frames': step[kind]}

	#============================
	def _parse_film(self, film) -> dict:
		film = self._mapping(film, "film")
		source = self._mapping(film.get('source'), "film.source")
		build = self._mapping(film.get('build'), "film.build")
		clips = film.get('clips')
		if not isinstance(clips, list) or len(clips) == 0:
			raise ValidationError("film.clips must be a non-empty list")
		parsed_clips = []
		for index, clip in enumerate(clips, start=1):
			parsed_clips.append(self._parse_clip(clip, index))
		return {
			'source_dir': self._path(source.get('dir'), "film.source.dir"),
			'video_ext': utils.check_extension(source.get('video_ext', 'mp4')),
			'descriptor_ext': utils.check_extension(source.get('descriptor_ext', 'clip')),
			'clips': parsed_clips,
			'build_dir': self._path(build.get('dir'), "film.build.dir"),
			'name': utils.check_name(build.get('name', 'movie'), "movie name"),
			'prefix': utils.check_name(build.get('prefix', 'tmp'), "prefix"),
			'build_video_ext': utils.check_extension(build.get('video_ext', 'mp4')),
			'map_ext': utils.check_extension(build.get('map_ext', 'map')),
			'options': utils.split_options(build.get('options')),
			'max_inputs': self._int(build.get('max_inputs', 8), "film.build.max_inputs", 2),
		}

	#============================
	def _parse_clip(self, clip, index: int) -> dict:
		where = f"film.clips[{index}]"
		if isinstance(clip, str):
			return {'name': utils.check_name(clip, "clip name"), 'fade_in': 0, 'fade_out': 0}
		clip = self._mapping(clip, where)
		return {
			'name': utils.check_name(clip.get('name'), "clip name"),
			'fade_in': self._int(clip.get('fade_in', 0), f"{where}.fade_in"),
			'fade_out': self._int(clip.get('fade_out', 0), f"{where}.fade_out"),
		}

	#============================
	def _parse_sync(self, sync) -> dict:
		sync = self._mapping(sync, "sync")
		buffer = self._mapping(sync.get('buffer', {}), "sync.buffer")
		output = self._mapping(sync.get('output', {}), "sync.output")
		sources = sync.get('sources')
		if not isinstance(sources, list) or len(sources) == 0:
			raise ValidationError("sync.sources must be a non-empty list")
		channels = buffer.get('channels', 2)
		if channels not in (1, 2) or isinstance(channels, bool):
			raise ValidationError("sync.buffer.channels must be 1 or 2")
		level = self._int(output.get('level', 20000), "sync.output.level")
		if level > 32767:
			raise ValidationError("sync.output.level must be in range [0, 32767]")
		parsed_sources = []
		for index, source in enumerate(sources, start=1):
			parsed_sources.append(self._parse_sync_source(source, index))
		return {
			'buffer_name': utils.check_extension(buffer.get('name', 'mix.wav'), "buffer name"),
			'channels': channels,
			'sources': parsed_sources,
			'output_name': utils.check_extension(output.get('name', 'audio.wav'), "output name"),
			'level': level,
		}

	#============================
	def _parse_sync_source(self, source, index: int) -> dict:
		where = f"sync.sources[{index}]"
		source = self._mapping(source, where)
		mixes = source.get('mix')
		if not isinstance(mixes, list) or len(mixes) == 0:
			raise ValidationError(f"{where}.mix must be a non-empty list")
		parsed_mixes = []
		for mix in mixes:
			mix = self._mapping(mix, f"{where}.mix")
			parsed_mixes.append({
				'audio': utils.check_name(mix.get('audio'), "audio asset name"),
				'video': utils.check_name(mix.get('video'), "video asset name"),
			})
		return {
			'dir': self._path(source.get('dir'), f"{where}.dir"),
			'ext': utils.check_extension(source.get('ext', 'wav')),
			'mix': parsed_mixes,
		}
