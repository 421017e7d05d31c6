#!/usr/bin/env python3

import os
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ValidationError
from reelfoldlib.core.cutter import ClipCutter
from reelfoldlib.core.editmap import EditMap
from reelfoldlib.core.ledger import ClipLedger
from reelfoldlib.core.loader import ProjectLoader
from reelfoldlib.core.merge import MergeScheduler
from reelfoldlib.core.sync import SyncEngine
from reelfoldlib.core.sync import SyncSession

#============================================

class ReelfoldProject():
	def __init__(self, yaml_file: str, dry_run: bool = False,
		keep_temp: bool = False, transcoder=None, mixer=None):
		loader = ProjectLoader(yaml_file, dry_run=dry_run, keep_temp=keep_temp)
		self._project = loader.load()
		self.transcoder = transcoder
		self.mixer = mixer
		self.yaml_file = self._project.yaml_file
		self.dry_run = self._project.dry_run
		self.keep_temp = self._project.keep_temp
		self.profile = self._project.profile
		self.cuts = self._project.cuts
		self.film = self._project.film
		self.sync = self._project.sync

	#============================
	def run(self) -> None:
		if self.dry_run:
			self.validate()
			utils.echo("dry run: validation complete")
			return
		if self.cuts is not None:
			self.cut_clips()
		report = self.build_film()
		if self.sync is not None:
			self.sync_audio()
		utils.echo(f"movie: {report.video_file}")

	#============================
	def validate(self) -> None:
		if self.cuts is not None:
			# clips do not exist until the cut steps run
			return
		clip_ledger = self.make_ledger()
		scheduler = self.make_scheduler(clip_ledger)
		scheduler.plan()
		EditMap.load(clip_ledger.map_records(), self.profile['fps'])

	#============================
	def plan(self) -> dict:
		if self.cuts is not None and not self._clips_are_cut():
			raise ValidationError(
				"clips come from the cuts section and are not cut yet, run the project first"
			)
		clip_ledger = self.make_ledger()
		report = self.make_scheduler(clip_ledger).plan()
		edit_map = EditMap.load(clip_ledger.map_records(), self.profile['fps'])
		placements = {}
		for asset in edit_map.assets():
			placements[asset] = [
				{
					'dest': float(entry.dest_start),
					'source': float(entry.source_start),
					'duration': float(entry.duration),
					'fade_in': float(entry.fade_in),
					'fade_out': float(entry.fade_out),
				}
				for entry in edit_map.entries(asset)
			]
		return {
			'clips': [placement._asdict() for placement in clip_ledger.placements],
			'merge': {
				'fade_invocations': report.fade_count,
				'copies': report.copy_count,
				'concat_invocations': report.concat_count,
				'passes': report.pass_count,
			},
			'duration': float(edit_map.total_duration),
			'placements': placements,
		}

	#============================
	def _clips_are_cut(self) -> bool:
		for clip in self.film['clips']:
			base_path = os.path.join(self.film['source_dir'], clip['name'])
			for ext in (self.film['video_ext'], self.film['descriptor_ext']):
				if not os.path.isfile(f"{base_path}.{ext}"):
					return False
		return True

	#============================
	def cut_clips(self) -> list:
		cutter = ClipCutter(self.profile['fps'], transcoder=self.transcoder)
		cutter.set_source(self.cuts['source_dir'], self.cuts['source_ext'])
		cutter.set_dest(self.cuts['dest_dir'], self.cuts['video_ext'],
			self.cuts['descriptor_ext'], self.cuts['options'])
		descriptors = []
		for step in self.cuts['steps']:
			if step['kind'] == 'load':
				cutter.load(step['asset'])
			elif step['kind'] == 'seek':
				cutter.seek(step['frames'])
			elif step['kind'] == 'skip':
				cutter.skip(step['frames'])
			else:
				descriptors.append(cutter.read(step['clip'], step['frames']))
		return descriptors

	#============================
	def make_ledger(self) -> ClipLedger:
		clip_ledger = ClipLedger()
		clip_ledger.declare_source(self.film['source_dir'], self.film['video_ext'],
			self.film['descriptor_ext'])
		for clip in self.film['clips']:
			clip_ledger.append_clip(clip['name'], clip['fade_in'], clip['fade_out'])
		return clip_ledger

	#============================
	def make_scheduler(self, clip_ledger: ClipLedger) -> MergeScheduler:
		return MergeScheduler(clip_ledger, self.film['build_dir'], self.film['name'],
			prefix=self.film['prefix'], video_ext=self.film['build_video_ext'],
			map_ext=self.film['map_ext'], options=self.film['options'],
			max_inputs=self.film['max_inputs'], fps=self.profile['fps'],
			keep_temp=self.keep_temp, transcoder=self.transcoder)

	#============================
	def build_film(self):
		clip_ledger = self.make_ledger()
		return self.make_scheduler(clip_ledger).build()

	#============================
	def sync_audio(self) -> str:
		session = SyncSession(SyncEngine(mixer=self.mixer))
		session.set_build_dir(self.film['build_dir'])
		map_name = f"{self.film['name']}.{self.film['map_ext']}"
		session.load_map(map_name, self.profile['sample_rate'], self.profile['fps'])
		session.begin(self.sync['buffer_name'], self.sync['channels'])
		for source in self.sync['sources']:
			session.set_source(source['dir'], source['ext'])
			for mix in source['mix']:
				session.mix(mix['audio'], mix['video'])
		return session.end(self.sync['output_name'], self.sync['level'])

	#============================
	def clean(self) -> list:
		return MergeScheduler(ClipLedger(), self.film['build_dir'], self.film['name'],
			prefix=self.film['prefix'], video_ext=self.film['build_video_ext'],
			map_ext=self.film['map_ext']).clean()
