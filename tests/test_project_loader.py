#!/usr/bin/env python3

import os
import sys
import tempfile
import unittest

import yaml

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

TESTS_DIR = os.path.abspath(os.path.dirname(__file__))
if TESTS_DIR not in sys.path:
	sys.path.insert(0, TESTS_DIR)
from fake_services import FakeMixer
from fake_services import FakeTranscoder
from fake_services import write_text

from reelfoldlib.core import utils
from reelfoldlib.core.errors import ValidationError
from reelfoldlib.core.loader import ProjectLoader
from reelfoldlib.core.mapfile import read_map_file
from reelfoldlib.core.project import ReelfoldProject

#============================================

def project_data() -> dict:
	return {
		'reelfold': 1,
		'profile': {'fps': 25, 'sample_rate': 48000},
		'cuts': {
			'source': {'dir': 'assets', 'ext': 'mp4'},
			'dest': {'dir': 'clips', 'video_ext': 'mp4', 'descriptor_ext': 'clip'},
			'steps': [
				{'load': 'beach'},
				{'read': 'intro', 'frames': 50},
				{'skip': 10},
				{'read': 'wave', 'frames': 25},
				{'load': 'city'},
				{'seek': 100},
				{'read': 'street', 'frames': 25},
			],
		},
		'film': {
			'source': {'dir': 'clips'},
			'clips': [
				'intro',
				{'name': 'street', 'fade_in': 5, 'fade_out': 5},
				'wave',
				'intro',
			],
			'build': {'dir': 'build', 'name': 'movie', 'max_inputs': 2},
		},
		'sync': {
			'buffer': {'channels': 2},
			'sources': [
				{'dir': 'audio', 'mix': [{'audio': 'beach_sound', 'video': 'beach'}]},
			],
			'output': {'level': 16000},
		},
	}

#============================================

class ProjectLoaderTest(unittest.TestCase):
	#============================================
	def setUp(self) -> None:
		utils.set_quiet_mode(True)
		self._temp = tempfile.TemporaryDirectory()
		self.root = self._temp.name
		for dirname in ("assets", "clips", "build", "audio"):
			os.mkdir(os.path.join(self.root, dirname))
		write_text(os.path.join(self.root, "assets", "beach.mp4"), "beach")
		write_text(os.path.join(self.root, "assets", "city.mp4"), "city")
		write_text(os.path.join(self.root, "audio", "beach_sound.wav"), "")
		self.yaml_file = os.path.join(self.root, "project.yaml")

	#============================================
	def tearDown(self) -> None:
		self._temp.cleanup()
		utils.set_quiet_mode(False)

	#============================================
	def _write(self, data: dict) -> None:
		with open(self.yaml_file, 'w') as handle:
			yaml.safe_dump(data, handle, sort_keys=False)

	#============================================
	def test_loader_resolves_paths_and_defaults(self) -> None:
		self._write(project_data())
		project = ProjectLoader(self.yaml_file).load()
		self.assertEqual(project.film['build_dir'], os.path.join(self.root, "build"))
		self.assertEqual(project.film['video_ext'], "mp4")
		self.assertEqual(project.film['map_ext'], "map")
		self.assertEqual(project.film['clips'][0],
			{'name': 'intro', 'fade_in': 0, 'fade_out': 0})
		self.assertEqual(project.sync['buffer_name'], "mix.wav")
		self.assertEqual(project.sync['output_name'], "audio.wav")
		self.assertEqual(project.cuts['steps'][2], {'kind': 'skip', 'frames': 10})

	#============================================
	def test_bad_documents(self) -> None:
		data = project_data()
		del data['reelfold']
		self._write(data)
		with self.assertRaises(ValidationError):
			ProjectLoader(self.yaml_file).load()
		data = project_data()
		data['film']['build']['max_inputs'] = 1
		self._write(data)
		with self.assertRaises(ValidationError):
			ProjectLoader(self.yaml_file).load()
		data = project_data()
		data['cuts']['steps'][1] = {'read': 'intro'}
		self._write(data)
		with self.assertRaises(ValidationError):
			ProjectLoader(self.yaml_file).load()
		data = project_data()
		data['sync']['output']['level'] = 40000
		self._write(data)
		with self.assertRaises(ValidationError):
			ProjectLoader(self.yaml_file).load()

	#============================================
	def test_full_run(self) -> None:
		self._write(project_data())
		transcoder = FakeTranscoder()
		mixer = FakeMixer()
		project = ReelfoldProject(self.yaml_file, transcoder=transcoder, mixer=mixer)
		project.run()
		build_dir = os.path.join(self.root, "build")
		self.assertEqual(sorted(os.listdir(build_dir)),
			["audio.wav", "mix.wav", "movie.map", "movie.mp4"])
		records = read_map_file(os.path.join(build_dir, "movie.map"))
		self.assertEqual([(record.source_asset, record.source_start_frame)
			for record in records],
			[("beach", 0), ("city", 100), ("beach", 60), ("beach", 0)])
		self.assertEqual(len(transcoder.calls_of('extract')), 3)
		self.assertEqual(len(transcoder.calls_of('fade')), 1)
		self.assertEqual(len(transcoder.calls_of('concat')), 3)
		self.assertEqual([call['dest_start'] for call in mixer.mix_calls],
			[0, 144000, 192000])
		self.assertEqual(mixer.render_calls[0][1], 16000)
		plan = project.plan()
		self.assertEqual(plan['merge'], {
			'fade_invocations': 1,
			'copies': 1,
			'concat_invocations': 3,
			'passes': 2,
		})
		self.assertEqual(plan['duration'], 6.0)
		self.assertEqual([item['dest'] for item in plan['placements']['beach']],
			[0.0, 3.0, 4.0])

	#============================================
	def test_dry_run_touches_nothing(self) -> None:
		self._write(project_data())
		transcoder = FakeTranscoder()
		mixer = FakeMixer()
		project = ReelfoldProject(self.yaml_file, dry_run=True,
			transcoder=transcoder, mixer=mixer)
		project.run()
		self.assertEqual(transcoder.calls, [])
		self.assertEqual(mixer.mix_calls, [])
		self.assertEqual(os.listdir(os.path.join(self.root, "build")), [])

	#============================================
	def test_plan_before_cutting_explains_itself(self) -> None:
		self._write(project_data())
		project = ReelfoldProject(self.yaml_file, transcoder=FakeTranscoder())
		with self.assertRaisesRegex(ValidationError, "not cut yet"):
			project.plan()
		project.cut_clips()
		plan = project.plan()
		self.assertEqual(plan['duration'], 6.0)

	#============================================
	def test_clean_removes_intermediates(self) -> None:
		self._write(project_data())
		write_text(os.path.join(self.root, "build", "tmp3.mp4"), "old")
		write_text(os.path.join(self.root, "build", "movie.mp4"), "keep")
		project = ReelfoldProject(self.yaml_file)
		removed = project.clean()
		self.assertEqual([os.path.basename(path) for path in removed], ["tmp3.mp4"])
		self.assertEqual(os.listdir(os.path.join(self.root, "build")), ["movie.mp4"])

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
