#!/usr/bin/env python3

import os
import sys
import unittest
from fractions import Fraction

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from reelfoldlib.core import utils
from reelfoldlib.core.errors import ValidationError
from reelfoldlib.media import ffmpeg_render
from reelfoldlib.media import sox_mix

#============================================

class ParseFpsTest(unittest.TestCase):
	#============================================
	def test_accepts_int_float_and_ratio(self) -> None:
		self.assertEqual(utils.parse_fps(25), Fraction(25))
		self.assertEqual(utils.parse_fps(29.97), Fraction(2997, 100))
		self.assertEqual(utils.parse_fps("30000/1001"), Fraction(30000, 1001))
		self.assertEqual(utils.parse_fps("24"), Fraction(24))

	#============================================
	def test_rejects_bad_rates(self) -> None:
		for raw in (None, 0, -25, "abc", "1/0", True):
			with self.assertRaises(ValidationError):
				utils.parse_fps(raw)

#============================================

class FormatSecondsTest(unittest.TestCase):
	#============================================
	def test_trims_trailing_zeros(self) -> None:
		self.assertEqual(utils.format_seconds(Fraction(2)), "2")
		self.assertEqual(utils.format_seconds(Fraction(2, 5)), "0.4")
		self.assertEqual(utils.format_seconds(Fraction(1, 3)), "0.333333")

	#============================================
	def test_ntsc_frames_stay_exact(self) -> None:
		seconds = utils.seconds_from_frames(30, Fraction(30000, 1001))
		self.assertEqual(seconds, Fraction(1001, 1000))
		self.assertEqual(utils.format_seconds(seconds), "1.001")

#============================================

class SampleConversionTest(unittest.TestCase):
	#============================================
	def test_truncates_to_whole_samples(self) -> None:
		self.assertEqual(utils.samples_from_seconds(Fraction(2, 5), 48000), 19200)
		self.assertEqual(utils.samples_from_seconds(Fraction(1, 3), 1000), 333)

	#============================================
	def test_sample_rate_range(self) -> None:
		self.assertEqual(utils.parse_sample_rate(48000), 48000)
		for raw in (1023, 192001, 44100.0, "48000"):
			with self.assertRaises(ValidationError):
				utils.parse_sample_rate(raw)

#============================================

class FilterTextTest(unittest.TestCase):
	#============================================
	def test_fade_in_and_out_chain(self) -> None:
		text = ffmpeg_render.fadeFilter(50, 5, 10, Fraction(25))
		self.assertEqual(text, "fade=t=in:st=0:d=0.2,fade=t=out:st=1.6:d=0.4")

	#============================================
	def test_fade_out_only(self) -> None:
		text = ffmpeg_render.fadeFilter(60, 0, 30, Fraction(30000, 1001))
		self.assertEqual(text, "fade=t=out:st=1.001:d=1.001")

	#============================================
	def test_concat_graph(self) -> None:
		self.assertEqual(ffmpeg_render.concatFilter(3),
			"[0:0] [1:0] [2:0] concat=n=3:v=1:a=0 [v]")

	#============================================
	def test_level_to_decibels(self) -> None:
		self.assertAlmostEqual(sox_mix.levelToDecibels(32767), 0.0)
		self.assertAlmostEqual(sox_mix.levelToDecibels(16384), -6.0206, places=3)

#============================================

class NameCheckTest(unittest.TestCase):
	#============================================
	def test_names_and_extensions(self) -> None:
		self.assertEqual(utils.check_name("clip_01"), "clip_01")
		self.assertEqual(utils.check_extension("tar.gz"), "tar.gz")
		for bad in ("Clip", "a-b", "", "a b"):
			with self.assertRaises(ValidationError):
				utils.check_name(bad)
		for bad in (".mp4", "mp4.", "a..b", "MP4"):
			with self.assertRaises(ValidationError):
				utils.check_extension(bad)

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
