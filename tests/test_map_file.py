#!/usr/bin/env python3

import os
import sys
import tempfile
import unittest

REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
	sys.path.insert(0, REPO_ROOT)

from reelfoldlib.core import mapfile
from reelfoldlib.core.errors import ConsistencyError

#============================================

class MapTextTest(unittest.TestCase):
	#============================================
	def test_parse_records_in_order(self) -> None:
		records = mapfile.parse_map_text("a 0 50 0 0\nb 10 25 5 5\n\n\n")
		self.assertEqual(records, [
			mapfile.MapRecord('a', 0, 50, 0, 0),
			mapfile.MapRecord('b', 10, 25, 5, 5),
		])

	#============================================
	def test_format_matches_parse(self) -> None:
		record = mapfile.MapRecord('beach_2', 125, 50, 10, 0)
		line = mapfile.format_map_record(record)
		self.assertEqual(line, "beach_2 125 50 10 0")
		self.assertEqual(mapfile.parse_map_text(line), [record])

	#============================================
	def test_malformed_maps_are_rejected(self) -> None:
		bad_maps = (
			"",
			"\n\n",
			"a 0 50 0\n",
			"a 0 50 0 0 0\n",
			"a 0 x 0 0\n",
			"a 0 -5 0 0\n",
			"Beach 0 50 0 0\n",
			"a 0 50 0 0\n\nb 0 50 0 0\n",
		)
		for text in bad_maps:
			with self.assertRaises(ConsistencyError):
				mapfile.parse_map_text(text)

	#============================================
	def test_file_round_trip(self) -> None:
		records = [
			mapfile.MapRecord('a', 0, 50, 0, 0),
			mapfile.MapRecord('a', 100, 20, 4, 4),
		]
		with tempfile.TemporaryDirectory() as temp_dir:
			path = os.path.join(temp_dir, "movie.map")
			mapfile.write_map_file(path, records)
			with open(path, 'r', encoding='utf-8') as handle:
				self.assertEqual(handle.read(), "a 0 50 0 0\na 100 20 4 4\n")
			self.assertEqual(mapfile.read_map_file(path), records)

#============================================

class DescriptorTextTest(unittest.TestCase):
	#============================================
	def test_single_line_with_trailing_blanks(self) -> None:
		descriptor = mapfile.parse_descriptor_text("beach 125 50\n\n   \n")
		self.assertEqual(descriptor, mapfile.ClipDescriptor('beach', 125, 50))

	#============================================
	def test_bad_descriptors(self) -> None:
		bad_descriptors = (
			"",
			"\nbeach 0 50\n",
			"beach 0 50\nmore 0 1\n",
			"beach 0\n",
			"beach 0 0\n",
			"beach 0.5 10\n",
		)
		for text in bad_descriptors:
			with self.assertRaises(ConsistencyError):
				mapfile.parse_descriptor_text(text)

#============================================

def main() -> None:
	"""Run the unit tests."""
	unittest.main()

#============================================

if __name__ == "__main__":
	main()
