#!/usr/bin/env python3

"""
Text formats shared by the film build and the audio sync.

A map file has one record per clip in timeline order:
	<asset> <start_frame> <frame_count> <fade_in_frames> <fade_out_frames>

A clip descriptor has a single content line:
	<asset> <start_frame> <frame_count>
"""

import re
from collections import namedtuple
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ConsistencyError

UNSIGNED_PATTERN = re.compile(r'^[0-9]+$')

MapRecord = namedtuple('MapRecord', [
	'source_asset',
	'source_start_frame',
	'frame_count',
	'fade_in_frames',
	'fade_out_frames',
])

ClipDescriptor = namedtuple('ClipDescriptor', [
	'source_asset',
	'source_start_frame',
	'frame_count',
])

#============================================

def _parse_fields(line: str, field_count: int, source: str) -> list:
	fields = line.split()
	if len(fields) != field_count:
		raise ConsistencyError(
			f"{source}: expected {field_count} fields, found {len(fields)}"
		)
	if utils.NAME_PATTERN.match(fields[0]) is None:
		raise ConsistencyError(f"{source}: invalid asset name '{fields[0]}'")
	values = [fields[0]]
	for field in fields[1:]:
		if UNSIGNED_PATTERN.match(field) is None:
			raise ConsistencyError(f"{source}: invalid integer '{field}'")
		values.append(int(field))
	return values

#============================================

def _content_lines(text: str, source: str) -> list:
	lines = text.splitlines()
	while len(lines) > 0 and lines[-1].strip() == '':
		lines.pop()
	for line in lines:
		if line.strip() == '':
			raise ConsistencyError(f"{source}: blank line inside records")
	return lines

#============================================

def format_map_record(record: MapRecord) -> str:
	return (
		f"{record.source_asset} {record.source_start_frame} "
		f"{record.frame_count} {record.fade_in_frames} {record.fade_out_frames}"
	)

#============================================

def parse_map_text(text: str, source: str = "map") -> list:
	lines = _content_lines(text, source)
	if len(lines) == 0:
		raise ConsistencyError(f"{source}: map has no records")
	records = []
	for index, line in enumerate(lines, start=1):
		values = _parse_fields(line, 5, f"{source} line {index}")
		records.append(MapRecord(*values))
	return records

#============================================

def write_map_file(path: str, records: list) -> None:
	with open(path, 'w', encoding='utf-8') as handle:
		for record in records:
			handle.write(format_map_record(record))
			handle.write("\n")
	return

#============================================

def read_map_file(path: str) -> list:
	utils.ensure_file_exists(path)
	with open(path, 'r', encoding='utf-8') as handle:
		text = handle.read()
	return parse_map_text(text, source=path)

#============================================

def parse_descriptor_text(text: str, source: str = "descriptor") -> ClipDescriptor:
	lines = text.splitlines()
	if len(lines) == 0 or lines[0].strip() == '':
		raise ConsistencyError(f"{source}: descriptor is empty")
	for line in lines[1:]:
		if line.strip() != '':
			raise ConsistencyError(f"{source}: descriptor has multiple lines")
	values = _parse_fields(lines[0], 3, source)
	descriptor = ClipDescriptor(*values)
	if descriptor.frame_count <= 0:
		raise ConsistencyError(f"{source}: frame count must be greater than zero")
	return descriptor

#============================================

def read_descriptor_file(path: str) -> ClipDescriptor:
	utils.ensure_file_exists(path)
	with open(path, 'r', encoding='utf-8') as handle:
		text = handle.read()
	return parse_descriptor_text(text, source=path)

#============================================

def write_descriptor_file(path: str, descriptor: ClipDescriptor) -> None:
	with open(path, 'w', encoding='utf-8') as handle:
		handle.write(
			f"{descriptor.source_asset} {descriptor.source_start_frame} "
			f"{descriptor.frame_count}\n"
		)
	return
