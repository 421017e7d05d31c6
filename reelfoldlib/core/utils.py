#!/usr/bin/env python3

import os
import re
import shlex
import subprocess
from decimal import Decimal
from fractions import Fraction
from reelfoldlib.core.errors import ValidationError

_QUIET_MODE = False

NAME_PATTERN = re.compile(r'^[a-z0-9_]+$')
EXTENSION_PATTERN = re.compile(r'^[a-z0-9_]+(\.[a-z0-9_]+)*$')

#============================================

def set_quiet_mode(quiet: bool) -> None:
	global _QUIET_MODE
	_QUIET_MODE = bool(quiet)

#============================================

def is_quiet_mode() -> bool:
	return _QUIET_MODE

#============================================

def echo(message: str) -> None:
	if not _QUIET_MODE:
		print(message)

#============================================

def runCmd(args: list) -> bool:
	"""
	Run an external program and wait for it.

	Args:
		args: program name followed by its arguments.

	Returns:
		True when the program exited with status zero.
	"""
	showcmd = shlex.join(str(arg) for arg in args)
	echo(f"CMD: '{showcmd}'")
	stream = subprocess.DEVNULL if _QUIET_MODE else None
	try:
		proc = subprocess.run([str(arg) for arg in args], stdout=stream,
			stderr=stream)
	except OSError as exc:
		echo(f"could not start {args[0]}: {exc}")
		return False
	return proc.returncode == 0

#============================================

def parse_fps(raw_fps) -> Fraction:
	if raw_fps is None:
		raise ValidationError("profile.fps is required")
	if isinstance(raw_fps, bool):
		raise ValidationError("profile.fps must be int, float, or fraction string")
	if isinstance(raw_fps, int):
		fps = Fraction(raw_fps, 1)
	elif isinstance(raw_fps, float):
		fps = Fraction(str(raw_fps))
	elif isinstance(raw_fps, Fraction):
		fps = raw_fps
	elif isinstance(raw_fps, str):
		try:
			if '/' in raw_fps:
				parts = raw_fps.split('/')
				fps = Fraction(int(parts[0]), int(parts[1]))
			else:
				fps = Fraction(raw_fps.strip())
		except (ValueError, ZeroDivisionError, IndexError):
			raise ValidationError(f"invalid frame rate: {raw_fps}")
	else:
		raise ValidationError("profile.fps must be int, float, or fraction string")
	if fps <= 0:
		raise ValidationError("frame rate must be greater than zero")
	return fps

#============================================

def parse_sample_rate(raw_rate) -> int:
	if isinstance(raw_rate, bool) or not isinstance(raw_rate, int):
		raise ValidationError("sample rate must be an integer")
	if raw_rate < 1024 or raw_rate > 192000:
		raise ValidationError("sample rate must be in range [1024, 192000]")
	return raw_rate

#============================================

def seconds_from_frames(frames: int, fps: Fraction) -> Fraction:
	return Fraction(frames, 1) / fps

#============================================

def samples_from_seconds(seconds: Fraction, sample_rate: int) -> int:
	# truncation, matching the buffer sizing
	return int(seconds * sample_rate)

#============================================

def format_seconds(seconds: Fraction, places: int = 6) -> str:
	"""
	Render an exact seconds value as decimal text for an ffmpeg argument.
	"""
	value = Decimal(seconds.numerator) / Decimal(seconds.denominator)
	text = f"{value:.{places}f}"
	if '.' in text:
		text = text.rstrip('0').rstrip('.')
	return text

#============================================

def check_name(name, what: str = "name") -> str:
	name = str(name)
	if NAME_PATTERN.match(name) is None:
		raise ValidationError(f"{what} '{name}' is invalid")
	return name

#============================================

def check_extension(ext, what: str = "extension") -> str:
	ext = str(ext)
	if EXTENSION_PATTERN.match(ext) is None:
		raise ValidationError(f"{what} '{ext}' is invalid")
	return ext

#============================================

def check_frame_count(value, what: str) -> int:
	if isinstance(value, bool) or not isinstance(value, int):
		raise ValidationError(f"{what} must be an integer")
	if value < 0:
		raise ValidationError(f"{what} must not be negative")
	return value

#============================================

def ensure_dir_exists(dirpath: str) -> None:
	if not os.path.isdir(dirpath):
		raise ValidationError(f"directory not found: {dirpath}")
	return

#============================================

def ensure_file_exists(filepath: str) -> None:
	if not os.path.isfile(filepath):
		raise ValidationError(f"file not found: {filepath}")
	return

#============================================

def split_options(options) -> list:
	if options is None:
		return []
	if isinstance(options, (list, tuple)):
		return [str(item) for item in options]
	return shlex.split(str(options))

#============================================

def remove_if_exists(filepath: str) -> None:
	if os.path.isfile(filepath):
		os.remove(filepath)
	return
