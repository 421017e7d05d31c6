#!/usr/bin/env python3

#============================================

class ValidationError(RuntimeError):
	"""Bad names, paths, ranges, or calls made in the wrong order."""

#============================================

class ConsistencyError(RuntimeError):
	"""Declared data disagrees with derived data (fades, durations, syntax)."""

#============================================

class ExternalInvocationError(RuntimeError):
	"""ffmpeg or sox failed or left no output file."""
