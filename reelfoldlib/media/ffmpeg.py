#!/usr/bin/env python3

from reelfoldlib.media.ffmpeg_render import fadeFilter
from reelfoldlib.media.ffmpeg_render import concatFilter
from reelfoldlib.media.ffmpeg_render import fadeVideo
from reelfoldlib.media.ffmpeg_render import concatenateVideos
from reelfoldlib.media.ffmpeg_render import extractClip

__all__ = [
	'fadeFilter',
	'concatFilter',
	'fadeVideo',
	'concatenateVideos',
	'extractClip',
]
