
import os
import time
from fractions import Fraction
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ExternalInvocationError

FFMPEG = 'ffmpeg'

#============================================

def runCmd(args: list) -> bool:
	return utils.runCmd(args)

#============================================

def _check_result(success: bool, outfile: str, what: str) -> str:
	if not success or not os.path.isfile(outfile):
		raise ExternalInvocationError(f"{what} failed for {outfile}")
	return outfile

#============================================

def fadeFilter(frame_count: int, fade_in_frames: int, fade_out_frames: int,
	fps: Fraction) -> str:
	"""
	Build the video fade chain for one clip, fade-in first.

	Times are exact until formatted here for ffmpeg.
	"""
	chain = []
	if fade_in_frames > 0:
		duration = utils.seconds_from_frames(fade_in_frames, fps)
		chain.append(f"fade=t=in:st=0:d={utils.format_seconds(duration)}")
	if fade_out_frames > 0:
		start = utils.seconds_from_frames(frame_count - fade_out_frames, fps)
		duration = utils.seconds_from_frames(fade_out_frames, fps)
		chain.append(
			f"fade=t=out:st={utils.format_seconds(start)}"
			f":d={utils.format_seconds(duration)}"
		)
	return ",".join(chain)

#============================================

def concatFilter(input_count: int) -> str:
	labels = " ".join(f"[{index}:0]" for index in range(input_count))
	return f"{labels} concat=n={input_count}:v=1:a=0 [v]"

#============================================

def fadeVideo(movfile: str, outfile: str, fade_filter: str,
	options: list = None) -> str:
	t0 = time.time()
	cmd = [FFMPEG, '-y', '-i', movfile, '-filter:v', fade_filter]
	cmd += utils.split_options(options)
	cmd.append(outfile)
	_check_result(runCmd(cmd), outfile, "fade")
	utils.echo(f"Complete in {int(time.time() - t0)} seconds")
	return outfile

#============================================

def concatenateVideos(movfiles: list, outfile: str, options: list = None) -> str:
	if len(movfiles) < 2:
		raise ExternalInvocationError("concatenation needs at least two inputs")
	if len(set(os.path.realpath(movfile) for movfile in movfiles)) != len(movfiles):
		raise ExternalInvocationError("concatenation inputs must be distinct files")
	t0 = time.time()
	cmd = [FFMPEG, '-y']
	for movfile in movfiles:
		cmd += ['-i', movfile]
	cmd += ['-filter_complex', concatFilter(len(movfiles)), '-map', '[v]']
	cmd += utils.split_options(options)
	cmd.append(outfile)
	_check_result(runCmd(cmd), outfile, "concatenation")
	utils.echo(f"Complete in {int(time.time() - t0)} seconds")
	return outfile

#============================================

def extractClip(movfile: str, outfile: str, start_seconds: Fraction,
	duration_seconds: Fraction, options: list = None) -> str:
	cmd = [FFMPEG, '-y']
	cmd += ['-ss', utils.format_seconds(start_seconds)]
	cmd += ['-t', utils.format_seconds(duration_seconds)]
	cmd += ['-i', movfile]
	cmd += utils.split_options(options)
	cmd.append(outfile)
	return _check_result(runCmd(cmd), outfile, "clip extraction")
