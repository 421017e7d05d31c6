
import math
import os
from reelfoldlib.core import utils
from reelfoldlib.core.errors import ExternalInvocationError
from reelfoldlib.core.errors import ValidationError

SOX = 'sox'
BUFFER_FORMAT = ['-e', 'floating-point', '-b', '32']
MAX_LEVEL = 32767
# pieces go in at -24 dB so overlaps sum below full scale, render restores level
MIX_HEADROOM = '0.0625'

#============================================

def runCmd(args: list) -> bool:
	return utils.runCmd(args)

#============================================

def _check_result(success: bool, outfile: str, what: str) -> str:
	if not success or not os.path.isfile(outfile):
		raise ExternalInvocationError(f"{what} failed for {outfile}")
	return outfile

#============================================

def _side_file(bufwavfile: str, tag: str) -> str:
	base, ext = os.path.splitext(bufwavfile)
	return f"{base}-{tag}{ext or '.wav'}"

#============================================

def makeMixBuffer(bufwavfile: str, channels: int, sample_count: int,
	samplerate: int) -> str:
	if channels not in (1, 2):
		raise ValidationError("channel count must be one or two")
	if sample_count < 1:
		raise ValidationError("sample count must be greater than zero")
	utils.remove_if_exists(bufwavfile)
	cmd = [SOX, '--null', '-r', str(samplerate), '-c', str(channels)]
	cmd += BUFFER_FORMAT
	cmd += [bufwavfile, 'trim', '0', f"{sample_count}s"]
	return _check_result(runCmd(cmd), bufwavfile, "blank buffer")

#============================================

def mixIntoBuffer(srcwavfile: str, src_start: int, sample_count: int,
	dest_start: int, fade_in: int, fade_out: int, bufwavfile: str,
	channels: int, samplerate: int, buffer_samples: int) -> str:
	"""
	Add a faded range of a source file into the buffer at dest_start.

	The buffer keeps its length; audio past the end is dropped.
	"""
	if sample_count < 0 or src_start < 0 or dest_start < 0:
		raise ValidationError("sample positions must be zero or greater")
	if fade_in < 0 or fade_out < 0:
		raise ValidationError("fade counts must be zero or greater")
	if fade_in + fade_out > sample_count:
		raise ValidationError("fades are too long")
	utils.ensure_file_exists(srcwavfile)
	piecewavfile = _side_file(bufwavfile, "piece")
	mixedwavfile = _side_file(bufwavfile, "mixed")
	cmd = [SOX, srcwavfile, '-r', str(samplerate), '-c', str(channels)]
	cmd += BUFFER_FORMAT
	cmd += [piecewavfile, 'trim', f"{src_start}s", f"{sample_count}s"]
	if fade_out > 0:
		cmd += ['fade', 't', f"{fade_in}s", f"{sample_count}s", f"{fade_out}s"]
	elif fade_in > 0:
		cmd += ['fade', 't', f"{fade_in}s"]
	if dest_start > 0:
		cmd += ['pad', f"{dest_start}s"]
	cmd += ['vol', MIX_HEADROOM]
	_check_result(runCmd(cmd), piecewavfile, "mix source extraction")
	cmd = [SOX, '-m', '-v', '1', bufwavfile, '-v', '1', piecewavfile]
	cmd += BUFFER_FORMAT
	cmd += [mixedwavfile, 'trim', '0', f"{buffer_samples}s"]
	success = runCmd(cmd)
	os.remove(piecewavfile)
	_check_result(success, mixedwavfile, "buffer mix")
	os.replace(mixedwavfile, bufwavfile)
	return bufwavfile

#============================================

def levelToDecibels(level: int) -> float:
	return 20.0 * math.log10(level / float(MAX_LEVEL))

#============================================

def renderMixBuffer(bufwavfile: str, level: int, samplerate: int,
	outwavfile: str) -> str:
	if level < 0 or level > MAX_LEVEL:
		raise ValidationError("level target is out of range")
	if samplerate < 1024 or samplerate > 192000:
		raise ValidationError("sample rate is out of range")
	utils.ensure_file_exists(bufwavfile)
	cmd = [SOX, bufwavfile, '-r', str(samplerate), '-e', 'signed-integer',
		'-b', '16', outwavfile]
	if level == 0:
		cmd += ['vol', '0']
	else:
		cmd += ['norm', f"{levelToDecibels(level):.4f}"]
	return _check_result(runCmd(cmd), outwavfile, "buffer render")
