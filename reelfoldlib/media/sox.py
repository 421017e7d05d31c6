
from reelfoldlib.media.sox_mix import makeMixBuffer
from reelfoldlib.media.sox_mix import mixIntoBuffer
from reelfoldlib.media.sox_mix import renderMixBuffer
from reelfoldlib.media.sox_mix import levelToDecibels

__all__ = [
	'makeMixBuffer',
	'mixIntoBuffer',
	'renderMixBuffer',
	'levelToDecibels',
]
