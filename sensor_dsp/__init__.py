"""Top level package of the radar sensor signal processing library.

This package turns raw chirp samples into range, Doppler and angle
estimates and locates candidate targets in the resulting spectra.  It
contains submodules for signal processing (dsp), detection (detect) and
an offline experiment runner (exp).  Users should typically import from
the subpackages, for example:

```python
from sensor_dsp.dsp.fft import RangeFFT, DopplerFFT
from sensor_dsp.detect.peaks import peak_search, PeakSearchOptions
```
"""

__version__ = "0.5.0"

__all__ = [
    "dsp",
    "detect",
    "exp",
    "config",
    "errors",
]
