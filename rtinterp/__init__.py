# emacs: -*- coding: utf-8; mode: python; py-indent-offset: 4; indent-tabs-mode: nil -*-
# vi: set fileencoding=utf-8 ft=python sts=4 ts=4 sw=4 et:
from rtinterp import options, polyutils, interpolation
from rtinterp.options import config
from rtinterp.polyutils import Surface, DistanceMatrix, InvalidConfiguration, scdc
from rtinterp.interpolation import create_interpolation_mat, interpolate
from rtinterp.worker import InterpolationMatWorker
from rtinterp.version import __version__, __full_version__
