"""Pipeline stages: quantize, resample, upload, render, export."""

from mipview.services.canvas_resampler import build_mip_chain, resample
from mipview.services.size_quantizer import is_power_of_two, quantize

__all__ = ["build_mip_chain", "is_power_of_two", "quantize", "resample"]
