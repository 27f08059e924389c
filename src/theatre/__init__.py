"""Conflict overlay core: data contract, overlay composition, globe sampler, starfield."""
