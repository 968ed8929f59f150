"""Core simulation building blocks for the xG match simulator.

This package contains pure, I/O-free building blocks:

- ``prng``      — mulberry32 PRNG, uint32 seed reduction, FNV-1a seed derivation
- ``shots``     — immutable shot / match / payload DTOs and the probability clamp
- ``simulator`` — probability partition, Bernoulli sampler, batch runner, ranker

The HTTP, storage and database layers build on these; the dependency only
runs that way, so a simulation can be reproduced from a payload alone.
"""
