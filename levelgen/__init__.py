"""Procedural level generation for Orbital Decay and Boat Journey."""
