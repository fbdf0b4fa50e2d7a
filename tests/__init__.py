"""Test package for the cue task environment.

Core tests exercise each component in isolation; headless simulation tests
drive complete episodes tick by tick with scripted actuator positions. No
physics engine, renderer or audio device is needed. To run these tests,
execute ``pytest`` from the project root.
"""
