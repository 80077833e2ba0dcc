"""Test package for the bubble chamber trainer.

Core tests (geometry, kinematics, event generation, numbering, hit-testing,
scoring) run without pygame. The smoke tests drive the pygame shell with the
SDL dummy video driver so no real window opens. Run ``pytest`` from the
project root.
"""
