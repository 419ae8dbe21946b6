"""
App module for Tuner.

Interactive text front end driving a Player from stdin.
"""
