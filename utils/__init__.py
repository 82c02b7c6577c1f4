"""Shared utilities: state files, spam and flag detection, nagger, playback and focus."""
