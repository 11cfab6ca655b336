"""Publish pre-built static site output to a git-hosted pages branch."""
