"""Inkwell backend: blog posts with likes and view counts."""
