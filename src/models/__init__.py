"""Models: Stan count regressions and fake-data simulators."""
