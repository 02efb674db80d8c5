"""
testctl - plugin loading and test catalog extraction for the test controller.

Package layout:
- plugins/    plugin taxonomy, loader and the built-in catalog reader
- extractor/  test bundle scanning and catalog generation
- config.py   controller.yaml parsing
- markers.py  decorators that tag fixtures and tests inside bundles
- cli.py      ``testctl`` command-line entry-point
"""

__version__ = "0.1.0"
