"""
Loading of the configured registry sources.

This package is responsible for:
* Reading registries.yaml from the data directory.
* Turning each configured entry into a concrete registry source.
"""
