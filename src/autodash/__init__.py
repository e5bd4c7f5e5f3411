"""autodash - automatic dashboards from table metadata and domain rules."""

__version__ = "0.1.0"
