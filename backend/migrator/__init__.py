"""Legacy data migration workbench: dataset profiling and schema inference."""
