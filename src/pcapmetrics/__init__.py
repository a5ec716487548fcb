"""
pcapmetrics: turn finished packet captures into typed metric events.

Capture files are claimed from their producer, analysed with tshark, and
the tool's tabular output is decoded into tags, fields and timestamps for a
monitoring sink.
"""

__version__ = "0.1.0"
