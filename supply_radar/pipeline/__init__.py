"""
Request pipeline.

Modules
-------
assembler   Concurrent fetch fan-out followed by coverage, metrics, predictor
            and payload shaping.
"""
