"""
This package contains the batch transcode pipeline.

The pipeline discovers the input files, runs the per-file job state machine for
each of them in turn, accumulates the batch counters and reports the results.
"""
