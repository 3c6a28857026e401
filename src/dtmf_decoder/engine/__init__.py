"""Decoding engine - runs the detection and protocol stages concurrently.

Contains:
- DecoderPipeline: classifier → debouncer → framer → verifier threads
- HandoffQueue: rendezvous link between stages
"""

from .pipeline import DecoderPipeline, HandoffQueue, SourceExhaustedError, END_OF_STREAM

__all__ = ['DecoderPipeline', 'HandoffQueue', 'SourceExhaustedError', 'END_OF_STREAM']
