"""
Engine Module
=============

Processing orchestration and the request/response worker.
"""

from pulsedsp.engine.processing import ProcessingPipeline
from pulsedsp.engine.worker import SignalWorker, start_worker, STOP

__all__ = [
    'ProcessingPipeline',
    'SignalWorker',
    'start_worker',
    'STOP',
]
