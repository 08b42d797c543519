"""
Signal Worker
=============

Request/response message boundary of the engine, meant to run off the
caller's latency-sensitive path.

Message Contract:
----------------
Request:   {'id': int, 'type': str, 'payload': dict}
Response:  {'id': int, 'result': ... | None, 'error': str | None}

Exactly one of result and error is not None.

Request Types:
-------------
processSignal
    payload: rawSignal, samplingRate, bandpassLow, bandpassHigh,
             filterOrder, optional resultShape ('compact' | 'full')
    result:  {cleanedSignal, qualityMetrics} or, for 'full',
             {rawSignal, bandpassSignal, cleanedSignal, qualityMetrics}

computeFFT
    payload: signal, samplingRate, optional method ('radix2' | 'direct')
    result:  list of magnitudes

Threading:
---------
serve() drains a queue.Queue inbox one request at a time and stops on a
None sentinel. start_worker() runs it on a daemon thread. Workers share
no mutable state, so several may run side by side.

Example Usage:
    ```python
    import queue
    from pulsedsp.engine import start_worker

    inbox, outbox = queue.Queue(), queue.Queue()
    thread = start_worker(inbox, outbox)

    inbox.put({'id': 1, 'type': 'computeFFT', 'payload': {'signal': [1, 0, 0, 0]}})
    response = outbox.get()

    inbox.put(None)
    thread.join()
    ```

Author: PulseDSP
Date: 2024
"""

from typing import Dict, Any, Optional, Callable
import logging
import queue
import threading

from pulsedsp.core.exceptions import UnknownRequestType, InvalidRequestError
from pulsedsp.core.types import RESULT_SHAPES
from pulsedsp.engine.processing import ProcessingPipeline
from pulsedsp.utils.logging import log_exception, setup_logging_from_config


logger = logging.getLogger(__name__)

# Sentinel that stops serve()
STOP = None

_PROCESS_FIELDS = ('rawSignal', 'samplingRate', 'bandpassLow', 'bandpassHigh', 'filterOrder')


class SignalWorker:
    """
    Dispatches request messages to a ProcessingPipeline.

    Attributes:
        pipeline (ProcessingPipeline): Engine used for every request
    """

    def __init__(self,
                 config: Optional[Dict[str, Any]] = None,
                 pipeline: Optional[ProcessingPipeline] = None):
        self.pipeline = pipeline or ProcessingPipeline(config)
        self._handlers: Dict[str, Callable[[Dict[str, Any]], Any]] = {
            'processSignal': self._process_signal,
            'computeFFT': self._compute_fft,
        }

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def handle(self, message: Any) -> Dict[str, Any]:
        """
        Answer one request message.

        Never raises: every failure becomes an error response. The id is
        echoed when the message carries an integer id, otherwise it is
        None.

        Args:
            message: Request dict

        Returns:
            Response dict with id, result and error
        """
        request_id = self._extract_id(message)

        try:
            if request_id is None:
                raise InvalidRequestError("'id' must be an integer")

            request_type = message.get('type')
            handler = self._handlers.get(request_type) if isinstance(request_type, str) else None
            if handler is None:
                raise UnknownRequestType(request_type)

            payload = message.get('payload')
            if not isinstance(payload, dict):
                raise InvalidRequestError("'payload' must be an object")

            result = handler(payload)

        except Exception as e:
            log_exception(logger, e, f"Request {request_id} failed")
            return {'id': request_id, 'result': None, 'error': str(e)}

        logger.debug(f"Request {request_id} ({request_type}) completed")
        return {'id': request_id, 'result': result, 'error': None}

    @staticmethod
    def _extract_id(message: Any) -> Optional[int]:
        if not isinstance(message, dict):
            return None
        request_id = message.get('id')
        if isinstance(request_id, bool) or not isinstance(request_id, int):
            return None
        return request_id

    # =========================================================================
    # HANDLERS
    # =========================================================================

    def _process_signal(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        missing = [field for field in _PROCESS_FIELDS if field not in payload]
        if missing:
            raise InvalidRequestError(f"processSignal payload missing {missing}")

        shape = payload.get('resultShape', self.pipeline.result_shape)
        if shape not in RESULT_SHAPES:
            raise InvalidRequestError(
                f"resultShape must be one of {list(RESULT_SHAPES)}, got {shape!r}"
            )

        result = self.pipeline.process(
            payload['rawSignal'],
            payload['samplingRate'],
            payload['bandpassLow'],
            payload['bandpassHigh'],
            payload['filterOrder']
        )
        return result.to_message(shape)

    def _compute_fft(self, payload: Dict[str, Any]) -> list:
        if 'signal' not in payload:
            raise InvalidRequestError("computeFFT payload missing ['signal']")

        magnitudes = self.pipeline.analyze_spectrum(
            payload['signal'],
            payload.get('samplingRate'),
            method=payload.get('method')
        )
        return magnitudes.tolist()

    # =========================================================================
    # QUEUE LOOP
    # =========================================================================

    def serve(self, inbox: queue.Queue, outbox: queue.Queue) -> int:
        """
        Handle requests from inbox until the STOP sentinel arrives.

        Responses without an id cannot be correlated by the caller and
        are logged instead of posted.

        Returns:
            Number of requests handled
        """
        handled = 0
        logger.info("Signal worker started")

        while True:
            message = inbox.get()
            try:
                if message is STOP:
                    break

                response = self.handle(message)
                handled += 1

                if response['id'] is None:
                    logger.error(f"Dropping response to message without id: {response['error']}")
                else:
                    outbox.put(response)
            finally:
                inbox.task_done()

        logger.info(f"Signal worker stopped after {handled} requests")
        return handled


def start_worker(inbox: queue.Queue,
                 outbox: queue.Queue,
                 config: Optional[Dict[str, Any]] = None,
                 name: str = 'pulsedsp-worker',
                 configure_logging: bool = False) -> threading.Thread:
    """
    Run a SignalWorker on a daemon thread.

    Args:
        inbox: Queue of request dicts (put None to stop)
        outbox: Queue receiving response dicts
        config: Optional configuration overrides
        configure_logging: Apply the 'logging' configuration section to
            the root logger before the thread starts

    Returns:
        The started thread
    """
    worker = SignalWorker(config)
    if configure_logging:
        setup_logging_from_config(worker.pipeline.settings.get('logging', {}))

    thread = threading.Thread(target=worker.serve, args=(inbox, outbox), name=name, daemon=True)
    thread.start()
    return thread
