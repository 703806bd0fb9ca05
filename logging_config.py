'''
Logging setup for the Newsdesk server.

``setup_logging`` attaches a single console handler to the root logger;
``register_request_logging`` adds per-request access lines to a Flask app.
'''

import logging, time

from flask import Flask, Response, g, request

logger = logging.getLogger('newsdesk.request')


def setup_logging(level:str='INFO') -> None:
    '''Configure the root logger once. Repeated calls (tests, app factory reruns) are no-ops.'''
    root : logging.Logger = logging.getLogger()
    if root.handlers:
        return

    root.setLevel(getattr(logging, level.upper(), logging.INFO))
    handler : logging.StreamHandler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(
        fmt='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    ))
    root.addHandler(handler)


def register_request_logging(app:Flask) -> None:
    @app.before_request
    def start_timer() -> None:
        g.request_started = time.perf_counter()

    @app.after_request
    def log_request(response:Response) -> Response:
        started : float = g.get('request_started', time.perf_counter())
        logger.info(
            'Request processed method=%s path=%s status=%s duration=%.2fms',
            request.method,
            request.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response
