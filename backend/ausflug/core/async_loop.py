"""
Run coroutines from synchronous Celery tasks on one loop per worker process
"""

import asyncio
import threading

_loop: asyncio.AbstractEventLoop = None
_lock = threading.Lock()


def get_worker_loop() -> asyncio.AbstractEventLoop:
    global _loop
    with _lock:
        if _loop is None or _loop.is_closed():
            _loop = asyncio.new_event_loop()
            asyncio.set_event_loop(_loop)
        return _loop


def run_coro(coro):
    """Run coro to completion on the worker loop and return its result"""
    return get_worker_loop().run_until_complete(coro)
