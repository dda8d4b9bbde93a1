"""Bunch of random utilities."""

import logging
import os
import random
import socket
import time
from contextlib import contextmanager
from pathlib import Path
from typing import Optional

import coloredlogs
import psutil
from filelock import FileLock

logger = logging.getLogger(__name__)


def is_localhost_port_listening(port: int, host="localhost") -> bool:
    """Check if a localhost is running a server already.

    :return: True if there is a process occupying the port
    """

    a_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        result_of_check = a_socket.connect_ex((host, port))
        return result_of_check == 0
    finally:
        a_socket.close()


def find_free_port(min_port: int = 20_000, max_port: int = 40_000, max_attempt: int = 20) -> int:
    """Find a free localhost port for an Anvil fork.

    Picks ports by random.

    .. note ::

        Subject to race condition, but should be rareish.

    :param max_attempt:
        Give up and die with an exception if no port found after this many attempts.

    :return:
        Free port number
    """

    assert type(min_port) == int
    assert type(max_port) == int

    for attempt in range(0, max_attempt):
        random_port = random.randrange(start=min_port, stop=max_port)
        logger.info("Attempting to allocate port %d to Anvil", random_port)
        if not is_localhost_port_listening(random_port, "127.0.0.1"):
            return random_port

    raise RuntimeError(f"Could not find a free port in range {min_port} - {max_port}, {max_attempt} attempts")


def shutdown_hard(
    process: psutil.Popen,
    log_level: Optional[int] = None,
    check_port: Optional[int] = None,
    block_timeout=30,
) -> tuple[bytes, bytes]:
    """Kill a child process and collect its output.

    :param log_level:
        If set, dump the process stdout/stderr to the Python logging with this level.

    :param check_port:
        Block until this localhost port has been freed.

    :return:
        stdout, stderr as bytes
    """

    stdout = b""
    stderr = b""

    if process.poll() is None:
        process.kill()

    for name, stream in (("stdout", process.stdout), ("stderr", process.stderr)):
        if stream is None or stream.closed:
            continue
        data = b"".join(stream.readlines())
        stream.close()
        if log_level is not None:
            for line in data.decode("utf-8", errors="replace").splitlines():
                logger.log(log_level, "%s: %s", name, line)
        if name == "stdout":
            stdout = data
        else:
            stderr = data

    if process.poll() is None:
        process.wait()

    if check_port is not None:
        deadline = time.time() + block_timeout
        while is_localhost_port_listening(check_port):
            if time.time() > deadline:
                raise AssertionError(f"Process did not release port {check_port} in {block_timeout} seconds")
            time.sleep(0.1)

    return stdout, stderr


def setup_console_logging(default_log_level="info") -> logging.Logger:
    """Set up coloured log output for deployment scripts.

    - ``LOG_LEVEL`` environment variable overrides the default level

    - Tune down some noisy dependency library logging

    :return:
        Root logger
    """

    level = os.environ.get("LOG_LEVEL", default_log_level).upper()
    numeric_level = getattr(logging, level, None)
    assert numeric_level, f"No level: {level}"

    fmt = "%(asctime)s %(name)-30s %(levelname)-8s %(message)s"
    date_fmt = "%Y-%m-%d %H:%M:%S"
    coloredlogs.install(level=numeric_level, fmt=fmt, datefmt=date_fmt)

    # Mute noise
    logging.getLogger("web3.providers.HTTPProvider").setLevel(logging.WARNING)
    logging.getLogger("web3.RequestManager").setLevel(logging.WARNING)
    logging.getLogger("urllib3.connectionpool").setLevel(logging.WARNING)
    logging.getLogger("filelock").setLevel(logging.WARNING)
    return logging.getLogger()


@contextmanager
def wait_other_writers(path: Path | str, timeout: int = 120):
    """Wait other processes writing the same path.

    - Parallel test runs and scripts share one Foundry ``out`` folder,
      so only one ``forge build`` may write it at a time

    :param path:
        Absolute path of the file or folder being written

    :param timeout:
        How many seconds wait to acquire the lock file.

    :raise filelock.Timeout:
        If the other writer is stuck with the lock.
    """

    if isinstance(path, str):
        path = Path(path)

    assert path.is_absolute(), f"Did not get an absolute path: {path}"

    os.makedirs(path.parent, exist_ok=True)

    lock_file = path.parent / (path.name + ".lock")
    lock = FileLock(lock_file, timeout=timeout)

    if lock.is_locked:
        logger.info("%s locked for writing, waiting %f seconds", path, timeout)

    with lock:
        yield
