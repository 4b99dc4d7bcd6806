"""
Shared utility functions for repoget.
"""
import subprocess
import sys
from typing import Optional, Sequence, Tuple

from .config import logger
from .exit_codes import SubprocessFailureError


def run_command(argv: Sequence[str], cwd: Optional[str] = None, silent: bool = False,
                capture_output: bool = False, check: bool = True) -> Tuple[Optional[str], int]:
    """
    Runs an external command.

    Args:
        argv (list): The command and its arguments. Never run through a shell.
        cwd (str): The working directory.
        silent (bool): Discard stdout/stderr and do not log the invocation.
            Failures are still reported.
        capture_output (bool): If True, return combined stdout/stderr.
        check (bool): If True, raise SubprocessFailureError on failure.

    Returns:
        tuple: (output, returncode). Output is None unless capture_output is set.
        A missing executable is reported with returncode -1.
    """
    argv = [str(a) for a in argv]
    if not silent:
        logger.info(f"{argv[0]} {' '.join(argv[1:])}")

    if capture_output:
        stdout, stderr = subprocess.PIPE, subprocess.STDOUT
    elif silent:
        stdout, stderr = subprocess.DEVNULL, subprocess.DEVNULL
    else:
        # VCS progress goes to stderr so stdout stays clean for data
        stdout, stderr = sys.stderr, sys.stderr

    try:
        result = subprocess.run(
            argv,
            cwd=cwd,
            stdout=stdout,
            stderr=stderr,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        if cwd is not None and e.filename == cwd:
            # The working directory is missing, not the executable
            if check:
                raise SubprocessFailureError(argv, cause=f"no such directory: {cwd}") from e
            return None, -1
        logger.debug(f"Executable not found: {argv[0]}")
        if check:
            raise SubprocessFailureError(argv, not_found=True, cause=argv[0]) from e
        return None, -1
    except PermissionError as e:
        if check:
            raise SubprocessFailureError(argv, cause=str(e)) from e
        return None, -1

    output = result.stdout if capture_output else None
    if result.returncode != 0:
        logger.debug(f"Command failed with exit code {result.returncode}: {' '.join(argv)}")
        if check:
            raise SubprocessFailureError(argv, returncode=result.returncode)
    return output, result.returncode


def run_silently(argv: Sequence[str], cwd: Optional[str] = None) -> bool:
    """Run a check command, discarding output. True when it succeeded."""
    _, returncode = run_command(argv, cwd=cwd, silent=True, check=False)
    return returncode == 0
