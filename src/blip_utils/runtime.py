"""Script sessions: run a script the way the host would.

A session owns one fresh Context plus the Time, HttpRequest, and
TimeSpan objects, and injects them into the script module as the
globals ``request``, ``context``, ``time`` and ``TimeSpan``. Scripts
define a ``run`` function (sync or async) whose positional arguments
are the values of the session's input variables.

Note that the injected ``time`` global shadows the stdlib module of the
same name inside the script, as it does on the host.

Copyright 2025 Ben Mensi
Licensed under the Apache License, Version 2.0
"""

import asyncio
import importlib.util
import inspect
import logging
import sys
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Sequence, Union

from blip_utils.config import HostConfig
from blip_utils.context import Context
from blip_utils.dates import Time
from blip_utils.errors import ScriptLoadError
from blip_utils.event_client import EventClient
from blip_utils.http_request import HttpRequest
from blip_utils.timespan import TimeSpan

logger = logging.getLogger(__name__)


class ScriptSession:
    """The objects one script execution sees. Never shared across runs."""

    def __init__(self, config: Optional[HostConfig] = None):
        self.config = config or HostConfig()
        self.context = Context()
        self.time = Time.from_config(self.config)
        self.request = HttpRequest(timeout=self.config.http_timeout)

    def script_globals(self) -> Dict[str, Any]:
        return {
            "request": self.request,
            "context": self.context,
            "time": self.time,
            "TimeSpan": TimeSpan,
        }


@dataclass
class ScriptResult:
    """Outcome of one script execution."""
    success: bool
    output: Any = None
    error: Optional[str] = None
    variables: Dict[str, Any] = field(default_factory=dict)
    duration_ms: int = 0


def format_exception(error: BaseException) -> str:
    """Render an error the way the host stores captured exceptions."""
    kind = getattr(error, "kind", type(error).__name__)
    return f"{kind}: {error}"


def load_script(path: Union[str, Path], session: ScriptSession) -> Callable[..., Any]:
    """Import a script file with the session objects injected.

    Args:
        path: Path to a Python script defining ``run``.
        session: Session whose objects become the script's globals.

    Returns:
        The script's ``run`` callable.

    Raises:
        ScriptLoadError: If the file is missing, fails to import, or has no run().
    """
    script_path = Path(path).expanduser()
    if not script_path.is_file():
        raise ScriptLoadError(f"script not found: {script_path}")

    module_name = f"blip_script_{uuid.uuid4().hex}"
    spec = importlib.util.spec_from_file_location(module_name, script_path)
    if spec is None or spec.loader is None:
        raise ScriptLoadError(f"cannot load script: {script_path}")

    module = importlib.util.module_from_spec(spec)
    module.__dict__.update(session.script_globals())
    # dataclasses resolves string annotations through sys.modules
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except Exception as e:
        sys.modules.pop(module_name, None)
        raise ScriptLoadError(f"failed to import {script_path}: {e}") from e

    run = getattr(module, "run", None)
    if not callable(run):
        raise ScriptLoadError(f"script {script_path} must define a run() function")
    return run


async def execute(
    run: Callable[..., Any],
    session: ScriptSession,
    inputs: Sequence[str] = (),
    output_variable: Optional[str] = None,
) -> ScriptResult:
    """
    Call a script's run() with input variables and store its output.

    When the session's config enables exception capture, an exception
    raised by the script is stored as "<Kind>: <message>" in the
    configured exception variable instead of propagating.

    Args:
        run: The script's entry point.
        session: Session providing the context.
        inputs: Variable names whose values are passed positionally.
        output_variable: Variable that receives the return value.

    Returns:
        ScriptResult with the output (or captured error) and final variables.
    """
    context = session.context
    values = [await context.get_variable_async(name) for name in inputs]

    try:
        output = run(*values)
        if inspect.isawaitable(output):
            output = await output
    except Exception as e:
        if not session.config.capture_exceptions:
            raise
        message = format_exception(e)
        variable = session.config.exception_variable
        logger.warning(f"Captured script exception into '{variable}': {message}")
        await context.set_variable_async(variable, message)
        return ScriptResult(success=False, error=message, variables=context.variables())

    if output_variable:
        await context.set_variable_async(output_variable, output)
    return ScriptResult(success=True, output=output, variables=context.variables())


def run_script(
    path: Union[str, Path],
    config: Optional[HostConfig] = None,
    variables: Optional[Dict[str, Any]] = None,
    inputs: Sequence[str] = (),
    output_variable: Optional[str] = None,
) -> ScriptResult:
    """Run a script file in a fresh session.

    Args:
        path: Script file.
        config: Host configuration (defaults if None).
        variables: Variables to seed the context with before running.
        inputs: Variable names passed to run() in order.
        output_variable: Variable that receives run()'s return value.

    Returns:
        ScriptResult.

    Raises:
        ScriptLoadError: If the script cannot be loaded.
        Exception: Whatever the script raises when capture is off.
    """
    session = ScriptSession(config)
    event_client = EventClient(session.config.event_log)
    correlation_id = str(uuid.uuid4())

    event_client.log_event(
        event_type="script.started",
        correlation_id=correlation_id,
        status="running",
        payload={
            "script": str(path),
            "inputs": list(inputs),
            "output_variable": output_variable,
            "time_zone": session.time.default_time_zone,
        },
    )

    async def _main() -> ScriptResult:
        for name, value in (variables or {}).items():
            await session.context.set_variable_async(name, value)
        run = load_script(path, session)
        return await execute(run, session, inputs=inputs, output_variable=output_variable)

    start_time = datetime.now(timezone.utc)
    try:
        result = asyncio.run(_main())
    except Exception as e:
        event_client.log_event(
            event_type="script.failed",
            correlation_id=correlation_id,
            status="failed",
            payload={"script": str(path)},
            error_message=format_exception(e),
        )
        raise

    result.duration_ms = int((datetime.now(timezone.utc) - start_time).total_seconds() * 1000)

    if result.success:
        event_client.log_event(
            event_type="script.completed",
            correlation_id=correlation_id,
            status="succeeded",
            payload={"script": str(path), "duration_ms": result.duration_ms},
        )
    else:
        event_client.log_event(
            event_type="script.failed",
            correlation_id=correlation_id,
            status="captured",
            payload={
                "script": str(path),
                "duration_ms": result.duration_ms,
                "exception_variable": session.config.exception_variable,
            },
            error_message=result.error,
        )

    return result
