"""Logger with composable output sinks, built on logfire.

There is no process-wide logger object. Config builds a Logger and
hands it to each component; components that are created without
one fall back to NullLogger.
"""

from __future__ import annotations

import contextlib
import sys
from abc import abstractmethod
from pathlib import Path
from typing import Any

from opentelemetry.proto.logs.v1 import logs_pb2
from opentelemetry.sdk.trace import ReadableSpan
from opentelemetry.sdk.trace.export import SpanExporter, SpanExportResult
from pydantic import Field, PrivateAttr, model_validator

from mergemend.core.base import BaseConfig

# Level names to OpenTelemetry severity numbers, most verbose first.
LEVELS = {
    'spew': logs_pb2.SEVERITY_NUMBER_TRACE,
    'trace': logs_pb2.SEVERITY_NUMBER_TRACE3,
    'debug': logs_pb2.SEVERITY_NUMBER_DEBUG,
    'info': logs_pb2.SEVERITY_NUMBER_INFO,
    'warn': logs_pb2.SEVERITY_NUMBER_WARN,
    'error': logs_pb2.SEVERITY_NUMBER_ERROR,
    'fatal': logs_pb2.SEVERITY_NUMBER_FATAL,
}

# Span attributes already rendered by a template, or instrumentation
# internals.
_INTERNAL_ATTRS = frozenset({
    'code.filepath', 'code.lineno', 'code.function',
    'logfire.msg', 'logfire.level_num', 'logfire.span_type',
    'logfire.msg_template', 'logfire.json_schema',
})


def level_name(level_num: int) -> str:
    """Map a severity number back to the closest level name."""
    for name in reversed(LEVELS):
        if level_num >= LEVELS[name]:
            return name
    return 'spew'


class LevelFilteringExporter(SpanExporter):
    """Forward only spans at or above a minimum level."""

    def __init__(self, exporter: SpanExporter, min_level: str | None):
        self._exporter = exporter
        self._min_severity = LEVELS.get(
            (min_level or 'info').lower(), LEVELS['info']
        )

    def export(self, spans: list[ReadableSpan]) -> SpanExportResult:
        kept = [
            span for span in spans
            if (span.attributes or {}).get(
                'logfire.level_num', LEVELS['info']
            ) >= self._min_severity
        ]
        if kept:
            return self._exporter.export(kept)
        return SpanExportResult.SUCCESS

    def shutdown(self) -> None:
        self._exporter.shutdown()

    def force_flush(self, timeout_millis: int = 30000) -> bool:
        return self._exporter.force_flush(timeout_millis)


class Sink(BaseConfig):
    """One independent log destination.

    Sinks are closed through the BaseCloseable cascade when the
    owning Logger is closed.
    """

    enabled: bool = Field(default=True, description="Enable this sink")
    level: str | None = Field(
        default=None,
        description=(
            "Minimum level for this sink; inherits Logger.level when "
            "unset. Valid: spew, trace, debug, info, warn, error, fatal"
        ),
    )
    escape_special_characters: bool = Field(
        default=False,
        description="Escape newlines and tabs so each record is one line",
    )
    format_template: str | None = Field(
        default=None,
        description="str.format template for text sinks",
    )

    _processor: Any = PrivateAttr(default=None)

    @staticmethod
    def _escape(text: str) -> str:
        return (
            text.replace('\\', '\\\\')
            .replace('\n', '\\n')
            .replace('\r', '\\r')
            .replace('\t', '\\t')
        )

    def _format_span(self, span) -> str:
        """Render one span with format_template, or as JSON."""
        from datetime import UTC, datetime

        if not self.format_template:
            import os
            return span.to_json() + os.linesep

        attrs = span.attributes or {}
        filepath = attrs.get('code.filepath', '')
        lineno = attrs.get('code.lineno', '')
        message = attrs.get('logfire.msg', span.name)
        if self.escape_special_characters:
            message = self._escape(message)

        data = {
            'timestamp': datetime.fromtimestamp(
                span.start_time / 1e9, tz=UTC
            ),
            'level': level_name(
                attrs.get('logfire.level_num', LEVELS['info'])
            ),
            'message': message,
            'filepath': filepath,
            'lineno': lineno,
            'location': f"{filepath}:{lineno}" if filepath else "",
            'function': attrs.get('code.function', ''),
        }
        try:
            formatted = self.format_template.format(**data)
        except KeyError as e:
            return f"ERROR: Invalid template field {e}\n"

        extras = {
            key: value for key, value in attrs.items()
            if key not in _INTERNAL_ATTRS
            and not key.startswith(
                ('otel.', 'telemetry.', 'service.', 'process.')
            )
        }
        if extras:
            rendered = ' '.join(
                f"{k}={v!r}" for k, v in sorted(extras.items())
            )
            formatted = f"{formatted} │ {rendered}"
        return formatted + '\n'

    @abstractmethod
    def create_processor(self, log_root: Path, session: str):
        """Return a span processor for this sink, or None."""

    def close(self):
        if self._processor:
            with contextlib.suppress(Exception):
                self._processor.shutdown()


class ConsoleSink(Sink):
    """Console output, rendered by logfire itself."""

    verbose: bool = Field(default=False, description="Show span details")
    colors: str = Field(
        default="auto", description="Color mode: auto, always, never"
    )

    def create_processor(self, log_root: Path, session: str):
        return None


class OTLPSink(Sink):
    """OTLP export to a collector (SigNoz, Jaeger, ...)."""

    enabled: bool = Field(default=False, description="Enable OTLP export")
    endpoint: str = Field(
        default="http://localhost:4317", description="OTLP gRPC endpoint"
    )
    insecure: bool = Field(default=True, description="Disable TLS")
    headers: dict[str, str] = Field(
        default_factory=dict, description="Extra request headers"
    )

    def create_processor(self, log_root: Path, session: str):
        from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (
            OTLPSpanExporter,
        )
        from opentelemetry.sdk.trace.export import BatchSpanProcessor

        exporter = OTLPSpanExporter(
            endpoint=self.endpoint,
            insecure=self.insecure,
            headers=self.headers or None,
        )
        return BatchSpanProcessor(
            LevelFilteringExporter(exporter, self.level)
        )


class FileSink(Sink):
    """Append formatted records to a log file."""

    enabled: bool = Field(default=False, description="Enable file logging")
    path: str = Field(
        default="{log_root}/{session}/mergemend.log",
        description="Log file path; {log_root} and {session} expand",
    )
    format_template: str | None = Field(
        default="{timestamp:%Y-%m-%d %H:%M:%S} {level:<5} {message}",
        description="str.format template for each record",
    )

    _file: Any = PrivateAttr(default=None)

    def create_processor(self, log_root: Path, session: str):
        from opentelemetry.sdk.trace.export import (
            BatchSpanProcessor,
            ConsoleSpanExporter,
        )

        log_path = Path(self.path.format(log_root=log_root, session=session))
        log_path.parent.mkdir(parents=True, exist_ok=True)
        # Line buffered so a crash loses at most the current record.
        self._file = open(log_path, "a", buffering=1, encoding="utf-8")  # noqa: SIM115

        exporter = ConsoleSpanExporter(
            out=self._file, formatter=self._format_span
        )
        return BatchSpanProcessor(
            LevelFilteringExporter(exporter, self.level)
        )

    def close(self):
        # Processor first so queued spans reach the file.
        super().close()
        if self._file and not self._file.closed:
            with contextlib.suppress(OSError):
                self._file.flush()
                self._file.close()


class LogfireSink(Sink):
    """Send records to the logfire.dev service."""

    enabled: bool = Field(default=False, description="Send to logfire.dev")
    token: str | None = Field(
        default=None, description="API token (or LOGFIRE_TOKEN)"
    )

    def create_processor(self, log_root: Path, session: str):
        return None


class Logger(BaseConfig):
    """Logger with composable sinks.

    Closing the Logger closes every sink through the BaseCloseable
    cascade.
    """

    level: str = Field(
        default="info",
        description=(
            "Default level for sinks that do not set their own. "
            "Valid: spew, trace, debug, info, warn, error, fatal"
        ),
    )
    console: ConsoleSink = Field(default_factory=ConsoleSink)
    otlp: OTLPSink = Field(default_factory=OTLPSink)
    file: FileSink = Field(default_factory=FileSink)
    logfire: LogfireSink = Field(default_factory=LogfireSink)

    @model_validator(mode='after')
    def _cascade_level_to_sinks(self) -> 'Logger':
        for sink in (self.console, self.otlp, self.file):
            if sink.level is None:
                sink.level = self.level
        return self

    def _sinks(self) -> list[Sink]:
        return [self.console, self.otlp, self.file, self.logfire]

    def setup(self, log_root: Path, session: str) -> 'Logger':
        """Create processors for enabled sinks and configure logfire."""
        import logfire
        from logfire import ConsoleOptions

        for sink in self._sinks():
            if sink.enabled:
                sink._processor = sink.create_processor(log_root, session)

        processors = [
            sink._processor for sink in self._sinks()
            if sink.enabled and sink._processor
        ]

        console = (
            ConsoleOptions(
                # logfire has no level below trace.
                min_log_level=(
                    "trace" if self.console.level == "spew"
                    else self.console.level
                ),
                verbose=self.console.verbose,
                colors=self.console.colors,
                include_timestamps=True,
                output=sys.stderr,
            )
            if self.console.enabled
            else False
        )

        logfire.configure(
            service_name=f"mergemend-{session}",
            send_to_logfire=self.logfire.enabled,
            token=self.logfire.token if self.logfire.enabled else None,
            console=console,
            additional_span_processors=processors or None,
        )
        logfire.instrument_pydantic_ai()
        return self

    def info(self, msg: str, **kwargs):
        import logfire
        logfire.info(msg, **kwargs)

    def debug(self, msg: str, **kwargs):
        import logfire
        logfire.debug(msg, **kwargs)

    def trace(self, msg: str, **kwargs):
        self.log('trace', msg, **kwargs)

    def spew(self, msg: str, **kwargs):
        """Below trace: subprocess chatter and other noise."""
        self.log('spew', msg, **kwargs)

    def warn(self, msg: str, **kwargs):
        import logfire
        logfire.warn(msg, **kwargs)

    warning = warn

    def error(self, msg: str, **kwargs):
        import logfire
        logfire.error(msg, **kwargs)

    def span(self, msg: str, **kwargs):
        """Context manager that groups the records logged inside it."""
        import logfire
        return logfire.span(msg, **kwargs)

    def log(self, level: str, msg: str, **kwargs):
        import logfire
        logfire.log(
            level=LEVELS.get(level, LEVELS['info']),
            msg_template=msg,
            attributes=kwargs or None,
        )


class NullLogger:
    """Logger stand-in that discards everything."""

    def _discard(self, *args, **kwargs):  # noqa: ARG002
        pass

    info = debug = trace = spew = warn = warning = error = log = _discard

    def span(self, *args, **kwargs):  # noqa: ARG002
        return contextlib.nullcontext()

    def close(self):
        pass


def setup_logger(
    log_root: Path,
    session: str,
    console: ConsoleSink | None = None,
    otlp: OTLPSink | None = None,
    file: FileSink | None = None,
    logfire: LogfireSink | None = None,
    level: str = "info",
) -> Logger:
    """Build and set up a Logger outside of Config (tests, scripts).

    Args:
        log_root: Root directory for log files
        session: Name used in the service name and log paths
        console: Console sink config (or None for defaults)
        otlp: OTLP sink config (or None for defaults)
        file: File sink config (or None for defaults)
        logfire: logfire.dev sink config (or None for defaults)
        level: Default level for sinks that do not set one

    Returns:
        Logger: A configured logger; close it when done
    """
    logger = Logger(
        level=level,
        console=console or ConsoleSink(),
        otlp=otlp or OTLPSink(),
        file=file or FileSink(),
        logfire=logfire or LogfireSink(),
    )
    return logger.setup(log_root, session)
