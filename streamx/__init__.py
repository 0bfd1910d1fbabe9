"""Auto-closing streams, replayable stream factories and IO error translation.

Public surface::

    from streamx import (
        Stream,
        Spliterator,
        ElementKind,
        StreamProtocol,
        AutoClosingStream,
        auto_closing,
        Streamable,
        IOStreamable,
        io_function,
        io_consumer,
        StreamError,
        StreamStateError,
        UncheckedIOError,
    )
"""

from .autoclose import (
    AutoClosingStream,
    auto_closing,
    auto_closing_float,
    auto_closing_int,
    auto_closing_long,
)
from .config import StreamConfig, default_config, set_default_config
from .errors import StreamError, StreamStateError, UncheckedIOError, suppressed
from .failure import (
    io_consumer,
    io_function,
    io_predicate,
    io_supplier,
    translating_io_errors,
)
from .kinds import ElementKind
from .protocol import StreamProtocol
from .stats import SummaryStatistics
from .stream import Spliterator, Stream
from .streamable import IOStreamable, Streamable, io_streamable, streamable

__all__ = [
    "Stream",
    "Spliterator",
    "ElementKind",
    "StreamProtocol",
    "StreamConfig",
    "default_config",
    "set_default_config",
    "SummaryStatistics",
    "AutoClosingStream",
    "auto_closing",
    "auto_closing_int",
    "auto_closing_long",
    "auto_closing_float",
    "Streamable",
    "IOStreamable",
    "streamable",
    "io_streamable",
    "io_function",
    "io_consumer",
    "io_predicate",
    "io_supplier",
    "translating_io_errors",
    "StreamError",
    "StreamStateError",
    "UncheckedIOError",
    "suppressed",
]
