"""Standard MIDI File track-chunk codec."""

from .chunk_event import (  # noqa: F401
    DEFAULT_TIME_DIVISION,
    ChunkEvent,
    TimeFormat,
    split_time_division,
)
from .chunks import Chunk, iter_chunks, track_chunks  # noqa: F401
from .classifier import Classification, EventKind, classify  # noqa: F401
from .messages import (  # noqa: F401
    META_TYPE_NAMES,
    MetaEvent,
    StatusMessage,
    StatusType,
    SysExMessage,
    SystemCommand,
)
from .track_chunk import (  # noqa: F401
    HEADER_SIZE,
    TRACK_TAG,
    TrackChunk,
    parse,
)
from .vlq import (  # noqa: F401
    MAX_VLQ_BYTES,
    MAX_VLQ_QUANTITY,
    VariableLengthQuantity,
)
