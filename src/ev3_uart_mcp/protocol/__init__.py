"""Protocol layer: wire constants, message framing and message builders."""

from .magics import Base, Cmd, Info, InfoDtype, InfoSpan, MessageKind, Sys
from .framing import MessageBuffer, checksum, insert_padding, length_code, log2ceil
from .messages import build_message
