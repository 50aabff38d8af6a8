from .connection import Session, Connection
from .buffers import BufferRegistry, CompletionStore, SharedSlot, SENTINEL_BUFFER
from .parser import ChatMessage, NameListing, Ping, Other, parse_line, pong_line
from .formatter import Transcript, wrap_text, nick_color, format_message
from .commands import CommandInterpreter
from .session import InboundLoop, OutboundLoop, SessionSupervisor

__version__ = '0.1.0'
