# sngc — compile editable text PNG source (SNG) to PNG
__version__ = "0.1.0"

from .errors import CompileError, LexError, ParseError, SemanticError, CodecError
from .options import CompileOptions
from .codec import ImageCodec, PngCodec, RecordingCodec
from .compiler import Compiler, CompileResult, compile_source, compile_to_png
