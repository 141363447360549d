from .base import BaseEngine
from .output_parser_engine import OutputKind, OutputParserEngine

__all__ = ["BaseEngine", "OutputKind", "OutputParserEngine"]
