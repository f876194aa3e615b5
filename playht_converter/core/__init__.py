"""Core package — the conversion pipeline and the artifact writer."""

from playht_converter.core.pipeline import (
    ConversionPipeline,
    PipelineState,
    PollPolicy,
    convert_text_to_file,
)
from playht_converter.core.writer import ArtifactWriter

__all__ = [
    "ArtifactWriter",
    "ConversionPipeline",
    "PipelineState",
    "PollPolicy",
    "convert_text_to_file",
]
