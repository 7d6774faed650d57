"""Clip path resolution."""

from abc import ABC, abstractmethod


class ClipPathResolver(ABC):
    """Maps an opaque clip id to a media file path."""

    @abstractmethod
    def resolve(self, clip_id: str) -> str:
        ...


class PlaceholderPathResolver(ClipPathResolver):
    """Builds a deterministic path from a template.

    Stands in until the host application wires a resolver backed by its
    timeline/project data.
    """

    def __init__(self, template: str = "/path/to/video/{clip_id}.mp4"):
        self.template = template

    def resolve(self, clip_id: str) -> str:
        return self.template.format(clip_id=clip_id)
