"""Core interfaces and context objects shared by pdfsuite tools."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import Any, Callable, Mapping, Sequence

from ...core.config import Settings
from ...core.crypto import RandomSource
from ...core.document import PdfDocumentHandle
from ...core.exceptions import ValidationError
from ...core.raster import RasterBackend, default_backend
from ...core.types import InputFile, ResultDescriptor
from .options import OptionsBag, ToolOptions


@dataclass
class ProcessingContext:
    """Holds shared execution state for a tool invocation."""

    files: Sequence[InputFile] = ()
    options: OptionsBag = field(default_factory=OptionsBag)
    settings: Settings = field(default_factory=Settings)
    raster: RasterBackend | None = None
    random_bytes: RandomSource | None = None
    resources: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        self.files = tuple(self.files)
        if not isinstance(self.options, OptionsBag):
            self.options = OptionsBag(self.options)
        if self.raster is None:
            self.raster = default_backend()

    def with_updates(
        self,
        *,
        files: Sequence[InputFile] | None = None,
        options: Mapping[str, Any] | None = None,
    ) -> "ProcessingContext":
        data = replace(self, resources=dict(self.resources))
        if files is not None:
            data.files = tuple(files)
        if options:
            data.options = self.options.patch(**options)
        return data


class BaseTool:
    """Base class for all pluggable pdfsuite tools."""

    name: str
    min_files: int = 1
    options_class: type[ToolOptions] = ToolOptions

    def __init__(self, context: ProcessingContext) -> None:
        self.context = context
        self._options: ToolOptions | None = None

    @property
    def options(self) -> Any:
        if self._options is None:
            self._options = self.options_class.from_bag(self.context.options, self.context.settings)
        return self._options

    @property
    def files(self) -> Sequence[InputFile]:
        return self.context.files

    @property
    def settings(self) -> Settings:
        return self.context.settings

    def validate(self) -> None:
        count = len(self.files)
        if count < self.min_files:
            noun = "file" if self.min_files == 1 else "files"
            raise ValidationError(f"Tool '{self.name}' requires at least {self.min_files} {noun}, got {count}")
        self.options  # noqa: B018 - builds and validates the options record

    def open_document(self, file: InputFile, password: str | None = None) -> PdfDocumentHandle:
        if password is None:
            password = getattr(self.options, "password", "") or None
        return PdfDocumentHandle.load(file.data, password, name=file.name)

    def run(self) -> list[ResultDescriptor]:  # pragma: no cover - to be implemented by subclasses
        raise NotImplementedError


ToolFactory = Callable[[ProcessingContext], BaseTool]
