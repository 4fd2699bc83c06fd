"""Page-tree tools: merge, split, reorder, rotate and friends."""

from __future__ import annotations

import math
import re
from typing import List, Sequence

from ..core.document import PAGE_SIZES, PdfDocumentHandle, open_reader
from ..core.exceptions import ValidationError
from ..core.ranges import parse_ranges, split_range_groups, validate_page_order, validate_page_selection
from ..core.types import ResultDescriptor, pdf_result
from ..core.utils import get_logger
from .common.interfaces import BaseTool
from .common.options import (
    BlankPageOptions,
    DuplicateOptions,
    NUpOptions,
    PageSelectionOptions,
    PasswordOptions,
    ReorderOptions,
    RotateOptions,
    SplitBySizeOptions,
    SplitTextOptions,
)
from .common.pipeline import register_tool

LOGGER = get_logger("pdfsuite.tools.organize")

NUP_GRIDS = {2: (2, 1), 4: (2, 2), 6: (3, 2), 8: (4, 2), 9: (3, 3), 16: (4, 4)}


def _subset(source: PdfDocumentHandle, indices: Sequence[int]) -> PdfDocumentHandle:
    document = PdfDocumentHandle.create()
    document.copy_pages(source, indices)
    return document


@register_tool("merge")
class MergeTool(BaseTool):
    name = "merge"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        merged = PdfDocumentHandle.create()
        for file in self.files:
            source = self.open_document(file)
            LOGGER.debug("Appending %d page(s) from %s", source.page_count, file.name)
            merged.copy_pages(source, range(source.page_count))
        LOGGER.info("Merged %d file(s) into %d page(s)", len(self.files), merged.page_count)
        return [pdf_result("merged_ultra.pdf", merged.save())]


@register_tool("split")
class SplitTool(BaseTool):
    name = "split"
    options_class = SplitTextOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        source = self.open_document(file)
        if self.options.ranges.strip():
            groups = split_range_groups(self.options.ranges, source.page_count)
            if not groups:
                raise ValidationError(f"No valid page ranges in {self.options.ranges!r}")
        else:
            groups = [[index] for index in range(source.page_count)]

        results = []
        for number, group in enumerate(groups, start=1):
            LOGGER.debug("Writing part %d with pages %s", number, [index + 1 for index in group])
            results.append(pdf_result(f"{file.stem}_part_{number}.pdf", _subset(source, group).save()))
        return results


@register_tool("split-by-size")
class SplitBySizeTool(BaseTool):
    """Greedy split into parts no larger than the configured size.

    A single page larger than the limit is still written as its own part.
    """

    name = "split-by-size"
    options_class = SplitBySizeOptions

    def run(self) -> list[ResultDescriptor]:
        source = self.open_document(self.files[0])
        limit = self.options.max_bytes
        results: List[ResultDescriptor] = []
        current: List[int] = []
        for index in range(source.page_count):
            candidate = current + [index]
            if len(current) >= 1 and len(_subset(source, candidate).snapshot()) > limit:
                results.append(pdf_result(f"split_size_{len(results) + 1}.pdf", _subset(source, current).save()))
                current = [index]
            else:
                current = candidate
        if current:
            results.append(pdf_result(f"split_size_{len(results) + 1}.pdf", _subset(source, current).save()))
        LOGGER.info("Split into %d part(s) of at most %d bytes", len(results), limit)
        return results


def _top_level_bookmarks(data: bytes, password: str | None, name: str) -> list[tuple[str, int]]:
    reader = open_reader(data, password, name=name)
    marks: list[tuple[str, int]] = []
    for entry in reader.outline or []:
        if isinstance(entry, list):
            continue
        try:
            page_index = reader.get_destination_page_number(entry)
        except Exception as exc:
            LOGGER.warning("Skipping bookmark %r in %s: %s", getattr(entry, "title", "?"), name, exc)
            continue
        if page_index is None or page_index < 0:
            continue
        marks.append((str(entry.title or "Untitled"), page_index))
    return marks


def _safe_name(title: str) -> str:
    cleaned = re.sub(r"[^A-Za-z0-9._-]+", "_", title).strip("._")
    return cleaned[:60] or "section"


@register_tool("split-by-bookmark")
class SplitByBookmarkTool(BaseTool):
    name = "split-by-bookmark"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        source = self.open_document(file)
        marks = _top_level_bookmarks(file.data, self.options.password or None, file.name)
        starts: dict[int, str] = {}
        for title, page_index in sorted(marks, key=lambda item: item[1]):
            starts.setdefault(page_index, title)
        if not starts:
            raise ValidationError("This PDF has no bookmarks to split by")

        ordered = sorted(starts)
        ordered[0] = 0
        titles = [starts[page] for page in sorted(starts)]
        results = []
        for number, (start, title) in enumerate(zip(ordered, titles), start=1):
            end = ordered[number] if number < len(ordered) else source.page_count
            document = _subset(source, range(start, end))
            results.append(pdf_result(f"{file.stem}_{number:02d}_{_safe_name(title)}.pdf", document.save()))
        return results


@register_tool("extract-pages")
class ExtractPagesTool(BaseTool):
    name = "extract-pages"
    options_class = PageSelectionOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        source = self.open_document(file)
        indices = parse_ranges(self.options.pages, source.page_count)
        if not indices:
            raise ValidationError("Select at least one existing page to extract")
        return [pdf_result(f"extracted_{file.name}", _subset(source, indices).save())]


@register_tool("remove-pages")
class RemovePagesTool(BaseTool):
    name = "remove-pages"
    options_class = PageSelectionOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        doomed = parse_ranges(self.options.pages, document.page_count)
        if not doomed:
            raise ValidationError("Select at least one existing page to remove")
        if len(doomed) == document.page_count:
            raise ValidationError("Cannot remove every page of the document")
        for index in reversed(doomed):
            document.remove_page(index)
        return [pdf_result(f"removed_{file.name}", document.save())]


@register_tool("reorder-pages")
class ReorderPagesTool(BaseTool):
    name = "reorder-pages"
    options_class = ReorderOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        order = self.options.page_order or tuple(range(1, document.page_count + 1))
        document.reorder(validate_page_order(order, document.page_count))
        return [pdf_result(f"reordered_{file.name}", document.save())]


@register_tool("organize-pdf")
class OrganizeTool(BaseTool):
    """Keep the listed pages in the listed order and drop the rest."""

    name = "organize-pdf"
    options_class = ReorderOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        order = self.options.page_order or tuple(range(1, document.page_count + 1))
        document.reorder(validate_page_selection(order, document.page_count))
        return [pdf_result(f"organized_{file.name}", document.save())]


def rotate_document(document: PdfDocumentHandle, angle: int, indices: Sequence[int]) -> None:
    for index in indices:
        document.rotate(index, angle)


@register_tool("rotate-pdf", "rotate-pages")
class RotateTool(BaseTool):
    name = "rotate-pdf"
    options_class = RotateOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        specific = self.options.mode == "specific" or self.name == "rotate-pages"
        if specific:
            indices = parse_ranges(self.options.pages, document.page_count)
            if not indices:
                raise ValidationError("Select at least one existing page to rotate")
        else:
            indices = list(range(document.page_count))
        rotate_document(document, self.options.angle, indices)
        LOGGER.debug("Rotated %d page(s) by %d degrees", len(indices), self.options.angle)
        return [pdf_result(f"rotated_{file.name}", document.save())]


@register_tool("add-blank")
class AddBlankTool(BaseTool):
    name = "add-blank"
    options_class = BlankPageOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        position = min(max(0, self.options.position), document.page_count)
        document.insert_page(position, self.options.page_size)
        return [pdf_result(f"added_blank_{file.name}", document.save())]


@register_tool("duplicate-pages")
class DuplicatePagesTool(BaseTool):
    """Append copies of the selected pages to the end of the document."""

    name = "duplicate-pages"
    options_class = DuplicateOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        indices = parse_ranges(self.options.pages, document.page_count)
        if not indices:
            raise ValidationError("Select at least one existing page to duplicate")
        document.copy_pages(document, indices)
        return [pdf_result(f"duplicated_{file.name}", document.save())]


@register_tool("reverse-pdf")
class ReverseTool(BaseTool):
    name = "reverse-pdf"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        source = self.open_document(file)
        reversed_indices = list(range(source.page_count - 1, -1, -1))
        return [pdf_result(f"reversed_{file.name}", _subset(source, reversed_indices).save())]


@register_tool("mix-pdf")
class MixTool(BaseTool):
    """Interleave pages: first page of each file, then the second, and so on."""

    name = "mix-pdf"
    min_files = 2
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        sources = [self.open_document(file) for file in self.files]
        mixed = PdfDocumentHandle.create()
        longest = max(source.page_count for source in sources)
        for index in range(longest):
            for source in sources:
                if index < source.page_count:
                    mixed.copy_pages(source, [index])
        return [pdf_result("mixed_result.pdf", mixed.save())]


@register_tool("n-up")
class NUpTool(BaseTool):
    """Place several pages on each sheet, left to right then top to bottom."""

    name = "n-up"
    options_class = NUpOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        source = self.open_document(file)
        columns, rows = NUP_GRIDS[self.options.per_sheet]
        sheet_width, sheet_height = PAGE_SIZES["a4"]
        if columns > rows:
            sheet_width, sheet_height = sheet_height, sheet_width
        cell_width = sheet_width / columns
        cell_height = sheet_height / rows

        sheets = PdfDocumentHandle.create()
        per_sheet = columns * rows
        for sheet_number in range(math.ceil(source.page_count / per_sheet)):
            sheet_index = sheets.add_page((sheet_width, sheet_height)).index
            for slot in range(per_sheet):
                page_index = sheet_number * per_sheet + slot
                if page_index >= source.page_count:
                    break
                width, height = source.page(page_index).size
                scale = min(cell_width / width, cell_height / height)
                column, row = slot % columns, slot // columns
                x = column * cell_width + (cell_width - width * scale) / 2
                y = sheet_height - (row + 1) * cell_height + (cell_height - height * scale) / 2
                sheets.place_page(sheet_index, source, page_index, scale=scale, x=x, y=y)
        LOGGER.info("Placed %d page(s) on %d sheet(s)", source.page_count, sheets.page_count)
        return [pdf_result(f"nup_{file.name}", sheets.save())]


__all__ = [
    "MergeTool",
    "SplitTool",
    "SplitBySizeTool",
    "SplitByBookmarkTool",
    "ExtractPagesTool",
    "RemovePagesTool",
    "ReorderPagesTool",
    "OrganizeTool",
    "RotateTool",
    "AddBlankTool",
    "DuplicatePagesTool",
    "ReverseTool",
    "MixTool",
    "NUpTool",
    "rotate_document",
]
