"""Catalog of advertised tools.

Every identifier the front end can request is listed here, whether or not a
dedicated tool implements it. :func:`pdfsuite.dispatch` consults the catalog
to tell an advertised-but-unimplemented tool (served by a fallback) from an
identifier nobody ever offered.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterable, List

ORGANIZE = "Organize PDF"
CONVERT_TO = "Convert to PDF"
CONVERT_FROM = "Convert from PDF"
SECURITY = "Security"
EDIT = "Edit PDF"
ADVANCED = "Advanced"

CATEGORIES = (ORGANIZE, CONVERT_TO, CONVERT_FROM, SECURITY, EDIT, ADVANCED)


@dataclass(frozen=True)
class ToolInfo:
    id: str
    name: str
    category: str
    description: str
    popular: bool = False


def _tool(tool_id: str, name: str, category: str, description: str, popular: bool = False) -> ToolInfo:
    return ToolInfo(tool_id, name, category, description, popular)


CATALOG: List[ToolInfo] = [
    _tool("merge", "Merge PDF", ORGANIZE, "Combine multiple PDFs into one unified document.", popular=True),
    _tool("split", "Split PDF", ORGANIZE, "Extract pages or split your PDF into multiple files.", popular=True),
    _tool("remove-pages", "Remove Pages", ORGANIZE, "Delete specific pages from your document."),
    _tool("extract-pages", "Extract Pages", ORGANIZE, "Get specific pages as a separate PDF file."),
    _tool("organize-pdf", "Organize PDF", ORGANIZE, "Sort, add and delete PDF pages."),
    _tool("scan-pdf", "Scan to PDF", ORGANIZE, "Capture document from images to PDF."),
    _tool("reorder-pages", "Reorder Pages", ORGANIZE, "Drag and drop to reorder pages."),
    _tool("rotate-pdf", "Rotate PDF", ORGANIZE, "Rotate your PDF pages permanently."),
    _tool("add-blank", "Add Blank Page", ORGANIZE, "Insert blank pages into your PDF."),
    _tool("duplicate-pages", "Duplicate Pages", ORGANIZE, "Duplicate specific pages."),
    _tool("reverse-pdf", "Reverse PDF", ORGANIZE, "Reverse the order of pages."),
    _tool("mix-pdf", "Mix PDF", ORGANIZE, "Interleave pages from two different PDFs."),
    _tool("jpg-to-pdf", "JPG to PDF", CONVERT_TO, "Convert JPG images to PDF in seconds.", popular=True),
    _tool("word-to-pdf", "Word to PDF", CONVERT_TO, "Convert DOC/DOCX to PDF.", popular=True),
    _tool("powerpoint-to-pdf", "PowerPoint to PDF", CONVERT_TO, "Convert PPT/PPTX presentations to PDF."),
    _tool("excel-to-pdf", "Excel to PDF", CONVERT_TO, "Convert XLS/XLSX spreadsheets to PDF."),
    _tool("html-to-pdf", "HTML to PDF", CONVERT_TO, "Convert webpages to PDF documents."),
    _tool("png-to-pdf", "PNG to PDF", CONVERT_TO, "Convert PNG images to PDF."),
    _tool("tiff-to-pdf", "TIFF to PDF", CONVERT_TO, "Convert TIFF images to PDF."),
    _tool("txt-to-pdf", "TXT to PDF", CONVERT_TO, "Convert plain text files to PDF."),
    _tool("markdown-to-pdf", "Markdown to PDF", CONVERT_TO, "Convert Markdown (.md) to PDF."),
    _tool("epub-to-pdf", "EPUB to PDF", CONVERT_TO, "Convert eBooks to PDF format."),
    _tool("djvu-to-pdf", "DJVU to PDF", CONVERT_TO, "Convert DJVU files to PDF."),
    _tool("rtf-to-pdf", "RTF to PDF", CONVERT_TO, "Convert Rich Text to PDF."),
    _tool("odt-to-pdf", "ODT to PDF", CONVERT_TO, "Convert OpenOffice documents to PDF."),
    _tool("ppt-to-pdf", "PPT to PDF", CONVERT_TO, "Convert legacy PowerPoint to PDF."),
    _tool("bmp-to-pdf", "BMP to PDF", CONVERT_TO, "Convert Bitmap images to PDF."),
    _tool("svg-to-pdf", "SVG to PDF", CONVERT_TO, "Convert Vector graphics to PDF."),
    _tool("heic-to-pdf", "HEIC to PDF", CONVERT_TO, "Convert iPhone photos to PDF."),
    _tool("webp-to-pdf", "WebP to PDF", CONVERT_TO, "Convert WebP images to PDF."),
    _tool("pdf-to-jpg", "PDF to JPG", CONVERT_FROM, "Extract images or save pages as JPG.", popular=True),
    _tool("pdf-to-word", "PDF to Word", CONVERT_FROM, "Convert PDF to editable Word documents.", popular=True),
    _tool("pdf-to-powerpoint", "PDF to PowerPoint", CONVERT_FROM, "Convert PDF to Powerpoint presentations."),
    _tool("pdf-to-excel", "PDF to Excel", CONVERT_FROM, "Convert PDF data to Excel spreadsheets."),
    _tool("pdf-to-pdfa", "PDF to PDF/A", CONVERT_FROM, "Convert for long-term archiving (ISO 19005)."),
    _tool("pdf-to-png", "PDF to PNG", CONVERT_FROM, "Save each page as a PNG image."),
    _tool("pdf-to-html", "PDF to HTML", CONVERT_FROM, "Convert PDF to HTML5."),
    _tool("pdf-to-text", "PDF to Text", CONVERT_FROM, "Extract plain text from PDF."),
    _tool("pdf-to-rtf", "PDF to RTF", CONVERT_FROM, "Convert PDF to Rich Text Format."),
    _tool("pdf-to-epub", "PDF to EPUB", CONVERT_FROM, "Convert PDF to eBook format."),
    _tool("pdf-to-bmp", "PDF to BMP", CONVERT_FROM, "Convert PDF pages to BMP."),
    _tool("pdf-to-tiff", "PDF to TIFF", CONVERT_FROM, "Convert PDF pages to TIFF."),
    _tool("pdf-to-svg", "PDF to SVG", CONVERT_FROM, "Convert PDF pages to SVG vector."),
    _tool("extract-images", "Extract Images", CONVERT_FROM, "Extract all images embedded in a PDF."),
    _tool("unlock-pdf", "Unlock PDF", SECURITY, "Remove password security from PDF.", popular=True),
    _tool("protect-pdf", "Protect PDF", SECURITY, "Encrypt or decrypt PDFs with military-grade AES-256 encryption."),
    _tool("sign-pdf", "Sign PDF", SECURITY, "Add a digital signature to your PDF.", popular=True),
    _tool("watermark-pdf", "Watermark", SECURITY, "Stamp an image or text over your PDF."),
    _tool("redact-pdf", "Redact PDF", SECURITY, "Permanently black out sensitive text."),
    _tool("sanitize-pdf", "Sanitize PDF", SECURITY, "Remove hidden metadata and comments."),
    _tool("flatten-pdf", "Flatten PDF", SECURITY, "Merge layers and form fields."),
    _tool("compress-pdf", "Compress PDF", EDIT, "Reduce file size while maintaining quality.", popular=True),
    _tool("page-numbers", "Page Numbers", EDIT, "Add page numbers to your PDF."),
    _tool("add-header-footer", "Header & Footer", EDIT, "Add custom headers and footers."),
    _tool("crop-pdf", "Crop PDF", EDIT, "Crop pages to a specific size."),
    _tool("rotate-pages", "Rotate Pages", EDIT, "Rotate individual pages."),
    _tool("resize-pdf", "Resize PDF", EDIT, "Change the page size (e.g. A4 to Letter)."),
    _tool("grayscale-pdf", "Grayscale PDF", EDIT, "Convert PDF colors to black & white."),
    _tool("annotation-pdf", "Annotate PDF", EDIT, "Add notes and markup."),
    _tool("overlay-pdf", "Overlay PDF", EDIT, "Overlay one PDF on top of another."),
    _tool("deskew-pdf", "Deskew PDF", EDIT, "Straighten scanned PDF pages."),
    _tool("contrast-pdf", "Adjust Contrast", EDIT, "Enhance darkness of text."),
    _tool("repair-pdf", "Repair PDF", ADVANCED, "Recover data from corrupted PDFs."),
    _tool("ocr-pdf", "OCR PDF", ADVANCED, "Make scanned PDFs searchable.", popular=True),
    _tool("compare-pdf", "Compare PDF", ADVANCED, "Show differences between two PDFs."),
    _tool("optimize-web", "Optimize for Web", ADVANCED, "Linearize PDF for fast web view."),
    _tool("meta-edit", "Edit Metadata", ADVANCED, "Change title, author, and keywords."),
    _tool("set-viewer", "Viewer Prefs", ADVANCED, "Set initial view settings (zoom, layout)."),
    _tool("extract-fonts", "Extract Fonts", ADVANCED, "Professional font analysis with detailed reports, usage statistics, and health checks."),
    _tool("analyze-pdf", "Analyze PDF", ADVANCED, "Get detailed structure info."),
    _tool("certificate-sign", "Certify PDF", SECURITY, "Sign with a digital certificate ID."),
    _tool("timestamp-pdf", "Timestamp PDF", SECURITY, "Add trusted timestamp."),
    _tool("convert-pdf-xml", "PDF to XML", CONVERT_FROM, "Convert structure to XML."),
    _tool("convert-pdf-json", "PDF to JSON", CONVERT_FROM, "Convert data to JSON."),
    _tool("batch-process", "Batch Process", ADVANCED, "Apply actions to many files."),
    _tool("print-ready", "Print Ready", ADVANCED, "Convert RGB to CMYK for printing."),
    _tool("extract-tables", "Extract Tables", CONVERT_FROM, "Pull tables specifically."),
    _tool("delete-annotations", "Clear Notes", EDIT, "Remove all comments/notes."),
    _tool("image-extraction", "Grab Images", CONVERT_FROM, "Get all images as a zip."),
    _tool("split-by-bookmark", "Split via Bookmarks", ORGANIZE, "Use bookmarks to define split points."),
    _tool("split-by-size", "Split by Size", ORGANIZE, "Split into files of X MB."),
    _tool("split-by-text", "Split by Text", ORGANIZE, "Split when specific text changes."),
    _tool("n-up", "N-Up", ORGANIZE, "Fit multiple pages on one sheet."),
    _tool("booklet-maker", "Booklet", ORGANIZE, "Reorder pages for booklet printing."),
    _tool("qr-to-pdf", "QR to PDF", CONVERT_TO, "Create PDF from QR content."),
    _tool("barcode-pdf", "Barcode Stamp", SECURITY, "Add barcode to pages."),
    _tool("pdf-to-long-img", "Long Image", CONVERT_FROM, "Convert all pages to one tall image."),
    _tool("remove-password", "Remove Pass", SECURITY, "Brute force removal (Client side limited)."),
    _tool("change-password", "Change Pass", SECURITY, "Update existing password."),
    _tool("pdf-to-csv", "PDF to CSV", CONVERT_FROM, "Table data to CSV."),
    _tool("xps-to-pdf", "XPS to PDF", CONVERT_TO, "Convert XPS to PDF."),
    _tool("oxps-to-pdf", "OXPS to PDF", CONVERT_TO, "Convert OXPS to PDF."),
    _tool("cbr-to-pdf", "CBR to PDF", CONVERT_TO, "Comic book CBR to PDF."),
    _tool("cbz-to-pdf", "CBZ to PDF", CONVERT_TO, "Comic book CBZ to PDF."),
    _tool("jb2-to-pdf", "JB2 to PDF", CONVERT_TO, "JB2 to PDF."),
    _tool("pct-to-pdf", "PCT to PDF", CONVERT_TO, "PCT to PDF."),
    _tool("decrypt-pdf", "Decrypt PDF", SECURITY, "Open a file sealed by Protect PDF."),
]

_BY_ID: Dict[str, ToolInfo] = {info.id: info for info in CATALOG}


def get_tool_info(tool_id: str) -> ToolInfo | None:
    return _BY_ID.get(tool_id)


def is_advertised(tool_id: str) -> bool:
    return tool_id in _BY_ID


def tools_in_category(category: str) -> Iterable[ToolInfo]:
    return [info for info in CATALOG if info.category == category]


__all__ = [
    "CATALOG",
    "CATEGORIES",
    "ToolInfo",
    "get_tool_info",
    "is_advertised",
    "tools_in_category",
    "ORGANIZE",
    "CONVERT_TO",
    "CONVERT_FROM",
    "SECURITY",
    "EDIT",
    "ADVANCED",
]
