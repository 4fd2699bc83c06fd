"""Password, envelope encryption and sanitising tools."""

from __future__ import annotations

from ..core.crypto import ENVELOPE_EXTENSION, open_sealed, seal
from ..core.exceptions import ValidationError
from ..core.types import OCTET_STREAM_MIME, ResultDescriptor, pdf_result
from ..core.utils import get_logger
from .common.interfaces import BaseTool
from .common.options import ChangePasswordOptions, PasswordOptions, ProtectOptions
from .common.pipeline import register_tool

LOGGER = get_logger("pdfsuite.tools.security")


@register_tool("protect-pdf")
class ProtectTool(BaseTool):
    """Password-protect a PDF, then wrap it in the authenticated envelope."""

    name = "protect-pdf"
    options_class = ProtectOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        password = self.options.password
        document = self.open_document(file)
        protected = document.save(user_password=password, owner_password=password)
        envelope = seal(protected, password, random_bytes=self.context.random_bytes)
        LOGGER.info("Protected %s (%d bytes sealed)", file.name, len(protected))
        return [ResultDescriptor(f"{file.name}{ENVELOPE_EXTENSION}", envelope, OCTET_STREAM_MIME)]


@register_tool("decrypt-pdf")
class DecryptTool(BaseTool):
    """Open an envelope produced by ``protect-pdf``."""

    name = "decrypt-pdf"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        if not file.name.lower().endswith(ENVELOPE_EXTENSION):
            raise ValidationError(
                f"Decrypt expects a {ENVELOPE_EXTENSION} file. Use Unlock PDF to remove a regular PDF password."
            )
        if not self.options.password:
            raise ValidationError("A password is required to decrypt this file")
        plaintext = open_sealed(file.data, self.options.password)
        name = file.name[: -len(ENVELOPE_EXTENSION)] or "decrypted.pdf"
        return [pdf_result(name, plaintext)]


@register_tool("unlock-pdf", "remove-password")
class UnlockTool(BaseTool):
    name = "unlock-pdf"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        return [pdf_result(f"unlocked_{file.name}", document.save())]


@register_tool("change-password")
class ChangePasswordTool(BaseTool):
    name = "change-password"
    options_class = ChangePasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file, password=self.options.old_password)
        data = document.save(user_password=self.options.new_password, owner_password=self.options.new_password)
        return [pdf_result(f"password_changed_{file.name}", data)]


@register_tool("sanitize-pdf")
class SanitizeTool(BaseTool):
    """Strip metadata, annotations and active content."""

    name = "sanitize-pdf"
    options_class = PasswordOptions

    def run(self) -> list[ResultDescriptor]:
        file = self.files[0]
        document = self.open_document(file)
        removed = document.strip_active_content()
        document.remove_annotations()
        document.clear_metadata()
        LOGGER.debug("Sanitised %s; removed %s", file.name, removed or "no active content")
        return [pdf_result(f"sanitized_{file.name}", document.save())]


__all__ = ["ProtectTool", "DecryptTool", "UnlockTool", "ChangePasswordTool", "SanitizeTool"]
