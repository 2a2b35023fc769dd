"""Read the DT_SONAME of a shared object.

Thin wrapper over pyelftools: find the dynamic section, pick the
``DT_SONAME`` tag, and let the library resolve it through the dynamic
string table.
"""

from __future__ import annotations

import logging

from elftools.common.exceptions import ELFError
from elftools.elf.dynamic import DynamicSection
from elftools.elf.elffile import ELFFile

logger = logging.getLogger("ldcache")


class SonameError(Exception):
    """The object is not ELF, has no dynamic section, or no DT_SONAME."""


def read_soname(path: str) -> str:
    try:
        with open(path, "rb") as f:
            elf = ELFFile(f)
            dynamic = None
            for sect in elf.iter_sections():
                if isinstance(sect, DynamicSection):
                    dynamic = sect
                    break
            if dynamic is None:
                raise SonameError(f"{path!r}: no dynamic section")
            logger.debug("%s: dynamic section %r", path, dynamic.name)

            for tag in dynamic.iter_tags("DT_SONAME"):
                return tag.soname
    except OSError as exc:
        raise SonameError(f"cannot open {path!r}: {exc.strerror or exc}") from exc
    except ELFError as exc:
        raise SonameError(f"{path!r} is not an ELF object: {exc}") from exc
    raise SonameError(f"{path!r}: no DT_SONAME entry")
