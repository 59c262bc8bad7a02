"""SpreadsheetML namespace and tag constants."""

MAIN_NS = "http://schemas.openxmlformats.org/spreadsheetml/2006/main"
REL_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
PKG_REL_NS = "http://schemas.openxmlformats.org/package/2006/relationships"
CT_NS = "http://schemas.openxmlformats.org/package/2006/content-types"
XML_NS = "http://www.w3.org/XML/1998/namespace"


def qn(local: str, ns: str = MAIN_NS) -> str:
    """Clark-notation name: ``qn("c")`` -> ``{main-ns}c``."""
    return f"{{{ns}}}{local}"
