"""Google Sheets gviz query connector."""

from .connector import GvizConnector, build_sheet_url

__all__ = ["GvizConnector", "build_sheet_url"]
