"""SharePoint Lists adapter.

Why a package:
- `rest` holds the raw endpoints (lists discovery, contextinfo, URL builders).
- `site` binds CRUD operations to each discovered list.
"""

from adapters.sharepoint.site import SharePointList, SharePointSite, connect

__all__ = [
    "SharePointList",
    "SharePointSite",
    "connect",
]
