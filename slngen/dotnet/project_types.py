"""Known project type (category) identifiers, keyed by project file extension.

The tables are read-only mappings built once at import time. Keys are
lower-case extensions; use `lookup` for case-insensitive access.
"""

from __future__ import annotations

import uuid
from types import MappingProxyType
from typing import Mapping

AZURE_SDK = uuid.UUID("151D2E53-A2C4-4D7D-83FE-D05416EBD58E")
AZURE_SERVICE_FABRIC = uuid.UUID("A07B5EB6-E848-4116-A8D0-A826331D98C6")
CPP = uuid.UUID("8BC9CEB8-8B4A-11D0-8D11-00A0C91BC942")
FSHARP = uuid.UUID("F2A71F9B-5D33-465A-A702-920D77279786")
JSHARP = uuid.UUID("E6FDF86B-F3D1-11D4-8576-0002A516ECE8")
LEGACY_CSHARP = uuid.UUID("FAE04EC0-301F-11D3-BF4B-00C04F79EFBC")
LEGACY_VISUAL_BASIC = uuid.UUID("F184B08F-C81C-45F6-A57F-5ABD9991F28F")
NETSDK_CSHARP = uuid.UUID("9A19103F-16F7-4668-BE54-9A1E7A4F7556")
NETSDK_VISUAL_BASIC = uuid.UUID("778DAE3C-4631-46EA-AA77-85C1314464D9")
NODEJS = uuid.UUID("9092AA53-FB77-4645-B42D-1CCCA6BD08BD")
NUPROJ = uuid.UUID("FF286327-C783-4F7A-AB73-9BCBAD0D4460")
SCOPE = uuid.UUID("202899A3-C531-4771-9089-0213D66978AE")
SHARED_PROJECT = uuid.UUID("D954291E-2A0B-460D-934E-DC6B0785DB48")
SOLUTION_FOLDER = uuid.UUID("2150E333-8FDC-42A3-9474-1A3956D46DE8")
SQL_SERVER_DB_LEGACY = uuid.UUID("00D1A9C2-B5F0-4AF3-8072-F6C62B433612")
SQL_SERVER_DB_SDK = uuid.UUID("42EA0DBD-9CF1-443E-919E-BE9C484E4577")
WAP = uuid.UUID("C7167F0D-BC9F-4E6E-AFE1-012C56B48DB5")
WIX = uuid.UUID("930C7802-8A8C-48F9-8165-68863BCCD9DD")

# Fixed id of the "Solution Items" pseudo folder
SOLUTION_ITEMS_FOLDER = uuid.UUID("B283EBC2-E01F-412D-9339-FD56EF114549")

DEFAULT_LEGACY = LEGACY_CSHARP
DEFAULT_NETSDK = NETSDK_CSHARP

AZURE_SERVICE_FABRIC_EXTENSION = ".sfproj"
CPP_EXTENSION = ".vcxproj"
SHARED_PROJECT_EXTENSIONS = frozenset({".shproj", ".vcxitems"})

KNOWN_LEGACY: Mapping[str, uuid.UUID] = MappingProxyType({
    "": DEFAULT_LEGACY,
    ".csproj": DEFAULT_LEGACY,
    ".vbproj": LEGACY_VISUAL_BASIC,
    ".sqlproj": SQL_SERVER_DB_LEGACY,
})

KNOWN_NETSDK: Mapping[str, uuid.UUID] = MappingProxyType({
    "": DEFAULT_NETSDK,
    ".csproj": DEFAULT_NETSDK,
    ".vbproj": NETSDK_VISUAL_BASIC,
    ".sqlproj": SQL_SERVER_DB_SDK,
})

# Extensions whose category does not depend on the project style
KNOWN_FIXED: Mapping[str, uuid.UUID] = MappingProxyType({
    ".ccproj": AZURE_SDK,
    ".sfproj": AZURE_SERVICE_FABRIC,
    ".vcxproj": CPP,
    ".fsproj": FSHARP,
    ".vjsproj": JSHARP,
    ".vcproj": CPP,
    ".nativeproj": CPP,
    ".njsproj": NODEJS,
    ".nuproj": NUPROJ,
    ".scopeproj": SCOPE,
    ".shproj": SHARED_PROJECT,
    ".vcxitems": CPP,
    ".wapproj": WAP,
    ".wixproj": WIX,
})


def lookup(table: Mapping[str, uuid.UUID], extension: str) -> uuid.UUID | None:
    """Case-insensitive extension lookup."""
    return table.get(extension.lower())
